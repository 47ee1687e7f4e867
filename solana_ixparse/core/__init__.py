"""
Core cross-cutting pieces shared by the codec, decoders and engine.
"""
