"""
Parsing engine: schema registry, decoder dispatch, normalizer, flattener and
format adapters. SolanaParser in engine.parser is the entry point.
"""
