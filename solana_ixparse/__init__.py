"""
solana_ixparse: instruction parser registry for Solana transactions.

Turns transactions fetched or received in any of the common shapes (raw
signed bytes, compiled messages with or without address lookup tables,
jsonParsed RPC responses) into one ordered list of named, typed,
account-annotated instructions. Per-program decoders come from Anchor IDLs,
caller-supplied functions, or the built-in set for native programs.
"""

from solana_ixparse.engine.models import NamedAccount, NormalizedInstruction
from solana_ixparse.engine.parser import SolanaParser

__version__ = "0.1.0"

__all__ = ["NamedAccount", "NormalizedInstruction", "SolanaParser", "__version__"]
