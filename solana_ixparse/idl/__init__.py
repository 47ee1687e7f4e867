"""
Anchor IDL support: normalized schema model, IDL version adapter and the
Borsh instruction codec.
"""

from solana_ixparse.idl.coder import DecodedInstruction, InstructionCoder
from solana_ixparse.idl.converter import normalize_idl
from solana_ixparse.idl.schema import AccountSlot, InstructionSchema, Schema, flatten_account_slots

__all__ = [
    "AccountSlot",
    "DecodedInstruction",
    "InstructionCoder",
    "InstructionSchema",
    "Schema",
    "flatten_account_slots",
    "normalize_idl",
]
