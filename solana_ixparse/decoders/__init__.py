"""
Built-in decoders for native Solana programs.

Applied by SolanaParser for program ids not covered by a registered IDL or a
custom decoder.
"""

from solana_ixparse.decoders.associated_token import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    decode_associated_token_instruction,
)
from solana_ixparse.decoders.base import BuiltinInstruction, BuiltinProgramDecoder
from solana_ixparse.decoders.compute_budget import (
    COMPUTE_BUDGET_PROGRAM_ID,
    decode_compute_budget_instruction,
)
from solana_ixparse.decoders.stake import STAKE_PROGRAM_ID, decode_stake_instruction
from solana_ixparse.decoders.system import SYSTEM_PROGRAM_ID, decode_system_instruction
from solana_ixparse.decoders.token import (
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    decode_token_2022_instruction,
    decode_token_instruction,
)

BUILTIN_DECODERS: tuple[tuple[str, BuiltinProgramDecoder], ...] = (
    (SYSTEM_PROGRAM_ID, decode_system_instruction),
    (TOKEN_PROGRAM_ID, decode_token_instruction),
    (TOKEN_2022_PROGRAM_ID, decode_token_2022_instruction),
    (ASSOCIATED_TOKEN_PROGRAM_ID, decode_associated_token_instruction),
    (COMPUTE_BUDGET_PROGRAM_ID, decode_compute_budget_instruction),
    (STAKE_PROGRAM_ID, decode_stake_instruction),
)

__all__ = [
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "BUILTIN_DECODERS",
    "BuiltinInstruction",
    "BuiltinProgramDecoder",
    "COMPUTE_BUDGET_PROGRAM_ID",
    "STAKE_PROGRAM_ID",
    "SYSTEM_PROGRAM_ID",
    "TOKEN_2022_PROGRAM_ID",
    "TOKEN_PROGRAM_ID",
    "decode_associated_token_instruction",
    "decode_compute_budget_instruction",
    "decode_stake_instruction",
    "decode_system_instruction",
    "decode_token_2022_instruction",
    "decode_token_instruction",
]
