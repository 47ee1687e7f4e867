"""
SPL Token and Token-2022 instructions (u8 tag).

Token-2022 shares the base instruction set; its extension instructions are
left to the unknown fallback.
"""

from __future__ import annotations

from borsh_construct import U8, U64, CStruct, Option

from solana_ixparse.decoders.base import BuiltinInstruction, BuiltinProgramDecoder
from solana_ixparse.idl.coder import PubkeyLayout

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"

_AMOUNT = CStruct("amount" / U64)
_AMOUNT_CHECKED = CStruct("amount" / U64, "decimals" / U8)
_INITIALIZE_MINT = CStruct(
    "decimals" / U8,
    "mint_authority" / PubkeyLayout,
    "freeze_authority" / Option(PubkeyLayout),
)

TOKEN_INSTRUCTIONS: dict[int, BuiltinInstruction] = {
    0: BuiltinInstruction("initializeMint", _INITIALIZE_MINT, ("mint", "rentSysvar")),
    1: BuiltinInstruction("initializeAccount", accounts=("account", "mint", "owner", "rentSysvar")),
    2: BuiltinInstruction("initializeMultisig", CStruct("m" / U8), ("multisig", "rentSysvar")),
    3: BuiltinInstruction("transfer", _AMOUNT, ("source", "destination", "authority")),
    4: BuiltinInstruction("approve", _AMOUNT, ("source", "delegate", "owner")),
    5: BuiltinInstruction("revoke", accounts=("source", "owner")),
    6: BuiltinInstruction(
        "setAuthority",
        CStruct("authority_type" / U8, "new_authority" / Option(PubkeyLayout)),
        ("owned", "authority"),
    ),
    7: BuiltinInstruction("mintTo", _AMOUNT, ("mint", "destination", "authority")),
    8: BuiltinInstruction("burn", _AMOUNT, ("account", "mint", "authority")),
    9: BuiltinInstruction("closeAccount", accounts=("account", "destination", "authority")),
    10: BuiltinInstruction("freezeAccount", accounts=("account", "mint", "authority")),
    11: BuiltinInstruction("thawAccount", accounts=("account", "mint", "authority")),
    12: BuiltinInstruction(
        "transferChecked", _AMOUNT_CHECKED, ("source", "mint", "destination", "authority")
    ),
    13: BuiltinInstruction(
        "approveChecked", _AMOUNT_CHECKED, ("source", "mint", "delegate", "owner")
    ),
    14: BuiltinInstruction("mintToChecked", _AMOUNT_CHECKED, ("mint", "destination", "authority")),
    15: BuiltinInstruction("burnChecked", _AMOUNT_CHECKED, ("account", "mint", "authority")),
    16: BuiltinInstruction(
        "initializeAccount2", CStruct("owner" / PubkeyLayout), ("account", "mint", "rentSysvar")
    ),
    17: BuiltinInstruction("syncNative", accounts=("account",)),
    18: BuiltinInstruction("initializeAccount3", CStruct("owner" / PubkeyLayout), ("account", "mint")),
    19: BuiltinInstruction("initializeMultisig2", CStruct("m" / U8), ("multisig",)),
    20: BuiltinInstruction("initializeMint2", _INITIALIZE_MINT, ("mint",)),
    21: BuiltinInstruction("getAccountDataSize", accounts=("mint",)),
    22: BuiltinInstruction("initializeImmutableOwner", accounts=("account",)),
}

decode_token_instruction = BuiltinProgramDecoder("spl-token", U8, TOKEN_INSTRUCTIONS)
decode_token_2022_instruction = BuiltinProgramDecoder("spl-token-2022", U8, TOKEN_INSTRUCTIONS)
