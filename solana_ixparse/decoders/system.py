"""System program instructions (u32 tag, bincode)."""

from __future__ import annotations

from borsh_construct import U32, U64, CStruct

from solana_ixparse.decoders.base import BincodeString, BuiltinInstruction, BuiltinProgramDecoder
from solana_ixparse.idl.coder import PubkeyLayout

SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"

SYSTEM_INSTRUCTIONS: dict[int, BuiltinInstruction] = {
    0: BuiltinInstruction(
        "createAccount",
        CStruct("lamports" / U64, "space" / U64, "owner" / PubkeyLayout),
        ("from", "newAccount"),
    ),
    1: BuiltinInstruction("assign", CStruct("owner" / PubkeyLayout), ("account",)),
    2: BuiltinInstruction("transfer", CStruct("lamports" / U64), ("from", "to")),
    3: BuiltinInstruction(
        "createAccountWithSeed",
        CStruct(
            "base" / PubkeyLayout,
            "seed" / BincodeString,
            "lamports" / U64,
            "space" / U64,
            "owner" / PubkeyLayout,
        ),
        ("from", "newAccount", "base"),
    ),
    4: BuiltinInstruction(
        "advanceNonceAccount",
        accounts=("nonceAccount", "recentBlockhashesSysvar", "nonceAuthority"),
    ),
    5: BuiltinInstruction(
        "withdrawNonceAccount",
        CStruct("lamports" / U64),
        ("nonceAccount", "to", "recentBlockhashesSysvar", "rentSysvar", "nonceAuthority"),
    ),
    6: BuiltinInstruction(
        "initializeNonceAccount",
        CStruct("authority" / PubkeyLayout),
        ("nonceAccount", "recentBlockhashesSysvar", "rentSysvar"),
    ),
    7: BuiltinInstruction(
        "authorizeNonceAccount",
        CStruct("new_authority" / PubkeyLayout),
        ("nonceAccount", "nonceAuthority"),
    ),
    8: BuiltinInstruction("allocate", CStruct("space" / U64), ("account",)),
    9: BuiltinInstruction(
        "allocateWithSeed",
        CStruct(
            "base" / PubkeyLayout,
            "seed" / BincodeString,
            "space" / U64,
            "owner" / PubkeyLayout,
        ),
        ("account", "base"),
    ),
    10: BuiltinInstruction(
        "assignWithSeed",
        CStruct("base" / PubkeyLayout, "seed" / BincodeString, "owner" / PubkeyLayout),
        ("account", "base"),
    ),
    11: BuiltinInstruction(
        "transferWithSeed",
        CStruct("lamports" / U64, "from_seed" / BincodeString, "from_owner" / PubkeyLayout),
        ("from", "base", "to"),
    ),
    12: BuiltinInstruction("upgradeNonceAccount", accounts=("nonceAccount",)),
}

decode_system_instruction = BuiltinProgramDecoder("system", U32, SYSTEM_INSTRUCTIONS)
