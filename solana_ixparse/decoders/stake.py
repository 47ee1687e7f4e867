"""Stake program instructions (u32 tag, bincode)."""

from __future__ import annotations

from borsh_construct import I64, U32, U64, CStruct, Option

from solana_ixparse.decoders.base import BuiltinInstruction, BuiltinProgramDecoder
from solana_ixparse.idl.coder import PubkeyLayout

STAKE_PROGRAM_ID = "Stake11111111111111111111111111111111111111"

_AUTHORIZED = CStruct("staker" / PubkeyLayout, "withdrawer" / PubkeyLayout)
_LOCKUP = CStruct("unix_timestamp" / I64, "epoch" / U64, "custodian" / PubkeyLayout)

STAKE_INSTRUCTIONS: dict[int, BuiltinInstruction] = {
    0: BuiltinInstruction(
        "initialize",
        CStruct("authorized" / _AUTHORIZED, "lockup" / _LOCKUP),
        ("stakeAccount", "rentSysvar"),
    ),
    1: BuiltinInstruction(
        "authorize",
        CStruct("new_authorized" / PubkeyLayout, "stake_authorize" / U32),
        ("stakeAccount", "clockSysvar", "authority", "custodian"),
    ),
    2: BuiltinInstruction(
        "delegate",
        accounts=(
            "stakeAccount",
            "voteAccount",
            "clockSysvar",
            "stakeHistorySysvar",
            "stakeConfig",
            "authority",
        ),
    ),
    3: BuiltinInstruction(
        "split", CStruct("lamports" / U64), ("stakeAccount", "splitStakeAccount", "authority")
    ),
    4: BuiltinInstruction(
        "withdraw",
        CStruct("lamports" / U64),
        ("stakeAccount", "recipient", "clockSysvar", "stakeHistorySysvar", "authority", "custodian"),
    ),
    5: BuiltinInstruction("deactivate", accounts=("stakeAccount", "clockSysvar", "authority")),
    6: BuiltinInstruction(
        "setLockup",
        CStruct(
            "unix_timestamp" / Option(I64),
            "epoch" / Option(U64),
            "custodian" / Option(PubkeyLayout),
        ),
        ("stakeAccount", "authority"),
    ),
    7: BuiltinInstruction(
        "merge",
        accounts=(
            "destinationStakeAccount",
            "sourceStakeAccount",
            "clockSysvar",
            "stakeHistorySysvar",
            "authority",
        ),
    ),
}

decode_stake_instruction = BuiltinProgramDecoder("stake", U32, STAKE_INSTRUCTIONS)
