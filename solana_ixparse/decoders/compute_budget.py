"""Compute Budget program instructions (u8 tag, no accounts)."""

from __future__ import annotations

from borsh_construct import U8, U32, U64, CStruct

from solana_ixparse.decoders.base import BuiltinInstruction, BuiltinProgramDecoder

COMPUTE_BUDGET_PROGRAM_ID = "ComputeBudget111111111111111111111111111111"

COMPUTE_BUDGET_INSTRUCTIONS: dict[int, BuiltinInstruction] = {
    # Deprecated; still found in older transactions
    0: BuiltinInstruction("requestUnits", CStruct("units" / U32, "additional_fee" / U32)),
    1: BuiltinInstruction("requestHeapFrame", CStruct("bytes" / U32)),
    2: BuiltinInstruction("setComputeUnitLimit", CStruct("units" / U32)),
    3: BuiltinInstruction("setComputeUnitPrice", CStruct("micro_lamports" / U64)),
    4: BuiltinInstruction("setLoadedAccountsDataSizeLimit", CStruct("bytes" / U32)),
}

decode_compute_budget_instruction = BuiltinProgramDecoder(
    "compute-budget", U8, COMPUTE_BUDGET_INSTRUCTIONS
)
