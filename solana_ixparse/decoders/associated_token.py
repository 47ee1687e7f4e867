"""Associated Token Account program instructions (u8 tag; empty data means create)."""

from __future__ import annotations

from borsh_construct import U8

from solana_ixparse.decoders.base import BuiltinInstruction, BuiltinProgramDecoder

ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"

_CREATE_ACCOUNTS = (
    "payer",
    "associatedAccount",
    "owner",
    "mint",
    "systemProgram",
    "tokenProgram",
)

ASSOCIATED_TOKEN_INSTRUCTIONS: dict[int, BuiltinInstruction] = {
    0: BuiltinInstruction("create", accounts=_CREATE_ACCOUNTS),
    1: BuiltinInstruction("createIdempotent", accounts=_CREATE_ACCOUNTS),
    2: BuiltinInstruction(
        "recoverNested",
        accounts=(
            "nestedAssociatedAccount",
            "nestedMint",
            "destinationAssociatedAccount",
            "ownerAssociatedAccount",
            "ownerMint",
            "wallet",
            "tokenProgram",
        ),
    ),
}

decode_associated_token_instruction = BuiltinProgramDecoder(
    "spl-associated-token-account",
    U8,
    ASSOCIATED_TOKEN_INSTRUCTIONS,
    empty_data_tag=0,
)
