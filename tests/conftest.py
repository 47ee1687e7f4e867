"""
Pytest fixtures for solana_ixparse tests: sample Anchor IDLs (current and
legacy format), a program id for them, and a configured parser.
"""

from __future__ import annotations

import pytest
from solders.pubkey import Pubkey

from solana_ixparse.idl.converter import sighash


def _current_idl(address: str) -> dict:
    return {
        "address": address,
        "metadata": {"name": "vault", "version": "0.1.0", "spec": "0.1.0"},
        "instructions": [
            {
                "name": "transfer",
                "discriminator": list(sighash("transfer")),
                "accounts": [
                    {"name": "from", "writable": True, "signer": True},
                    {"name": "to", "writable": True},
                ],
                "args": [{"name": "amount", "type": "u64"}],
            },
            {
                "name": "deposit",
                "discriminator": list(sighash("deposit")),
                "accounts": [
                    {"name": "user", "signer": True},
                    {
                        "name": "pool",
                        "accounts": [
                            {"name": "state", "writable": True},
                            {
                                "name": "vault",
                                "accounts": [
                                    {"name": "token_account", "writable": True},
                                    {"name": "authority"},
                                ],
                            },
                        ],
                    },
                    {"name": "token_program"},
                ],
                "args": [{"name": "params", "type": {"defined": {"name": "DepositParams"}}}],
            },
            {
                "name": "close",
                "discriminator": list(sighash("close")),
                "accounts": [{"name": "vault", "writable": True}],
                "args": [],
            },
        ],
        "types": [
            {
                "name": "DepositParams",
                "type": {
                    "kind": "struct",
                    "fields": [
                        {"name": "amount", "type": "u64"},
                        {"name": "memo", "type": {"option": "string"}},
                        {"name": "side", "type": {"defined": {"name": "Side"}}},
                        {"name": "route", "type": {"vec": "pubkey"}},
                    ],
                },
            },
            {
                "name": "Side",
                "type": {
                    "kind": "enum",
                    "variants": [
                        {"name": "Bid"},
                        {"name": "Ask"},
                        {"name": "Limit", "fields": [{"name": "price", "type": "u64"}]},
                    ],
                },
            },
        ],
    }


def _legacy_idl() -> dict:
    return {
        "version": "0.1.0",
        "name": "legacy_vault",
        "instructions": [
            {
                "name": "initializeVault",
                "accounts": [
                    {"name": "vaultState", "isMut": True, "isSigner": False},
                    {"name": "payer", "isMut": True, "isSigner": True},
                    {
                        "name": "common",
                        "accounts": [
                            {"name": "systemProgram", "isMut": False, "isSigner": False},
                        ],
                    },
                ],
                "args": [
                    {"name": "bumpSeed", "type": "u8"},
                    {"name": "admin", "type": "publicKey"},
                    {"name": "fees", "type": {"array": ["u16", 2]}},
                    {"name": "config", "type": {"defined": "VaultConfig"}},
                ],
            }
        ],
        "types": [
            {
                "name": "VaultConfig",
                "type": {
                    "kind": "struct",
                    "fields": [
                        {"name": "maxDeposit", "type": "u64"},
                        {"name": "paused", "type": "bool"},
                    ],
                },
            }
        ],
    }


@pytest.fixture
def vault_program_id() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def vault_idl(vault_program_id) -> dict:
    """Anchor >= 0.30 IDL: transfer(amount), deposit(params) with nested accounts, close()."""
    return _current_idl(str(vault_program_id))


@pytest.fixture
def legacy_idl() -> dict:
    """Pre-0.30 IDL with camelCase names, isMut/isSigner and publicKey types."""
    return _legacy_idl()


@pytest.fixture
def parser(vault_program_id, vault_idl):
    from solana_ixparse.engine.parser import SolanaParser

    return SolanaParser([(vault_program_id, vault_idl)])
