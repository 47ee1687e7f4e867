"""
Schema registry and account binder.

The registry keeps, per program id (base58), the normalized Schema and the
flattened account-name list of every instruction, computed once at
registration. The binder pairs an instruction's AccountMetas with those
names positionally.
"""

from __future__ import annotations

from typing import Iterator, Sequence

from solders.instruction import AccountMeta
from solders.pubkey import Pubkey

from solana_ixparse.engine.models import NamedAccount
from solana_ixparse.idl.schema import Schema, flatten_account_slots

REMAINING_ACCOUNT_PREFIX = "Remaining"


def program_key(program_id: Pubkey | str) -> str:
    """Canonical registry key: base58 text of the program id."""
    if isinstance(program_id, Pubkey):
        return str(program_id)
    return str(Pubkey.from_string(str(program_id).strip()))


def bind_accounts(
    accounts: Sequence[AccountMeta],
    flattened_names: Sequence[str],
) -> list[NamedAccount]:
    """
    Name accounts by position; extra accounts become "Remaining <n>".

    Output length always equals len(accounts) and order is preserved.
    """
    declared = len(flattened_names)
    out: list[NamedAccount] = []
    for idx, meta in enumerate(accounts):
        if idx < declared:
            name = flattened_names[idx]
        else:
            name = f"{REMAINING_ACCOUNT_PREFIX} {idx - declared}"
        out.append(NamedAccount.from_meta(name, meta))
    return out


class SchemaRegistry:
    """Program id -> Schema plus precomputed flattened account names."""

    def __init__(self) -> None:
        self._schemas: dict[str, Schema] = {}
        self._account_names: dict[str, dict[str, tuple[str, ...]]] = {}

    def register(self, program_id: Pubkey | str, schema: Schema) -> None:
        """Add or replace the schema for program_id."""
        key = program_key(program_id)
        self._account_names[key] = {
            ix.name: flatten_account_slots(ix.accounts) for ix in schema.instructions
        }
        self._schemas[key] = schema

    def remove(self, program_id: Pubkey | str) -> None:
        key = program_key(program_id)
        self._schemas.pop(key, None)
        self._account_names.pop(key, None)

    def lookup(self, program_id: Pubkey | str) -> Schema | None:
        return self._schemas.get(program_key(program_id))

    def flattened_accounts(
        self, program_id: Pubkey | str, instruction_name: str
    ) -> tuple[str, ...] | None:
        """Flattened account names for one instruction; None if unknown."""
        names = self._account_names.get(program_key(program_id))
        if names is None:
            return None
        return names.get(instruction_name)

    def __contains__(self, program_id: object) -> bool:
        if not isinstance(program_id, (Pubkey, str)):
            return False
        return program_key(program_id) in self._schemas

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._schemas))

    def __len__(self) -> int:
        return len(self._schemas)
