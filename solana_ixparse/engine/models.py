"""
Data models for parser output.

Instructions and account metas on the input side are solders objects
(Instruction, AccountMeta, Pubkey); these dataclasses are the normalized
output handed back to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from solders.instruction import AccountMeta
from solders.pubkey import Pubkey

UNKNOWN_INSTRUCTION_NAME = "unknown"


@dataclass(frozen=True)
class NamedAccount:
    """AccountMeta with the semantic name bound from the program schema."""

    name: str
    pubkey: Pubkey
    is_signer: bool
    is_writable: bool

    @classmethod
    def from_meta(cls, name: str, meta: AccountMeta) -> "NamedAccount":
        return cls(
            name=name,
            pubkey=meta.pubkey,
            is_signer=meta.is_signer,
            is_writable=meta.is_writable,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "pubkey": str(self.pubkey),
            "is_signer": self.is_signer,
            "is_writable": self.is_writable,
        }


@dataclass
class NormalizedInstruction:
    """
    One decoded instruction.

    Unknown records keep the raw AccountMeta list and carry the original data
    under args["unknown"]; decoded is False only for them. parent_program_id
    is set only for inner (CPI) instructions and names the top-level
    instruction's program.
    """

    name: str
    program_id: Pubkey
    accounts: Sequence[NamedAccount | AccountMeta] = field(default_factory=list)
    args: dict[str, Any] = field(default_factory=dict)
    parent_program_id: Pubkey | None = None
    decoded: bool = True

    @property
    def is_unknown(self) -> bool:
        """True for fallback records built by unknown_instruction."""
        return not self.decoded

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict (pubkeys base58, bytes hex)."""
        out: dict[str, Any] = {
            "name": self.name,
            "program_id": str(self.program_id),
            "accounts": [_account_to_dict(acc) for acc in self.accounts],
            "args": _jsonable(self.args),
        }
        if self.parent_program_id is not None:
            out["parent_program_id"] = str(self.parent_program_id)
        return out


def unknown_instruction(
    program_id: Pubkey,
    accounts: Sequence[AccountMeta],
    data: bytes,
    name: str | None = None,
) -> NormalizedInstruction:
    """Build the fallback record used whenever decoding cannot fully succeed."""
    return NormalizedInstruction(
        name=name or UNKNOWN_INSTRUCTION_NAME,
        program_id=program_id,
        accounts=list(accounts),
        args={"unknown": bytes(data)},
        decoded=False,
    )


def _account_to_dict(acc: NamedAccount | AccountMeta) -> dict[str, Any]:
    if isinstance(acc, NamedAccount):
        return acc.to_dict()
    return {
        "pubkey": str(acc.pubkey),
        "is_signer": acc.is_signer,
        "is_writable": acc.is_writable,
    }


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, Pubkey):
        return str(value)
    return value
