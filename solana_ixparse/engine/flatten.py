"""
Transaction flattener: top-level and inner instructions in execution order.

Each top-level instruction is followed immediately by the inner (CPI)
instructions recorded for it in meta.innerInstructions, before the next
top-level instruction. Every inner instruction is attributed to the program
of its top-level instruction, however deep the actual call chain was.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Mapping, Optional, Sequence, TypeVar

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from solana_ixparse.core.exceptions import TransactionFormatError
from solana_ixparse.engine.adapters import (
    account_metas_from_message,
    compiled_instruction_to_instruction,
    instructions_from_compiled_message,
    message_from_encoded,
    to_pubkey,
)
from solana_ixparse.ixparse_logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# (instruction, program id of the top-level instruction it ran under, or None)
FlatEntry = tuple[T, Optional[Pubkey]]


def group_inner_instructions(meta: Mapping[str, Any] | None) -> dict[int, list[Any]]:
    """meta.innerInstructions to {top-level index: [entries in trace order]}."""
    grouped: defaultdict[int, list[Any]] = defaultdict(list)
    for block in (meta or {}).get("innerInstructions") or []:
        if not isinstance(block, Mapping) or block.get("index") is None:
            continue
        grouped[int(block["index"])].extend(block.get("instructions") or [])
    return dict(grouped)


def interleave(
    top_level: Sequence[T],
    inner: Mapping[int, Sequence[T]],
    program_id_of: Callable[[T], Pubkey],
) -> list[FlatEntry[T]]:
    """Emit each top-level entry, then its inner entries tagged with its program id."""
    out: list[FlatEntry[T]] = []
    for idx, ix in enumerate(top_level):
        out.append((ix, None))
        children = inner.get(idx)
        if not children:
            continue
        parent = program_id_of(ix)
        for child in children:
            out.append((child, parent))
    orphaned = sorted(idx for idx in inner if not 0 <= idx < len(top_level))
    if orphaned:
        logger.debug(
            "inner_instructions_orphaned",
            indexes=orphaned,
            top_level_count=len(top_level),
        )
    return out


def _response_parts(tx: Mapping[str, Any]) -> tuple[Any, Mapping[str, Any] | None]:
    """(message, meta) of a getTransaction-style result."""
    if not isinstance(tx, Mapping) or "transaction" not in tx:
        raise TransactionFormatError("Transaction response has no 'transaction' field")
    message = message_from_encoded(tx["transaction"])
    meta = tx.get("meta")
    return message, meta if isinstance(meta, Mapping) else None


def flatten_transaction_response(
    tx: Mapping[str, Any],
    include_inner: bool = True,
) -> list[FlatEntry[Instruction]]:
    """
    Flatten a getTransaction result (encoding "json" or "base64").

    Account indices of top-level and inner instructions resolve against the
    static keys followed by meta.loadedAddresses (writable, then readonly).
    """
    message, meta = _response_parts(tx)
    loaded = (meta or {}).get("loadedAddresses")
    metas = account_metas_from_message(message, loaded)
    top_level = instructions_from_compiled_message(message, loaded)
    inner: dict[int, list[Instruction]] = {}
    if include_inner:
        inner = {
            idx: [compiled_instruction_to_instruction(entry, metas) for entry in entries]
            for idx, entries in group_inner_instructions(meta).items()
        }
    return interleave(top_level, inner, lambda ix: ix.program_id)


def flatten_parsed_transaction(
    tx: Mapping[str, Any],
    include_inner: bool = True,
) -> list[FlatEntry[Mapping[str, Any]]]:
    """
    Flatten a jsonParsed getTransaction result.

    Entries stay raw dicts: partially decoded ones still need the decoder
    registry, fully parsed ones are converted as-is by the caller.
    """
    if not isinstance(tx, Mapping) or not isinstance(tx.get("transaction"), Mapping):
        raise TransactionFormatError("Parsed transaction has no 'transaction' object")
    message = tx["transaction"].get("message")
    if not isinstance(message, Mapping):
        raise TransactionFormatError("Parsed transaction has no message")
    meta = tx.get("meta") if isinstance(tx.get("meta"), Mapping) else None
    top_level = list(message.get("instructions") or [])
    inner = group_inner_instructions(meta) if include_inner else {}
    return interleave(top_level, inner, lambda entry: to_pubkey(entry.get("programId")))
