"""
Format adapters: transaction shapes to solders Instructions.

Four shapes are supported:
- compiled message with address lookup tables (MessageV0 or RPC "json" dict
  plus meta.loadedAddresses),
- legacy compiled message (Message or legacy RPC "json" dict),
- pre-annotated "jsonParsed" message (accounts already carry signer/writable),
- raw signed transaction bytes (base64 str or bytes).

RPC dicts carry instruction data as base58 strings.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Mapping, Sequence, Union

import base58
from solders.instruction import AccountMeta, Instruction
from solders.message import Message, MessageV0
from solders.pubkey import Pubkey
from solders.transaction import Transaction, VersionedTransaction

from solana_ixparse.core.exceptions import TransactionFormatError
from solana_ixparse.engine.models import NormalizedInstruction

MEMO_PROGRAM_V1 = "Memo1UhkJRfHyvLMcVucJwxXeuD728EqVDDwQDxFMNo"
MEMO_PROGRAM_V2 = "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr"
MEMO_PROGRAM_IDS = frozenset({MEMO_PROGRAM_V1, MEMO_PROGRAM_V2})

CompiledMessage = Union[Message, MessageV0, Mapping[str, Any]]


def to_pubkey(value: Any) -> Pubkey:
    """Pubkey from a Pubkey, base58 string or {"pubkey": ...} dict."""
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, Mapping):
        value = value.get("pubkey")
    try:
        return Pubkey.from_string(str(value).strip())
    except ValueError as e:
        raise TransactionFormatError(f"Invalid address {value!r}: {e}") from e


def decode_instruction_data(data: Any) -> bytes:
    """Instruction data from bytes or an RPC base58 string."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if data is None:
        return b""
    try:
        return base58.b58decode(str(data))
    except ValueError as e:
        raise TransactionFormatError(f"Could not decode instruction data (base58): {e}") from e


def _header_counts(message: CompiledMessage) -> tuple[int, int, int]:
    """(num_required_signatures, num_readonly_signed, num_readonly_unsigned)."""
    if isinstance(message, Mapping):
        header = message.get("header") or {}
        return (
            int(header.get("numRequiredSignatures", 0)),
            int(header.get("numReadonlySignedAccounts", 0)),
            int(header.get("numReadonlyUnsignedAccounts", 0)),
        )
    header = message.header
    return (
        header.num_required_signatures,
        header.num_readonly_signed_accounts,
        header.num_readonly_unsigned_accounts,
    )


def _static_keys(message: CompiledMessage) -> list[Pubkey]:
    if isinstance(message, Mapping):
        return [to_pubkey(k) for k in message.get("accountKeys") or []]
    return list(message.account_keys)


def _loaded_role(loaded_addresses: Any, role: str) -> list[Pubkey]:
    if loaded_addresses is None:
        return []
    if isinstance(loaded_addresses, Mapping):
        values = loaded_addresses.get(role) or []
    else:
        values = getattr(loaded_addresses, role, None) or []
    return [to_pubkey(v) for v in values]


def account_metas_from_message(
    message: CompiledMessage,
    loaded_addresses: Any = None,
) -> list[AccountMeta]:
    """
    Resolve every account a compiled message can reference, in index order.

    Static keys get signer/writable flags from the header. Lookup-table
    addresses follow: all writable ones, then all read-only ones; none of
    them can sign.
    """
    keys = _static_keys(message)
    num_required, readonly_signed, readonly_unsigned = _header_counts(message)
    writable_unsigned = len(keys) - num_required - readonly_unsigned

    metas: list[AccountMeta] = []
    for idx, key in enumerate(keys):
        if idx < num_required:
            is_signer = True
            is_writable = idx < num_required - readonly_signed
        else:
            is_signer = False
            is_writable = idx - num_required < writable_unsigned
        metas.append(AccountMeta(pubkey=key, is_signer=is_signer, is_writable=is_writable))

    for key in _loaded_role(loaded_addresses, "writable"):
        metas.append(AccountMeta(pubkey=key, is_signer=False, is_writable=True))
    for key in _loaded_role(loaded_addresses, "readonly"):
        metas.append(AccountMeta(pubkey=key, is_signer=False, is_writable=False))
    return metas


def _meta_at(metas: Sequence[AccountMeta], idx: int) -> AccountMeta:
    if not 0 <= idx < len(metas):
        raise TransactionFormatError(
            f"Account index {idx} out of range for {len(metas)} resolved accounts"
        )
    return metas[idx]


def compiled_instruction_to_instruction(
    compiled: Any,
    metas: Sequence[AccountMeta],
) -> Instruction:
    """Resolve a compiled instruction (indices into metas) to an Instruction."""
    if isinstance(compiled, Mapping):
        program_idx = compiled.get("programIdIndex")
        indices = compiled.get("accounts") or []
        data = decode_instruction_data(compiled.get("data"))
    else:
        program_idx = compiled.program_id_index
        indices = list(compiled.accounts)
        data = bytes(compiled.data)
    if program_idx is None:
        raise TransactionFormatError("Compiled instruction has no programIdIndex")
    program_id = _meta_at(metas, int(program_idx)).pubkey
    accounts = [_meta_at(metas, int(i)) for i in indices]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def _compiled_instructions(message: CompiledMessage) -> list[Any]:
    if isinstance(message, Mapping):
        return list(message.get("instructions") or [])
    return list(message.instructions)


def instructions_from_compiled_message(
    message: CompiledMessage,
    loaded_addresses: Any = None,
) -> list[Instruction]:
    """Compiled message (+ optional lookup-table addresses) to Instructions."""
    metas = account_metas_from_message(message, loaded_addresses)
    return [compiled_instruction_to_instruction(ix, metas) for ix in _compiled_instructions(message)]


def instructions_from_dump(dump: str | bytes) -> list[Instruction]:
    """Raw signed legacy transaction (base64 str or bytes) to Instructions."""
    if isinstance(dump, str):
        try:
            raw = base64.b64decode(dump, validate=True)
        except binascii.Error as e:
            raise TransactionFormatError(f"Transaction dump is not valid base64: {e}") from e
    else:
        raw = bytes(dump)
    try:
        tx = Transaction.from_bytes(raw)
    except Exception as e:
        raise TransactionFormatError(f"Could not deserialize transaction: {e}") from e
    return instructions_from_compiled_message(tx.message)


def message_from_encoded(encoded: Any) -> CompiledMessage:
    """
    Message of an RPC "transaction" field.

    Handles the "json" form ({"message": {...}}) and the binary form
    ([<base64>, "base64"]) which is deserialized as a VersionedTransaction.
    """
    if isinstance(encoded, Mapping):
        message = encoded.get("message")
        if not isinstance(message, Mapping):
            raise TransactionFormatError("Transaction has no message")
        return message
    if isinstance(encoded, (list, tuple)) and len(encoded) == 2 and encoded[1] == "base64":
        try:
            tx = VersionedTransaction.from_bytes(base64.b64decode(encoded[0]))
        except Exception as e:
            raise TransactionFormatError(f"Could not deserialize transaction: {e}") from e
        return tx.message
    raise TransactionFormatError(f"Unsupported transaction encoding: {type(encoded).__name__}")


def parsed_account_metas(message: Mapping[str, Any]) -> list[AccountMeta]:
    """AccountMetas from a jsonParsed message's annotated accountKeys."""
    metas: list[AccountMeta] = []
    for key in message.get("accountKeys") or []:
        if isinstance(key, Mapping):
            metas.append(
                AccountMeta(
                    pubkey=to_pubkey(key.get("pubkey")),
                    is_signer=bool(key.get("signer", False)),
                    is_writable=bool(key.get("writable", False)),
                )
            )
        else:
            metas.append(AccountMeta(pubkey=to_pubkey(key), is_signer=False, is_writable=False))
    return metas


def is_partially_decoded(entry: Mapping[str, Any]) -> bool:
    """True for jsonParsed entries the RPC node could not decode (raw data present)."""
    return "data" in entry and "parsed" not in entry


def parsed_instruction_to_instruction(
    entry: Mapping[str, Any],
    metas: Sequence[AccountMeta],
) -> Instruction:
    """
    Partially decoded jsonParsed entry to an Instruction.

    Flags come from the message's annotated keys; an address missing from
    them is treated as neither signer nor writable.
    """
    by_key = {str(meta.pubkey): meta for meta in metas}
    accounts: list[AccountMeta] = []
    for address in entry.get("accounts") or []:
        pubkey = to_pubkey(address)
        meta = by_key.get(str(pubkey))
        accounts.append(meta if meta is not None else AccountMeta(pubkey=pubkey, is_signer=False, is_writable=False))
    return Instruction(
        program_id=to_pubkey(entry.get("programId")),
        data=decode_instruction_data(entry.get("data")),
        accounts=accounts,
    )


def convert_parsed_instruction(entry: Mapping[str, Any]) -> NormalizedInstruction:
    """
    Fully parsed jsonParsed entry to a NormalizedInstruction.

    Memo programs become {"name": "Memo", "args": {"message": ...}}; other
    entries take name and args from parsed["type"] and parsed["info"].
    """
    program_id = to_pubkey(entry.get("programId"))
    parsed = entry.get("parsed")
    if str(program_id) in MEMO_PROGRAM_IDS:
        return NormalizedInstruction(
            name="Memo",
            program_id=program_id,
            accounts=[],
            args={"message": parsed},
        )
    if isinstance(parsed, Mapping) and "type" in parsed:
        info = parsed.get("info")
        return NormalizedInstruction(
            name=str(parsed["type"]),
            program_id=program_id,
            accounts=[],
            args=dict(info) if isinstance(info, Mapping) else {"info": info},
        )
    return NormalizedInstruction(
        name=str(entry.get("program") or "unknown"),
        program_id=program_id,
        accounts=[],
        args={"parsed": parsed},
    )
