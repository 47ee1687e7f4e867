"""
Tests for the decode engine: schema registry and account binder, dispatch
table, normalizer outcomes and output models.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from solana_ixparse.core.exceptions import UnrecognizedLayoutError
from solana_ixparse.engine.dispatch import CustomDecoder, DispatchTable, SchemaDecoder, as_decoder
from solana_ixparse.engine.models import NamedAccount, NormalizedInstruction, unknown_instruction
from solana_ixparse.engine.normalizer import DecodeOutcome, InstructionNormalizer
from solana_ixparse.engine.registry import SchemaRegistry, bind_accounts, program_key
from solana_ixparse.idl.coder import InstructionCoder
from solana_ixparse.idl.converter import normalize_idl, sighash


def _metas(n: int, signer_first: bool = True) -> list[AccountMeta]:
    return [
        AccountMeta(pubkey=Pubkey.new_unique(), is_signer=signer_first and i == 0, is_writable=i < 2)
        for i in range(n)
    ]


def _transfer_data(amount: int) -> bytes:
    return sighash("transfer") + amount.to_bytes(8, "little")


# -- registry / binder -------------------------------------------------------------


def test_program_key_normalizes_pubkey_and_string():
    pid = Pubkey.new_unique()
    assert program_key(pid) == str(pid)
    assert program_key(f"  {pid} ") == str(pid)


def test_program_key_rejects_invalid():
    with pytest.raises(ValueError):
        program_key("not-a-pubkey")


def test_bind_accounts_exact_count():
    metas = _metas(2)
    bound = bind_accounts(metas, ("from", "to"))
    assert [a.name for a in bound] == ["from", "to"]
    assert bound[0].pubkey == metas[0].pubkey
    assert bound[0].is_signer is True
    assert bound[1].is_writable is True


def test_bind_accounts_extra_become_remaining():
    metas = _metas(5)
    bound = bind_accounts(metas, ("from", "to"))
    assert [a.name for a in bound] == ["from", "to", "Remaining 0", "Remaining 1", "Remaining 2"]
    assert [a.pubkey for a in bound] == [m.pubkey for m in metas]


def test_bind_accounts_fewer_than_declared():
    """Missing trailing accounts are simply absent; output length follows the input."""
    metas = _metas(1)
    bound = bind_accounts(metas, ("from", "to", "authority"))
    assert [a.name for a in bound] == ["from"]


def test_registry_register_lookup_remove(vault_idl, vault_program_id):
    registry = SchemaRegistry()
    schema = normalize_idl(vault_idl)
    registry.register(vault_program_id, schema)

    assert vault_program_id in registry
    assert str(vault_program_id) in registry
    assert 42 not in registry
    assert len(registry) == 1
    assert list(registry) == [str(vault_program_id)]
    assert registry.lookup(str(vault_program_id)) is schema
    assert registry.flattened_accounts(vault_program_id, "transfer") == ("from", "to")
    assert registry.flattened_accounts(vault_program_id, "missing") is None

    registry.remove(vault_program_id)
    assert registry.lookup(vault_program_id) is None
    assert registry.flattened_accounts(vault_program_id, "transfer") is None
    registry.remove(vault_program_id)  # no-op


# -- dispatch -------------------------------------------------------------------


def test_dispatch_table_last_write_wins():
    table = DispatchTable()
    pid = Pubkey.new_unique()
    first = MagicMock(name="first")
    second = MagicMock(name="second")
    table.set(pid, first)
    table.set(str(pid), second)
    assert len(table) == 1
    assert table.get(pid).fn is second
    assert table.list_known_programs() == [str(pid)]
    table.remove(pid)
    assert not table.has(pid)
    assert table.get(pid) is None
    table.remove(pid)


def test_as_decoder_wraps_callables_only_once():
    fn = MagicMock()
    wrapped = as_decoder(fn)
    assert isinstance(wrapped, CustomDecoder)
    assert as_decoder(wrapped) is wrapped
    with pytest.raises(TypeError):
        CustomDecoder("not callable")


def test_schema_decoder_binds_names(vault_idl, vault_program_id):
    registry = SchemaRegistry()
    schema = normalize_idl(vault_idl)
    registry.register(vault_program_id, schema)
    decoder = SchemaDecoder(vault_program_id, registry)
    metas = _metas(2)
    ix = Instruction(program_id=vault_program_id, data=_transfer_data(9), accounts=metas)

    result = decoder.decode(ix, InstructionCoder(schema))
    assert result.name == "transfer"
    assert result.args == {"amount": 9}
    assert [a.name for a in result.accounts] == ["from", "to"]

    # Without a coder the decoder compiles one from the registry
    assert decoder.decode(ix, None).args == {"amount": 9}


def test_schema_decoder_raises_on_bad_layout(vault_idl, vault_program_id):
    registry = SchemaRegistry()
    registry.register(vault_program_id, normalize_idl(vault_idl))
    decoder = SchemaDecoder(vault_program_id, registry)
    ix = Instruction(program_id=vault_program_id, data=b"\x01\x02", accounts=[])
    with pytest.raises(UnrecognizedLayoutError):
        decoder.decode(ix, None)


# -- normalizer -----------------------------------------------------------------


@pytest.fixture
def schema_table(vault_idl, vault_program_id):
    registry = SchemaRegistry()
    schema = normalize_idl(vault_idl)
    registry.register(vault_program_id, schema)
    table = DispatchTable()
    table.set(vault_program_id, SchemaDecoder(vault_program_id, registry), coder=InstructionCoder(schema))
    return table, registry


def test_normalizer_decoded(schema_table, vault_program_id):
    table, _ = schema_table
    ix = Instruction(program_id=vault_program_id, data=_transfer_data(100), accounts=_metas(3))
    record, outcome = InstructionNormalizer(table).try_normalize(ix)
    assert outcome is DecodeOutcome.DECODED
    assert record.name == "transfer"
    assert record.args == {"amount": 100}
    assert [a.name for a in record.accounts] == ["from", "to", "Remaining 0"]


def test_normalizer_unknown_program_keeps_raw_accounts(schema_table):
    table, _ = schema_table
    other = Pubkey.new_unique()
    metas = _metas(2)
    ix = Instruction(program_id=other, data=b"\xde\xad", accounts=metas)
    record, outcome = InstructionNormalizer(table).try_normalize(ix)
    assert outcome is DecodeOutcome.UNKNOWN_PROGRAM
    assert record.name == "unknown"
    assert record.program_id == other
    assert record.args == {"unknown": b"\xde\xad"}
    assert list(record.accounts) == metas
    assert record.is_unknown


def test_normalizer_unrecognized_layout(schema_table, vault_program_id):
    table, _ = schema_table
    ix = Instruction(program_id=vault_program_id, data=b"\x00" * 3, accounts=[])
    record, outcome = InstructionNormalizer(table).try_normalize(ix)
    assert outcome is DecodeOutcome.UNRECOGNIZED_LAYOUT
    assert record.name == "unknown"
    assert record.args == {"unknown": b"\x00" * 3}


def test_normalizer_unrecognized_instruction_name(vault_idl, vault_program_id):
    """A coder that knows more instructions than the registered schema yields the decoded name."""
    registry = SchemaRegistry()
    full = normalize_idl(vault_idl)
    trimmed_idl = dict(vault_idl, instructions=[vault_idl["instructions"][0]])
    registry.register(vault_program_id, normalize_idl(trimmed_idl))
    table = DispatchTable()
    table.set(vault_program_id, SchemaDecoder(vault_program_id, registry), coder=InstructionCoder(full))

    data = sighash("close")
    ix = Instruction(program_id=vault_program_id, data=data, accounts=_metas(1))
    record, outcome = InstructionNormalizer(table).try_normalize(ix)
    assert outcome is DecodeOutcome.UNRECOGNIZED_INSTRUCTION
    assert record.name == "close"
    assert record.args == {"unknown": data}


def test_normalizer_absorbs_custom_decoder_exception():
    pid = Pubkey.new_unique()
    table = DispatchTable()
    table.set(pid, MagicMock(side_effect=RuntimeError("boom")))
    ix = Instruction(program_id=pid, data=b"\x01", accounts=[])
    record, outcome = InstructionNormalizer(table).try_normalize(ix)
    assert outcome is DecodeOutcome.DECODER_FAULT
    assert record.name == "unknown"
    assert record.args == {"unknown": b"\x01"}


def test_normalizer_rejects_wrong_return_type():
    pid = Pubkey.new_unique()
    table = DispatchTable()
    table.set(pid, MagicMock(return_value={"name": "not a record"}))
    ix = Instruction(program_id=pid, data=b"", accounts=[])
    record, outcome = InstructionNormalizer(table).try_normalize(ix)
    assert outcome is DecodeOutcome.DECODER_FAULT
    assert record.is_unknown


def test_custom_decoder_receives_registered_coder(vault_idl, vault_program_id):
    """Custom decode functions are called with the program's coder when one exists."""
    schema = normalize_idl(vault_idl)
    coder = InstructionCoder(schema)
    seen = []

    def decode(ix, c):
        seen.append(c)
        return NormalizedInstruction(name="custom", program_id=ix.program_id, args={"n": 1})

    table = DispatchTable()
    table.set(vault_program_id, decode, coder=coder)
    ix = Instruction(program_id=vault_program_id, data=b"", accounts=[])
    record = InstructionNormalizer(table).normalize(ix)
    assert record.name == "custom"
    assert seen == [coder]


# -- models -----------------------------------------------------------------------


def test_normalized_instruction_to_dict():
    pid = Pubkey.new_unique()
    parent = Pubkey.new_unique()
    owner = Pubkey.new_unique()
    acc = NamedAccount(name="from", pubkey=Pubkey.new_unique(), is_signer=True, is_writable=True)
    record = NormalizedInstruction(
        name="transfer",
        program_id=pid,
        accounts=[acc],
        args={"amount": 5, "owner": owner, "blob": b"\x0a\x0b", "path": (owner,)},
        parent_program_id=parent,
    )
    out = record.to_dict()
    assert out["name"] == "transfer"
    assert out["program_id"] == str(pid)
    assert out["parent_program_id"] == str(parent)
    assert out["accounts"] == [acc.to_dict()]
    assert out["args"] == {"amount": 5, "owner": str(owner), "blob": "0a0b", "path": [str(owner)]}


def test_unknown_instruction_to_dict_has_raw_metas():
    pid = Pubkey.new_unique()
    meta = AccountMeta(pubkey=Pubkey.new_unique(), is_signer=False, is_writable=True)
    record = unknown_instruction(pid, [meta], b"\xff")
    out = record.to_dict()
    assert "parent_program_id" not in out
    assert out["accounts"] == [{"pubkey": str(meta.pubkey), "is_signer": False, "is_writable": True}]
    assert out["args"] == {"unknown": "ff"}


def test_is_unknown_follows_fallback_not_arg_names():
    """A decoded instruction whose only arg is named 'unknown' is still a decoded record."""
    pid = Pubkey.new_unique()
    decoded = NormalizedInstruction(name="set_flag", program_id=pid, args={"unknown": 1})
    assert decoded.decoded
    assert not decoded.is_unknown

    fallback = unknown_instruction(pid, [], b"\x01", name="close")
    assert fallback.is_unknown
    assert fallback.name == "close"
