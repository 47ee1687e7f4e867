"""
SolanaParser: decoder registry plus transaction parsing entry points.

Parses Solana transactions in any of the supported shapes into ordered
NormalizedInstruction lists:
- by signature (fetched over JSON-RPC),
- getTransaction "json"/"base64" results (with address lookup tables and
  inner instructions),
- getTransaction "jsonParsed" results and messages,
- compiled solders Message / MessageV0 objects or their RPC dict form,
- raw signed transaction dumps (base64 or bytes),
- single solders Instructions.

Each instance owns its registry; there is no process-wide state.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from solana_ixparse.config.settings import ParserSettings
from solana_ixparse.core.exceptions import SchemaDefinitionError, TransactionFormatError
from solana_ixparse.decoders import BUILTIN_DECODERS
from solana_ixparse.engine.adapters import (
    CompiledMessage,
    convert_parsed_instruction,
    instructions_from_compiled_message,
    instructions_from_dump,
    is_partially_decoded,
    parsed_account_metas,
    parsed_instruction_to_instruction,
)
from solana_ixparse.engine.dispatch import DecodeFn, DispatchTable, SchemaDecoder
from solana_ixparse.engine.fetch import fetch_transaction
from solana_ixparse.engine.flatten import flatten_parsed_transaction, flatten_transaction_response
from solana_ixparse.engine.models import NormalizedInstruction
from solana_ixparse.engine.normalizer import InstructionNormalizer
from solana_ixparse.engine.registry import SchemaRegistry, program_key
from solana_ixparse.idl.coder import InstructionCoder
from solana_ixparse.idl.converter import normalize_idl
from solana_ixparse.ixparse_logging import get_logger

logger = get_logger(__name__)

ProgramId = Pubkey | str


class SolanaParser:
    """
    Parse Solana instructions and transactions with per-program decoders.

    Decoder precedence at construction: IDL schemas first (a later schema for
    the same program wins), then custom decoders for programs no schema
    covers, then the built-in native-program decoders for whatever is left.
    After construction, register_schema / set_custom_decoder overwrite and
    remove_decoder deletes, however the decoder was added.
    """

    def __init__(
        self,
        program_infos: Iterable[tuple[ProgramId, Any]] | None = None,
        decoders: Iterable[tuple[ProgramId, DecodeFn]] | None = None,
        *,
        settings: ParserSettings | None = None,
    ) -> None:
        """
        Args:
            program_infos: (program_id, idl) pairs; idl is a raw IDL dict of any
                supported Anchor version or an already normalized Schema.
            decoders: (program_id, decode_fn) pairs of custom decoders.
            settings: RPC settings for parse_transaction; resolved from the
                environment on first use when omitted.
        """
        self._registry = SchemaRegistry()
        self._table = DispatchTable()
        self._normalizer = InstructionNormalizer(self._table)
        self._settings = settings

        for program_id, idl in program_infos or ():
            self.register_schema(program_id, idl)
        for program_id, fn in decoders or ():
            if not self._table.has(program_id):
                self._table.set(program_id, fn)
        for program_id, fn in BUILTIN_DECODERS:
            if not self._table.has(program_id):
                self._table.set(program_id, fn)

    # -- registry -----------------------------------------------------------------

    def register_schema(self, program_id: ProgramId, idl: Any) -> bool:
        """
        Add or replace the IDL-backed decoder for program_id.

        Returns False (and keeps any existing decoder) when the IDL cannot be
        converted or compiled.
        """
        key = str(program_id)
        try:
            key = program_key(program_id)
            schema = normalize_idl(idl, program_id=key)
            coder = InstructionCoder(schema)
        except (SchemaDefinitionError, ValueError, TypeError) as e:
            logger.error(
                "schema_registration_failed",
                program_id=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        self._registry.register(key, schema)
        self._table.set(key, SchemaDecoder(key, self._registry), coder=coder)
        logger.debug(
            "schema_registered",
            program_id=key,
            schema_name=schema.name,
            instruction_count=len(schema.instructions),
        )
        return True

    def set_custom_decoder(self, program_id: ProgramId, decoder: DecodeFn) -> None:
        """Add or replace a custom decode function fn(instruction, coder)."""
        self._table.set(program_id, decoder)

    def remove_decoder(self, program_id: ProgramId) -> None:
        """Remove whatever decoder serves program_id; no-op when there is none."""
        try:
            key = program_key(program_id)
        except ValueError:
            return
        self._table.remove(key)
        self._registry.remove(key)

    def has_decoder(self, program_id: ProgramId) -> bool:
        try:
            return self._table.has(program_id)
        except ValueError:
            return False

    def list_known_programs(self) -> list[str]:
        """Base58 program ids that have a decoder."""
        return self._table.list_known_programs()

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    # -- instructions -------------------------------------------------------------

    def parse_instruction(self, instruction: Instruction) -> NormalizedInstruction:
        """Decode one instruction; unknown record when no decoder can."""
        return self._normalizer.normalize(instruction)

    def _parse_flat(
        self, flat: Sequence[tuple[Instruction, Pubkey | None]]
    ) -> list[NormalizedInstruction]:
        out: list[NormalizedInstruction] = []
        for instruction, parent_program_id in flat:
            parsed = self.parse_instruction(instruction)
            if parent_program_id is not None:
                parsed.parent_program_id = parent_program_id
            out.append(parsed)
        return out

    # -- compiled forms -----------------------------------------------------------

    def parse_transaction_data(
        self,
        message: CompiledMessage,
        loaded_addresses: Any = None,
    ) -> list[NormalizedInstruction]:
        """
        Parse the top-level instructions of a compiled message.

        Args:
            message: solders Message / MessageV0, or the RPC "json" message dict.
            loaded_addresses: meta.loadedAddresses ({"writable": [...],
                "readonly": [...]}) for versioned messages using lookup tables.
        """
        instructions = instructions_from_compiled_message(message, loaded_addresses)
        return [self.parse_instruction(ix) for ix in instructions]

    def parse_transaction_response(
        self,
        tx: Mapping[str, Any],
        include_inner: bool = True,
    ) -> list[NormalizedInstruction]:
        """Parse a getTransaction "json"/"base64" result, inner instructions included by default."""
        return self._parse_flat(flatten_transaction_response(tx, include_inner=include_inner))

    def parse_transaction_dump(self, dump: str | bytes) -> list[NormalizedInstruction]:
        """Parse a raw signed legacy transaction (base64 string or bytes)."""
        return [self.parse_instruction(ix) for ix in instructions_from_dump(dump)]

    # -- jsonParsed forms ---------------------------------------------------------

    def parse_parsed_message(self, message: Mapping[str, Any]) -> list[NormalizedInstruction]:
        """Parse the top-level instructions of a jsonParsed message."""
        metas = parsed_account_metas(message)
        return [self._parse_parsed_entry(entry, metas) for entry in message.get("instructions") or []]

    def parse_parsed_transaction(
        self,
        tx: Mapping[str, Any],
        include_inner: bool = True,
    ) -> list[NormalizedInstruction]:
        """Parse a jsonParsed getTransaction result, inner instructions included by default."""
        flat = flatten_parsed_transaction(tx, include_inner=include_inner)
        metas = parsed_account_metas(tx["transaction"]["message"])
        out: list[NormalizedInstruction] = []
        for entry, parent_program_id in flat:
            parsed = self._parse_parsed_entry(entry, metas)
            if parent_program_id is not None:
                parsed.parent_program_id = parent_program_id
            out.append(parsed)
        return out

    def _parse_parsed_entry(self, entry: Mapping[str, Any], metas: Sequence[Any]) -> NormalizedInstruction:
        if not isinstance(entry, Mapping):
            raise TransactionFormatError(f"Instruction entry must be an object, got {type(entry).__name__}")
        if is_partially_decoded(entry):
            return self.parse_instruction(parsed_instruction_to_instruction(entry, metas))
        return convert_parsed_instruction(entry)

    # -- by signature -------------------------------------------------------------

    def parse_transaction(
        self,
        signature: str,
        include_inner: bool = False,
        commitment: str | None = None,
    ) -> list[NormalizedInstruction] | None:
        """
        Fetch a transaction by signature and parse it.

        Returns None when the transaction cannot be retrieved. With
        include_inner=False only top-level instructions are returned.
        """
        if self._settings is None:
            self._settings = ParserSettings()
        tx = fetch_transaction(signature, commitment=commitment, settings=self._settings)
        if tx is None:
            return None
        return self.parse_transaction_response(tx, include_inner=include_inner)
