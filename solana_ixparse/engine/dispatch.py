"""
Decoder dispatch table: program id to decoder.

A decoder is one of two closed variants:
- SchemaDecoder: backed by a registered IDL schema and its InstructionCoder.
- CustomDecoder: wraps a caller-supplied (or built-in) decode function.

Decode functions are called as fn(instruction, coder) where coder is the
InstructionCoder registered for the program id, or None. They return a
NormalizedInstruction and may raise; the normalizer absorbs failures.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Iterator

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from solana_ixparse.core.exceptions import (
    UnrecognizedInstructionError,
    UnrecognizedLayoutError,
)
from solana_ixparse.engine.models import NormalizedInstruction
from solana_ixparse.engine.registry import SchemaRegistry, bind_accounts, program_key
from solana_ixparse.idl.coder import InstructionCoder

DecodeFn = Callable[[Instruction, "InstructionCoder | None"], NormalizedInstruction]


class Decoder(ABC):
    """Closed decoder capability; see SchemaDecoder and CustomDecoder."""

    kind: str

    @abstractmethod
    def decode(
        self, instruction: Instruction, coder: InstructionCoder | None
    ) -> NormalizedInstruction:
        """Decode one instruction; raise InstructionDecodeError when it cannot."""


class SchemaDecoder(Decoder):
    """Decode with an IDL schema and bind account names from the registry."""

    kind = "schema"

    def __init__(self, program_id: Pubkey | str, registry: SchemaRegistry) -> None:
        self.program_id = program_key(program_id)
        self._registry = registry

    def decode(
        self, instruction: Instruction, coder: InstructionCoder | None
    ) -> NormalizedInstruction:
        if coder is None:
            schema = self._registry.lookup(self.program_id)
            if schema is None:
                raise UnrecognizedLayoutError(f"No schema registered for {self.program_id}")
            coder = InstructionCoder(schema)
        decoded = coder.decode(instruction.data)
        if decoded is None:
            raise UnrecognizedLayoutError(
                f"Data does not match any {self.program_id} instruction layout"
            )
        names = self._registry.flattened_accounts(self.program_id, decoded.name)
        if names is None:
            raise UnrecognizedInstructionError(decoded.name)
        return NormalizedInstruction(
            name=decoded.name,
            program_id=instruction.program_id,
            accounts=bind_accounts(instruction.accounts, names),
            args=decoded.args,
        )

    def __repr__(self) -> str:
        return f"SchemaDecoder({self.program_id})"


class CustomDecoder(Decoder):
    """Adapter for a plain decode function."""

    kind = "custom"

    def __init__(self, fn: DecodeFn) -> None:
        if not callable(fn):
            raise TypeError(f"decoder must be callable, got {type(fn).__name__}")
        self.fn = fn

    def decode(
        self, instruction: Instruction, coder: InstructionCoder | None
    ) -> NormalizedInstruction:
        result = self.fn(instruction, coder)
        if not isinstance(result, NormalizedInstruction):
            raise TypeError(
                f"decoder {getattr(self.fn, '__name__', self.fn)!r} returned "
                f"{type(result).__name__}, expected NormalizedInstruction"
            )
        return result

    def __repr__(self) -> str:
        return f"CustomDecoder({getattr(self.fn, '__name__', self.fn)!r})"


def as_decoder(decoder: Decoder | DecodeFn) -> Decoder:
    if isinstance(decoder, Decoder):
        return decoder
    return CustomDecoder(decoder)


class DispatchTable:
    """
    Program id (base58) -> Decoder, plus program id -> InstructionCoder for
    schema-backed programs. Last write wins; no merging.
    """

    def __init__(self) -> None:
        self._decoders: dict[str, Decoder] = {}
        self._coders: dict[str, InstructionCoder] = {}

    def set(
        self,
        program_id: Pubkey | str,
        decoder: Decoder | DecodeFn,
        coder: InstructionCoder | None = None,
    ) -> None:
        """Insert or overwrite the decoder; coder replaces the side-table entry when given."""
        key = program_key(program_id)
        self._decoders[key] = as_decoder(decoder)
        if coder is not None:
            self._coders[key] = coder

    def remove(self, program_id: Pubkey | str) -> None:
        """Delete decoder and coder if present; no-op otherwise."""
        key = program_key(program_id)
        self._decoders.pop(key, None)
        self._coders.pop(key, None)

    def has(self, program_id: Pubkey | str) -> bool:
        return program_key(program_id) in self._decoders

    def get(self, program_id: Pubkey | str) -> Decoder | None:
        return self._decoders.get(program_key(program_id))

    def coder_for(self, program_id: Pubkey | str) -> InstructionCoder | None:
        return self._coders.get(program_key(program_id))

    def list_known_programs(self) -> list[str]:
        """Program ids with a decoder, in insertion order."""
        return list(self._decoders)

    def __iter__(self) -> Iterator[str]:
        return iter(self.list_known_programs())

    def __len__(self) -> int:
        return len(self._decoders)
