"""
Table-driven decoder for native programs.

Native programs prefix instruction data with a fixed-width tag (u8 for SPL
programs, u32 for bincode-encoded system and stake instructions). Each tag
maps to a name, an argument layout and the account names in order.
"""

from __future__ import annotations

from dataclasses import dataclass

import construct
from borsh_construct import CStruct
from solders.instruction import Instruction

from solana_ixparse.core.exceptions import UnrecognizedLayoutError
from solana_ixparse.engine.models import NormalizedInstruction
from solana_ixparse.engine.registry import bind_accounts
from solana_ixparse.idl.coder import InstructionCoder, to_python

# Bincode strings carry a u64 length prefix (Borsh uses u32)
BincodeString = construct.PascalString(construct.Int64ul, "utf8")

NO_ARGS = CStruct()


@dataclass(frozen=True)
class BuiltinInstruction:
    name: str
    layout: construct.Construct = NO_ARGS
    accounts: tuple[str, ...] = ()


class BuiltinProgramDecoder:
    """
    Decode function for one native program.

    Called like any custom decoder: decoder(instruction, coder). The coder is
    ignored; layouts are fixed.
    """

    def __init__(
        self,
        program_name: str,
        tag: construct.Construct,
        instructions: dict[int, BuiltinInstruction],
        *,
        empty_data_tag: int | None = None,
    ) -> None:
        self.program_name = program_name
        self.__name__ = f"decode_{program_name.replace('-', '_')}_instruction"
        self._tag = tag
        self._tag_size = tag.sizeof()
        self._instructions = instructions
        self._empty_data_tag = empty_data_tag

    def __call__(
        self,
        instruction: Instruction,
        coder: InstructionCoder | None = None,
    ) -> NormalizedInstruction:
        data = bytes(instruction.data)
        if not data and self._empty_data_tag is not None:
            tag, body = self._empty_data_tag, b""
        else:
            if len(data) < self._tag_size:
                raise UnrecognizedLayoutError(
                    f"{self.program_name}: {len(data)} bytes is too short for an instruction tag"
                )
            tag = self._tag.parse(data[: self._tag_size])
            body = data[self._tag_size :]

        spec = self._instructions.get(tag)
        if spec is None:
            raise UnrecognizedLayoutError(f"{self.program_name}: unknown instruction tag {tag}")
        try:
            args = to_python(spec.layout.parse(body))
        except (construct.ConstructError, ValueError) as e:
            raise UnrecognizedLayoutError(f"{self.program_name}.{spec.name}: {e}") from e

        return NormalizedInstruction(
            name=spec.name,
            program_id=instruction.program_id,
            accounts=bind_accounts(instruction.accounts, spec.accounts),
            args=args,
        )

    @property
    def instruction_names(self) -> list[str]:
        return [spec.name for spec in self._instructions.values()]

    def __repr__(self) -> str:
        return f"BuiltinProgramDecoder({self.program_name!r})"
