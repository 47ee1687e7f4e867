"""
Instruction normalizer: one solders Instruction to one NormalizedInstruction.

Never raises for instruction content: missing decoders, unrecognized data
and decoder exceptions all degrade to an unknown record so one bad
instruction cannot abort parsing of the rest of a transaction.
"""

from __future__ import annotations

from enum import Enum

from solders.instruction import Instruction

from solana_ixparse.core.exceptions import (
    UnrecognizedInstructionError,
    UnrecognizedLayoutError,
)
from solana_ixparse.engine.dispatch import DispatchTable
from solana_ixparse.engine.models import NormalizedInstruction, unknown_instruction
from solana_ixparse.ixparse_logging import bind_program


class DecodeOutcome(str, Enum):
    DECODED = "decoded"
    UNKNOWN_PROGRAM = "unknown_program"
    UNRECOGNIZED_LAYOUT = "unrecognized_layout"
    UNRECOGNIZED_INSTRUCTION = "unrecognized_instruction"
    DECODER_FAULT = "decoder_fault"


class InstructionNormalizer:
    """Resolve the decoder for an instruction and absorb its failures."""

    def __init__(self, table: DispatchTable) -> None:
        self._table = table

    def normalize(self, instruction: Instruction) -> NormalizedInstruction:
        record, _ = self.try_normalize(instruction)
        return record

    def try_normalize(
        self, instruction: Instruction
    ) -> tuple[NormalizedInstruction, DecodeOutcome]:
        """Return the record together with how it was obtained."""
        program_id = instruction.program_id
        decoder = self._table.get(program_id)
        if decoder is None:
            return self._unknown(instruction), DecodeOutcome.UNKNOWN_PROGRAM

        log = bind_program(program_id, __name__)
        try:
            record = decoder.decode(instruction, self._table.coder_for(program_id))
        except UnrecognizedInstructionError as e:
            log.debug(
                "instruction_name_not_in_schema",
                instruction_name=e.name,
            )
            return (
                self._unknown(instruction, name=e.name),
                DecodeOutcome.UNRECOGNIZED_INSTRUCTION,
            )
        except UnrecognizedLayoutError as e:
            log.debug(
                "instruction_layout_unrecognized",
                instruction_data=bytes(instruction.data),
                error=str(e),
            )
            return self._unknown(instruction), DecodeOutcome.UNRECOGNIZED_LAYOUT
        except Exception as e:
            log.warning(
                "instruction_decoder_fault",
                decoder=repr(decoder),
                instruction_data=bytes(instruction.data),
                error=str(e),
                error_type=type(e).__name__,
            )
            return self._unknown(instruction), DecodeOutcome.DECODER_FAULT
        return record, DecodeOutcome.DECODED

    @staticmethod
    def _unknown(instruction: Instruction, name: str | None = None) -> NormalizedInstruction:
        return unknown_instruction(
            instruction.program_id,
            instruction.accounts,
            instruction.data,
            name=name,
        )
