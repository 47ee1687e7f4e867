"""
Application-level exceptions.

Instruction-level errors never leave the normalizer; they are converted to
unknown records there. Schema and transaction-format errors describe a whole
registration or envelope and are handled by SolanaParser or the caller.
"""

from __future__ import annotations


class IxParseError(Exception):
    """Base class for all solana_ixparse errors."""


class InstructionDecodeError(IxParseError):
    """A decoder could not turn an instruction into a named record."""


class UnrecognizedLayoutError(InstructionDecodeError):
    """Instruction data does not match any layout the decoder knows."""


class UnrecognizedInstructionError(InstructionDecodeError):
    """Data decoded to an instruction name the schema does not declare."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Instruction {name!r} is not declared by the schema")
        self.name = name


class SchemaDefinitionError(IxParseError):
    """Raw IDL is not a recognized schema-definition shape."""


class TransactionFormatError(IxParseError):
    """Transaction payload cannot be turned into instructions."""
