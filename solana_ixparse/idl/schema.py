"""
Normalized program schema (IDL) model.

A Schema is the single shape every IDL version is converted into before it
reaches the registry or the codec. Account slots form a tree: a leaf names
one account, a group nests further slots (Anchor composite accounts).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AccountSlot:
    """
    One entry of an instruction's account list.

    Leaf when children is empty; otherwise a named group whose children are
    flattened with the group name as prefix ("group.child").
    """

    name: str
    writable: bool = False
    signer: bool = False
    optional: bool = False
    children: tuple["AccountSlot", ...] = ()

    @property
    def is_group(self) -> bool:
        return bool(self.children)


@dataclass(frozen=True)
class Field:
    """Named argument or struct field with its IDL type descriptor."""

    name: str
    type: Any


@dataclass(frozen=True)
class InstructionSchema:
    name: str
    discriminator: bytes
    accounts: tuple[AccountSlot, ...] = ()
    args: tuple[Field, ...] = ()


@dataclass(frozen=True)
class TypeDef:
    """
    Named type from the IDL "types" section.

    kind is "struct" or "enum". For structs, fields holds Field entries (named)
    or bare type descriptors (tuple struct). For enums, variants maps variant
    name to its fields in the same form, or None for unit variants.
    """

    name: str
    kind: str
    fields: tuple[Any, ...] = ()
    variants: tuple[tuple[str, tuple[Any, ...] | None], ...] = ()


@dataclass(frozen=True)
class Schema:
    name: str
    instructions: tuple[InstructionSchema, ...]
    types: tuple[TypeDef, ...] = ()
    address: str | None = None
    version: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def instruction(self, name: str) -> InstructionSchema | None:
        """Return the declared instruction with this name, or None."""
        for ix in self.instructions:
            if ix.name == name:
                return ix
        return None

    def type_def(self, name: str) -> TypeDef | None:
        for td in self.types:
            if td.name == name:
                return td
        return None

    @property
    def instruction_names(self) -> tuple[str, ...]:
        return tuple(ix.name for ix in self.instructions)


def flatten_account_slots(slots: tuple[AccountSlot, ...] | list[AccountSlot]) -> tuple[str, ...]:
    """
    Flatten a slot tree depth-first into dotted account names.

    Uses an explicit stack so deeply nested composite accounts cannot hit the
    recursion limit. Order matches the order accounts are passed on-chain.
    """
    names: list[str] = []
    # Stack of (slot, prefix); pushed in reverse so pops come out in declaration order
    stack: list[tuple[AccountSlot, str]] = [(slot, "") for slot in reversed(slots)]
    while stack:
        slot, prefix = stack.pop()
        full_name = f"{prefix}.{slot.name}" if prefix else slot.name
        if slot.is_group:
            for child in reversed(slot.children):
                stack.append((child, full_name))
        else:
            names.append(full_name)
    return tuple(names)
