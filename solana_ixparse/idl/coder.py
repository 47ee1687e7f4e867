"""
Borsh instruction codec built from a normalized Schema.

Instruction data is the instruction's discriminator followed by its args
serialized with Borsh. Layouts are compiled once per coder with
borsh-construct; named types are resolved lazily so self-referencing types
do not recurse at build time.

decode() returns None when no discriminator matches or the body does not fit
the layout. It never raises for bad data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import construct
from borsh_construct import (
    F32,
    F64,
    I8,
    I16,
    I32,
    I64,
    I128,
    U8,
    U16,
    U32,
    U64,
    U128,
    Bool,
    Bytes,
    CStruct,
    Option,
    String,
    Vec,
)
from solders.pubkey import Pubkey

from solana_ixparse.idl.schema import Field, InstructionSchema, Schema

_PRIMITIVES: dict[str, construct.Construct] = {
    "bool": Bool,
    "u8": U8,
    "u16": U16,
    "u32": U32,
    "u64": U64,
    "u128": U128,
    "i8": I8,
    "i16": I16,
    "i32": I32,
    "i64": I64,
    "i128": I128,
    "f32": F32,
    "f64": F64,
    "string": String,
    "bytes": Bytes,
}


def _pubkey_from_obj(obj: Any) -> bytes:
    if isinstance(obj, str):
        return bytes(Pubkey.from_string(obj))
    return bytes(obj)


PubkeyLayout = construct.ExprAdapter(
    construct.Bytes(32),
    lambda obj, ctx: Pubkey.from_bytes(obj),
    lambda obj, ctx: _pubkey_from_obj(obj),
)


class COption(construct.Adapter):
    """C-style option: u32 tag (0 = None, 1 = Some) followed by the value."""

    def __init__(self, subcon: construct.Construct) -> None:
        super().__init__(
            construct.Struct(
                "tag" / construct.Int32ul,
                "value" / construct.If(construct.this.tag == 1, subcon),
            )
        )

    def _decode(self, obj: Any, context: Any, path: Any) -> Any:
        if obj.tag not in (0, 1):
            raise construct.ValidationError(f"invalid COption tag {obj.tag}", path=path)
        return obj.value if obj.tag == 1 else None

    def _encode(self, obj: Any, context: Any, path: Any) -> dict[str, Any]:
        if obj is None:
            return {"tag": 0, "value": None}
        return {"tag": 1, "value": obj}


class BorshEnum(construct.Adapter):
    """
    Borsh enum: u8 variant index followed by the variant's fields.

    Decodes to {variant_name: fields}, fields being None for unit variants.
    Encodes from the same dict or from a bare variant name for unit variants.
    """

    def __init__(self, variants: list[tuple[str, construct.Construct | None]]) -> None:
        self._names = [name for name, _ in variants]
        cases = {
            idx: (layout if layout is not None else construct.Pass)
            for idx, (_, layout) in enumerate(variants)
        }
        super().__init__(
            construct.Struct(
                "index" / construct.Int8ul,
                "value" / construct.Switch(construct.this.index, cases, default=construct.Error),
            )
        )

    def _decode(self, obj: Any, context: Any, path: Any) -> dict[str, Any]:
        name = self._names[obj.index]
        value = obj.value
        return {name: to_python(value) if value is not None else None}

    def _encode(self, obj: Any, context: Any, path: Any) -> dict[str, Any]:
        if isinstance(obj, str):
            name, value = obj, None
        elif isinstance(obj, dict) and len(obj) == 1:
            name, value = next(iter(obj.items()))
        else:
            raise construct.ValidationError(f"cannot encode enum value {obj!r}", path=path)
        if name not in self._names:
            raise construct.ValidationError(f"unknown enum variant {name!r}", path=path)
        return {"index": self._names.index(name), "value": value}


def to_python(value: Any) -> Any:
    """Strip construct containers down to plain dicts and lists."""
    if isinstance(value, dict):
        return {k: to_python(v) for k, v in value.items() if not str(k).startswith("_")}
    if isinstance(value, list):
        return [to_python(v) for v in value]
    return value


def _field_types(fields: tuple[Any, ...]) -> list[Any]:
    return [f.type if isinstance(f, Field) else f for f in fields]


@dataclass(frozen=True)
class DecodedInstruction:
    name: str
    args: dict[str, Any]


class InstructionCoder:
    """
    Encode/decode instruction data for one program schema.

    Build once per schema and reuse; construction compiles every
    instruction layout.
    """

    def __init__(self, schema: Schema) -> None:
        """
        Raises:
            ValueError: an arg or type field uses an unsupported type or names
                a type the schema does not declare.
        """
        self.schema = schema
        self._defined: dict[str, construct.Construct] = {}
        self._layouts: dict[str, construct.Construct] = {}
        self._by_name: dict[str, InstructionSchema] = {}
        self._check_type_references()
        for td in schema.types:
            self._defined_layout(td.name)
        for ix in schema.instructions:
            self._by_name[ix.name] = ix
            self._layouts[ix.name] = self._struct_layout(ix.args)
        # Longest discriminator first so a short one never shadows a longer match
        self._ordered = sorted(schema.instructions, key=lambda ix: len(ix.discriminator), reverse=True)

    def decode(self, data: bytes) -> DecodedInstruction | None:
        """Decode instruction data; None when the layout is not recognized."""
        data = bytes(data)
        for ix in self._ordered:
            if not ix.discriminator or not data.startswith(ix.discriminator):
                continue
            body = data[len(ix.discriminator):]
            try:
                parsed = self._layouts[ix.name].parse(body)
            except (construct.ConstructError, ValueError):
                return None
            return DecodedInstruction(name=ix.name, args=to_python(parsed))
        return None

    def encode(self, name: str, args: dict[str, Any]) -> bytes:
        """Serialize args for instruction `name` (discriminator + Borsh body)."""
        ix = self._by_name.get(name)
        if ix is None:
            raise KeyError(f"Instruction {name!r} is not declared by {self.schema.name!r}")
        return ix.discriminator + self._layouts[name].build(args)

    def layout_for(self, name: str) -> construct.Construct | None:
        return self._layouts.get(name)

    def _check_type_references(self) -> None:
        """Every {"defined": ...} must name a declared type; LazyBound would only fail at decode."""
        declared = {td.name for td in self.schema.types}
        pending: list[Any] = [f.type for ix in self.schema.instructions for f in ix.args]
        for td in self.schema.types:
            pending.extend(_field_types(td.fields))
            for _, fields in td.variants:
                pending.extend(_field_types(fields or ()))
        while pending:
            ty = pending.pop()
            if not isinstance(ty, dict):
                continue
            kind, inner = next(iter(ty.items()))
            if kind == "defined":
                if inner["name"] not in declared:
                    raise ValueError(f"Type {inner['name']!r} is not defined in {self.schema.name!r}")
            elif kind == "array":
                pending.append(inner[0])
            else:
                pending.append(inner)

    def _struct_layout(self, fields: tuple[Field, ...]) -> construct.Construct:
        return CStruct(*(f.name / self._type_layout(f.type) for f in fields))

    def _fields_layout(self, fields: tuple[Any, ...]) -> construct.Construct:
        """Named fields -> CStruct; bare type descriptors -> tuple (Sequence)."""
        if all(isinstance(f, Field) for f in fields):
            return self._struct_layout(fields)
        return construct.Sequence(*(self._type_layout(f) for f in fields))

    def _type_layout(self, ty: Any) -> construct.Construct:
        if isinstance(ty, str):
            if ty == "pubkey":
                return PubkeyLayout
            if ty in _PRIMITIVES:
                return _PRIMITIVES[ty]
            raise ValueError(f"Unsupported IDL type {ty!r}")
        kind, inner = next(iter(ty.items()))
        if kind == "vec":
            return Vec(self._type_layout(inner))
        if kind == "option":
            return Option(self._type_layout(inner))
        if kind == "coption":
            return COption(self._type_layout(inner))
        if kind == "array":
            elem, length = inner
            return construct.Array(length, self._type_layout(elem))
        if kind == "defined":
            name = inner["name"]
            return construct.LazyBound(lambda: self._defined_layout(name))
        raise ValueError(f"Unsupported IDL type {ty!r}")

    def _defined_layout(self, name: str) -> construct.Construct:
        cached = self._defined.get(name)
        if cached is not None:
            return cached
        td = self.schema.type_def(name)
        if td is None:
            raise ValueError(f"Type {name!r} is not defined in {self.schema.name!r}")
        if td.kind == "struct":
            layout = self._fields_layout(td.fields)
        else:
            layout = BorshEnum(
                [
                    (variant, self._fields_layout(fields) if fields else None)
                    for variant, fields in td.variants
                ]
            )
        self._defined[name] = layout
        return layout
