"""
IDL version adapter: raw Anchor IDL JSON to the normalized Schema model.

Accepts both IDL generations:
- Anchor >= 0.30: top-level "address", "metadata", per-instruction
  "discriminator", accounts flagged with "writable"/"signer", types "pubkey"
  and {"defined": {"name": ...}}.
- Legacy (< 0.30): top-level "name"/"version", camelCase instruction names,
  accounts flagged with "isMut"/"isSigner", types "publicKey" and
  {"defined": "Name"}. Names are converted to snake_case and discriminators
  derived as sha256("global:<name>")[:8], matching what newer Anchor emits.

Anything else raises SchemaDefinitionError.
"""

from __future__ import annotations

import hashlib
import re
from typing import Any

from solana_ixparse.core.exceptions import SchemaDefinitionError
from solana_ixparse.idl.schema import (
    AccountSlot,
    Field,
    InstructionSchema,
    Schema,
    TypeDef,
)

DISCRIMINATOR_SIZE = 8

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def snake_case(name: str) -> str:
    """camelCase / PascalCase to snake_case (initializeMint -> initialize_mint)."""
    s = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    s = _WORD_BOUNDARY.sub(r"\1_\2", s)
    return s.lower()


def sighash(name: str, namespace: str = "global") -> bytes:
    """Anchor instruction discriminator: first 8 bytes of sha256("global:<name>")."""
    return hashlib.sha256(f"{namespace}:{name}".encode()).digest()[:DISCRIMINATOR_SIZE]


def is_legacy_idl(raw: dict[str, Any]) -> bool:
    """True when the IDL predates Anchor 0.30 (no address, no discriminators)."""
    if "address" in raw:
        return False
    if isinstance(raw.get("metadata"), dict) and "spec" in raw["metadata"]:
        return False
    instructions = raw.get("instructions") or []
    if any(isinstance(ix, dict) and "discriminator" in ix for ix in instructions):
        return False
    return True


def _normalize_type(ty: Any, legacy: bool) -> Any:
    """Rewrite a type descriptor into the >=0.30 vocabulary."""
    if isinstance(ty, str):
        if ty == "publicKey":
            return "pubkey"
        return ty
    if not isinstance(ty, dict) or len(ty) != 1:
        raise SchemaDefinitionError(f"Unsupported type descriptor: {ty!r}")
    kind, inner = next(iter(ty.items()))
    if kind == "defined":
        if isinstance(inner, str):
            return {"defined": {"name": inner}}
        if isinstance(inner, dict) and isinstance(inner.get("name"), str):
            return {"defined": {"name": inner["name"]}}
        raise SchemaDefinitionError(f"Unsupported defined type: {inner!r}")
    if kind in ("vec", "option", "coption"):
        return {kind: _normalize_type(inner, legacy)}
    if kind == "array":
        if not isinstance(inner, list) or len(inner) != 2 or not isinstance(inner[1], int):
            raise SchemaDefinitionError(f"Unsupported array type: {inner!r}")
        return {"array": [_normalize_type(inner[0], legacy), inner[1]]}
    raise SchemaDefinitionError(f"Unsupported type descriptor: {ty!r}")


def _convert_fields(raw_fields: Any, legacy: bool) -> tuple[Any, ...]:
    """Named fields become Field; tuple fields stay bare type descriptors."""
    if raw_fields is None:
        return ()
    if not isinstance(raw_fields, list):
        raise SchemaDefinitionError(f"Fields must be a list, got {type(raw_fields).__name__}")
    out: list[Any] = []
    for f in raw_fields:
        if isinstance(f, dict) and "name" in f and "type" in f:
            name = snake_case(f["name"]) if legacy else f["name"]
            out.append(Field(name=name, type=_normalize_type(f["type"], legacy)))
        else:
            out.append(_normalize_type(f, legacy))
    return tuple(out)


def _convert_account(raw: dict[str, Any], legacy: bool) -> AccountSlot:
    if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
        raise SchemaDefinitionError(f"Account entry without a name: {raw!r}")
    name = snake_case(raw["name"]) if legacy else raw["name"]
    if "accounts" in raw:
        children = tuple(_convert_account(child, legacy) for child in raw["accounts"] or [])
        return AccountSlot(name=name, children=children)
    if legacy:
        return AccountSlot(
            name=name,
            writable=bool(raw.get("isMut", False)),
            signer=bool(raw.get("isSigner", False)),
            optional=bool(raw.get("isOptional", False)),
        )
    return AccountSlot(
        name=name,
        writable=bool(raw.get("writable", False)),
        signer=bool(raw.get("signer", False)),
        optional=bool(raw.get("optional", False)),
    )


def _convert_instruction(raw: dict[str, Any], legacy: bool) -> InstructionSchema:
    if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
        raise SchemaDefinitionError(f"Instruction entry without a name: {raw!r}")
    if legacy:
        name = snake_case(raw["name"])
        discriminator = sighash(name)
    else:
        name = raw["name"]
        disc = raw.get("discriminator")
        if disc is None:
            discriminator = sighash(name)
        elif isinstance(disc, list) and all(isinstance(b, int) and 0 <= b < 256 for b in disc):
            discriminator = bytes(disc)
        else:
            raise SchemaDefinitionError(f"Invalid discriminator for {name!r}: {disc!r}")
    accounts = tuple(_convert_account(acc, legacy) for acc in raw.get("accounts") or [])
    args = _convert_fields(raw.get("args") or [], legacy)
    if not all(isinstance(f, Field) for f in args):
        raise SchemaDefinitionError(f"Instruction {name!r} has an unnamed argument")
    return InstructionSchema(name=name, discriminator=discriminator, accounts=accounts, args=args)


def _convert_type_def(raw: dict[str, Any], legacy: bool) -> TypeDef:
    if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
        raise SchemaDefinitionError(f"Type entry without a name: {raw!r}")
    body = raw.get("type")
    if not isinstance(body, dict):
        raise SchemaDefinitionError(f"Type {raw['name']!r} has no body")
    kind = body.get("kind")
    if kind == "struct":
        return TypeDef(name=raw["name"], kind="struct", fields=_convert_fields(body.get("fields"), legacy))
    if kind == "enum":
        variants: list[tuple[str, tuple[Any, ...] | None]] = []
        for variant in body.get("variants") or []:
            if not isinstance(variant, dict) or "name" not in variant:
                raise SchemaDefinitionError(f"Enum {raw['name']!r} has an unnamed variant")
            fields = variant.get("fields")
            variants.append((variant["name"], _convert_fields(fields, legacy) if fields else None))
        return TypeDef(name=raw["name"], kind="enum", variants=tuple(variants))
    raise SchemaDefinitionError(f"Unsupported type kind {kind!r} for {raw['name']!r}")


def normalize_idl(raw: Any, program_id: str | None = None) -> Schema:
    """
    Convert a raw IDL dict (any supported version) into a Schema.

    Args:
        raw: Parsed IDL JSON.
        program_id: Fallback address when the IDL does not carry one.

    Raises:
        SchemaDefinitionError: raw is not a recognized IDL shape.
    """
    if isinstance(raw, Schema):
        return raw
    if not isinstance(raw, dict):
        raise SchemaDefinitionError(f"IDL must be a dict, got {type(raw).__name__}")
    instructions = raw.get("instructions")
    if not isinstance(instructions, list):
        raise SchemaDefinitionError("IDL has no instructions list")

    legacy = is_legacy_idl(raw)
    metadata = raw.get("metadata") if isinstance(raw.get("metadata"), dict) else {}
    if legacy:
        name = raw.get("name")
        if not isinstance(name, str):
            raise SchemaDefinitionError("Legacy IDL has no name")
        version = raw.get("version")
        address = metadata.get("address") or program_id
    else:
        name = metadata.get("name") or raw.get("name") or ""
        version = metadata.get("version")
        address = raw.get("address") or program_id

    converted = tuple(_convert_instruction(ix, legacy) for ix in instructions)
    # Account structs share the types namespace in legacy IDLs; only "types" feed the codec.
    types = tuple(_convert_type_def(td, legacy) for td in raw.get("types") or [])
    return Schema(
        name=name,
        instructions=converted,
        types=types,
        address=str(address) if address is not None else None,
        version=version,
        metadata=dict(metadata),
    )
