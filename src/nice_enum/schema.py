"""
Type Declaration Schema
=======================

This module defines the structural description of a Rust type declaration
that the derive consumes. It is the in-memory boundary between the host
collaborator (the parser, or hand-built fixtures) and the derive itself.

Node Hierarchy
--------------
TypeDecl (base)
├── SumTypeDecl - enum: ordered variants
├── ProductTypeDecl - struct: rejected by the derive
└── UnionTypeDecl - union: rejected by the derive

VariantDecl - one case of a SumTypeDecl
├── FieldsKind.UNIT - `Unit`
├── FieldsKind.NAMED - `Named { a: u32 }`
└── FieldsKind.UNNAMED - `Tuple(u32, String)`

Design Notes
------------
- All nodes are frozen dataclasses; the derive never mutates its input.
- Identifiers carry an optional span (SourceLocation). Spans are used for
  error reporting only and are dropped from generated identifiers.
- Types are kept as normalized source text ("Vec<T>", "&'a str"). The
  derive copies them into signatures and never interprets them.
- Declarations can be built from plain dictionaries (as loaded from JSON)
  with TypeDecl.from_dict() and converted back with to_dict().
"""

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Optional

from nice_enum.errors import SchemaError, SourceLocation


# =============================================================================
# Identifiers and Visibility
# =============================================================================

@dataclass(frozen=True)
class Ident:
    """
    An identifier with optional source position.

    The span does not take part in equality: two identifiers with the same
    text are the same identifier wherever they were written.

    Attributes:
        text: The identifier as written
        span: Where it was written, if known
    """
    text: str
    span: Optional[SourceLocation] = field(default=None, compare=False)

    def normalized(self) -> "Ident":
        """Return the same identifier without position metadata."""
        return replace(self, span=None)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Visibility:
    """
    A visibility marker: "", "pub", "pub(crate)", "pub(super)", "pub(in path)".

    The empty string is private (inherited) visibility.
    """
    text: str = ""

    @property
    def is_private(self) -> bool:
        return not self.text

    def prefix(self) -> str:
        """Return the marker followed by a space, or "" when private."""
        return f"{self.text} " if self.text else ""

    def __str__(self) -> str:
        return self.text


PRIVATE = Visibility("")
PUBLIC = Visibility("pub")


# =============================================================================
# Generics
# =============================================================================

class GenericKind(Enum):
    """Kinds of generic parameter."""
    LIFETIME = auto()   # 'a
    TYPE = auto()       # T
    CONST = auto()      # const N: usize


@dataclass(frozen=True)
class GenericParam:
    """
    One generic parameter.

    Attributes:
        name: Parameter name, including the apostrophe for lifetimes
        kind: Lifetime, type or const parameter
        bounds: Trait or lifetime bounds (type and lifetime params)
        default: Default value, dropped in impl position
        const_type: Type of a const parameter
    """
    name: str
    kind: GenericKind = GenericKind.TYPE
    bounds: tuple[str, ...] = ()
    default: Optional[str] = None
    const_type: Optional[str] = None

    def impl_form(self) -> str:
        """Render for `impl<...>`: bounds kept, defaults dropped."""
        if self.kind == GenericKind.CONST:
            return f"const {self.name}: {self.const_type}"
        if self.bounds:
            return f"{self.name}: {' + '.join(self.bounds)}"
        return self.name

    def decl_form(self) -> str:
        """Render as written on the type declaration."""
        text = self.impl_form()
        if self.default is not None:
            text += f" = {self.default}"
        return text


@dataclass(frozen=True)
class Generics:
    """
    Generic parameters and where-clause of a type declaration.

    Attributes:
        params: Parameters in declaration order
        where_predicates: Where-clause predicates as written ("T: Debug")
    """
    params: tuple[GenericParam, ...] = ()
    where_predicates: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.params and not self.where_predicates

    def split_for_impl(self) -> tuple[str, str, str]:
        """
        Split into the three pieces of an impl header.

        Returns:
            (impl_generics, type_generics, where_clause), each possibly ""

        Example:
            <'a, T: Clone = u8> where T: Debug
            -> ("<'a, T: Clone>", "<'a, T>", "where T: Debug")
        """
        if self.params:
            impl_generics = "<" + ", ".join(p.impl_form() for p in self.params) + ">"
            type_generics = "<" + ", ".join(p.name for p in self.params) + ">"
        else:
            impl_generics = ""
            type_generics = ""

        where_clause = ""
        if self.where_predicates:
            where_clause = "where " + ", ".join(self.where_predicates)

        return impl_generics, type_generics, where_clause


# =============================================================================
# Variants and Fields
# =============================================================================

class FieldsKind(Enum):
    """Syntactic shape of a variant's (or struct's) fields."""
    UNIT = auto()       # Variant
    NAMED = auto()      # Variant { a: u32 }
    UNNAMED = auto()    # Variant(u32)


@dataclass(frozen=True)
class Field:
    """
    A field of a variant or struct.

    Attributes:
        ty: The field type as source text
        name: Field name for named fields, None for positional ones
    """
    ty: str
    name: Optional[str] = None


@dataclass(frozen=True)
class Attribute:
    """
    An outer attribute such as #[derive(Debug, NiceEnum)].

    Attributes:
        path: Attribute path ("derive", "doc", "serde")
        args: Raw argument text between the delimiters, without them
    """
    path: str
    args: str = ""

    def derive_names(self) -> tuple[str, ...]:
        """Return the derive macro names listed, or () for other attributes."""
        if self.path != "derive":
            return ()
        names = []
        for part in self.args.split(","):
            part = part.strip()
            if part:
                # Path-qualified derives (nice_enum::NiceEnum) match on last segment
                names.append(part.split("::")[-1].strip())
        return tuple(names)


@dataclass(frozen=True)
class VariantDecl:
    """
    One case of a sum type.

    Attributes:
        ident: Variant name
        fields_kind: Unit, named or unnamed fields
        fields: Fields in declaration order (empty for unit)
        discriminant: Explicit discriminant expression, if written
    """
    ident: Ident
    fields_kind: FieldsKind = FieldsKind.UNIT
    fields: tuple[Field, ...] = ()
    discriminant: Optional[str] = None

    @classmethod
    def unit(cls, name: str) -> "VariantDecl":
        return cls(Ident(name), FieldsKind.UNIT)

    @classmethod
    def named(cls, name: str, fields: dict[str, str]) -> "VariantDecl":
        return cls(
            Ident(name),
            FieldsKind.NAMED,
            tuple(Field(ty, field_name) for field_name, ty in fields.items()),
        )

    @classmethod
    def unnamed(cls, name: str, types: list[str]) -> "VariantDecl":
        return cls(Ident(name), FieldsKind.UNNAMED, tuple(Field(ty) for ty in types))

    @property
    def name(self) -> str:
        return self.ident.text


# =============================================================================
# Type Declarations
# =============================================================================

@dataclass(frozen=True)
class TypeDecl:
    """
    Base class for parsed type declarations.

    Attributes:
        ident: Type name
        visibility: Visibility marker
        generics: Generic parameters and where clause
        attributes: Outer attributes in source order
    """
    ident: Ident
    visibility: Visibility = PRIVATE
    generics: Generics = Generics()
    attributes: tuple[Attribute, ...] = ()

    @property
    def name(self) -> str:
        return self.ident.text

    @property
    def location(self) -> Optional[SourceLocation]:
        return self.ident.span

    def derives(self) -> tuple[str, ...]:
        """Return every derive macro name from all #[derive] attributes."""
        names: list[str] = []
        for attribute in self.attributes:
            names.extend(attribute.derive_names())
        return tuple(names)

    @staticmethod
    def from_dict(data: Any) -> "TypeDecl":
        """
        Build a declaration from a plain mapping.

        Format:
            {"kind": "enum" | "struct" | "union", "name": str, "visibility": str,
             "generics": {"params": [...], "where": [...]},
             "derives": [str, ...],
             "variants": [{"name": str, "fields": None | {...} | [...],
                           "discriminant": str}],
             "fields": None | {...} | [...]}

        Type, variant and generic parameter names must be Rust identifiers.

        Raises:
            SchemaError: If the mapping is malformed
        """
        if not isinstance(data, dict):
            raise SchemaError(f"type declaration must be an object, got {type(data).__name__}")

        kind = data.get("kind", "enum")
        name = _require_ident(data, "name", "type declaration")
        visibility = Visibility(_optional_str(data, "visibility", name) or "")
        generics = _generics_from_dict(data.get("generics"), name)

        derives = data.get("derives", [])
        if not isinstance(derives, list) or not all(isinstance(d, str) for d in derives):
            raise SchemaError(f"'derives' of '{name}' must be a list of strings")
        attributes = (Attribute("derive", ", ".join(derives)),) if derives else ()

        if kind == "enum":
            raw_variants = data.get("variants")
            if not isinstance(raw_variants, list):
                raise SchemaError(f"enum '{name}' must have a 'variants' list")
            variants = tuple(_variant_from_dict(v, name) for v in raw_variants)
            return SumTypeDecl(Ident(name), visibility, generics, attributes, variants)

        if kind == "struct":
            fields_kind, fields = _fields_from_value(data.get("fields"), name)
            return ProductTypeDecl(
                Ident(name), visibility, generics, attributes, fields_kind, fields
            )

        if kind == "union":
            fields_kind, fields = _fields_from_value(data.get("fields"), name)
            if fields_kind != FieldsKind.NAMED:
                raise SchemaError(f"'fields' of union '{name}' must be an object")
            return UnionTypeDecl(Ident(name), visibility, generics, attributes, fields)

        raise SchemaError(
            f"unknown declaration kind '{kind}' for '{name}'",
            hint="use \"enum\", \"struct\" or \"union\"",
        )


@dataclass(frozen=True)
class SumTypeDecl(TypeDecl):
    """
    An enum declaration: the input of the derive.

    Attributes:
        variants: Variants in declaration order
    """
    variants: tuple[VariantDecl, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to the mapping format accepted by from_dict()."""
        data = _common_to_dict(self, "enum")
        variants = []
        for v in self.variants:
            raw: dict[str, Any] = {
                "name": v.name,
                "fields": _fields_to_value(v.fields_kind, v.fields),
            }
            if v.discriminant is not None:
                raw["discriminant"] = v.discriminant
            variants.append(raw)
        data["variants"] = variants
        return data


@dataclass(frozen=True)
class ProductTypeDecl(TypeDecl):
    """
    A struct declaration.

    The derive refuses these; they are modelled so that the refusal can be
    reported with the struct's name and location.
    """
    fields_kind: FieldsKind = FieldsKind.UNIT
    fields: tuple[Field, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to the mapping format accepted by from_dict()."""
        data = _common_to_dict(self, "struct")
        data["fields"] = _fields_to_value(self.fields_kind, self.fields)
        return data


@dataclass(frozen=True)
class UnionTypeDecl(TypeDecl):
    """
    A union declaration.

    Refused by the derive like a struct. Union fields are always named.
    """
    fields: tuple[Field, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to the mapping format accepted by from_dict()."""
        data = _common_to_dict(self, "union")
        data["fields"] = _fields_to_value(FieldsKind.NAMED, self.fields)
        return data


# =============================================================================
# Dictionary Conversion Helpers
# =============================================================================

def _require_str(data: dict, key: str, what: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise SchemaError(f"{what} requires a non-empty string '{key}'")
    return value


def is_rust_identifier(text: str) -> bool:
    """
    Return True if text is a Rust identifier, raw (r#type) or plain.

    A lone underscore is a wildcard, not an identifier.
    """
    if text.startswith("r#"):
        text = text[2:]
    return text.isidentifier() and text != "_"


def _require_ident(data: dict, key: str, what: str) -> str:
    value = _require_str(data, key, what)
    if not is_rust_identifier(value):
        raise SchemaError(
            f"{what} has '{key}' {value!r}, which is not a Rust identifier",
            hint="use letters, digits and underscores, not starting with a digit",
        )
    return value


def _optional_str(data: dict, key: str, owner: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise SchemaError(f"'{key}' of '{owner}' must be a string")
    return value


def _generics_from_dict(data: Any, owner: str) -> Generics:
    if data is None:
        return Generics()
    if not isinstance(data, dict):
        raise SchemaError(f"'generics' of '{owner}' must be an object")

    raw_params = data.get("params", [])
    if not isinstance(raw_params, list):
        raise SchemaError(f"'params' of '{owner}' must be a list of objects")

    params = []
    for raw in raw_params:
        if not isinstance(raw, dict):
            raise SchemaError(f"generic parameter of '{owner}' must be an object")
        name = _require_str(raw, "name", f"generic parameter of '{owner}'")
        if not is_rust_identifier(name.removeprefix("'")):
            raise SchemaError(f"generic parameter {name!r} of '{owner}' is not a Rust identifier")
        bounds = raw.get("bounds", [])
        if not isinstance(bounds, list) or not all(isinstance(b, str) for b in bounds):
            raise SchemaError(f"bounds of '{name}' in '{owner}' must be a list of strings")

        if name.startswith("'"):
            kind = GenericKind.LIFETIME
        elif "const" in raw:
            kind = GenericKind.CONST
        else:
            kind = GenericKind.TYPE

        params.append(GenericParam(
            name=name,
            kind=kind,
            bounds=tuple(bounds),
            default=_optional_str(raw, "default", name),
            const_type=_optional_str(raw, "const", name),
        ))

    predicates = data.get("where", [])
    if not isinstance(predicates, list) or not all(isinstance(p, str) for p in predicates):
        raise SchemaError(f"'where' of '{owner}' must be a list of strings")

    return Generics(tuple(params), tuple(predicates))


def _fields_from_value(value: Any, owner: str) -> tuple[FieldsKind, tuple[Field, ...]]:
    # None -> unit, mapping -> named, list -> unnamed
    if value is None:
        return FieldsKind.UNIT, ()
    if isinstance(value, dict):
        for field_name, ty in value.items():
            if not isinstance(ty, str):
                raise SchemaError(f"type of field '{field_name}' in '{owner}' must be a string")
        return FieldsKind.NAMED, tuple(Field(ty, n) for n, ty in value.items())
    if isinstance(value, list):
        if not all(isinstance(ty, str) for ty in value):
            raise SchemaError(f"field types of '{owner}' must be strings")
        return FieldsKind.UNNAMED, tuple(Field(ty) for ty in value)
    raise SchemaError(
        f"'fields' of '{owner}' must be null, an object or a list",
        hint="use {\"a\": \"u32\"} for named fields and [\"u32\"] for unnamed ones",
    )


def _variant_from_dict(data: Any, owner: str) -> VariantDecl:
    if not isinstance(data, dict):
        raise SchemaError(f"variant of '{owner}' must be an object")
    name = _require_ident(data, "name", f"variant of '{owner}'")
    fields_kind, fields = _fields_from_value(data.get("fields"), f"{owner}::{name}")
    return VariantDecl(
        Ident(name),
        fields_kind,
        fields,
        _optional_str(data, "discriminant", name),
    )


def _fields_to_value(fields_kind: FieldsKind, fields: tuple[Field, ...]) -> Any:
    if fields_kind == FieldsKind.UNIT:
        return None
    if fields_kind == FieldsKind.NAMED:
        return {f.name: f.ty for f in fields}
    return [f.ty for f in fields]


def _common_to_dict(decl: TypeDecl, kind: str) -> dict[str, Any]:
    params = []
    for p in decl.generics.params:
        raw: dict[str, Any] = {"name": p.name}
        if p.bounds:
            raw["bounds"] = list(p.bounds)
        if p.default is not None:
            raw["default"] = p.default
        if p.const_type is not None:
            raw["const"] = p.const_type
        params.append(raw)

    data: dict[str, Any] = {"kind": kind, "name": decl.name}
    if not decl.visibility.is_private:
        data["visibility"] = decl.visibility.text
    if not decl.generics.is_empty:
        data["generics"] = {"params": params, "where": list(decl.generics.where_predicates)}
    if decl.derives():
        data["derives"] = list(decl.derives())
    return data
