"""
nice-enum - Kind Types and Accessors for Rust Enums
===================================================

This package derives, for a Rust enum, the boilerplate every tagged union
ends up needing:

- a payload-free `<Name>Kind` enum mirroring the variant tags, deriving
  Debug, Clone, Copy, PartialEq, Eq, PartialOrd, Ord and Hash
- `kind()` returning the tag of a value
- `is_<variant>()` for every variant
- `as_<variant>()`, `as_<variant>_mut()` and `into_<variant>()` for every
  variant holding exactly one unnamed field

Main Components
---------------
- **derive**: the transformation from an enum declaration to DerivedItems
- **schema**: declaration model (SumTypeDecl, VariantDecl, ...), buildable
  from dictionaries or JSON
- **parser**: reads enum and struct declarations from Rust source
- **generator**: runs the derive over a file and renders the output (nicegen)
- **evaluator**: executes derived methods on Python stand-in values

Quick Start
-----------
Derive from a hand-built declaration:
    >>> from nice_enum import SumTypeDecl, VariantDecl, Ident, PUBLIC, derive_nice_enum
    >>> decl = SumTypeDecl(Ident("MyEnum"), PUBLIC, variants=(
    ...     VariantDecl.unit("Unit"),
    ...     VariantDecl.named("NamedFields", {"a": "u32"}),
    ...     VariantDecl.unnamed("UnnamedFields", ["u32"]),
    ... ))
    >>> print(derive_nice_enum(decl).render())

Generate from Rust source:
    >>> from nice_enum import generate_source
    >>> print(generate_source("#[derive(NiceEnum)] enum Shape { Dot, Circle(f64) }"))

Or use the command-line tool:
    $ nicegen shapes.rs -o shapes_kind.rs
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from nice_enum.derive import derive_nice_enum
from nice_enum.errors import (
    NiceEnumError,
    DeriveError,
    NotASumTypeError,
    NameCollisionError,
    ExhaustivenessError,
    SchemaError,
    RustSyntaxError,
    GenerationError,
    EvaluationError,
    UseAfterMoveError,
    BorrowError,
    SourceLocation,
)
from nice_enum.evaluator import Evaluator, EnumValue, KindCase
from nice_enum.generator import (
    GeneratorOptions,
    GenerationResult,
    NiceEnumGenerator,
    generate_source,
)
from nice_enum.parser import parse_items
from nice_enum.rust import DerivedItems, ImplBlock, KindTypeDecl, MethodDecl
from nice_enum.schema import (
    PRIVATE,
    PUBLIC,
    Field,
    FieldsKind,
    GenericKind,
    GenericParam,
    Generics,
    Ident,
    ProductTypeDecl,
    SumTypeDecl,
    TypeDecl,
    UnionTypeDecl,
    VariantDecl,
    Visibility,
)

__all__ = [
    "__version__",
    # Derive
    "derive_nice_enum",
    "DerivedItems",
    "KindTypeDecl",
    "ImplBlock",
    "MethodDecl",
    # Declarations
    "TypeDecl",
    "SumTypeDecl",
    "ProductTypeDecl",
    "UnionTypeDecl",
    "VariantDecl",
    "Field",
    "FieldsKind",
    "Ident",
    "Visibility",
    "PRIVATE",
    "PUBLIC",
    "Generics",
    "GenericParam",
    "GenericKind",
    # Host
    "parse_items",
    "GeneratorOptions",
    "GenerationResult",
    "NiceEnumGenerator",
    "generate_source",
    # Evaluation
    "Evaluator",
    "EnumValue",
    "KindCase",
    # Errors
    "NiceEnumError",
    "DeriveError",
    "NotASumTypeError",
    "NameCollisionError",
    "ExhaustivenessError",
    "SchemaError",
    "RustSyntaxError",
    "GenerationError",
    "EvaluationError",
    "UseAfterMoveError",
    "BorrowError",
    "SourceLocation",
]
