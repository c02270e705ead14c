"""
NiceEnum Derive
===============

The transformation at the heart of nice-enum. Given a parsed enum
declaration it derives:

- `<Name>Kind`: a payload-free, Copy + Ord + Hash mirror of the variant tags
- `impl <Name>`: kind(), is_<v>() for every variant, and as_<v>(),
  as_<v>_mut(), into_<v>() for variants with exactly one unnamed field

Pipeline
--------
    TypeDecl → variants_of → classify_variants → check_names
                                   ├─→ emit_kind_type  ─┐
                                   └─→ emit_impl_block ─┴→ DerivedItems

The derive is pure: it reads an immutable declaration and returns new
structures. Each call is independent, so declarations can be derived in
any order.

Usage
-----
>>> from nice_enum.schema import SumTypeDecl, VariantDecl, Ident, PUBLIC
>>> decl = SumTypeDecl(Ident("Shape"), PUBLIC, variants=(
...     VariantDecl.unit("Empty"),
...     VariantDecl.unnamed("Circle", ["f64"]),
... ))
>>> items = derive_nice_enum(decl)
>>> items.impl_block.method_names
('kind', 'is_empty', 'is_circle', 'as_circle', 'as_circle_mut', 'into_circle')
"""

import logging
from typing import Iterable, Sequence

from nice_enum.accessors import emit_impl_block
from nice_enum.classifier import (
    VariantDescriptor,
    classify_variants,
    variants_of,
)
from nice_enum.kind_type import emit_kind_type
from nice_enum.naming import KIND_METHOD, NameTable, kind_type_name
from nice_enum.rust import DerivedItems
from nice_enum.schema import Ident, TypeDecl

logger = logging.getLogger(__name__)


def check_names(
    descriptors: Sequence[VariantDescriptor],
    reserved: Iterable[str] = (),
) -> NameTable:
    """
    Claim every derived method name, failing on the first collision.

    Args:
        descriptors: Classified variants
        reserved: Members already defined on the source type

    Returns:
        The filled name table

    Raises:
        NameCollisionError: If two derived members share a name
    """
    table = NameTable(reserved)
    table.claim(KIND_METHOD, "the kind() method")

    for d in descriptors:
        location = d.source.ident.span if d.source else None
        owner = f"variant '{d.name}'"
        table.claim(d.predicate_name, owner, location)
        if d.accessor_names is not None:
            for name in d.accessor_names:
                table.claim(name, owner, location)

    return table


def derive_nice_enum(decl: TypeDecl, reserved: Iterable[str] = ()) -> DerivedItems:
    """
    Derive the kind type and method set for an enum declaration.

    Args:
        decl: The parsed declaration
        reserved: Names of members the source type already has

    Returns:
        DerivedItems with the kind type and the impl block

    Raises:
        NotASumTypeError: If decl is not an enum
        NameCollisionError: If derived names collide
    """
    variants = variants_of(decl)
    kind_ident = Ident(kind_type_name(decl.name))

    descriptors = classify_variants(variants, kind_ident)
    check_names(descriptors, reserved)

    kind_type = emit_kind_type(descriptors, kind_ident, decl.visibility)
    impl_block = emit_impl_block(descriptors, decl, kind_ident)

    logger.debug(
        f"Derived {kind_ident} ({len(kind_type.cases)} cases) and "
        f"{len(impl_block.methods)} methods for {decl.name}"
    )

    return DerivedItems(decl.name, kind_type, impl_block)
