"""
Tag-Type Emitter
================

Emits the kind type: a payload-free enum with one case per variant of the
source type, in the same order, deriving Debug, Clone, Copy, PartialEq, Eq,
PartialOrd, Ord and Hash. Because cases keep declaration order, the derived
Ord compares kinds by declaration position.
"""

from typing import Sequence

from nice_enum.classifier import VariantDescriptor
from nice_enum.rust import KIND_DERIVES, KindTypeDecl
from nice_enum.schema import Ident, Visibility


def emit_kind_type(
    descriptors: Sequence[VariantDescriptor],
    kind_ident: Ident,
    visibility: Visibility,
) -> KindTypeDecl:
    """Emit the kind enum for the classified variants."""
    return KindTypeDecl(
        ident=kind_ident,
        visibility=visibility,
        cases=tuple(d.tag_ident for d in descriptors),
        derives=KIND_DERIVES,
    )
