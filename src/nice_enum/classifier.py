"""
Variant Classifier
==================

First pass of the derive. Walks the variant list of a sum type once and
produces one VariantDescriptor per variant, in declaration order. The
descriptors hold every name and pattern the two emitters need, so neither
emitter looks at the original VariantDecl again.

Shape Classes
-------------
| Variant              | Shape           | kind() pattern       | Accessors |
|----------------------|-----------------|----------------------|-----------|
| Unit                 | EMPTY           | Self::Unit           | no        |
| Named { a: u32 }     | NAMED_FIELDS    | Self::Named { .. }   | no        |
| Single(u32)          | SINGLE_UNNAMED  | Self::Single(_)      | yes       |
| Pair(u8, u8), Nil()  | MULTI_UNNAMED   | Self::Pair(..)       | no        |

Named variants with zero fields are still NAMED_FIELDS, and tuple variants
with zero fields are MULTI_UNNAMED: only exactly one positional field gets
accessors.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Sequence

from nice_enum.errors import NotASumTypeError
from nice_enum.naming import (
    AccessorNames,
    accessor_names,
    predicate_name,
    to_snake_case,
)
from nice_enum.rust import PathExpr, Pattern, PatternKind
from nice_enum.schema import (
    FieldsKind,
    Ident,
    ProductTypeDecl,
    SumTypeDecl,
    TypeDecl,
    UnionTypeDecl,
    VariantDecl,
)

logger = logging.getLogger(__name__)


class ShapeClass(Enum):
    """Classification of a variant's payload."""
    EMPTY = auto()
    NAMED_FIELDS = auto()
    SINGLE_UNNAMED = auto()
    MULTI_UNNAMED = auto()


@dataclass(frozen=True)
class VariantDescriptor:
    """
    Everything the emitters need to know about one variant.

    Attributes:
        tag_ident: Variant identifier without source position
        shape: Payload classification
        qualified_tag: <KindType>::<tag_ident>
        match_pattern: Pattern matching the variant whatever its payload
        snake_name: snake_case form of the identifier
        predicate_name: is_<snake_name>
        single_field_type: Payload type, SINGLE_UNNAMED only
        accessor_names: as_/as_..._mut/into_ names, SINGLE_UNNAMED only
        source: The variant as declared (for error locations)
    """
    tag_ident: Ident
    shape: ShapeClass
    qualified_tag: PathExpr
    match_pattern: Pattern
    snake_name: str
    predicate_name: str
    single_field_type: Optional[str] = None
    accessor_names: Optional[AccessorNames] = None
    source: Optional[VariantDecl] = None

    @property
    def name(self) -> str:
        return self.tag_ident.text

    @property
    def has_accessors(self) -> bool:
        return self.shape == ShapeClass.SINGLE_UNNAMED


# =============================================================================
# Capability Interface
# =============================================================================

def variants_of(decl: TypeDecl) -> tuple[VariantDecl, ...]:
    """
    Return the variant list of a sum-type declaration.

    Raises:
        NotASumTypeError: If decl is not an enum
    """
    if isinstance(decl, SumTypeDecl):
        return decl.variants

    if isinstance(decl, ProductTypeDecl):
        shape = "struct"
    elif isinstance(decl, UnionTypeDecl):
        shape = "union"
    else:
        shape = type(decl).__name__
    raise NotASumTypeError(decl.name, shape, location=decl.location)


# =============================================================================
# Classification
# =============================================================================

def classify_shape(variant: VariantDecl) -> ShapeClass:
    if variant.fields_kind == FieldsKind.UNIT:
        return ShapeClass.EMPTY
    if variant.fields_kind == FieldsKind.NAMED:
        return ShapeClass.NAMED_FIELDS
    if len(variant.fields) == 1:
        return ShapeClass.SINGLE_UNNAMED
    return ShapeClass.MULTI_UNNAMED


def _match_pattern(tag: str, shape: ShapeClass) -> Pattern:
    if shape == ShapeClass.EMPTY:
        return Pattern(PatternKind.UNIT, tag)
    if shape == ShapeClass.NAMED_FIELDS:
        return Pattern(PatternKind.STRUCT, tag)
    if shape == ShapeClass.SINGLE_UNNAMED:
        return Pattern(PatternKind.TUPLE, tag, ("_",))
    return Pattern(PatternKind.TUPLE, tag, ("..",))


def classify_variant(variant: VariantDecl, kind_ident: Ident) -> VariantDescriptor:
    """Build the descriptor of a single variant."""
    tag_ident = variant.ident.normalized()
    snake = to_snake_case(tag_ident.text)
    shape = classify_shape(variant)

    single_field_type = None
    names = None
    if shape == ShapeClass.SINGLE_UNNAMED:
        single_field_type = variant.fields[0].ty
        names = accessor_names(snake)

    return VariantDescriptor(
        tag_ident=tag_ident,
        shape=shape,
        qualified_tag=PathExpr((kind_ident.text, tag_ident.text)),
        match_pattern=_match_pattern(tag_ident.text, shape),
        snake_name=snake,
        predicate_name=predicate_name(snake),
        single_field_type=single_field_type,
        accessor_names=names,
        source=variant,
    )


def classify_variants(
    variants: Sequence[VariantDecl],
    kind_ident: Ident,
) -> tuple[VariantDescriptor, ...]:
    """
    Classify every variant, preserving declaration order.

    Args:
        variants: Variants as declared
        kind_ident: Identifier of the kind type being derived

    Returns:
        One descriptor per variant, same length and order as variants
    """
    descriptors = tuple(classify_variant(v, kind_ident) for v in variants)
    for d in descriptors:
        logger.debug(f"{kind_ident}: {d.name} -> {d.shape.name} ({d.match_pattern})")
    return descriptors
