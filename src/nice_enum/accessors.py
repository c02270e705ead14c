"""
Accessor Emitter
================

Emits the inherent impl block on the source type. Methods come out in a
fixed order:

1. kind()            - one arm per variant, no fallback arm
2. is_<v>()          - every variant, declaration order
3. as_<v>()          - single-unnamed-field variants only
4. as_<v>_mut()      - same filter and order
5. into_<v>()        - same filter and order

Predicates compare the result of kind() instead of matching the payload
again, so kind() is the only place that decides which variant a value is.

The accessors bind the single field and return it wrapped in Some; every
other variant falls through to `_ => None`. For an enum with only one
variant the binding arm is already exhaustive and no fallback is emitted.
"""

from collections import Counter
from typing import Sequence

from nice_enum.classifier import VariantDescriptor
from nice_enum.errors import ExhaustivenessError
from nice_enum.naming import KIND_METHOD
from nice_enum.rust import (
    ImplBlock,
    MatchArm,
    MatchesExpr,
    MatchExpr,
    MethodDecl,
    NoneExpr,
    Pattern,
    PatternKind,
    Receiver,
    SomeExpr,
)
from nice_enum.schema import Ident, SumTypeDecl, Visibility


BINDING = "v"


# =============================================================================
# kind()
# =============================================================================

def emit_kind_method(
    descriptors: Sequence[VariantDescriptor],
    kind_ident: Ident,
    visibility: Visibility,
) -> MethodDecl:
    """Emit `fn kind(&self) -> <Kind>`."""
    arms = tuple(MatchArm(d.match_pattern, d.qualified_tag) for d in descriptors)
    # An empty enum has no arms; `match *self {}` is exhaustive on the place
    scrutinee = "self" if arms else "*self"
    return MethodDecl(
        name=KIND_METHOD,
        visibility=visibility,
        receiver=Receiver.REF,
        return_type=kind_ident.text,
        body=MatchExpr(arms, scrutinee),
    )


def verify_exhaustive(
    method: MethodDecl,
    descriptors: Sequence[VariantDescriptor],
    type_name: str,
) -> None:
    """
    Check that kind() names every variant exactly once and has no fallback.

    Raises:
        ExhaustivenessError: If a variant is missing or matched twice
    """
    covered = Counter(arm.pattern.variant for arm in method.body.arms)
    expected = [d.name for d in descriptors]

    missing = [name for name in expected if covered[name] == 0]
    duplicated = sorted(name for name, count in covered.items() if count > 1)
    extra = sorted(str(name) for name in covered if name not in expected)

    if missing or duplicated or extra:
        raise ExhaustivenessError(type_name, missing + extra, duplicated)


# =============================================================================
# Predicates and Accessors
# =============================================================================

def emit_predicate(descriptor: VariantDescriptor, visibility: Visibility) -> MethodDecl:
    """Emit `fn is_<v>(&self) -> bool`."""
    return MethodDecl(
        name=descriptor.predicate_name,
        visibility=visibility,
        receiver=Receiver.REF,
        return_type="bool",
        body=MatchesExpr(KIND_METHOD, descriptor.qualified_tag),
    )


def _accessor_body(descriptor: VariantDescriptor, variant_count: int) -> MatchExpr:
    arms = [
        MatchArm(
            Pattern(PatternKind.TUPLE, descriptor.name, (BINDING,)),
            SomeExpr(BINDING),
        )
    ]
    if variant_count > 1:
        arms.append(MatchArm(Pattern.wildcard(), NoneExpr()))
    return MatchExpr(tuple(arms))


def emit_accessors(
    descriptor: VariantDescriptor,
    visibility: Visibility,
    variant_count: int,
) -> tuple[MethodDecl, MethodDecl, MethodDecl]:
    """
    Emit as_<v>, as_<v>_mut and into_<v> for a single-field variant.

    Returns:
        (borrowing, mutable borrowing, consuming) accessors
    """
    names = descriptor.accessor_names
    ty = descriptor.single_field_type
    body = _accessor_body(descriptor, variant_count)

    return (
        MethodDecl(names.as_ref, visibility, Receiver.REF, f"Option<&{ty}>", body),
        MethodDecl(names.as_mut, visibility, Receiver.REF_MUT, f"Option<&mut {ty}>", body),
        MethodDecl(names.into, visibility, Receiver.VALUE, f"Option<{ty}>", body),
    )


# =============================================================================
# Impl Block
# =============================================================================

def emit_impl_block(
    descriptors: Sequence[VariantDescriptor],
    decl: SumTypeDecl,
    kind_ident: Ident,
) -> ImplBlock:
    """
    Emit the impl block carrying the derived method set.

    Args:
        descriptors: Classified variants, declaration order
        decl: The source type (name, visibility, generics)
        kind_ident: Identifier of the kind type

    Raises:
        ExhaustivenessError: If kind() would not cover every variant
    """
    visibility = decl.visibility
    count = len(descriptors)

    kind_method = emit_kind_method(descriptors, kind_ident, visibility)
    verify_exhaustive(kind_method, descriptors, decl.name)

    predicates = [emit_predicate(d, visibility) for d in descriptors]

    as_refs: list[MethodDecl] = []
    as_muts: list[MethodDecl] = []
    intos: list[MethodDecl] = []
    for d in descriptors:
        if not d.has_accessors:
            continue
        as_ref, as_mut, into = emit_accessors(d, visibility, count)
        as_refs.append(as_ref)
        as_muts.append(as_mut)
        intos.append(into)

    impl_generics, type_generics, where_clause = decl.generics.split_for_impl()

    return ImplBlock(
        self_ty=decl.name,
        impl_generics=impl_generics,
        type_generics=type_generics,
        where_clause=where_clause,
        methods=(kind_method, *predicates, *as_refs, *as_muts, *intos),
    )
