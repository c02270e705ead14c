"""
Derived Method Evaluator
========================

A reference interpreter for the declarations the derive produces. It runs
the generated method bodies (match arms, patterns and matches! checks) over
Python stand-ins for enum values, so the behaviour of generated code can be
tested without a Rust toolchain.

Value Model
-----------
- EnumValue holds a variant name and its payload: None for unit variants,
  a list for tuple variants, a dict for struct variants.
- `&self` methods return Ref views; writing through a Ref raises BorrowError.
- `&mut self` methods return MutRef views that can replace the bound field
  and nothing else, so the variant of the value cannot change through them.
- `self` methods move the value: it is marked moved whatever the result,
  and any later call raises UseAfterMoveError.

Kind values are KindCase instances ordered by declaration position, the
same ordering the derived Ord gives the kind enum.

Usage
-----
>>> ev = Evaluator(decl)
>>> x = ev.construct("UnnamedFields", 7)
>>> x.is_unnamed_fields()
True
>>> x.as_unnamed_fields().get()
7
"""

import functools
from dataclasses import dataclass
from typing import Any, Callable, Optional

from nice_enum.derive import derive_nice_enum
from nice_enum.errors import BorrowError, EvaluationError, UseAfterMoveError
from nice_enum.rust import (
    DerivedItems,
    MatchesExpr,
    MatchExpr,
    MethodDecl,
    NoneExpr,
    PathExpr,
    Pattern,
    PatternKind,
    Receiver,
    SomeExpr,
)
from nice_enum.schema import FieldsKind, SumTypeDecl


# =============================================================================
# Values
# =============================================================================

@dataclass
class EnumValue:
    """
    An instance of a sum type.

    Attributes:
        type_name: Name of the sum type
        variant: Variant name
        payload: None, list of positional values, or dict of named values
        moved: Set once a consuming method has taken the value
    """
    type_name: str
    variant: str
    payload: Optional[list | dict] = None
    moved: bool = False


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class KindCase:
    """
    A value of a kind enum.

    Ordered by declaration position, like the derived Ord. Cases of
    different kind types are unequal and cannot be ordered.
    """
    index: int
    name: str
    kind_type: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KindCase):
            return NotImplemented
        return (self.kind_type, self.index) == (other.kind_type, other.index)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, KindCase):
            return NotImplemented
        if other.kind_type != self.kind_type:
            raise TypeError(f"cannot order {self} against {other}")
        return self.index < other.index

    def __hash__(self) -> int:
        return hash((self.kind_type, self.index))

    def __str__(self) -> str:
        return f"{self.kind_type}::{self.name}"


class Ref:
    """Shared reference to one payload field."""

    def __init__(self, value: EnumValue, index: int):
        self._value = value
        self._index = index

    def get(self) -> Any:
        return self._value.payload[self._index]

    def set(self, new: Any) -> None:
        raise BorrowError(
            f"cannot assign through a shared reference to {self._value.type_name}::{self._value.variant}",
            hint="use the _mut accessor",
        )


class MutRef(Ref):
    """Exclusive reference to one payload field."""

    def set(self, new: Any) -> None:
        self._value.payload[self._index] = new


# =============================================================================
# Evaluator
# =============================================================================

class Evaluator:
    """
    Executes derived methods against EnumValue instances.

    Attributes:
        decl: The sum type the methods were derived for
        items: The derived declarations being executed
    """

    def __init__(self, decl: SumTypeDecl, items: Optional[DerivedItems] = None):
        """
        Initialize the evaluator.

        Args:
            decl: The sum type declaration
            items: Derived declarations (derived from decl if None)
        """
        self.decl = decl
        self.items = items or derive_nice_enum(decl)
        self._case_index = {
            case: i for i, case in enumerate(self.items.kind_type.case_names)
        }

    @property
    def method_names(self) -> tuple[str, ...]:
        return self.items.impl_block.method_names

    def kind_case(self, name: str) -> KindCase:
        """Return the kind enum value called name."""
        if name not in self._case_index:
            raise EvaluationError(f"'{self.items.kind_type.name}' has no case '{name}'")
        return KindCase(self._case_index[name], name, self.items.kind_type.name)

    # =========================================================================
    # Construction
    # =========================================================================

    def construct(self, variant: str, *values: Any, **fields: Any) -> "Instance":
        """
        Build a value of the sum type, checked against its declaration.

        Args:
            variant: Variant name
            values: Positional payload for tuple variants
            fields: Named payload for struct variants

        Raises:
            EvaluationError: If the payload does not fit the variant
        """
        decl = next((v for v in self.decl.variants if v.name == variant), None)
        if decl is None:
            raise EvaluationError(f"'{self.decl.name}' has no variant '{variant}'")

        payload: Optional[list | dict]
        if decl.fields_kind == FieldsKind.UNIT:
            if values or fields:
                raise EvaluationError(f"{self.decl.name}::{variant} takes no payload")
            payload = None
        elif decl.fields_kind == FieldsKind.UNNAMED:
            if fields or len(values) != len(decl.fields):
                raise EvaluationError(
                    f"{self.decl.name}::{variant} takes {len(decl.fields)} positional values"
                )
            payload = list(values)
        else:
            expected = {f.name for f in decl.fields}
            if values or set(fields) != expected:
                raise EvaluationError(
                    f"{self.decl.name}::{variant} takes fields {sorted(expected)}"
                )
            payload = dict(fields)

        return Instance(self, EnumValue(self.decl.name, variant, payload))

    # =========================================================================
    # Execution
    # =========================================================================

    def call(self, value: EnumValue, method_name: str) -> Any:
        """
        Call a derived method on value.

        Raises:
            UseAfterMoveError: If value was moved by an earlier call
            EvaluationError: If no arm matches or the method is unknown
        """
        if value.moved:
            raise UseAfterMoveError(value.type_name, method_name)

        try:
            method = self.items.impl_block.method(method_name)
        except KeyError:
            raise EvaluationError(
                f"no method named '{method_name}' on '{self.items.source_name}'"
            ) from None

        result = self._execute(method, value)
        if method.receiver == Receiver.VALUE:
            value.moved = True
        return result

    def _execute(self, method: MethodDecl, value: EnumValue) -> Any:
        body = method.body

        if isinstance(body, MatchesExpr):
            return self.call(value, body.method) == self._eval_path(body.expected)

        if isinstance(body, MatchExpr):
            for arm in body.arms:
                if self._matches(arm.pattern, value):
                    return self._eval_arm(arm.expr, arm.pattern, value, method.receiver)
            raise EvaluationError(
                f"no arm of {method.name}() matches {value.type_name}::{value.variant}"
            )

        raise EvaluationError(f"cannot evaluate body of {method.name}()")

    def _matches(self, pattern: Pattern, value: EnumValue) -> bool:
        if pattern.kind == PatternKind.WILDCARD:
            return True
        if pattern.variant != value.variant:
            return False

        payload = value.payload
        if pattern.kind == PatternKind.UNIT:
            return payload is None
        if pattern.kind == PatternKind.STRUCT:
            return isinstance(payload, dict)
        if not isinstance(payload, list):
            return False
        if ".." in pattern.elements:
            return True
        return len(pattern.elements) == len(payload)

    def _eval_path(self, path: PathExpr) -> KindCase:
        if path.segments[0] != self.items.kind_type.name:
            raise EvaluationError(f"unknown path {path.render()}")
        return self.kind_case(path.last)

    def _eval_arm(
        self,
        expr: PathExpr | SomeExpr | NoneExpr,
        pattern: Pattern,
        value: EnumValue,
        receiver: Receiver,
    ) -> Any:
        if isinstance(expr, PathExpr):
            return self._eval_path(expr)
        if isinstance(expr, NoneExpr):
            return None

        index = pattern.elements.index(expr.binding)
        if receiver == Receiver.REF:
            return Ref(value, index)
        if receiver == Receiver.REF_MUT:
            return MutRef(value, index)
        return value.payload[index]


class Instance:
    """
    An EnumValue bound to an Evaluator, exposing derived methods as attributes.

    Example:
        x = evaluator.construct("Circle", 2.0)
        x.is_circle()          # True
        x.into_circle()        # 2.0, and x is moved
    """

    def __init__(self, evaluator: Evaluator, value: EnumValue):
        self._evaluator = evaluator
        self.value = value

    def __getattr__(self, name: str) -> Callable[[], Any]:
        if name.startswith("_") or name not in self._evaluator.method_names:
            raise AttributeError(name)
        return lambda: self._evaluator.call(self.value, name)

    def __repr__(self) -> str:
        return f"Instance({self.value.type_name}::{self.value.variant}, {self.value.payload!r})"
