"""
Generated Declaration Model
===========================

This module defines the structured declarations the derive produces and
renders them as Rust source text. The derive never builds strings of code
directly: it builds these nodes, and render() turns them into text. The
evaluator interprets the same nodes.

Node Hierarchy
--------------
DerivedItems - everything derived for one source type
├── KindTypeDecl - payload-free mirror enum (`MyEnumKind`)
└── ImplBlock - `impl<..> MyEnum<..> where .. { .. }`
    └── MethodDecl - one method
        └── body: MatchExpr | MatchesExpr
            └── MatchArm(Pattern, PathExpr | SomeExpr | NoneExpr)

Rendered Format
---------------
    #[derive(Debug, Clone, Copy, PartialEq, Eq, PartialOrd, Ord, Hash)]
    pub enum MyEnumKind {
        Unit,
        Tuple,
    }

    impl MyEnum {
        pub fn kind(&self) -> MyEnumKind {
            match self {
                Self::Unit => MyEnumKind::Unit,
                Self::Tuple(_) => MyEnumKind::Tuple,
            }
        }
        ...
    }
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union

from nice_enum.schema import Ident, Visibility


KIND_DERIVES = ("Debug", "Clone", "Copy", "PartialEq", "Eq", "PartialOrd", "Ord", "Hash")


# =============================================================================
# Patterns
# =============================================================================

class PatternKind(Enum):
    """Shapes of match patterns the derive emits."""
    UNIT = auto()       # Self::V
    STRUCT = auto()     # Self::V { .. }
    TUPLE = auto()      # Self::V(_), Self::V(..), Self::V(v)
    WILDCARD = auto()   # _


@dataclass(frozen=True)
class Pattern:
    """
    A match pattern over the source type.

    Attributes:
        kind: Pattern shape
        variant: Variant name, None for the `_` wildcard
        elements: Tuple sub-patterns ("_", "..", or a binding name)
    """
    kind: PatternKind
    variant: Optional[str] = None
    elements: tuple[str, ...] = ()

    @classmethod
    def wildcard(cls) -> "Pattern":
        return cls(PatternKind.WILDCARD)

    def render(self) -> str:
        if self.kind == PatternKind.WILDCARD:
            return "_"
        path = f"Self::{self.variant}"
        if self.kind == PatternKind.UNIT:
            return path
        if self.kind == PatternKind.STRUCT:
            return f"{path} {{ .. }}"
        return f"{path}({', '.join(self.elements)})"

    def __str__(self) -> str:
        return self.render()


# =============================================================================
# Expressions
# =============================================================================

@dataclass(frozen=True)
class PathExpr:
    """A path expression such as MyEnumKind::Unit."""
    segments: tuple[str, ...]

    @property
    def last(self) -> str:
        return self.segments[-1]

    def render(self) -> str:
        return "::".join(self.segments)


@dataclass(frozen=True)
class SomeExpr:
    """Some(<binding>)."""
    binding: str

    def render(self) -> str:
        return f"Some({self.binding})"


@dataclass(frozen=True)
class NoneExpr:
    def render(self) -> str:
        return "None"


ArmExpr = Union[PathExpr, SomeExpr, NoneExpr]


@dataclass(frozen=True)
class MatchArm:
    pattern: Pattern
    expr: ArmExpr

    def render(self) -> str:
        return f"{self.pattern.render()} => {self.expr.render()},"


@dataclass(frozen=True)
class MatchExpr:
    """
    A match over the receiver.

    Attributes:
        arms: Arms in order; the first matching arm wins
        scrutinee: Matched expression ("self", or "*self" for an empty enum)
    """
    arms: tuple[MatchArm, ...]
    scrutinee: str = "self"


@dataclass(frozen=True)
class MatchesExpr:
    """matches!(self.<method>(), <expected>)."""
    method: str
    expected: PathExpr

    def render(self) -> str:
        return f"matches!(self.{self.method}(), {self.expected.render()})"


MethodBody = Union[MatchExpr, MatchesExpr]


# =============================================================================
# Declarations
# =============================================================================

class Receiver(Enum):
    """How a method takes its receiver."""
    REF = "&self"
    REF_MUT = "&mut self"
    VALUE = "self"


@dataclass(frozen=True)
class MethodDecl:
    """
    A generated method.

    Attributes:
        name: Method name
        visibility: Copied from the source type
        receiver: &self, &mut self or self
        return_type: Return type as source text
        body: The method body
    """
    name: str
    visibility: Visibility
    receiver: Receiver
    return_type: str
    body: MethodBody

    def signature(self) -> str:
        return (
            f"{self.visibility.prefix()}fn {self.name}"
            f"({self.receiver.value}) -> {self.return_type}"
        )


@dataclass(frozen=True)
class KindTypeDecl:
    """
    The payload-free kind enum.

    Attributes:
        ident: Kind type name (<Source>Kind), without span
        visibility: Copied from the source type
        cases: One case per source variant, in declaration order
        derives: Derived traits
    """
    ident: Ident
    visibility: Visibility
    cases: tuple[Ident, ...]
    derives: tuple[str, ...] = KIND_DERIVES

    @property
    def name(self) -> str:
        return self.ident.text

    @property
    def case_names(self) -> tuple[str, ...]:
        return tuple(case.text for case in self.cases)


@dataclass(frozen=True)
class ImplBlock:
    """
    An inherent impl block on the source type.

    Attributes:
        self_ty: Source type name
        impl_generics: "<T: Clone>" or ""
        type_generics: "<T>" or ""
        where_clause: "where T: Debug" or ""
        methods: Methods in emission order
    """
    self_ty: str
    impl_generics: str
    type_generics: str
    where_clause: str
    methods: tuple[MethodDecl, ...]

    def header(self) -> str:
        parts = [f"impl{self.impl_generics} {self.self_ty}{self.type_generics}"]
        if self.where_clause:
            parts.append(self.where_clause)
        return " ".join(parts)

    def method(self, name: str) -> MethodDecl:
        """Return the method called name."""
        for method in self.methods:
            if method.name == name:
                return method
        raise KeyError(name)

    @property
    def method_names(self) -> tuple[str, ...]:
        return tuple(m.name for m in self.methods)


@dataclass(frozen=True)
class DerivedItems:
    """
    Everything derived for one source type.

    Attributes:
        source_name: Name of the source type
        kind_type: The kind enum
        impl_block: The method set on the source type
    """
    source_name: str
    kind_type: KindTypeDecl
    impl_block: ImplBlock

    @property
    def declarations(self) -> tuple[Union[KindTypeDecl, ImplBlock], ...]:
        """Declarations in emission order."""
        return (self.kind_type, self.impl_block)

    def render(self, indent: str = "    ") -> str:
        """Render both declarations as Rust source."""
        writer = SourceWriter(indent)
        render_kind_type(writer, self.kind_type)
        writer.blank()
        render_impl_block(writer, self.impl_block)
        return writer.text()


# =============================================================================
# Rendering
# =============================================================================

class SourceWriter:
    """
    Accumulates indented lines of output.

    Usage:
        writer = SourceWriter()
        writer.emit("impl Foo {")
        writer.indent()
        ...
        writer.dedent()
        writer.emit("}")
    """

    def __init__(self, indent: str = "    "):
        self._indent_unit = indent
        self._level = 0
        self._lines: list[str] = []

    def emit(self, line: str) -> None:
        self._lines.append(f"{self._indent_unit * self._level}{line}")

    def blank(self) -> None:
        self._lines.append("")

    def indent(self) -> None:
        self._level += 1

    def dedent(self) -> None:
        self._level -= 1

    def text(self) -> str:
        return "\n".join(self._lines) + "\n"


def render_kind_type(writer: SourceWriter, kind_type: KindTypeDecl) -> None:
    writer.emit(f"#[derive({', '.join(kind_type.derives)})]")
    if not kind_type.cases:
        writer.emit(f"{kind_type.visibility.prefix()}enum {kind_type.name} {{}}")
        return
    writer.emit(f"{kind_type.visibility.prefix()}enum {kind_type.name} {{")
    writer.indent()
    for case in kind_type.cases:
        writer.emit(f"{case.text},")
    writer.dedent()
    writer.emit("}")


def render_impl_block(writer: SourceWriter, impl_block: ImplBlock) -> None:
    writer.emit(f"{impl_block.header()} {{")
    writer.indent()
    for i, method in enumerate(impl_block.methods):
        if i:
            writer.blank()
        render_method(writer, method)
    writer.dedent()
    writer.emit("}")


def render_method(writer: SourceWriter, method: MethodDecl) -> None:
    writer.emit(f"{method.signature()} {{")
    writer.indent()
    body = method.body
    if isinstance(body, MatchesExpr):
        writer.emit(body.render())
    elif not body.arms:
        writer.emit(f"match {body.scrutinee} {{}}")
    else:
        writer.emit(f"match {body.scrutinee} {{")
        writer.indent()
        for arm in body.arms:
            writer.emit(arm.render())
        writer.dedent()
        writer.emit("}")
    writer.dedent()
    writer.emit("}")
