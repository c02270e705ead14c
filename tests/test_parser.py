"""
Rust Parser Tests
=================

Tests for reading enum, struct and union declarations out of Rust source and for
skipping every other kind of item.
"""

import pytest

from nice_enum.errors import (
    GenerationError,
    MissingTokenError,
    UnexpectedTokenError,
)
from nice_enum.parser import parse_items
from nice_enum.schema import (
    FieldsKind,
    GenericKind,
    ProductTypeDecl,
    SumTypeDecl,
    UnionTypeDecl,
)


def parse_one(source: str):
    decls = parse_items(source, "test.rs")
    assert len(decls) == 1
    return decls[0]


# =============================================================================
# Enums
# =============================================================================

class TestEnums:
    """Tests for enum declarations."""

    def test_reference_enum(self):
        """The three variant shapes are recognized."""
        decl = parse_one("""
            #[derive(NiceEnum)]
            pub enum MyEnum {
                Unit,
                NamedFields { a: u32 },
                UnnamedFields(u32),
            }
        """)
        assert isinstance(decl, SumTypeDecl)
        assert decl.name == "MyEnum"
        assert decl.visibility.text == "pub"
        assert decl.derives() == ("NiceEnum",)
        assert [(v.name, v.fields_kind) for v in decl.variants] == [
            ("Unit", FieldsKind.UNIT),
            ("NamedFields", FieldsKind.NAMED),
            ("UnnamedFields", FieldsKind.UNNAMED),
        ]

    def test_ident_spans(self):
        """Type and variant names carry their source positions."""
        decl = parse_one("enum E {\n    First,\n}")
        assert str(decl.location) == "test.rs:1:6"
        assert str(decl.variants[0].ident.span) == "test.rs:2:5"

    def test_field_types_normalized(self):
        """Field types are rendered as compact source text."""
        decl = parse_one("""
            enum E {
                A(Vec < Option<T> >),
                B(&'a mut [u8; 4]),
                C(Box<dyn Fn(u8) -> u8 + Send>),
                D { map: HashMap<String, (u8, u8)>, r#type: u8 },
            }
        """)
        a, b, c, d = decl.variants
        assert a.fields[0].ty == "Vec<Option<T>>"
        assert b.fields[0].ty == "&'a mut [u8; 4]"
        assert c.fields[0].ty == "Box<dyn Fn(u8) -> u8 + Send>"
        assert [(f.name, f.ty) for f in d.fields] == [
            ("map", "HashMap<String, (u8, u8)>"),
            ("r#type", "u8"),
        ]

    def test_multi_field_tuple(self):
        """Tuple variants keep every field."""
        decl = parse_one("enum E { Pair(u8, String,), Nil() }")
        assert [f.ty for f in decl.variants[0].fields] == ["u8", "String"]
        assert decl.variants[1].fields == ()

    def test_discriminants(self):
        """Explicit discriminants are recorded."""
        decl = parse_one("#[repr(u8)] enum E { A = 1, B = 1 + 2 }")
        assert [v.discriminant for v in decl.variants] == ["1", "1 + 2"]

    def test_variant_attributes_skipped(self):
        """Attributes and doc comments on variants are ignored."""
        decl = parse_one("""
            enum E {
                /// docs
                #[serde(rename = "a")]
                A(u8),
                #[default]
                B,
            }
        """)
        assert [v.name for v in decl.variants] == ["A", "B"]

    def test_empty_enum(self):
        """An enum may have no variants."""
        decl = parse_one("pub enum Never {}")
        assert decl.variants == ()

    def test_raw_variant_name(self):
        """Raw identifiers are accepted as variant names."""
        decl = parse_one("enum E { r#Type(u8) }")
        assert decl.variants[0].name == "r#Type"


# =============================================================================
# Visibility and Generics
# =============================================================================

class TestVisibilityAndGenerics:
    """Tests for visibility markers and generic parameters."""

    @pytest.mark.parametrize("marker", [
        "pub", "pub(crate)", "pub(super)", "pub(self)", "pub(in crate::shapes)",
    ])
    def test_visibility(self, marker):
        """Visibility markers are kept verbatim."""
        decl = parse_one(f"{marker} enum E {{ A }}")
        assert decl.visibility.text == marker

    def test_private(self):
        """No marker is private."""
        assert parse_one("enum E { A }").visibility.is_private

    def test_generics(self):
        """Lifetime, type and const parameters with bounds and defaults."""
        decl = parse_one(
            "enum E<'a, T: Clone + ?Sized + 'a, U = u8, const N: usize = 4> "
            "where T: Debug, U: Copy { A(&'a T) }"
        )
        params = decl.generics.params
        assert [p.kind for p in params] == [
            GenericKind.LIFETIME, GenericKind.TYPE, GenericKind.TYPE, GenericKind.CONST,
        ]
        assert params[1].bounds == ("Clone", "?Sized", "'a")
        assert params[2].default == "u8"
        assert (params[3].const_type, params[3].default) == ("usize", "4")
        assert decl.generics.where_predicates == ("T: Debug", "U: Copy")

    def test_nested_generic_bounds(self):
        """Bounds with their own generic arguments stay whole."""
        decl = parse_one("enum E<I: Iterator<Item = u8> + Clone> { A(I) }")
        assert decl.generics.params[0].bounds == ("Iterator<Item = u8>", "Clone")


# =============================================================================
# Structs, Unions and Other Items
# =============================================================================

class TestOtherItems:
    """Tests for structs, unions and skipped items."""

    def test_structs(self):
        """Named, tuple and unit structs are parsed as ProductTypeDecl."""
        decls = parse_items("""
            #[derive(NiceEnum)]
            pub struct Point { x: i32, y: i32 }
            struct Wrapper(pub u8);
            struct Marker;
        """)
        assert all(isinstance(d, ProductTypeDecl) for d in decls)
        assert [d.fields_kind for d in decls] == [
            FieldsKind.NAMED, FieldsKind.UNNAMED, FieldsKind.UNIT,
        ]
        assert decls[0].derives() == ("NiceEnum",)

    def test_union(self):
        """Unions are parsed as UnionTypeDecl with their derives."""
        decl = parse_one("#[derive(NiceEnum)]\npub union U<T: Copy> { a: u8, b: T }\n")
        assert isinstance(decl, UnionTypeDecl)
        assert decl.name == "U"
        assert decl.derives() == ("NiceEnum",)
        assert [(f.name, f.ty) for f in decl.fields] == [("a", "u8"), ("b", "T")]
        assert str(decl.location) == "test.rs:2:11"

    def test_union_is_contextual(self):
        """`union` used as an ordinary name does not start a union item."""
        decls = parse_items("""
            fn union() {}
            union! { a b }
            enum Visible { A }
        """)
        assert [d.name for d in decls] == ["Visible"]

    def test_items_skipped(self):
        """Functions, impls, modules and macros are skipped."""
        decls = parse_items("""
            #![allow(dead_code)]
            use std::fmt::{self, Debug};
            const MAX: usize = 1 << 4;
            fn helper<T>(x: T) -> Option<T> { if true { Some(x) } else { None } }
            impl<T> Tree<T> where T: Clone { fn leaf() {} }
            mod inner { pub enum Hidden { A } }
            macro_rules! m { ($x:expr) => { $x }; }
            pub(crate) trait Shape { fn area(&self) -> f64; }
            enum Visible { A }
        """)
        assert [d.name for d in decls] == ["Visible"]

    def test_inline_module_not_entered(self):
        """Enums inside an inline module are not collected."""
        assert parse_items("mod m { enum A { B } }") == []


# =============================================================================
# Errors
# =============================================================================

class TestErrors:
    """Tests for syntax errors."""

    def test_missing_enum_name(self):
        """enum must be followed by a name."""
        with pytest.raises(UnexpectedTokenError, match="unexpected token '{'") as exc_info:
            parse_items("enum { A }", "test.rs")
        assert exc_info.value.hint == "expected an enum name"
        assert str(exc_info.value.location) == "test.rs:1:6"

    def test_unclosed_enum(self):
        """A missing closing brace is reported."""
        with pytest.raises(MissingTokenError, match="expected '}'"):
            parse_items("enum E { A(u8)", "test.rs")

    def test_error_shows_source_line(self):
        """Errors include the offending line and a caret."""
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_items("enum E { 1 }", "test.rs")
        message = str(exc_info.value)
        assert "    enum E { 1 }" in message
        assert message.splitlines()[2] == " " * 13 + "^"

    def test_several_errors_aggregated(self):
        """Errors in separate items are reported together."""
        source = "enum { A }\nenum E { 1 }\nenum Good { A }\n"
        with pytest.raises(GenerationError) as exc_info:
            parse_items(source, "test.rs")
        report = str(exc_info.value)
        assert "test.rs:1:6" in report
        assert "test.rs:2:10" in report
        assert report.endswith("\n2 errors")
        assert "warning" not in report
