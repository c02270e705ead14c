"""
Declaration Schema Tests
========================

Tests for the declaration model: identifiers, visibility, generics,
attributes and conversion from and to plain dictionaries.
"""

import pytest

from nice_enum.errors import SchemaError, SourceLocation
from nice_enum.schema import (
    PRIVATE,
    PUBLIC,
    Attribute,
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


# =============================================================================
# Identifiers, Visibility, Attributes
# =============================================================================

class TestIdent:
    """Tests for Ident."""

    def test_span_not_compared(self):
        """Identifiers with the same text are equal wherever written."""
        a = Ident("Unit", SourceLocation("a.rs", 1, 1))
        b = Ident("Unit", SourceLocation("b.rs", 9, 4))
        assert a == b

    def test_normalized_drops_span(self):
        """normalized() removes position metadata."""
        ident = Ident("Unit", SourceLocation("a.rs", 1, 1))
        assert ident.normalized().span is None
        assert ident.normalized().text == "Unit"


class TestVisibility:
    """Tests for Visibility."""

    def test_private(self):
        """Private visibility renders nothing."""
        assert PRIVATE.is_private
        assert PRIVATE.prefix() == ""

    def test_public(self):
        """pub renders with a trailing space."""
        assert PUBLIC.prefix() == "pub "

    def test_restricted(self):
        """Restricted visibility is kept verbatim."""
        assert Visibility("pub(crate)").prefix() == "pub(crate) "


class TestAttribute:
    """Tests for derive name extraction."""

    def test_derive_names(self):
        """Names are split on commas and stripped."""
        attribute = Attribute("derive", "Debug, Clone,NiceEnum")
        assert attribute.derive_names() == ("Debug", "Clone", "NiceEnum")

    def test_path_qualified_derive(self):
        """A path-qualified derive matches on its last segment."""
        attribute = Attribute("derive", "nice_enum::NiceEnum")
        assert attribute.derive_names() == ("NiceEnum",)

    def test_non_derive_attribute(self):
        """Other attributes list no derives."""
        assert Attribute("doc", '"text"').derive_names() == ()

    def test_type_collects_all_derive_attributes(self):
        """derives() combines every #[derive] attribute."""
        decl = SumTypeDecl(
            Ident("A"),
            attributes=(Attribute("derive", "Debug"), Attribute("repr", "u8"),
                        Attribute("derive", "NiceEnum")),
        )
        assert decl.derives() == ("Debug", "NiceEnum")


# =============================================================================
# Generics
# =============================================================================

class TestGenerics:
    """Tests for splitting generics into impl header pieces."""

    def test_empty(self):
        """No generics produce three empty strings."""
        assert Generics().split_for_impl() == ("", "", "")
        assert Generics().is_empty

    def test_bounds_and_defaults(self):
        """Bounds stay in impl position; defaults are dropped."""
        generics = Generics(
            params=(
                GenericParam("'a", GenericKind.LIFETIME),
                GenericParam("T", bounds=("Clone",), default="u8"),
            ),
            where_predicates=("T: Debug",),
        )
        assert generics.split_for_impl() == ("<'a, T: Clone>", "<'a, T>", "where T: Debug")

    def test_const_param(self):
        """Const parameters keep their type in impl position."""
        generics = Generics(params=(
            GenericParam("N", GenericKind.CONST, const_type="usize", default="4"),
        ))
        assert generics.split_for_impl() == ("<const N: usize>", "<N>", "")

    def test_decl_form_keeps_default(self):
        """decl_form() renders the default."""
        param = GenericParam("T", bounds=("Clone", "Send"), default="u8")
        assert param.decl_form() == "T: Clone + Send = u8"


# =============================================================================
# Dictionary Conversion
# =============================================================================

class TestFromDict:
    """Tests for TypeDecl.from_dict()."""

    def test_enum(self):
        """An enum mapping becomes a SumTypeDecl with ordered variants."""
        decl = TypeDecl.from_dict({
            "kind": "enum",
            "name": "MyEnum",
            "visibility": "pub",
            "derives": ["NiceEnum"],
            "variants": [
                {"name": "Unit"},
                {"name": "NamedFields", "fields": {"a": "u32"}},
                {"name": "UnnamedFields", "fields": ["u32"]},
            ],
        })
        assert isinstance(decl, SumTypeDecl)
        assert decl.name == "MyEnum"
        assert decl.visibility == PUBLIC
        assert decl.derives() == ("NiceEnum",)
        assert [v.name for v in decl.variants] == ["Unit", "NamedFields", "UnnamedFields"]
        assert [v.fields_kind for v in decl.variants] == [
            FieldsKind.UNIT, FieldsKind.NAMED, FieldsKind.UNNAMED,
        ]
        assert decl.variants[1].fields[0].name == "a"
        assert decl.variants[2].fields[0].ty == "u32"

    def test_kind_defaults_to_enum(self):
        """A mapping without 'kind' is an enum."""
        decl = TypeDecl.from_dict({"name": "E", "variants": []})
        assert isinstance(decl, SumTypeDecl)
        assert decl.variants == ()

    def test_struct(self):
        """A struct mapping becomes a ProductTypeDecl."""
        decl = TypeDecl.from_dict({"kind": "struct", "name": "Point", "fields": {"x": "i32"}})
        assert isinstance(decl, ProductTypeDecl)
        assert decl.fields_kind == FieldsKind.NAMED

    def test_union(self):
        """A union mapping becomes a UnionTypeDecl with named fields."""
        decl = TypeDecl.from_dict({"kind": "union", "name": "U", "fields": {"a": "u8", "b": "f32"}})
        assert isinstance(decl, UnionTypeDecl)
        assert [(f.name, f.ty) for f in decl.fields] == [("a", "u8"), ("b", "f32")]

    def test_discriminant(self):
        """Variant discriminants are read as expression text."""
        decl = TypeDecl.from_dict({"name": "E", "variants": [{"name": "A", "discriminant": "1"}]})
        assert decl.variants[0].discriminant == "1"

    @pytest.mark.parametrize("name", ["Foo", "_Private", "r#Type", "Ünïcode", "V2"])
    def test_identifier_names_accepted(self, name):
        """Plain, raw and non-ASCII identifiers are valid variant names."""
        decl = TypeDecl.from_dict({"name": "E", "variants": [{"name": name}]})
        assert decl.variants[0].name == name

    @pytest.mark.parametrize("data", [
        {"name": "My Enum", "variants": []},
        {"name": "E", "variants": [{"name": "Foo Bar"}]},
        {"name": "E", "variants": [{"name": "2D"}]},
        {"name": "E", "variants": [{"name": "_"}]},
        {"name": "E", "variants": [{"name": "A::B"}]},
        {"name": "E", "variants": [{"name": "r#"}]},
        {"name": "E", "generics": {"params": [{"name": "T U"}]}, "variants": []},
        {"name": "E", "generics": {"params": [{"name": "'a b"}]}, "variants": []},
    ])
    def test_non_identifier_names_rejected(self, data):
        """Type, variant and generic names must be Rust identifiers."""
        with pytest.raises(SchemaError, match="not a Rust identifier"):
            TypeDecl.from_dict(data)

    def test_generics(self):
        """Generic parameters are classified by form."""
        decl = TypeDecl.from_dict({
            "name": "E",
            "generics": {
                "params": [
                    {"name": "'a"},
                    {"name": "T", "bounds": ["Clone"]},
                    {"name": "N", "const": "usize"},
                ],
                "where": ["T: Debug"],
            },
            "variants": [],
        })
        kinds = [p.kind for p in decl.generics.params]
        assert kinds == [GenericKind.LIFETIME, GenericKind.TYPE, GenericKind.CONST]
        assert decl.generics.where_predicates == ("T: Debug",)

    @pytest.mark.parametrize("data,fragment", [
        ([], "must be an object"),
        ({"variants": []}, "'name'"),
        ({"name": "E"}, "'variants' list"),
        ({"name": "E", "kind": "trait", "variants": []}, "unknown declaration kind"),
        ({"name": "U", "kind": "union", "fields": ["u8"]}, "'fields' of union 'U'"),
        ({"name": "E", "variants": [{"name": "A", "fields": 3}]}, "'fields'"),
        ({"name": "E", "variants": [{"name": "A", "fields": {"a": 1}}]}, "type of field 'a'"),
        ({"name": "E", "derives": "NiceEnum", "variants": []}, "'derives'"),
        ({"name": "E", "generics": [], "variants": []}, "'generics'"),
        ({"name": "E", "generics": {"params": 5}, "variants": []}, "'params' of 'E'"),
        ({"name": "E", "generics": {"params": "T"}, "variants": []}, "'params' of 'E'"),
    ])
    def test_malformed(self, data, fragment):
        """Malformed mappings raise SchemaError."""
        with pytest.raises(SchemaError, match=fragment):
            TypeDecl.from_dict(data)


class TestToDict:
    """Tests for to_dict()."""

    def test_enum_round_trip(self):
        """to_dict() output is accepted by from_dict() and gives an equal declaration."""
        decl = SumTypeDecl(
            Ident("MyEnum"),
            PUBLIC,
            Generics(params=(GenericParam("T", bounds=("Clone",)),)),
            (Attribute("derive", "NiceEnum"),),
            (
                VariantDecl.unit("Unit"),
                VariantDecl.named("NamedFields", {"a": "u32"}),
                VariantDecl.unnamed("UnnamedFields", ["T"]),
            ),
        )
        data = decl.to_dict()
        assert data["kind"] == "enum"
        assert data["variants"][0] == {"name": "Unit", "fields": None}
        assert TypeDecl.from_dict(data) == decl

    def test_discriminant_round_trip(self):
        """Discriminants are written back and survive a round trip."""
        data = {"kind": "enum", "name": "E", "variants": [
            {"name": "A", "fields": None, "discriminant": "1"},
            {"name": "B", "fields": None},
        ]}
        decl = TypeDecl.from_dict(data)
        assert decl.to_dict() == data
        assert TypeDecl.from_dict(decl.to_dict()) == decl

    def test_union_round_trip(self):
        """Union declarations convert back to a 'union' mapping."""
        data = {"kind": "union", "name": "U", "visibility": "pub", "fields": {"a": "u8"}}
        decl = TypeDecl.from_dict(data)
        assert decl.to_dict() == data

    def test_private_enum_omits_visibility(self):
        """Private declarations have no 'visibility' key."""
        data = SumTypeDecl(Ident("E")).to_dict()
        assert "visibility" not in data
        assert data == {"kind": "enum", "name": "E", "variants": []}
