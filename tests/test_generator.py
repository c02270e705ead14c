"""
Generator Driver Tests
======================

Tests for NiceEnumGenerator: selecting annotated enums, rendering the
output file, schema input and error collection across declarations.
"""

import json
from pathlib import Path

import pytest

from nice_enum.errors import (
    GenerationError,
    NameCollisionError,
    NotASumTypeError,
    SchemaError,
)
from nice_enum.generator import (
    GeneratorOptions,
    NiceEnumGenerator,
    generate_source,
)


SHAPES_SOURCE = """\
use std::fmt;

#[derive(Debug, Clone, NiceEnum)]
pub enum Shape {
    Empty,
    Circle(f64),
    Rect { w: f64, h: f64 },
}

#[derive(Debug)]
enum Plain {
    A,
    B(u8),
}

impl fmt::Display for Shape {
    fn fmt(&self, f: &mut fmt::Formatter) -> fmt::Result {
        write!(f, "shape")
    }
}
"""


# =============================================================================
# Selection
# =============================================================================

class TestSelection:
    """Tests for choosing which declarations to derive."""

    def test_annotated_only(self):
        """Only enums deriving NiceEnum are generated."""
        result = NiceEnumGenerator().generate_source(SHAPES_SOURCE, "shapes.rs")
        assert len(result.declarations) == 2
        assert result.item_count == 1
        assert result.derived[0].source_name == "Shape"

    def test_all_enums(self):
        """all_enums derives unannotated enums too."""
        generator = NiceEnumGenerator(GeneratorOptions(all_enums=True))
        result = generator.generate_source(SHAPES_SOURCE, "shapes.rs")
        assert [items.source_name for items in result.derived] == ["Shape", "Plain"]

    def test_all_enums_skips_structs(self):
        """all_enums does not pick up unannotated structs."""
        generator = NiceEnumGenerator(GeneratorOptions(all_enums=True))
        result = generator.generate_source("struct P { x: u8 }\nenum E { A }\n")
        assert [items.source_name for items in result.derived] == ["E"]

    def test_custom_derive_name(self):
        """The selecting derive name is configurable."""
        generator = NiceEnumGenerator(GeneratorOptions(derive_name="Kinded"))
        result = generator.generate_source("#[derive(Kinded)] enum E { A }\n")
        assert result.item_count == 1

    def test_path_qualified_derive(self):
        """#[derive(nice_enum::NiceEnum)] is selected."""
        result = NiceEnumGenerator().generate_source(
            "#[derive(nice_enum::NiceEnum)] enum E { A }\n"
        )
        assert result.for_type("E").kind_type.name == "EKind"

    def test_for_type_unknown(self):
        """for_type() raises KeyError for types not derived."""
        result = NiceEnumGenerator().generate_source(SHAPES_SOURCE)
        with pytest.raises(KeyError):
            result.for_type("Plain")


# =============================================================================
# Output
# =============================================================================

class TestOutput:
    """Tests for the rendered output."""

    def test_header(self):
        """The output starts with a generated-file comment naming the source."""
        output = generate_source(SHAPES_SOURCE, "src/shapes.rs")
        assert output.startswith("// Generated by nicegen from shapes.rs. Do not edit.\n\n")

    def test_no_header(self):
        """emit_header=False starts directly with the kind type."""
        output = generate_source(SHAPES_SOURCE, options=GeneratorOptions(emit_header=False))
        assert output.startswith("#[derive(Debug, Clone, Copy")

    def test_derived_content(self):
        """The derived items for Shape are in the output."""
        output = generate_source(SHAPES_SOURCE)
        assert "pub enum ShapeKind {" in output
        assert "            Self::Rect { .. } => ShapeKind::Rect," in output
        assert "    pub fn as_circle_mut(&mut self) -> Option<&mut f64> {" in output
        assert "PlainKind" not in output

    def test_items_separated_by_blank_line(self):
        """Consecutive types are separated by one blank line."""
        options = GeneratorOptions(all_enums=True, emit_header=False)
        output = generate_source("enum A { X }\nenum B { Y }\n", options=options)
        assert "}\n\n#[derive(" in output
        assert "\n\n\n" not in output

    def test_nothing_selected(self):
        """No annotated enums give a header-only output."""
        output = generate_source("enum A { X }\n", "a.rs")
        assert output == "// Generated by nicegen from a.rs. Do not edit.\n"

    def test_reserved_names(self):
        """Reserved names are passed to the derive."""
        options = GeneratorOptions(reserved_names=frozenset({"is_empty"}))
        with pytest.raises(NameCollisionError):
            generate_source(SHAPES_SOURCE, options=options)


# =============================================================================
# Failures
# =============================================================================

class TestFailures:
    """Tests for error reporting."""

    def test_struct_with_derive(self):
        """An annotated struct is reported at its name."""
        source = "#[derive(NiceEnum)]\npub struct Point { x: i32 }\n"
        with pytest.raises(NotASumTypeError) as exc_info:
            generate_source(source, "point.rs")
        assert str(exc_info.value).startswith(
            "point.rs:2:12: error: NiceEnum can only be derived for enums"
        )

    def test_union_with_derive(self):
        """An annotated union is rejected, not silently dropped."""
        source = "#[derive(NiceEnum)]\npub union U { a: u8, b: f32 }\n"
        with pytest.raises(NotASumTypeError) as exc_info:
            generate_source(source, "u.rs")
        assert exc_info.value.shape == "union"
        assert str(exc_info.value).startswith(
            "u.rs:2:11: error: NiceEnum can only be derived for enums"
        )

    def test_unannotated_union_ignored(self):
        """all_enums does not pick up unions."""
        options = GeneratorOptions(all_enums=True, emit_header=False)
        output = generate_source("union U { a: u8 }\nenum E { A }\n", options=options)
        assert "enum EKind {" in output
        assert "UKind" not in output

    def test_several_failures_collected(self):
        """Failures in several declarations are reported together."""
        source = (
            "#[derive(NiceEnum)]\nstruct P;\n"
            "#[derive(NiceEnum)]\nenum Good { A }\n"
            "#[derive(NiceEnum)]\nenum Bad { FooBar, Foo_Bar }\n"
        )
        with pytest.raises(GenerationError) as exc_info:
            generate_source(source, "mixed.rs")
        report = str(exc_info.value)
        assert "NiceEnum can only be derived for enums" in report
        assert "derived member 'is_foo_bar'" in report
        assert report.endswith("\n2 errors")

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            NiceEnumGenerator().generate_file(tmp_path / "missing.rs")

    def test_generate_file(self, tmp_path):
        """Files are read and named in the header."""
        path = tmp_path / "shapes.rs"
        path.write_text(SHAPES_SOURCE)
        result = NiceEnumGenerator().generate_file(path)
        assert result.filename == str(path)
        assert "from shapes.rs" in result.output


# =============================================================================
# Schema Input
# =============================================================================

class TestSchema:
    """Tests for dictionary and JSON input."""

    SCHEMA = {
        "kind": "enum",
        "name": "MyEnum",
        "visibility": "pub",
        "variants": [
            {"name": "Unit"},
            {"name": "NamedFields", "fields": {"a": "u32"}},
            {"name": "UnnamedFields", "fields": ["u32"]},
        ],
    }

    def test_single_object(self):
        """A schema object is always derived, annotated or not."""
        result = NiceEnumGenerator().generate_schema(self.SCHEMA)
        assert result.item_count == 1
        assert "pub fn into_unnamed_fields(self) -> Option<u32> {" in result.output

    def test_list(self):
        """A list of objects derives each one."""
        other = {"name": "Other", "variants": [{"name": "X"}]}
        result = NiceEnumGenerator().generate_schema([self.SCHEMA, other])
        assert [items.source_name for items in result.derived] == ["MyEnum", "Other"]

    def test_schema_file(self, tmp_path):
        """JSON files are loaded."""
        path = tmp_path / "my_enum.json"
        path.write_text(json.dumps(self.SCHEMA))
        result = NiceEnumGenerator().generate_schema_file(path)
        assert result.output.startswith("// Generated by nicegen from my_enum.json.")

    def test_invalid_json(self, tmp_path):
        """Invalid JSON is a SchemaError."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(SchemaError, match="invalid JSON"):
            NiceEnumGenerator().generate_schema_file(path)

    def test_schema_struct(self):
        """Struct entries fail the derive like annotated structs."""
        with pytest.raises(NotASumTypeError):
            NiceEnumGenerator().generate_schema({"kind": "struct", "name": "P"})

    def test_schema_union(self):
        """Union entries fail the derive."""
        with pytest.raises(NotASumTypeError, match="can only be derived for enums"):
            NiceEnumGenerator().generate_schema(
                {"kind": "union", "name": "U", "fields": {"a": "u8"}}
            )

    def test_schema_bad_variant_name(self):
        """A variant name that is not an identifier is a SchemaError, not bad output."""
        schema = {"name": "E", "variants": [{"name": "Foo Bar", "fields": ["u8"]}]}
        with pytest.raises(SchemaError, match="not a Rust identifier"):
            NiceEnumGenerator().generate_schema(schema)

    def test_missing_schema_file(self):
        """A missing schema file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            NiceEnumGenerator().generate_schema_file(Path("does/not/exist.json"))
