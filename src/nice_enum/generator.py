"""
nice-enum Generator Driver
==========================

This module connects the Rust parser to the derive. It orchestrates the
complete generation process for one source file:

    Source → Lex → Parse → Select #[derive(NiceEnum)] items → Derive → Render

Each selected declaration is derived independently. A declaration that
fails produces no output at all; the generator carries on with the others
and reports every failure together at the end.

Usage
-----
Command line:
    $ nicegen shapes.rs -o shapes_kind.rs

Programmatic:
    >>> from nice_enum.generator import generate_source
    >>> print(generate_source('#[derive(NiceEnum)] enum A { B, C(u8) }'))
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from nice_enum.derive import derive_nice_enum
from nice_enum.errors import ErrorCollector, NiceEnumError, SchemaError
from nice_enum.parser import parse_items
from nice_enum.rust import DerivedItems
from nice_enum.schema import SumTypeDecl, TypeDecl

logger = logging.getLogger(__name__)


DEFAULT_DERIVE_NAME = "NiceEnum"


@dataclass
class GeneratorOptions:
    """
    Generator configuration options.

    Attributes:
        derive_name: Derive macro name that selects declarations
        all_enums: Derive for every enum, annotated or not
        reserved_names: Methods the source types already define; derived
                        names must not collide with them
        indent: Indentation unit of the rendered output
        emit_header: Start the output with a "generated" comment
    """
    derive_name: str = DEFAULT_DERIVE_NAME
    all_enums: bool = False
    reserved_names: frozenset[str] = frozenset()
    indent: str = "    "
    emit_header: bool = True


@dataclass
class GenerationResult:
    """
    Result of one generator run.

    Attributes:
        filename: Source filename
        declarations: Every enum and struct declaration parsed
        derived: DerivedItems per selected declaration, in source order
        output: Rendered Rust source for all derived items
    """
    filename: str
    declarations: list[TypeDecl] = field(default_factory=list)
    derived: list[DerivedItems] = field(default_factory=list)
    output: str = ""

    @property
    def item_count(self) -> int:
        return len(self.derived)

    def for_type(self, name: str) -> DerivedItems:
        """Return the items derived for the type called name."""
        for items in self.derived:
            if items.source_name == name:
                return items
        raise KeyError(name)


class NiceEnumGenerator:
    """
    Runs the derive over the declarations of a Rust source file.

    Example:
        generator = NiceEnumGenerator()
        result = generator.generate_file("shapes.rs")
        print(result.output)

    Attributes:
        options: Generator configuration
    """

    def __init__(self, options: Optional[GeneratorOptions] = None):
        """
        Initialize the generator.

        Args:
            options: Generator configuration (uses defaults if None)
        """
        self.options = options or GeneratorOptions()
        self._errors = ErrorCollector()

    # =========================================================================
    # Entry Points
    # =========================================================================

    def generate_source(self, source: str, filename: str = "<input>") -> GenerationResult:
        """
        Generate companion declarations for Rust source text.

        Args:
            source: Rust source code
            filename: Source filename for messages and the output header

        Returns:
            GenerationResult with derived items and rendered output

        Raises:
            RustSyntaxError: If the source cannot be parsed
            NiceEnumError: If any selected declaration cannot be derived
        """
        logger.debug(f"Parsing {filename}")
        declarations = parse_items(source, filename)
        logger.debug(f"Parsed {len(declarations)} type declarations from {filename}")

        result = self.generate_declarations(declarations, filename)
        return result

    def generate_file(self, filepath: str | Path) -> GenerationResult:
        """
        Generate companion declarations for a Rust source file.

        Raises:
            FileNotFoundError: If the file does not exist
            NiceEnumError: As for generate_source()
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")
        return self.generate_source(path.read_text(encoding="utf-8"), str(path))

    def generate_schema(self, data: Any, filename: str = "<schema>") -> GenerationResult:
        """
        Generate from schema mappings (one object or a list of objects).

        Schema declarations are always derived: being listed in the schema
        is the selection.

        Raises:
            SchemaError: If the data is malformed
        """
        raw_decls = data if isinstance(data, list) else [data]
        declarations = [TypeDecl.from_dict(raw) for raw in raw_decls]
        return self.generate_declarations(declarations, filename, select_all=True)

    def generate_schema_file(self, filepath: str | Path) -> GenerationResult:
        """
        Generate from a JSON schema file.

        Raises:
            FileNotFoundError: If the file does not exist
            SchemaError: If the file is not valid JSON or not a valid schema
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Schema file not found: {filepath}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise SchemaError(
                f"invalid JSON in {path}: {e.msg} (line {e.lineno}, column {e.colno})"
            ) from e
        return self.generate_schema(data, str(path))

    # =========================================================================
    # Derivation
    # =========================================================================

    def is_selected(self, decl: TypeDecl) -> bool:
        """Return True if decl should be derived."""
        if self.options.derive_name in decl.derives():
            return True
        return self.options.all_enums and isinstance(decl, SumTypeDecl)

    def generate_declarations(
        self,
        declarations: list[TypeDecl],
        filename: str = "<input>",
        select_all: bool = False,
    ) -> GenerationResult:
        """
        Derive for every selected declaration and render the output.

        Raises:
            NiceEnumError: The single failure, if one declaration failed
            GenerationError: Aggregate report if several failed
        """
        self._errors.clear()
        result = GenerationResult(filename=filename, declarations=list(declarations))

        for decl in declarations:
            if not select_all and not self.is_selected(decl):
                logger.debug(f"Skipping {decl.name}: not annotated with {self.options.derive_name}")
                continue

            try:
                items = derive_nice_enum(decl, self.options.reserved_names)
            except NiceEnumError as e:
                logger.debug(f"Derive failed for {decl.name}: {e.message}")
                self._errors.add(e)
                if self._errors.should_stop():
                    break
                continue

            result.derived.append(items)

        if len(self._errors.errors) == 1:
            raise self._errors.errors[0]
        self._errors.raise_if_errors()

        if not result.derived:
            logger.info(f"No declarations in {filename} derive {self.options.derive_name}")

        result.output = self.render(result)
        return result

    def render(self, result: GenerationResult) -> str:
        """Render all derived items of result as one Rust source text."""
        chunks = []
        if self.options.emit_header:
            chunks.append(
                f"// Generated by nicegen from {Path(result.filename).name}. Do not edit.\n"
            )
        chunks.extend(items.render(self.options.indent) for items in result.derived)
        return "\n".join(chunks)


# =============================================================================
# Convenience Function
# =============================================================================

def generate_source(
    source: str,
    filename: str = "<input>",
    options: Optional[GeneratorOptions] = None,
) -> str:
    """
    Generate companion declarations and return the rendered Rust source.

    Args:
        source: Rust source code
        filename: Source filename for error messages
        options: Generator options

    Returns:
        Rendered Rust source
    """
    return NiceEnumGenerator(options).generate_source(source, filename).output
