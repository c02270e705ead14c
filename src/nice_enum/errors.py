"""
nice-enum Error Hierarchy
=========================

This module defines the exception hierarchy for nice-enum. All exceptions
inherit from NiceEnumError, allowing callers to catch every tool error with
a single except clause if desired.

Exception Hierarchy
-------------------
NiceEnumError (base)
├── DeriveError - the derive refused its input
│   ├── NotASumTypeError - input is not a tagged union
│   ├── NameCollisionError - two derived members share a name
│   └── ExhaustivenessError - kind() arms do not cover every variant
├── SchemaError - malformed schema dictionary
├── RustSyntaxError - lexer and parser errors
│   ├── UnexpectedTokenError - token doesn't fit the grammar
│   ├── MissingTokenError - required token not found
│   └── InvalidCharacterError - character not valid in Rust source
├── GenerationError - aggregate report from the generator driver
└── EvaluationError - misuse of evaluated values
    ├── UseAfterMoveError - value used after a consuming call
    └── BorrowError - write through a shared reference

Error Message Format
--------------------
Errors that know where they happened follow this format:

    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Base Exception Class
# =============================================================================

class NiceEnumError(Exception):
    """
    Base exception for all nice-enum errors.

    Provides location tracking, source line context and an optional hint,
    so every error can be reported the same way:

        try:
            generator.generate_file("shapes.rs")
        except NiceEnumError as e:
            print(e)

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            shapes.rs:3:1: error: NiceEnum can only be derived for enums
                pub struct Point {
                ^
            hint: 'Point' is a struct
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Derive Errors
# =============================================================================

class DeriveError(NiceEnumError):
    """
    The derive could not produce output for a declaration.

    Derive errors are fatal for the declaration they concern: no partial
    output is ever produced.
    """
    pass


class NotASumTypeError(DeriveError):
    """
    The declaration handed to the derive is not a tagged union.

    Raised when a struct or union is annotated with the derive.
    This is a programmer error in the annotated source, not a runtime
    condition.
    """

    def __init__(
        self,
        type_name: str,
        shape: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.type_name = type_name
        self.shape = shape
        super().__init__(
            "NiceEnum can only be derived for enums",
            location=location,
            hint=f"'{type_name}' is a {shape}",
            source_line=source_line,
        )


class NameCollisionError(DeriveError):
    """
    Two derived members would get the same name.

    Method names come from the snake_case form of each variant, so
    distinct variants can still collide:

        enum Token { FooBar, Foo_Bar }      // both give is_foo_bar
        enum Slot { X(u8), XMut(u8) }       // as_x_mut twice

    A collision with a name the caller reserved (an existing method of
    the source type) is reported the same way.
    """

    def __init__(
        self,
        member: str,
        first_owner: str,
        second_owner: str,
        location: Optional[SourceLocation] = None,
    ):
        self.member = member
        self.first_owner = first_owner
        self.second_owner = second_owner
        super().__init__(
            f"derived member '{member}' for {second_owner} "
            f"collides with {first_owner}",
            location=location,
            hint="rename one of the variants",
        )


class ExhaustivenessError(DeriveError):
    """
    The generated kind() match does not cover every variant exactly once.

    This signals an internal inconsistency between the classifier and
    the accessor emitter.
    """

    def __init__(
        self,
        type_name: str,
        missing: list[str],
        duplicated: list[str],
    ):
        self.type_name = type_name
        self.missing = missing
        self.duplicated = duplicated

        details = []
        if missing:
            details.append(f"missing {', '.join(missing)}")
        if duplicated:
            details.append(f"duplicated {', '.join(duplicated)}")

        super().__init__(
            f"kind() for '{type_name}' is not exhaustive ({'; '.join(details)})"
        )


# =============================================================================
# Schema Errors
# =============================================================================

class SchemaError(NiceEnumError):
    """
    Malformed schema dictionary.

    Raised by TypeDecl.from_dict() when required keys are missing or
    values have the wrong type.
    """
    pass


# =============================================================================
# Syntax Errors (Lexer and Parser)
# =============================================================================

class RustSyntaxError(NiceEnumError):
    """
    Syntax error in Rust source code.

    Raised when the lexer or parser meets text it cannot tokenize or
    that does not fit the item declaration grammar.
    """
    pass


class UnexpectedTokenError(RustSyntaxError):
    """Token doesn't match the expected grammar rule."""

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(RustSyntaxError):
    """
    Required token is missing.

    Raised when a required token (like '}' or '>') is not found
    where expected.
    """

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected '{expected}'",
            location=location,
            source_line=source_line,
        )


class InvalidCharacterError(RustSyntaxError):
    """Character that cannot start any Rust token."""

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Aggregate Generation Error
# =============================================================================

class GenerationError(NiceEnumError):
    """
    Aggregate error containing every failure of one generator run.

    The message is an already formatted report from ErrorCollector and
    is passed through unchanged.
    """

    def _format_message(self) -> str:
        """Return message as-is - it's already a formatted report."""
        return self.message


# =============================================================================
# Evaluation Errors
# =============================================================================

class EvaluationError(NiceEnumError):
    """Base exception for misuse of values in the evaluator."""
    pass


class UseAfterMoveError(EvaluationError):
    """A value was used after a consuming (self) method took it."""

    def __init__(self, type_name: str, method: str):
        self.type_name = type_name
        self.method = method
        super().__init__(
            f"use of moved value of type '{type_name}' in call to {method}()",
            hint="consuming accessors take ownership even when they return None",
        )


class BorrowError(EvaluationError):
    """Attempt to write through a shared (&) reference."""
    pass


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects errors from several declarations for batch reporting.

    The generator keeps going after a declaration fails so that every
    broken declaration in a file is reported in one run.

    Example:
        collector = ErrorCollector()

        for decl in declarations:
            try:
                derive_nice_enum(decl)
            except DeriveError as e:
                collector.add(e)

        collector.raise_if_errors()
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before stopping
        """
        self.errors: list[NiceEnumError] = []
        self.max_errors = max_errors

    def add(self, error: NiceEnumError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def should_stop(self) -> bool:
        """Return True if max_errors has been reached."""
        return len(self.errors) >= self.max_errors

    def report(self) -> str:
        """Format all errors for display, followed by the error count."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        error_word = "error" if len(self.errors) == 1 else "errors"
        lines.append(f"{len(self.errors)} {error_word}")

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()

    def raise_if_errors(self) -> None:
        """Raise a GenerationError if any errors were collected."""
        if self.has_errors():
            raise GenerationError(self.report())
