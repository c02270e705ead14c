"""
Rust Lexer (Tokenizer)
======================

This module implements a lexer for the subset of Rust needed to read item
declarations. It converts source text into a stream of tokens for the
parser; it does not need to understand function bodies, only to tokenize
them well enough for the parser to skip them.

Token Categories
----------------
- Identifiers: names and keywords alike (`enum`, `Shape`, `r#type`)
- Lifetimes: 'a, 'static
- Literals: integers, floats, strings, raw strings, byte strings, chars
- Punctuation: single characters, plus the multi-character tokens
  `::`, `->`, `=>`, `==`, `!=`, `<=`, `>=`, `&&`, `||`, `..`, `..=`, `...`

`<` and `>` are always single tokens so that `Vec<Vec<T>>` closes two
generic lists rather than producing a shift operator.

Comments
--------
- Line: // comment (including /// and //! doc comments)
- Block: /* comment */, nesting allowed as in Rust

Example Usage
-------------
>>> from nice_enum.lexer import RustLexer
>>> for token in RustLexer("enum A { B(u8) }", "a.rs").tokenize():
...     print(token)
Token(IDENT, 'enum', 1:1)
Token(IDENT, 'A', 1:6)
Token(PUNCT, '{', 1:8)
Token(IDENT, 'B', 1:10)
Token(PUNCT, '(', 1:11)
Token(IDENT, 'u8', 1:12)
Token(PUNCT, ')', 1:14)
Token(PUNCT, '}', 1:16)
Token(EOF, 1:17)
"""

import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional

from nice_enum.errors import (
    InvalidCharacterError,
    RustSyntaxError,
    SourceLocation,
)


# =============================================================================
# Token Types
# =============================================================================

class TokenType(Enum):
    """Token categories for Rust source."""
    EOF = auto()
    IDENT = auto()      # identifiers and keywords
    LIFETIME = auto()   # 'a
    LITERAL = auto()    # numbers, strings, chars
    PUNCT = auto()      # operators and delimiters


@dataclass(frozen=True)
class RustToken:
    """
    A single token from Rust source code.

    Attributes:
        type: Token category
        value: Token text exactly as written (None for EOF)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: Optional[str]
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_punct(self, *values: str) -> bool:
        return self.type == TokenType.PUNCT and self.value in values

    def is_keyword(self, *values: str) -> bool:
        return self.type == TokenType.IDENT and self.value in values


# =============================================================================
# Lexer Implementation
# =============================================================================

class RustLexer:
    """
    Tokenizes Rust source code.

    Usage:
        lexer = RustLexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    # Longest first so that "..=" wins over ".."
    MULTI_CHAR_PUNCT = ("..=", "...", "::", "->", "=>", "==", "!=", "<=", ">=", "&&", "||", "..")

    SINGLE_CHAR_PUNCT = set("{}[]()<>,;:#!=+-*/%&|^~?.@$")

    def __init__(self, source: str, filename: str = "<input>"):
        """
        Initialize the lexer with source code.

        Args:
            source: The Rust source code to tokenize
            filename: Name of the source file (for error messages)
        """
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[RustToken]:
        """
        Generate tokens from the source code.

        Yields:
            RustToken objects, always ending with EOF

        Raises:
            RustSyntaxError: If invalid syntax is encountered
        """
        while True:
            self._skip_whitespace_and_comments()
            if self._at_end():
                break
            yield self._scan_token()

        yield self._make_token(TokenType.EOF, None, self._line, self._column)

    # =========================================================================
    # Character Access
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _peek_in(self, offset: int, chars: str) -> bool:
        """Return True if the character at offset is one of chars; False at end of input."""
        char = self._peek(offset)
        return bool(char) and char in chars

    def _advance(self) -> str:
        """Consume one character, keeping line and column up to date."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _make_token(
        self,
        token_type: TokenType,
        value: Optional[str],
        line: int,
        column: int,
    ) -> RustToken:
        return RustToken(token_type, value, line, column, self.filename)

    def _current_line_text(self, line_start: int) -> str:
        line_end = self.source.find("\n", line_start)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[line_start:line_end]

    def _error(
        self,
        message: str,
        line: int,
        column: int,
        line_start: int,
        hint: Optional[str] = None,
    ) -> RustSyntaxError:
        return RustSyntaxError(
            message,
            SourceLocation(self.filename, line, column),
            hint=hint,
            source_line=self._current_line_text(line_start),
        )

    # =========================================================================
    # Whitespace and Comments
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> None:
        while not self._at_end():
            char = self._peek()

            if char.isspace():
                self._advance()
            elif char == "/" and self._peek(1) == "/":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
            elif char == "/" and self._peek(1) == "*":
                self._skip_block_comment()
            else:
                return

    def _skip_block_comment(self) -> None:
        line, column, line_start = self._line, self._column, self._line_start_pos
        self._advance()
        self._advance()
        depth = 1

        while depth:
            if self._at_end():
                raise self._error(
                    "unterminated block comment", line, column, line_start,
                    hint="add closing '*/'",
                )
            if self._peek() == "/" and self._peek(1) == "*":
                self._advance()
                self._advance()
                depth += 1
            elif self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                depth -= 1
            else:
                self._advance()

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> RustToken:
        line, column, line_start = self._line, self._column, self._line_start_pos
        char = self._peek()

        if char == "r" and self._peek(1) == "#" and self._peek_in(2, self.IDENT_START):
            self._advance()
            self._advance()
            name = self._scan_ident_chars()
            return self._make_token(TokenType.IDENT, f"r#{name}", line, column)

        if char == "r" and (self._peek(1) == '"' or (self._peek(1) == "#" and self._peek_in(2, '"#'))):
            self._advance()
            text = self._scan_raw_string(line, column, line_start)
            return self._make_token(TokenType.LITERAL, "r" + text, line, column)

        if char == "b" and self._peek_in(1, "\"'"):
            self._advance()
            text = self._scan_quoted(self._peek(), line, column, line_start)
            return self._make_token(TokenType.LITERAL, "b" + text, line, column)

        if char == "b" and self._peek(1) == "r" and self._peek_in(2, '"#'):
            self._advance()
            self._advance()
            text = self._scan_raw_string(line, column, line_start)
            return self._make_token(TokenType.LITERAL, "br" + text, line, column)

        if char in self.IDENT_START or (char.isalpha() and not char.isascii()):
            return self._make_token(TokenType.IDENT, self._scan_ident_chars(), line, column)

        if char.isdigit():
            return self._make_token(TokenType.LITERAL, self._scan_number(), line, column)

        if char == '"':
            text = self._scan_quoted('"', line, column, line_start)
            return self._make_token(TokenType.LITERAL, text, line, column)

        if char == "'":
            return self._scan_quote_token(line, column, line_start)

        for punct in self.MULTI_CHAR_PUNCT:
            if self.source.startswith(punct, self._pos):
                for _ in punct:
                    self._advance()
                return self._make_token(TokenType.PUNCT, punct, line, column)

        if char in self.SINGLE_CHAR_PUNCT:
            self._advance()
            return self._make_token(TokenType.PUNCT, char, line, column)

        raise InvalidCharacterError(
            char,
            SourceLocation(self.filename, line, column),
            self._current_line_text(line_start),
        )

    def _scan_ident_chars(self) -> str:
        start = self._pos
        while not self._at_end() and (
            self._peek() in self.IDENT_CHARS or (self._peek().isalnum() and not self._peek().isascii())
        ):
            self._advance()
        return self.source[start:self._pos]

    def _scan_number(self) -> str:
        """Scan an integer or float literal, including suffixes (1_000u32, 2.5f64)."""
        start = self._pos
        while self._peek().isalnum() or self._peek() == "_":
            self._advance()
        # Fraction only when a digit follows the dot, so 1..2 stays a range
        if self._peek() == "." and self._peek(1).isdigit():
            self._advance()
            while self._peek().isalnum() or self._peek() == "_":
                self._advance()
        return self.source[start:self._pos]

    def _scan_quoted(self, quote: str, line: int, column: int, line_start: int) -> str:
        """Scan a string or char literal with escapes; returns the text with quotes."""
        start = self._pos
        self._advance()

        while True:
            if self._at_end():
                kind = "string" if quote == '"' else "character"
                raise self._error(
                    f"unterminated {kind} literal", line, column, line_start,
                    hint=f"add closing {quote} to complete the literal",
                )
            char = self._advance()
            if char == "\\":
                self._advance()
            elif char == quote:
                break

        return self.source[start:self._pos]

    def _scan_raw_string(self, line: int, column: int, line_start: int) -> str:
        """Scan #*"..."#* after the r prefix."""
        start = self._pos
        hashes = 0
        while self._peek() == "#":
            self._advance()
            hashes += 1

        if self._peek() != '"':
            raise self._error("malformed raw string literal", line, column, line_start)
        self._advance()

        terminator = '"' + "#" * hashes
        while not self.source.startswith(terminator, self._pos):
            if self._at_end():
                raise self._error(
                    "unterminated raw string literal", line, column, line_start,
                    hint=f"add closing {terminator}",
                )
            self._advance()

        for _ in terminator:
            self._advance()
        return self.source[start:self._pos]

    def _scan_quote_token(self, line: int, column: int, line_start: int) -> RustToken:
        # 'x' and '\n' are characters; 'a and 'static are lifetimes
        if self._peek(1) == "\\" or (self._peek(1) and self._peek(2) == "'"):
            text = self._scan_quoted("'", line, column, line_start)
            return self._make_token(TokenType.LITERAL, text, line, column)

        if self._peek_in(1, self.IDENT_START):
            self._advance()
            return self._make_token(TokenType.LIFETIME, "'" + self._scan_ident_chars(), line, column)

        raise self._error("invalid lifetime or character literal", line, column, line_start)
