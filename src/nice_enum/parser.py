"""
Rust Item Declaration Parser
============================

This module parses the top-level item declarations of a Rust source file
into TypeDecl nodes. Only `enum`, `struct` and `union` items are turned into
nodes; every other item (fn, impl, mod, use, trait, const, macro_rules!, ...)
is skipped by balanced-delimiter scanning.

Grammar (subset)
----------------
item            ::= outer_attr* visibility? (enum_item | struct_item | union_item | other)
outer_attr      ::= '#' '[' path ('(' tokens ')' | '=' tokens)? ']'
visibility      ::= 'pub' ('(' ('crate' | 'super' | 'self' | 'in' path) ')')?
enum_item       ::= 'enum' IDENT generics? where_clause? '{' variants '}'
variant         ::= outer_attr* visibility? IDENT variant_fields? ('=' expr)? ','?
variant_fields  ::= '{' named_fields '}' | '(' tuple_fields ')'
struct_item     ::= 'struct' IDENT generics?
                    ( where_clause? '{' named_fields '}'
                    | '(' tuple_fields ')' where_clause? ';'
                    | where_clause? ';' )
union_item      ::= 'union' IDENT generics? where_clause? '{' named_fields '}'
generics        ::= '<' generic_param (',' generic_param)* ','? '>'
generic_param   ::= LIFETIME (':' bounds)?
                  | 'const' IDENT ':' type ('=' tokens)?
                  | IDENT (':' bounds)? ('=' type)?
where_clause    ::= 'where' predicate (',' predicate)* ','?

Types are not parsed into a tree. The parser collects the tokens of a type
up to the next top-level ',' (or closing delimiter) and renders them as
normalized text, e.g. `Vec < Option<T> >` becomes `Vec<Option<T>>`.

Usage
-----
>>> from nice_enum.parser import parse_items
>>> decls = parse_items("#[derive(NiceEnum)] pub enum A { B, C(u8) }")
>>> decls[0].name, [v.name for v in decls[0].variants]
('A', ['B', 'C'])
"""

from typing import Optional

from nice_enum.errors import (
    ErrorCollector,
    MissingTokenError,
    RustSyntaxError,
    UnexpectedTokenError,
)
from nice_enum.lexer import RustLexer, RustToken, TokenType
from nice_enum.schema import (
    Attribute,
    Field,
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


OPENERS = {"(": ")", "[": "]", "{": "}", "<": ">"}
CLOSERS = {")", "]", "}", ">"}

# Keywords that start a top-level item; used to resynchronize after an error
ITEM_KEYWORDS = {
    "pub", "enum", "struct", "fn", "impl", "trait", "mod", "use", "const",
    "static", "type", "union", "extern", "macro_rules", "unsafe", "async",
}


# =============================================================================
# Token Rendering
# =============================================================================

_NO_SPACE_AFTER = {"<", "(", "[", "&", "&&", "*", "::", "#", "!", "?"}
_NO_SPACE_BEFORE = {",", ";", ">", ")", "]", "::", ":"}


def render_tokens(tokens: list[RustToken]) -> str:
    """
    Render a token run as normalized source text.

    Examples:
        Vec < Option < T > >      → Vec<Option<T>>
        & 'a mut [ u8 ; 4 ]       → &'a mut [u8; 4]
        Box < dyn Fn ( u8 ) -> u8 > → Box<dyn Fn(u8) -> u8>
    """
    parts: list[str] = []
    prev: Optional[RustToken] = None

    for token in tokens:
        if prev is not None and _needs_space(prev, token):
            parts.append(" ")
        parts.append(token.value)
        prev = token

    return "".join(parts)


def _needs_space(prev: RustToken, token: RustToken) -> bool:
    if prev.type == TokenType.PUNCT and prev.value in _NO_SPACE_AFTER:
        return False
    if token.type == TokenType.PUNCT:
        if token.value in _NO_SPACE_BEFORE:
            return False
        # Generic and call openers hug the preceding name: Vec<T>, Fn(u8)
        if token.value in ("<", "(", "[") and (
            prev.type == TokenType.IDENT or prev.is_punct(">")
        ):
            return prev.is_keyword("dyn", "impl", "as", "where", "mut", "const")
    return True


# =============================================================================
# Parser
# =============================================================================

class RustParser:
    """
    Recursive descent parser for Rust item declarations.

    The parser recovers from errors at the next top-level item, so all
    broken declarations in a file are reported together.

    Attributes:
        tokens: List of tokens to parse
        filename: Source filename for error reporting
    """

    def __init__(
        self,
        tokens: list[RustToken],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer
            filename: Source filename for error messages
            source_lines: Original source lines for error context
        """
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []

        self._pos = 0
        self._errors = ErrorCollector()

    def parse(self) -> list[TypeDecl]:
        """
        Parse every item in the token stream.

        Returns:
            Enum, struct and union declarations in source order

        Raises:
            RustSyntaxError: The single syntax error, if there was one
            GenerationError: Aggregate report if there were several
        """
        decls: list[TypeDecl] = []

        while not self._at_end():
            try:
                decl = self._parse_item()
                if decl is not None:
                    decls.append(decl)
            except RustSyntaxError as e:
                self._errors.add(e)
                self._synchronize()

        if len(self._errors.errors) == 1:
            raise self._errors.errors[0]
        self._errors.raise_if_errors()

        return decls

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self, offset: int = 0) -> RustToken:
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _advance(self) -> RustToken:
        if not self._at_end():
            token = self.tokens[self._pos]
            self._pos += 1
            return token
        return self.tokens[-1]

    def _check_punct(self, *values: str) -> bool:
        return self._peek().is_punct(*values)

    def _check_keyword(self, *values: str) -> bool:
        return self._peek().is_keyword(*values)

    def _match_punct(self, *values: str) -> Optional[RustToken]:
        if self._check_punct(*values):
            return self._advance()
        return None

    def _expect_punct(self, value: str) -> RustToken:
        if self._check_punct(value):
            return self._advance()
        current = self._peek()
        raise MissingTokenError(
            value,
            current.location,
            self._get_source_line(current.line),
        )

    def _expect_ident(self, what: str) -> RustToken:
        if self._peek().type == TokenType.IDENT:
            return self._advance()
        raise self._unexpected(what)

    def _unexpected(self, expected: str) -> UnexpectedTokenError:
        current = self._peek()
        found = current.value if current.value is not None else "end of file"
        return UnexpectedTokenError(
            found,
            expected,
            current.location,
            self._get_source_line(current.line),
        )

    def _get_source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    def _ident(self, token: RustToken) -> Ident:
        return Ident(token.value, token.location)

    def _synchronize(self) -> None:
        """
        Skip to the start of the next top-level item.

        Top-level items start at column 1 in conventionally formatted
        source, which is the only reliable anchor once the parser has lost
        track of delimiter depth.
        """
        self._advance()
        while not self._at_end():
            token = self._peek()
            if token.column == 1 and (token.is_punct("#") or token.is_keyword(*ITEM_KEYWORDS)):
                return
            self._advance()

    # =========================================================================
    # Token Collection
    # =========================================================================

    def _collect_until(self, stops: set[str], angle: bool = True) -> list[RustToken]:
        """
        Collect tokens up to a stop punctuation at nesting depth zero.

        Args:
            stops: Punctuation values that end the run at depth zero
            angle: Track <> as brackets (types) or not (expressions)

        Raises:
            MissingTokenError: If the input ends first
        """
        collected: list[RustToken] = []
        depth: list[str] = []

        while True:
            token = self._peek()
            if token.type == TokenType.EOF:
                expected = depth[-1] if depth else sorted(stops)[0]
                raise MissingTokenError(expected, token.location, self._get_source_line(token.line))

            if token.type == TokenType.PUNCT:
                value = token.value
                if not depth and value in stops:
                    return collected
                if value in OPENERS and (angle or value != "<"):
                    depth.append(OPENERS[value])
                elif value in CLOSERS and (angle or value != ">"):
                    if not depth:
                        # An unmatched closer belongs to the enclosing construct
                        return collected
                    if depth[-1] != value:
                        raise UnexpectedTokenError(
                            value, f"'{depth[-1]}'", token.location,
                            self._get_source_line(token.line),
                        )
                    depth.pop()

            collected.append(self._advance())

    def _collect_text(self, stops: set[str], what: str, angle: bool = True) -> str:
        tokens = self._collect_until(stops, angle)
        if not tokens:
            raise self._unexpected(what)
        return render_tokens(tokens)

    def _skip_balanced(self) -> None:
        """Consume one delimited group starting at the current opener."""
        opener = self._advance()
        closer = OPENERS[opener.value]
        self._collect_until({closer}, angle=False)
        self._expect_punct(closer)

    # =========================================================================
    # Items
    # =========================================================================

    def _parse_item(self) -> Optional[TypeDecl]:
        """Parse one item; returns None for items that are skipped."""
        if self._check_punct("#") and self._peek(1).is_punct("!"):
            # Inner attribute: #![...]
            self._advance()
            self._advance()
            self._skip_balanced()
            return None

        attributes = self._parse_outer_attributes()
        visibility = self._parse_visibility()

        if self._check_keyword("enum"):
            self._advance()
            return self._parse_enum(attributes, visibility)

        if self._check_keyword("struct"):
            self._advance()
            return self._parse_struct(attributes, visibility)

        # `union` is a contextual keyword: only an item when a name follows
        if self._check_keyword("union") and self._peek(1).type == TokenType.IDENT:
            self._advance()
            return self._parse_union(attributes, visibility)

        self._skip_item()
        return None

    def _skip_item(self) -> None:
        """Skip an item this parser has no use for: up to ';' or a closing '}'."""
        if self._at_end():
            return
        while not self._at_end():
            if self._check_punct(";"):
                self._advance()
                return
            if self._check_punct("{"):
                self._skip_balanced()
                # `macro_rules! m { } ` and `impl X { }` end at the brace
                self._match_punct(";")
                return
            if self._check_punct("(", "["):
                self._skip_balanced()
                continue
            if self._check_punct("}", ")", "]"):
                raise self._unexpected("an item")
            self._advance()

    def _parse_outer_attributes(self) -> tuple[Attribute, ...]:
        attributes = []
        while self._check_punct("#") and self._peek(1).is_punct("["):
            self._advance()
            self._advance()
            attributes.append(self._parse_attribute_body())
            self._expect_punct("]")
        return tuple(attributes)

    def _parse_attribute_body(self) -> Attribute:
        path = render_tokens(self._collect_until({"(", "=", "]", "[", "{"}))
        if not path:
            raise self._unexpected("an attribute path")

        if self._match_punct("("):
            args = render_tokens(self._collect_until({")"}, angle=False))
            self._expect_punct(")")
            return Attribute(path, args)

        if self._match_punct("="):
            return Attribute(path, render_tokens(self._collect_until({"]"}, angle=False)))

        if self._check_punct("[", "{"):
            opener = self._advance()
            args = render_tokens(self._collect_until({OPENERS[opener.value]}, angle=False))
            self._expect_punct(OPENERS[opener.value])
            return Attribute(path, args)

        return Attribute(path)

    def _parse_visibility(self) -> Visibility:
        if not self._check_keyword("pub"):
            if self._check_keyword("crate") and not self._peek(1).is_punct("::"):
                self._advance()
                return Visibility("crate")
            return Visibility()

        self._advance()
        if not self._check_punct("("):
            return Visibility("pub")

        # pub(crate), pub(super), pub(self), pub(in path); anything else is a
        # parenthesized tuple field type such as `pub (u8, u8)`
        inner = self._peek(1)
        if inner.is_keyword("crate", "super", "self") and self._peek(2).is_punct(")"):
            self._advance()
            self._advance()
            self._advance()
            return Visibility(f"pub({inner.value})")
        if inner.is_keyword("in"):
            self._advance()
            self._advance()
            path = self._collect_text({")"}, "a module path")
            self._expect_punct(")")
            return Visibility(f"pub(in {path})")

        return Visibility("pub")

    # =========================================================================
    # Generics
    # =========================================================================

    def _parse_generics(self) -> tuple[GenericParam, ...]:
        if not self._match_punct("<"):
            return ()

        params = []
        while not self._check_punct(">"):
            self._parse_outer_attributes()
            params.append(self._parse_generic_param())
            if not self._match_punct(","):
                break
        self._expect_punct(">")
        return tuple(params)

    def _parse_generic_param(self) -> GenericParam:
        token = self._peek()

        if token.type == TokenType.LIFETIME:
            self._advance()
            bounds = self._parse_bounds() if self._match_punct(":") else ()
            return GenericParam(token.value, GenericKind.LIFETIME, bounds)

        if token.is_keyword("const"):
            self._advance()
            name = self._expect_ident("a const parameter name")
            self._expect_punct(":")
            const_type = self._collect_text({",", ">", "="}, "a const parameter type")
            default = None
            if self._match_punct("="):
                default = self._parse_const_default()
            return GenericParam(name.value, GenericKind.CONST, (), default, const_type)

        name = self._expect_ident("a generic parameter")
        bounds = self._parse_bounds() if self._match_punct(":") else ()
        default = None
        if self._match_punct("="):
            default = self._collect_text({",", ">"}, "a default type")
        return GenericParam(name.value, GenericKind.TYPE, bounds, default)

    def _parse_const_default(self) -> str:
        # `{ N + 1 }` blocks may contain '>' so take them whole
        if self._check_punct("{"):
            start = self._pos
            self._skip_balanced()
            return render_tokens(self.tokens[start:self._pos])
        return self._collect_text({",", ">"}, "a const default")

    def _parse_bounds(self) -> tuple[str, ...]:
        """Parse `A + B<C> + 'a` up to ',' '>' '=' or '{' at depth zero."""
        tokens = self._collect_until({",", ">", "=", "{", ";"})
        bounds: list[str] = []
        current: list[RustToken] = []
        depth = 0

        for token in tokens:
            if token.type == TokenType.PUNCT:
                if token.value in OPENERS:
                    depth += 1
                elif token.value in CLOSERS:
                    depth -= 1
                elif token.value == "+" and depth == 0:
                    if current:
                        bounds.append(render_tokens(current))
                    current = []
                    continue
            current.append(token)

        if current:
            bounds.append(render_tokens(current))
        return tuple(bounds)

    def _parse_where_clause(self) -> tuple[str, ...]:
        if not self._check_keyword("where"):
            return ()
        self._advance()

        predicates = []
        while not self._check_punct("{", ";") and not self._at_end():
            predicates.append(self._collect_text({",", "{", ";"}, "a where predicate"))
            if not self._match_punct(","):
                break
        return tuple(predicates)

    # =========================================================================
    # Fields
    # =========================================================================

    def _parse_named_fields(self) -> tuple[Field, ...]:
        """Parse `{ a: T, pub b: U }` after the opening brace."""
        fields = []
        while not self._check_punct("}"):
            self._parse_outer_attributes()
            self._parse_visibility()
            name = self._expect_ident("a field name")
            self._expect_punct(":")
            ty = self._collect_text({",", "}"}, "a field type")
            fields.append(Field(ty, name.value))
            if not self._match_punct(","):
                break
        self._expect_punct("}")
        return tuple(fields)

    def _parse_tuple_fields(self) -> tuple[Field, ...]:
        """Parse `(T, pub U)` after the opening parenthesis."""
        fields = []
        while not self._check_punct(")"):
            self._parse_outer_attributes()
            self._parse_visibility()
            ty = self._collect_text({",", ")"}, "a field type")
            fields.append(Field(ty))
            if not self._match_punct(","):
                break
        self._expect_punct(")")
        return tuple(fields)

    # =========================================================================
    # Enums, Structs and Unions
    # =========================================================================

    def _parse_enum(
        self,
        attributes: tuple[Attribute, ...],
        visibility: Visibility,
    ) -> SumTypeDecl:
        name = self._expect_ident("an enum name")
        params = self._parse_generics()
        where = self._parse_where_clause()
        self._expect_punct("{")

        variants = []
        while not self._check_punct("}"):
            variants.append(self._parse_variant())
            if not self._match_punct(","):
                break
        self._expect_punct("}")

        return SumTypeDecl(
            ident=self._ident(name),
            visibility=visibility,
            generics=Generics(params, where),
            attributes=attributes,
            variants=tuple(variants),
        )

    def _parse_variant(self) -> VariantDecl:
        self._parse_outer_attributes()
        self._parse_visibility()
        name = self._expect_ident("a variant name")

        if self._match_punct("{"):
            fields_kind, fields = FieldsKind.NAMED, self._parse_named_fields()
        elif self._match_punct("("):
            fields_kind, fields = FieldsKind.UNNAMED, self._parse_tuple_fields()
        else:
            fields_kind, fields = FieldsKind.UNIT, ()

        discriminant = None
        if self._match_punct("="):
            discriminant = self._collect_text({",", "}"}, "a discriminant", angle=False)

        return VariantDecl(self._ident(name), fields_kind, fields, discriminant)

    def _parse_struct(
        self,
        attributes: tuple[Attribute, ...],
        visibility: Visibility,
    ) -> ProductTypeDecl:
        name = self._expect_ident("a struct name")
        params = self._parse_generics()

        if self._match_punct("("):
            fields_kind, fields = FieldsKind.UNNAMED, self._parse_tuple_fields()
            where = self._parse_where_clause()
            self._expect_punct(";")
        else:
            where = self._parse_where_clause()
            if self._match_punct(";"):
                fields_kind, fields = FieldsKind.UNIT, ()
            elif self._match_punct("{"):
                fields_kind, fields = FieldsKind.NAMED, self._parse_named_fields()
            else:
                raise self._unexpected("'{', '(' or ';'")

        return ProductTypeDecl(
            ident=self._ident(name),
            visibility=visibility,
            generics=Generics(params, where),
            attributes=attributes,
            fields_kind=fields_kind,
            fields=fields,
        )

    def _parse_union(
        self,
        attributes: tuple[Attribute, ...],
        visibility: Visibility,
    ) -> UnionTypeDecl:
        name = self._expect_ident("a union name")
        params = self._parse_generics()
        where = self._parse_where_clause()
        self._expect_punct("{")
        fields = self._parse_named_fields()

        return UnionTypeDecl(
            ident=self._ident(name),
            visibility=visibility,
            generics=Generics(params, where),
            attributes=attributes,
            fields=fields,
        )


# =============================================================================
# Convenience Function
# =============================================================================

def parse_items(source: str, filename: str = "<input>") -> list[TypeDecl]:
    """
    Tokenize and parse Rust source into enum, struct and union declarations.

    Args:
        source: Rust source text
        filename: Name used in error messages

    Returns:
        Declarations in source order
    """
    tokens = list(RustLexer(source, filename).tokenize())
    return RustParser(tokens, filename, source.splitlines()).parse()
