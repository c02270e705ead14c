"""
Name Derivation
===============

Every name the derive generates comes from this module: the kind type name,
the snake_case form of each variant, and the method names built from it.

Word Boundaries
---------------
to_snake_case() splits an identifier into words at:

| Boundary        | Example         | Words            |
|-----------------|-----------------|------------------|
| _ - whitespace  | Foo_Bar         | Foo, Bar         |
| lower → upper   | NamedFields     | Named, Fields    |
| acronym end     | HTTPServer      | HTTP, Server     |
| letter → digit  | Vec3            | Vec, 3           |
| digit → letter  | V4Addr          | V, 4, Addr       |

and joins the lowercased words with underscores.

Generated identifiers never carry source positions: names are plain strings
and become Ident values without a span.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from nice_enum.errors import NameCollisionError, SourceLocation


KIND_SUFFIX = "Kind"
KIND_METHOD = "kind"

_DELIMITERS = "_- \t\n"


# =============================================================================
# Case Conversion
# =============================================================================

def split_words(identifier: str) -> list[str]:
    """
    Split an identifier into words.

    Examples:
        >>> split_words("UnnamedFields")
        ['Unnamed', 'Fields']
        >>> split_words("HTTPServer2")
        ['HTTP', 'Server', '2']
    """
    if identifier.startswith("r#"):
        identifier = identifier[2:]

    words: list[str] = []
    current = ""

    for i, char in enumerate(identifier):
        if char in _DELIMITERS:
            if current:
                words.append(current)
            current = ""
            continue

        if current and _is_boundary(current[-1], char, identifier[i + 1:i + 2]):
            words.append(current)
            current = ""

        current += char

    if current:
        words.append(current)

    return words


def _is_boundary(prev: str, char: str, following: str) -> bool:
    """Return True if a new word starts at char."""
    if prev.islower() and char.isupper():
        return True
    # Acronym end: the last capital of a run starts the next word (HTTPServer)
    if prev.isupper() and char.isupper() and following.islower():
        return True
    if prev.isdigit() and char.isalpha():
        return True
    if prev.isalpha() and char.isdigit():
        return True
    return False


def to_snake_case(identifier: str) -> str:
    """
    Convert an identifier to snake_case.

    Examples:
        >>> to_snake_case("UnnamedFields")
        'unnamed_fields'
        >>> to_snake_case("Ipv4Addr")
        'ipv_4_addr'
    """
    return "_".join(word.lower() for word in split_words(identifier))


# =============================================================================
# Derived Names
# =============================================================================

@dataclass(frozen=True)
class AccessorNames:
    """Names of the three accessors of a single-field variant."""
    as_ref: str
    as_mut: str
    into: str

    def __iter__(self):
        return iter((self.as_ref, self.as_mut, self.into))


def kind_type_name(type_name: str) -> str:
    """Name of the kind type derived for type_name."""
    return f"{type_name}{KIND_SUFFIX}"


def predicate_name(snake: str) -> str:
    return f"is_{snake}"


def accessor_names(snake: str) -> AccessorNames:
    return AccessorNames(
        as_ref=f"as_{snake}",
        as_mut=f"as_{snake}_mut",
        into=f"into_{snake}",
    )


# =============================================================================
# Name Table
# =============================================================================

class NameTable:
    """
    Records which derived member owns each generated name.

    Collisions are fatal: claim() raises NameCollisionError naming both
    owners instead of letting one generated method shadow another.

    Example:
        table = NameTable(reserved=["len"])
        table.claim("kind", "the kind() method")
        table.claim("is_foo_bar", "variant 'FooBar'")
        table.claim("is_foo_bar", "variant 'Foo_Bar'")   # raises
    """

    def __init__(self, reserved: Iterable[str] = ()):
        """
        Initialize the table.

        Args:
            reserved: Names already defined on the source type
        """
        self._owners: dict[str, str] = {
            name: f"existing member '{name}'" for name in reserved
        }

    def claim(
        self,
        name: str,
        owner: str,
        location: Optional[SourceLocation] = None,
    ) -> str:
        """
        Claim a name for owner.

        Returns:
            The claimed name

        Raises:
            NameCollisionError: If the name is already taken
        """
        if name in self._owners:
            raise NameCollisionError(name, self._owners[name], owner, location)
        self._owners[name] = owner
        return name

    def owner_of(self, name: str) -> Optional[str]:
        return self._owners.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._owners

    def __len__(self) -> int:
        return len(self._owners)
