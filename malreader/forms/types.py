"""
malreader.forms.types - Form node types produced by the reader

This module contains the node types the reader builds and the printer
consumes:
- Symbol: Identifiers such as +, list?, my-var, ns/fn
- Keyword: :name atoms
- VectorLiteral: [...] syntax
- MapLiteral: {...} syntax, kept as a flat sequence of forms

Lists are SourceList instances (see malreader.reader.reader); numbers,
strings, booleans and nil are plain Python int, str, True/False and None.

Reader macros expand to lists whose head is one of the symbols named by
QUOTE, QUASIQUOTE, UNQUOTE, SPLICE_UNQUOTE, DEREF and WITH_META.
"""

from dataclasses import dataclass, field
from typing import Any

# Heads of the lists produced by reader macros
QUOTE = "quote"
QUASIQUOTE = "quasiquote"
UNQUOTE = "unquote"
SPLICE_UNQUOTE = "splice-unquote"
DEREF = "deref"
WITH_META = "with-meta"

READER_MACRO_HEADS = frozenset(
    [QUOTE, QUASIQUOTE, UNQUOTE, SPLICE_UNQUOTE, DEREF, WITH_META]
)


@dataclass(eq=False)
class Symbol:
    """
    Represents a symbolic identifier.

    Symbols compare equal by name only (source location is ignored),
    so forms read from different places can be compared directly.

    Attributes:
        name: The string name of the symbol
        line: Source line number (1-based)
        col: Source column number (0-based)
        end_line: Ending line number
        end_col: Ending column number
    """

    name: str
    line: int = 0
    col: int = 0
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return self.name

    def __eq__(self, other):
        if isinstance(other, Symbol):
            return self.name == other.name
        return False

    def __hash__(self):
        return hash(("Symbol", self.name))


@dataclass(eq=False)
class Keyword:
    """
    Keyword type - a symbol prefixed with a colon, e.g. :name.

    Keywords compare equal by name only and are hashable.

    Attributes:
        name: The string name of the keyword (without the leading colon)
        line: Source line number (1-based)
        col: Source column number (0-based)
        end_line: Ending line number
        end_col: Ending column number
    """

    name: str
    line: int = 0
    col: int = 0
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return f":{self.name}"

    def __str__(self):
        return f":{self.name}"

    def __eq__(self, other):
        if isinstance(other, Keyword):
            return self.name == other.name
        return False

    def __hash__(self):
        return hash(("Keyword", self.name))


@dataclass(eq=False)
class VectorLiteral:
    """
    AST node representing a vector literal [...] in source code.

    Attributes:
        items: List of elements in the vector
        line: Source line number
        col: Source column number
        end_line: Ending line number
        end_col: Ending column number
    """

    items: list[Any] = field(default_factory=list)
    line: int = 0
    col: int = 0
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return f"VectorLiteral({self.items!r})"

    def __eq__(self, other):
        if isinstance(other, VectorLiteral):
            return self.items == other.items
        return False

    __hash__ = None  # type: ignore[assignment]

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, index):
        return self.items[index]


@dataclass(eq=False)
class MapLiteral:
    """
    Represents a map literal {...} as the flat sequence of forms it contains.

    The reader does not pair keys with values: {:a 1 :b} is a valid
    MapLiteral with three items. Whether an odd count is an error is up
    to whoever consumes the form; pairs() is provided for that.

    Attributes:
        items: The forms between the braces, in source order
        line: Source line number
        col: Source column number
        end_line: Ending line number
        end_col: Ending column number
    """

    items: list[Any] = field(default_factory=list)
    line: int = 0
    col: int = 0
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return f"MapLiteral({self.items!r})"

    def __eq__(self, other):
        if isinstance(other, MapLiteral):
            return self.items == other.items
        return False

    __hash__ = None  # type: ignore[assignment]

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)

    def pairs(self) -> list[tuple[Any, Any]]:
        """Return the items as (key, value) tuples.

        Raises:
            ValueError: If the map holds an odd number of forms.
        """
        if len(self.items) % 2 != 0:
            raise ValueError(
                f"Map literal must have even number of forms at line {self.line}"
            )
        return [(self.items[i], self.items[i + 1]) for i in range(0, len(self.items), 2)]


def same_form(a: Any, b: Any) -> bool:
    """
    Strict structural equality of two forms.

    Unlike ==, this keeps True/False apart from 1/0 and never treats a
    list, a vector and a map with the same items as equal.
    """
    stack = [(a, b)]
    while stack:
        x, y = stack.pop()
        if type(x) is not type(y):
            # SourceList and plain list are the same variant
            if not (isinstance(x, list) and isinstance(y, list)):
                return False
        if isinstance(x, list):
            if len(x) != len(y):
                return False
            stack.extend(zip(x, y))
        elif isinstance(x, (VectorLiteral, MapLiteral)):
            if len(x.items) != len(y.items):
                return False
            stack.extend(zip(x.items, y.items))
        elif x != y:
            return False
    return True


__all__ = [
    "Symbol",
    "Keyword",
    "VectorLiteral",
    "MapLiteral",
    "same_form",
    "QUOTE",
    "QUASIQUOTE",
    "UNQUOTE",
    "SPLICE_UNQUOTE",
    "DEREF",
    "WITH_META",
    "READER_MACRO_HEADS",
]
