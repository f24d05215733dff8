"""
malreader.reader.reader - Reader for mal source code

This module turns source text into forms (S-expressions with source
location tracking).

Components:
- SourceLocation: Holds line/column information for error messages
- SourceList: A list that carries source location information
- ParseError: Raised when the input does not match the grammar
- Reader: Converts source text to forms
- read_str(): Convenience function to read a source string to forms

Grammar, as an ordered choice tried at every form position after
whitespace, commas and ; comments have been skipped:

    form     = "^" form form          ; (with-meta target meta)
             | "~@" form              ; (splice-unquote form)
             | "'" form               ; (quote form)
             | "`" form               ; (quasiquote form)
             | "~" form               ; (unquote form)
             | "@" form               ; (deref form)
             | "(" form* ")"
             | "[" form* "]"
             | "{" form* "}"
             | ":" symbol-char+       ; keyword
             | "-"? digit+            ; number
             | '"' string-char* '"'
             | ("true" | "false") !symbol-char
             | "nil" !symbol-char
             | symbol-char+

Compound forms and reader macros are read with an explicit stack of open
frames instead of recursion, so deeply nested input cannot exhaust the
Python call stack.
"""

import bisect
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from malreader.forms.types import (
    DEREF,
    QUASIQUOTE,
    QUOTE,
    SPLICE_UNQUOTE,
    UNQUOTE,
    WITH_META,
    Keyword,
    MapLiteral,
    Symbol,
    VectorLiteral,
)
from malreader.reader.escapes import (
    HEX_DIGITS,
    SIMPLE_ESCAPES,
    UNICODE_DIGITS,
    UNICODE_ESCAPE,
    unescape_string,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Lexical Rules
# =============================================================================

# Skipped between tokens; commas count as whitespace
WHITESPACE = " \t\r\n,"
COMMENT_START = ";"

# Characters that can never appear inside a symbol
RESERVED = "()[]{}'`~^@\":"

_SYMBOL_CHAR = r"[^ \t\r\n,;()\[\]{}'`~^@\":]"

SYMBOL_RE = re.compile(_SYMBOL_CHAR + "+")
KEYWORD_RE = re.compile(":(" + _SYMBOL_CHAR + "+)")
NUMBER_RE = re.compile(r"-?[0-9]+")
BOOLEAN_RE = re.compile(r"(?:true|false)(?!" + _SYMBOL_CHAR + ")")
NIL_RE = re.compile(r"nil(?!" + _SYMBOL_CHAR + ")")
SKIP_RE = re.compile(r"(?:[ \t\r\n,]+|;[^\r\n]*)*")

# Reader macros in priority order: (prefix, head symbol, forms consumed)
READER_MACROS = (
    ("^", WITH_META, 2),
    ("~@", SPLICE_UNQUOTE, 1),
    ("'", QUOTE, 1),
    ("`", QUASIQUOTE, 1),
    ("~", UNQUOTE, 1),
    ("@", DEREF, 1),
)

# Opening delimiter -> (closing delimiter, kind)
COLLECTIONS = {
    "(": (")", "list"),
    "[": ("]", "vector"),
    "{": ("}", "map"),
}

# Names used in ParseError.expected
EXPECT_FORM = "form"
EXPECT_EOF = "end of input"
EXPECT_ESCAPE = "escape sequence"
EXPECT_HEX = "hex digit"
EXPECT_QUOTE = "'\"'"

# Returned by scalar alternatives that do not match at the cursor
_NO_MATCH = object()


# =============================================================================
# Source Location Tracking
# =============================================================================


@dataclass
class SourceLocation:
    """Holds source location information for debugging and error messages."""

    line: int = 0  # 1-based line number
    col: int = 0  # 0-based column offset
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return f"SourceLocation({self.line}:{self.col})"


class SourceList(list):
    """A list subclass that carries source location information.

    Used to represent parenthesized lists, and the lists reader macros
    expand to, while preserving source location for error messages.
    """

    __slots__ = ("line", "col", "end_line", "end_col")

    def __init__(self, items=None, line=0, col=0, end_line=0, end_col=0):
        super().__init__(items if items is not None else [])
        self.line = line
        self.col = col
        self.end_line = end_line
        self.end_col = end_col

    def get_location(self) -> SourceLocation:
        return SourceLocation(self.line, self.col, self.end_line, self.end_col)


def get_source_location(form) -> Optional[SourceLocation]:
    """Extract source location from a form if available."""
    if isinstance(form, SourceList):
        return form.get_location()
    if hasattr(form, "line") and hasattr(form, "col"):
        end_line = getattr(form, "end_line", form.line)
        end_col = getattr(form, "end_col", form.col)
        return SourceLocation(form.line, form.col, end_line, end_col)
    return None


# =============================================================================
# Errors
# =============================================================================


class ParseError(SyntaxError):
    """
    Raised when the source text does not match the grammar.

    Attributes:
        pos: 0-based offset of the failure in the source
        line: 1-based line of the failure
        col: 0-based column of the failure
        expected: Sorted names of the alternatives expected at ``pos``
        source: The full source text that was being read
    """

    def __init__(
        self,
        source: str,
        pos: int,
        expected,
        line: int,
        col: int,
        filename: str = "<input>",
    ):
        self.source = source
        self.pos = pos
        self.line = line
        self.col = col
        self.expected = tuple(sorted(expected))
        if pos >= len(source):
            found = "end of input"
        else:
            found = repr(source[pos])
        message = (
            f"expected {' or '.join(self.expected)}, found {found} "
            f"at line {line}, column {col}"
        )
        line_start = source.rfind("\n", 0, pos) + 1
        line_end = source.find("\n", pos)
        text = source[line_start : line_end if line_end != -1 else len(source)]
        super().__init__(message, (filename, line, col + 1, text))

    def __reduce__(self):
        return (
            self.__class__,
            (self.source, self.pos, self.expected, self.line, self.col, self.filename),
        )

    @property
    def incomplete(self) -> bool:
        """True if more input could still make the source readable."""
        return self.pos >= len(self.source)


# =============================================================================
# Reader
# =============================================================================


@dataclass
class _Frame:
    """An open compound form or reader macro waiting for its children."""

    kind: str  # "list", "vector", "map", or a reader macro head
    start: int
    closer: Optional[str] = None  # set for collections
    arity: int = 0  # set for reader macros
    items: list[Any] = field(default_factory=list)


class Reader:
    """
    Reader that parses source text into forms with source location tracking.

    A Reader owns its cursor; use one instance per input.
    """

    def __init__(self, src: str, filename: str = "<input>"):
        self.src = src
        self.filename = filename
        self.i = 0
        self._line_starts = [0]
        for m in re.finditer("\n", src):
            self._line_starts.append(m.end())
        self._fail_pos = -1
        self._fail_expected: set[str] = set()

    def eof(self) -> bool:
        return self.i >= len(self.src)

    def peek(self, offset: int = 0) -> str:
        """Return the character at the cursor (plus offset), or "" past the end."""
        return self.src[self.i + offset : self.i + offset + 1]

    def location(self, pos: int) -> tuple[int, int]:
        """Return the (1-based line, 0-based column) of an offset."""
        index = bisect.bisect_right(self._line_starts, pos) - 1
        return index + 1, pos - self._line_starts[index]

    # -------------------------------------------------------------------------
    # Top-level driver
    # -------------------------------------------------------------------------

    def read(self) -> list[Any]:
        """Read all forms from the source."""
        return list(self.iter_forms())

    def read_form(self) -> Any:
        """Read the next top-level form.

        Raises:
            ParseError: At end of input, or if the next form is malformed.
        """
        for form in self.iter_forms():
            return form
        self._reset_failure()
        self._expect(self.i, EXPECT_FORM)
        raise self._error()

    def iter_forms(self) -> Iterator[Any]:
        """Yield top-level forms one at a time until the input is exhausted."""
        stack: list[_Frame] = []
        while True:
            self.skip()
            frame = stack[-1] if stack else None
            if self.eof():
                if frame is None:
                    return
                self._fail_in_frame(frame)
            if frame is not None and frame.closer is not None and self.peek() == frame.closer:
                self.i += 1
                stack.pop()
                form = self._close(frame)
            else:
                opened = self._open()
                if opened is not None:
                    stack.append(opened)
                    continue
                form = self._read_scalar(frame)
            form = self._deliver(stack, form)
            if form is not _NO_MATCH:
                logger.debug("read %s ending at offset %d", type(form).__name__, self.i)
                yield form

    def _deliver(self, stack: list[_Frame], form):
        """Hand a finished form to the innermost open frame.

        Reader macros complete as soon as they have their forms, which may
        complete enclosing reader macros in turn. Returns the form when it
        ends up at the top level, _NO_MATCH otherwise.
        """
        while stack:
            frame = stack[-1]
            frame.items.append(form)
            if frame.closer is not None or len(frame.items) < frame.arity:
                return _NO_MATCH
            stack.pop()
            form = self._close(frame)
        return form

    # -------------------------------------------------------------------------
    # Skip layer
    # -------------------------------------------------------------------------

    def skip(self):
        """Skip whitespace, commas and ; comments. Never fails."""
        self.i = SKIP_RE.match(self.src, self.i).end()

    # -------------------------------------------------------------------------
    # Compound forms
    # -------------------------------------------------------------------------

    def _open(self) -> Optional[_Frame]:
        """Try the reader macro and collection alternatives at the cursor."""
        start = self.i
        for prefix, head, arity in READER_MACROS:
            if self.src.startswith(prefix, start):
                self.i += len(prefix)
                return _Frame(head, start, arity=arity)
        ch = self.peek()
        if ch in COLLECTIONS:
            closer, kind = COLLECTIONS[ch]
            self.i += 1
            return _Frame(kind, start, closer=closer)
        return None

    def _close(self, frame: _Frame):
        """Build the form for a frame whose children are all read."""
        line, col = self.location(frame.start)
        end_line, end_col = self.location(self.i)
        if frame.kind == "list":
            return SourceList(frame.items, line, col, end_line, end_col)
        if frame.kind == "vector":
            return VectorLiteral(frame.items, line, col, end_line, end_col)
        if frame.kind == "map":
            return MapLiteral(frame.items, line, col, end_line, end_col)
        prefix_end = col + (2 if frame.kind == SPLICE_UNQUOTE else 1)
        head = Symbol(frame.kind, line, col, line, prefix_end)
        if frame.kind == WITH_META:
            meta, target = frame.items
            items = [head, target, meta]
        else:
            items = [head] + frame.items
        return SourceList(items, line, col, end_line, end_col)

    def _fail_in_frame(self, frame: _Frame):
        self._reset_failure()
        if frame.closer is not None:
            self._expect(self.i, repr(frame.closer))
        self._expect(self.i, EXPECT_FORM)
        raise self._error()

    # -------------------------------------------------------------------------
    # Scalars
    # -------------------------------------------------------------------------

    def _read_scalar(self, frame: Optional[_Frame]):
        """Try the scalar alternatives in order; raise if none matches."""
        self._reset_failure()
        for alternative in (
            self._read_keyword,
            self._read_number,
            self._read_string,
            self._read_boolean,
            self._read_nil,
            self._read_symbol,
        ):
            value = alternative()
            if value is not _NO_MATCH:
                return value
        if frame is None:
            self._expect(self.i, EXPECT_EOF)
        elif frame.closer is not None:
            self._expect(self.i, repr(frame.closer))
        self._expect(self.i, EXPECT_FORM)
        raise self._error()

    def _read_keyword(self):
        m = KEYWORD_RE.match(self.src, self.i)
        if m is None:
            return _NO_MATCH
        line, col = self.location(self.i)
        self.i = m.end()
        return Keyword(m.group(1), line, col, line, col + len(m.group()))

    def _read_number(self):
        m = NUMBER_RE.match(self.src, self.i)
        if m is None:
            return _NO_MATCH
        self.i = m.end()
        return int(m.group())

    def _read_boolean(self):
        m = BOOLEAN_RE.match(self.src, self.i)
        if m is None:
            return _NO_MATCH
        self.i = m.end()
        return m.group() == "true"

    def _read_nil(self):
        m = NIL_RE.match(self.src, self.i)
        if m is None:
            return _NO_MATCH
        self.i = m.end()
        return None

    def _read_symbol(self):
        # true, false and nil never get here: their alternatives come first
        m = SYMBOL_RE.match(self.src, self.i)
        if m is None:
            return _NO_MATCH
        line, col = self.location(self.i)
        self.i = m.end()
        return Symbol(m.group(), line, col, line, col + len(m.group()))

    def _read_string(self):
        """Match a string literal, validating its escapes, and decode it."""
        src = self.src
        n = len(src)
        if self.peek() != '"':
            return _NO_MATCH
        j = self.i + 1
        while True:
            if j >= n:
                self._expect(j, EXPECT_QUOTE)
                return _NO_MATCH
            c = src[j]
            if c == '"':
                break
            if c != "\\":
                j += 1
                continue
            esc = src[j + 1 : j + 2]
            if esc in SIMPLE_ESCAPES:
                j += 2
            elif esc == UNICODE_ESCAPE:
                k = j + 2
                while k < j + 2 + UNICODE_DIGITS:
                    if k >= n or src[k] not in HEX_DIGITS:
                        self._expect(k, EXPECT_HEX)
                        return _NO_MATCH
                    k += 1
                j = k
            else:
                self._expect(j + 1, EXPECT_ESCAPE)
                return _NO_MATCH
        raw = src[self.i + 1 : j]
        self.i = j + 1
        return unescape_string(raw)

    # -------------------------------------------------------------------------
    # Failure tracking
    # -------------------------------------------------------------------------

    def _reset_failure(self):
        self._fail_pos = -1
        self._fail_expected = set()

    def _expect(self, pos: int, name: str):
        """Record that ``name`` was expected at ``pos``; the furthest position wins."""
        if pos > self._fail_pos:
            self._fail_pos = pos
            self._fail_expected = {name}
        elif pos == self._fail_pos:
            self._fail_expected.add(name)

    def _error(self) -> ParseError:
        line, col = self.location(self._fail_pos)
        error = ParseError(
            self.src,
            self._fail_pos,
            self._fail_expected,
            line,
            col,
            self.filename,
        )
        logger.debug("parse error in %s: %s", self.filename, error.msg)
        return error


# =============================================================================
# Convenience Functions
# =============================================================================


def read_str(src: str, filename: str = "<input>") -> list[Any]:
    """Read every top-level form in ``src``."""
    return Reader(src, filename).read()


__all__ = [
    # Source location
    "SourceLocation",
    "SourceList",
    "get_source_location",
    # Errors
    "ParseError",
    # Reader
    "Reader",
    "read_str",
]
