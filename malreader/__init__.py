"""
malreader - A reader for mal, a Clojure-flavoured Lisp

Turns source text into forms for an evaluator to consume.

Packages:
1. forms: Form types and the printer (forms -> text)
2. reader: The reader (text -> forms) and string escapes
3. repl: A read-print REPL
"""

from malreader.forms.printer import format_form, pr_str
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
    same_form,
)
from malreader.reader.reader import (
    ParseError,
    Reader,
    SourceList,
    SourceLocation,
    get_source_location,
    read_str,
)

__version__ = "0.1.0"

__all__ = [
    "read_str",
    "Reader",
    "ParseError",
    "SourceList",
    "SourceLocation",
    "get_source_location",
    "pr_str",
    "format_form",
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
]
