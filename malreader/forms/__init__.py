"""
malreader.forms - Form types and the printer

Modules:
- types.py: Symbol, Keyword, VectorLiteral, MapLiteral and reader macro heads
- printer.py: pr_str() and format_form()
"""

from malreader.forms.printer import format_form, pr_str
from malreader.forms.types import (
    DEREF,
    QUASIQUOTE,
    QUOTE,
    READER_MACRO_HEADS,
    SPLICE_UNQUOTE,
    UNQUOTE,
    WITH_META,
    Keyword,
    MapLiteral,
    Symbol,
    VectorLiteral,
    same_form,
)

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
    "pr_str",
    "format_form",
]
