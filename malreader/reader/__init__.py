"""
malreader.reader - Source text to forms

Modules:
- reader.py: The Reader (skip layer, scalars, compound forms, driver)
- escapes.py: String literal escape decoding and encoding
"""

from malreader.reader.escapes import escape_string, unescape_string
from malreader.reader.reader import (
    ParseError,
    Reader,
    SourceList,
    SourceLocation,
    get_source_location,
    read_str,
)

__all__ = [
    "ParseError",
    "Reader",
    "SourceList",
    "SourceLocation",
    "get_source_location",
    "read_str",
    "escape_string",
    "unescape_string",
]
