"""
malreader.reader.escapes - String literal escape sequences

The reader only checks that a string literal is well formed; this module
turns the raw text between the quotes into the string it denotes.

Recognized escapes: \\" \\\\ \\/ \\b \\f \\n \\r \\t \\s (space) and \\uXXXX.
"""

# Escape character -> decoded text
SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "s": " ",
}

UNICODE_ESCAPE = "u"
UNICODE_DIGITS = 4
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def is_high_surrogate(code: int) -> bool:
    return 0xD800 <= code <= 0xDBFF


def is_low_surrogate(code: int) -> bool:
    return 0xDC00 <= code <= 0xDFFF


def unescape_string(raw: str) -> str:
    """
    Decode the escape sequences in the body of a string literal.

    ``raw`` is the text between the quotes exactly as it appeared in the
    source. A \\uXXXX escape naming a high surrogate that is directly
    followed by one naming a low surrogate decodes to a single code point.

    Raises:
        ValueError: If ``raw`` contains an escape the grammar does not allow.
    """
    buf = []
    i = 0
    n = len(raw)
    while i < n:
        c = raw[i]
        if c != "\\":
            buf.append(c)
            i += 1
            continue
        esc = raw[i + 1 : i + 2]
        if esc in SIMPLE_ESCAPES:
            buf.append(SIMPLE_ESCAPES[esc])
            i += 2
        elif esc == UNICODE_ESCAPE:
            code = _hex_value(raw, i + 2)
            i += 2 + UNICODE_DIGITS
            if is_high_surrogate(code) and raw[i : i + 2] == "\\u":
                try:
                    low = _hex_value(raw, i + 2)
                except ValueError:
                    low = -1
                if is_low_surrogate(low):
                    code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                    i += 2 + UNICODE_DIGITS
            buf.append(chr(code))
        else:
            raise ValueError(f"invalid escape sequence \\{esc} at offset {i}")
    return "".join(buf)


def _hex_value(raw: str, start: int) -> int:
    digits = raw[start : start + UNICODE_DIGITS]
    if len(digits) != UNICODE_DIGITS or not all(d in HEX_DIGITS for d in digits):
        raise ValueError(f"invalid unicode escape \\u{digits} at offset {start - 2}")
    return int(digits, 16)


def escape_string(s: str) -> str:
    """
    Escape a string so that reading the quoted result gives back ``s``.

    Control characters without a short escape are written as \\uXXXX.
    """
    buf = []
    for c in s:
        if c == "\\":
            buf.append("\\\\")
        elif c == '"':
            buf.append('\\"')
        elif c == "\n":
            buf.append("\\n")
        elif c == "\r":
            buf.append("\\r")
        elif c == "\t":
            buf.append("\\t")
        elif c == "\b":
            buf.append("\\b")
        elif c == "\f":
            buf.append("\\f")
        elif ord(c) < 0x20 or ord(c) == 0x7F:
            buf.append(f"\\u{ord(c):04x}")
        else:
            buf.append(c)
    return "".join(buf)


__all__ = [
    "SIMPLE_ESCAPES",
    "HEX_DIGITS",
    "unescape_string",
    "escape_string",
]
