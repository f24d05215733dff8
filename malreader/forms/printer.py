"""
malreader.forms.printer - Forms back to text

pr_str() prints a form on one line; format_form() breaks long lists,
vectors and maps over several lines. Both print readably by default, so
reading their output gives back an equal form (comments aside, which the
reader drops).

pr_str() walks the form with an explicit stack, so any form the reader
can build can be printed, however deeply nested.
"""

from typing import Any

from malreader.forms.types import Keyword, MapLiteral, Symbol, VectorLiteral
from malreader.reader.escapes import escape_string

# Threshold for breaking a form onto multiple lines
_LINE_LENGTH_THRESHOLD = 60

# Forms nested deeper than this are printed on one line by format_form
_PRETTY_DEPTH_LIMIT = 64


def _delimiters(form: Any):
    """Return (open, close, items) for a compound form, None for a scalar."""
    if isinstance(form, list):
        return "(", ")", form
    elif isinstance(form, VectorLiteral):
        return "[", "]", form.items
    elif isinstance(form, MapLiteral):
        return "{", "}", form.items
    return None


def _pr_scalar(form: Any, print_readably: bool) -> str:
    if form is None:
        return "nil"
    elif isinstance(form, bool):
        return "true" if form else "false"
    elif isinstance(form, str):
        if print_readably:
            return f'"{escape_string(form)}"'
        return form
    elif isinstance(form, Symbol):
        return form.name
    elif isinstance(form, Keyword):
        return f":{form.name}"
    else:
        return str(form)


def pr_str(form: Any, print_readably: bool = True) -> str:
    """
    Print a form as source text on a single line.

    Args:
        form: The form to print.
        print_readably: Quote and escape strings. When False, strings are
            written out verbatim, as a program's output would show them.
    """
    parts = []
    # Entries are (True, text) for text to emit, (False, form) for a form to print
    stack = [(False, form)]
    while stack:
        is_text, item = stack.pop()
        if is_text:
            parts.append(item)
            continue
        compound = _delimiters(item)
        if compound is None:
            parts.append(_pr_scalar(item, print_readably))
            continue
        open_, close, items = compound
        parts.append(open_)
        stack.append((True, close))
        for i in range(len(items) - 1, -1, -1):
            stack.append((False, items[i]))
            if i:
                stack.append((True, " "))
    return "".join(parts)


def format_form(form: Any, indent: int = 0, pretty: bool = True) -> str:
    """
    Format a form as readable source text.

    Lists that do not fit on one line are broken after their head, with
    the remaining items indented two columns. Vectors and maps keep one
    item (or one key/value pair) per line. Below a fixed nesting depth
    forms stay on one line.

    Args:
        form: The form to format.
        indent: Current indentation level.
        pretty: Whether to use pretty-printing with newlines.
    """
    return _format(form, indent, pretty, 0)


def _format(form: Any, indent: int, pretty: bool, depth: int) -> str:
    single_line = pr_str(form)
    if (
        not pretty
        or depth >= _PRETTY_DEPTH_LIMIT
        or len(single_line) + indent <= _LINE_LENGTH_THRESHOLD
    ):
        return single_line
    if isinstance(form, list) and form:
        return _format_long_form(form, indent, depth)
    if isinstance(form, VectorLiteral) and form.items:
        return _format_items("[", form.items, "]", indent, depth, step=1)
    if isinstance(form, MapLiteral) and form.items:
        return _format_items("{", form.items, "}", indent, depth, step=2)
    return single_line


def _format_long_form(form: list, indent: int, depth: int) -> str:
    """Format a long list by breaking after the first element."""
    head = _format(form[0], indent + 1, True, depth + 1)
    if len(form) == 1:
        return f"({head})"

    body_indent = indent + 2
    indent_str = " " * body_indent
    body_parts = [_format(f, body_indent, True, depth + 1) for f in form[1:]]
    body = ("\n" + indent_str).join(body_parts)
    return f"({head}\n{indent_str}{body})"


def _format_items(
    open_: str, items: list, close: str, indent: int, depth: int, step: int
) -> str:
    """Format vector items one per line, or map items one pair per line."""
    body_indent = indent + 1
    indent_str = " " * body_indent
    parts = []
    for i in range(0, len(items), step):
        group = [_format(f, body_indent, True, depth + 1) for f in items[i : i + step]]
        parts.append(" ".join(group))
    return open_ + ("\n" + indent_str).join(parts) + close


__all__ = ["pr_str", "format_form"]
