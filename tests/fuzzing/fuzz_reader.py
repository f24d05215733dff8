#!/usr/bin/env python3
"""Fuzzers for the reader and printer.

Random forms are printed and read back, and must come back unchanged.
Random token soup is read and must either give forms or fail with a
ParseError pointing inside the input.
"""

import random
from typing import Any

from malreader.forms.printer import format_form, pr_str
from malreader.forms.types import (
    READER_MACRO_HEADS,
    Keyword,
    MapLiteral,
    Symbol,
    VectorLiteral,
    same_form,
)
from malreader.reader.reader import ParseError, read_str

from .fuzz import FuzzCase, Fuzzer

SYMBOL_START = "abcxyz+*!?<>=&_"
SYMBOL_REST = SYMBOL_START + "0123456789-/."
STRING_CHARS = 'abc xyz"\\\n\r\t\b\f\x00\x01\x1f\x7fé€😀;()[]{}'

# Fragments glued together to make mostly-wrong source text
TOKENS = [
    "(", ")", "[", "]", "{", "}", "'", "`", "~", "~@", "@", "^",
    " ", "\n", ",", "; c\n", "a", "-", "-1", "42", ":k", "nil", "true",
    '"', '"s"', '"\\n"', '"\\u00', "\\", "\\q",
]


def random_symbol_name(rng: random.Random) -> str:
    rest = "".join(rng.choices(SYMBOL_REST, k=rng.randint(0, 6)))
    return rng.choice(SYMBOL_START) + rest


def random_atom(rng: random.Random) -> Any:
    """Generate a random scalar form."""
    choice = rng.randint(0, 6)
    if choice == 0:
        return rng.randint(-10000, 10000)
    elif choice == 1:
        return "".join(rng.choices(STRING_CHARS, k=rng.randint(0, 12)))
    elif choice == 2:
        return None
    elif choice == 3:
        return rng.choice([True, False])
    elif choice == 4:
        return Keyword(rng.choice([random_symbol_name(rng), "nil", "1", "true"]))
    else:
        return Symbol(random_symbol_name(rng))


def random_form(rng: random.Random, depth: int = 0) -> Any:
    """Generate a random form, nesting at most a few levels deep."""
    if depth >= 4 or rng.random() < 0.4:
        return random_atom(rng)

    choice = rng.randint(0, 3)
    size = rng.randint(0, 5)
    if choice == 0:
        return [random_form(rng, depth + 1) for _ in range(size)]
    elif choice == 1:
        return VectorLiteral([random_form(rng, depth + 1) for _ in range(size)])
    elif choice == 2:
        items = []
        for _ in range(size):
            items.append(random_form(rng, depth + 1))
            items.append(random_form(rng, depth + 1))
        return MapLiteral(items)
    else:
        head = rng.choice(sorted(READER_MACRO_HEADS))
        return [Symbol(head), random_form(rng, depth + 1)]


def check_reprint(source: str, forms: list[Any]):
    """Printing forms read from ``source`` and reading them again is stable."""
    printed = " ".join(pr_str(f) for f in forms)
    assert same_form(read_str(printed), forms), (
        f"Re-reading {source!r} as {printed!r} changed the forms"
    )


class RoundTripFuzzer(Fuzzer):
    """Prints random forms and reads them back."""

    name = "RoundTrip"
    corpus = (
        "(+ 1 (* 2 3))",
        "^{:a 1} [1 2]",
        "`(a ~b ~@c @d 'e)",
        '{:a "x\\ty" :b}',
        '"\\ud83d\\ude00 \\u00e9 \\s"',
        "(" * 3000 + "x" + ")" * 3000,
        "[{:k " * 1000 + "nil" + "}]" * 1000,
    )

    def generate(self, rng: random.Random) -> FuzzCase:
        form = random_form(rng)
        if rng.random() < 0.5:
            self.record_op("pr_str")
            return FuzzCase(pr_str(form), [form])
        self.record_op("format_form")
        return FuzzCase(format_form(form), [form])

    def check(self, case: FuzzCase):
        forms = read_str(case.source)
        if case.expected is None:
            check_reprint(case.source, forms)
            return

        assert same_form(forms, case.expected), (
            f"Read back {' '.join(pr_str(f) for f in forms)!r}"
        )

        # Dropping a closing delimiter leaves input that more text could fix
        if case.source[-1] in ')]}"':
            try:
                read_str(case.source[:-1])
            except ParseError as e:
                assert e.incomplete, "Truncated source not incomplete"
            else:
                raise AssertionError("Truncated source read without error")


class GarbageFuzzer(Fuzzer):
    """Reads random token soup; the reader must never crash."""

    name = "Garbage"
    corpus = ("", "(]", ")", '"\\u00', '"\\q"', "^a", "~@", "{:a", "'" * 5000)

    def generate(self, rng: random.Random) -> FuzzCase:
        return FuzzCase("".join(rng.choices(TOKENS, k=rng.randint(0, 15))))

    def check(self, case: FuzzCase):
        source = case.source
        try:
            forms = read_str(source)
        except ParseError as e:
            self.record_op("error")
            assert 0 <= e.pos <= len(source), f"Bad error position {e.pos}"
            assert e.expected, "No expected alternatives"
            assert e.incomplete == (e.pos == len(source))
            return
        self.record_op("read")
        check_reprint(source, forms)


FUZZERS = [RoundTripFuzzer, GarbageFuzzer]
