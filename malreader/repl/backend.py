"""
malreader REPL - A read-print loop with pluggable frontends.

This module provides a REPL backend that reads input into forms and
prints them back, and frontends (terminal, simple) that drive it.
Evaluation is left to whatever consumes the forms; the backend's job
stops at reading.
"""

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from malreader.config import ReaderConfig
from malreader.forms.printer import format_form, pr_str
from malreader.reader.reader import ParseError, read_str

logger = logging.getLogger(__name__)


class ResultType(Enum):
    """Type of result returned from reading."""

    VALUE = "value"
    ERROR = "error"
    INCOMPLETE = "incomplete"
    EMPTY = "empty"


@dataclass
class ReadResult:
    """Result of reading code in the REPL."""

    type: ResultType
    forms: list[Any] = field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None

    def is_success(self) -> bool:
        return self.type == ResultType.VALUE or self.type == ResultType.EMPTY

    def is_error(self) -> bool:
        return self.type == ResultType.ERROR

    def is_incomplete(self) -> bool:
        return self.type == ResultType.INCOMPLETE


@dataclass
class ReplState:
    """Maintains the state of a REPL session."""

    history: list[tuple[str, ReadResult]] = field(default_factory=list)
    counter: int = 0

    def add_to_history(self, code: str, result: ReadResult):
        """Add a read to the history."""
        self.history.append((code, result))
        if result.is_success():
            self.counter += 1

    def clear_history(self):
        """Clear read history."""
        self.history.clear()
        self.counter = 0


class ReplBackend:
    """
    Generic REPL backend that handles reading and printing.

    This backend is frontend-agnostic and can be used with any
    input/output mechanism.
    """

    def __init__(
        self,
        state: Optional[ReplState] = None,
        config: Optional[ReaderConfig] = None,
    ):
        self.state = state or ReplState()
        self.config = config or ReaderConfig()
        self.buffer = ""

    def is_complete(self, code: str) -> bool:
        """
        Check if the given code could be read without more input.

        Code that is malformed before its end counts as complete: reading
        it reports the error instead of waiting for lines that cannot help.
        """
        try:
            read_str(code)
        except ParseError as e:
            return not e.incomplete
        return True

    def read(self, code: str) -> ReadResult:
        """
        Read code into forms.

        Returns:
            A ReadResult holding the forms, or the parse error.
        """
        if not code.strip():
            return ReadResult(type=ResultType.EMPTY)

        try:
            forms = read_str(code, filename="<repl>")
        except ParseError as e:
            return ReadResult(
                type=ResultType.INCOMPLETE if e.incomplete else ResultType.ERROR,
                error=e.msg,
                error_type=type(e).__name__,
            )

        if not forms:
            return ReadResult(type=ResultType.EMPTY)
        return ReadResult(type=ResultType.VALUE, forms=forms)

    def read_with_buffer(self, line: str) -> ReadResult:
        """
        Read a line of code, using a buffer for incomplete forms.

        Returns:
            A ReadResult. If incomplete, returns INCOMPLETE type and keeps
            the line in the buffer.
        """
        self.buffer += line + "\n"

        result = self.read(self.buffer)
        if result.is_incomplete():
            return result

        code = self.buffer
        self.buffer = ""
        self.state.add_to_history(code, result)
        return result

    def reset_buffer(self):
        """Clear the input buffer."""
        self.buffer = ""

    def format_forms(self, forms: list[Any]) -> str:
        """Print forms the way the REPL shows them, separated by spaces."""
        if self.config.pretty:
            return "\n".join(format_form(form) for form in forms)
        return " ".join(pr_str(form) for form in forms)


class ReplFrontend(ABC):
    """
    Abstract base class for REPL frontends.

    Subclasses should implement the run method to provide
    specific input/output behavior.
    """

    def __init__(self, backend: Optional[ReplBackend] = None):
        self.backend = backend or ReplBackend()

    @property
    def config(self) -> ReaderConfig:
        return self.backend.config

    @abstractmethod
    def run(self):
        """Run the REPL frontend."""
        pass

    def print_result(self, result: ReadResult):
        """Print a read result."""
        if result.is_error():
            print(f"Error: {result.error}", file=sys.stderr)
        elif result.type == ResultType.VALUE:
            print(self.backend.format_forms(result.forms))


class TerminalRepl(ReplFrontend):
    """
    Terminal-based REPL frontend with readline support.
    """

    def __init__(self, backend: Optional[ReplBackend] = None):
        super().__init__(backend)
        self.readline = None
        self.setup_readline()

    def setup_readline(self):
        """Setup readline history when readline is available."""
        history_file = self.config.history_file
        if history_file is None:
            return
        try:
            import readline
        except ImportError:
            return

        self.readline = readline
        try:
            readline.read_history_file(history_file)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("could not read history file %s: %s", history_file, e)

        import atexit

        atexit.register(self.save_history)

    def save_history(self):
        if self.readline is None or self.config.history_file is None:
            return
        try:
            self.readline.write_history_file(self.config.history_file)
        except OSError as e:
            logger.warning(
                "could not write history file %s: %s", self.config.history_file, e
            )

    def run(self):
        """Run the terminal REPL."""
        current_prompt = self.config.prompt

        while True:
            try:
                line = input(current_prompt)
            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                print()
                self.backend.reset_buffer()
                current_prompt = self.config.prompt
                continue

            # Check for special commands
            if not self.backend.buffer and line.strip() in ["(exit)", "(quit)"]:
                break

            if not self.backend.buffer and not line.strip():
                continue

            result = self.backend.read_with_buffer(line)

            if result.is_incomplete():
                current_prompt = self.config.continuation_prompt
            else:
                self.print_result(result)
                current_prompt = self.config.prompt


class SimpleRepl(ReplFrontend):
    """
    Minimal REPL frontend: one line is one read, no continuation lines.
    Useful for embedding or when readline is not available.
    """

    def run(self):
        """Run the simple REPL."""
        while True:
            try:
                line = input(self.config.prompt)
            except EOFError:
                print()
                break

            if not line.strip():
                continue

            result = self.backend.read(line)

            if result.is_incomplete():
                print(f"Error: {result.error}", file=sys.stderr)
            else:
                self.print_result(result)


def create_repl(mode: str = "terminal", config: Optional[ReaderConfig] = None):
    """
    Create a REPL frontend.

    Args:
        mode: "terminal" for the readline REPL with continuation lines,
            "simple" for the line-at-a-time REPL.
        config: Settings to use; defaults when None.
    """
    backend = ReplBackend(config=config)
    if mode == "terminal":
        return TerminalRepl(backend)
    elif mode == "simple":
        return SimpleRepl(backend)
    raise ValueError(f"Unknown REPL mode: {mode}")
