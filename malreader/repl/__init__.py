"""
malreader.repl - Read-print REPL

Modules:
- backend.py: REPL backend with pluggable frontends (terminal, simple)

The REPL supports:
- Multi-line input for incomplete forms
- History (terminal mode, when readline is available)
- Pretty printing of long forms
"""

from malreader.repl.backend import (
    ReadResult,
    ReplBackend,
    ReplFrontend,
    ReplState,
    ResultType,
    SimpleRepl,
    TerminalRepl,
    create_repl,
)

__all__ = [
    "ReplBackend",
    "ReplFrontend",
    "ReplState",
    "TerminalRepl",
    "SimpleRepl",
    "ReadResult",
    "ResultType",
    "create_repl",
]
