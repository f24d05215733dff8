"""
malreader.config - Configuration loader

This module handles finding and loading .malrc files. It provides the
ReaderConfig class holding the defaults used by the REPL and the CLI.

The .malrc file uses mal map syntax and is read with malreader itself:
    {:prompt "user> "
     :continuation-prompt "... "
     :history-file ".mal_history"
     :pretty false
     :log-level "warning"}

Every field is optional.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

from malreader.forms.types import Keyword, MapLiteral, Symbol, VectorLiteral
from malreader.reader.reader import ParseError, read_str

CONFIG_FILENAME = ".malrc"
DEFAULT_PROMPT = "user> "
DEFAULT_CONTINUATION_PROMPT = "... "
DEFAULT_HISTORY_FILE = ".mal_history"
DEFAULT_LOG_LEVEL = "warning"

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def mal_to_python(value: Any) -> Any:
    """
    Convert forms to Python native types for internal tooling use.

    - Keyword -> str (without the colon)
    - Symbol -> str
    - VectorLiteral and lists -> list
    - MapLiteral -> dict
    - Other types pass through unchanged
    """
    if isinstance(value, (Keyword, Symbol)):
        return value.name
    elif isinstance(value, VectorLiteral):
        return [mal_to_python(item) for item in value.items]
    elif isinstance(value, MapLiteral):
        return {mal_to_python(k): mal_to_python(v) for k, v in value.pairs()}
    elif isinstance(value, list):
        return [mal_to_python(item) for item in value]
    else:
        return value


def find_config_file(start_path: Optional[str] = None) -> Optional[str]:
    """
    Find a .malrc by walking up the directory tree.

    Args:
        start_path: Directory to start searching from. If None, uses the
            current working directory.

    Returns:
        Absolute path to the .malrc file, or None if not found.
    """
    current = os.path.abspath(start_path) if start_path else os.getcwd()

    while True:
        config_file = os.path.join(current, CONFIG_FILENAME)
        if os.path.isfile(config_file):
            return config_file

        parent = os.path.dirname(current)
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _check_type(config_dict: dict, key: str, expected: type, type_name: str):
    if key in config_dict and not isinstance(config_dict[key], expected):
        raise ValueError(
            f":{key} must be a {type_name}, got {type(config_dict[key]).__name__}"
        )


@dataclass
class ReaderConfig:
    """
    REPL and CLI settings loaded from a .malrc file.

    Fields:
        prompt: Prompt shown when the REPL waits for a new form
        continuation_prompt: Prompt shown while a form is incomplete
        history_file: readline history file, or None to keep no history
        pretty: Print forms over several lines when they are long
        log_level: Default logging level name
        path: The file the settings came from, None for defaults
    """

    prompt: str = DEFAULT_PROMPT
    continuation_prompt: str = DEFAULT_CONTINUATION_PROMPT
    history_file: Optional[str] = DEFAULT_HISTORY_FILE
    pretty: bool = False
    log_level: str = DEFAULT_LOG_LEVEL
    path: Optional[str] = None

    @property
    def logging_level(self) -> int:
        """The numeric logging level for log_level."""
        return getattr(logging, self.log_level.upper())

    @classmethod
    def load(cls, path: Optional[str] = None) -> "ReaderConfig":
        """
        Load a ReaderConfig from a .malrc file.

        Args:
            path: Path to a config file, or None to search from the current
                directory upward. Defaults are returned when searching finds
                nothing.

        Raises:
            FileNotFoundError: If an explicit path does not exist.
            ValueError: If the file is not a valid config map.
        """
        if path is None:
            path = find_config_file()
            if path is None:
                return cls()
        elif not os.path.isfile(path):
            raise FileNotFoundError(f"Config file does not exist: {path}")

        with open(path, encoding="utf-8") as f:
            content = f.read()

        try:
            parsed = read_str(content, filename=path)
        except ParseError as e:
            raise ValueError(f"Failed to parse {path}: {e}") from e

        if not parsed:
            return cls(path=path)
        if len(parsed) != 1 or not isinstance(parsed[0], MapLiteral):
            raise ValueError(f"{path} must contain a single map")

        try:
            config_dict = mal_to_python(parsed[0])
        except (TypeError, ValueError) as e:
            raise ValueError(f"{path}: {e}") from e

        _check_type(config_dict, "prompt", str, "string")
        _check_type(config_dict, "continuation-prompt", str, "string")
        _check_type(config_dict, "pretty", bool, "boolean")
        _check_type(config_dict, "log-level", str, "string")
        history_file = config_dict.get("history-file", DEFAULT_HISTORY_FILE)
        if history_file is not None and not isinstance(history_file, str):
            raise ValueError(
                f":history-file must be a string or nil, got {type(history_file).__name__}"
            )

        log_level = config_dict.get("log-level", DEFAULT_LOG_LEVEL).lower()
        if log_level not in LOG_LEVELS:
            raise ValueError(
                f":log-level must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
            )

        return cls(
            prompt=config_dict.get("prompt", DEFAULT_PROMPT),
            continuation_prompt=config_dict.get(
                "continuation-prompt", DEFAULT_CONTINUATION_PROMPT
            ),
            history_file=history_file,
            pretty=config_dict.get("pretty", False),
            log_level=log_level,
            path=path,
        )