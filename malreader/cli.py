"""
malreader.cli - malread Command Line Interface

This module provides the main CLI entry point with subcommand support:

- malread repl              Start the read-print REPL
- malread read <file>...    Read files and print their forms
- malread check <file>...   Check that files read without errors
- malread <file>...         Shorthand for `malread read <file>...`

Flags:
- malread -c <code>         Read code directly and print its forms
- malread -i                Start the REPL after -c or a file
"""

import argparse
import logging
import sys
from typing import Optional

from malreader.config import ReaderConfig
from malreader.forms.printer import format_form, pr_str
from malreader.reader.reader import ParseError, Reader, read_str

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


def print_forms(forms, pretty: bool) -> None:
    """Print forms one per line."""
    for form in forms:
        print(format_form(form) if pretty else pr_str(form))


def report_parse_error(error: ParseError) -> None:
    """Print a parse error with the offending line and a caret under the spot."""
    print(f"Error: {error.filename}:{error.line}: {error.msg}", file=sys.stderr)
    if error.text:
        print(f"  {error.text}", file=sys.stderr)
        print(f"  {' ' * error.col}^", file=sys.stderr)


def read_file(path: str, pretty: bool) -> int:
    """Read one file and print its forms. Stops at the first error."""
    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        return 1

    logger.info("reading %s", path)
    try:
        # forms ahead of a syntax error are printed before it is reported
        for form in Reader(content, filename=path).iter_forms():
            print_forms([form], pretty)
    except ParseError as e:
        report_parse_error(e)
        return 1
    return 0


def cmd_repl(args: argparse.Namespace, config: ReaderConfig) -> int:
    """Start the interactive REPL."""
    from malreader.repl import create_repl

    if getattr(args, "pretty", False):
        config.pretty = True
    repl_instance = create_repl(mode="terminal", config=config)
    repl_instance.run()
    return 0


def read_files(paths: list[str], pretty: bool) -> int:
    """Read files in order, stopping at the first one that fails."""
    for path in paths:
        status = read_file(path, pretty)
        if status != 0:
            return status
    return 0


def cmd_read(args: argparse.Namespace, config: ReaderConfig) -> int:
    """Read files and print their forms."""
    return read_files(args.files, args.pretty or config.pretty)


def cmd_check(args: argparse.Namespace, config: ReaderConfig) -> int:
    """Check that files read without errors."""
    failed = 0
    for path in args.files:
        try:
            with open(path, encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            print(f"Error: cannot read {path}: {e}", file=sys.stderr)
            failed += 1
            continue
        try:
            forms = read_str(content, filename=path)
        except ParseError as e:
            report_parse_error(e)
            failed += 1
            continue
        print(f"{path}: ok ({len(forms)} forms)")
    return 1 if failed else 0


def cmd_exec_code(code: str, config: ReaderConfig, pretty: bool = False) -> int:
    """Read code given on the command line and print its forms."""
    try:
        forms = read_str(code, filename="<string>")
    except ParseError as e:
        report_parse_error(e)
        return 1
    print_forms(forms, pretty or config.pretty)
    return 0


# Known subcommands - used to differentiate from file arguments
SUBCOMMANDS = {"repl", "read", "check"}

# Global options that take a value
VALUE_OPTIONS = {"-c", "--command", "--config", "--log"}


def split_shorthand_files(argv: list[str]) -> tuple[list[str], list[str]]:
    """
    Separate the files of `malread FILE...` from the global options.

    Returns (options, files). When the first positional argument is a
    subcommand, argv is returned unchanged with no files.
    """
    options: list[str] = []
    files: list[str] = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in VALUE_OPTIONS:
            options.extend(argv[i : i + 2])
            i += 2
            continue
        if arg.startswith("-"):
            options.append(arg)
        elif not files and arg in SUBCOMMANDS:
            return argv, []
        else:
            files.append(arg)
        i += 1
    return options, files


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="malread",
        description="malread - read mal source and print its forms",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  malread                       Start interactive REPL
  malread repl                  Start interactive REPL (explicit)
  malread read core.mal         Print every form in core.mal
  malread check *.mal           Check files for syntax errors
  malread a.mal b.mal           Same as `malread read a.mal b.mal`
  malread -c "(+ 1 2 3)"        Read code directly
        """,
    )

    parser.add_argument(
        "-c",
        "--command",
        metavar="CODE",
        help="Read code directly and print its forms",
    )

    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Start REPL after reading a file or command",
    )

    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Break long forms over several lines",
    )

    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: nearest .malrc)",
    )

    parser.add_argument(
        "--log",
        metavar="FILE",
        help="Log file for debugging the reader",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log reader activity at debug level",
    )

    subparsers = parser.add_subparsers(dest="subcommand", metavar="<command>")

    # repl subcommand
    subparsers.add_parser("repl", help="Start the interactive REPL")

    # read subcommand
    read_parser = subparsers.add_parser(
        "read", help="Read files and print their forms"
    )
    read_parser.add_argument("files", nargs="+", metavar="FILE")

    # check subcommand
    check_parser = subparsers.add_parser(
        "check", help="Check that files read without errors"
    )
    check_parser.add_argument("files", nargs="+", metavar="FILE")

    return parser


def setup_logging(args: argparse.Namespace, config: ReaderConfig) -> None:
    """Configure logging from the command line and the config file."""
    level = logging.DEBUG if args.verbose else config.logging_level
    if args.log:
        logging.basicConfig(filename=args.log, level=level, format=LOG_FORMAT)
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT)


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the malread CLI. Calls sys.exit with return code."""
    sys.exit(_main(argv))


def _main(argv: Optional[list[str]] = None) -> int:
    """Internal main that returns exit code."""
    if argv is None:
        argv = sys.argv[1:]

    # Pre-parse to pull out files given without a subcommand
    argv, files_to_read = split_shorthand_files(argv)

    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = ReaderConfig.load(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error in config: {e}", file=sys.stderr)
        return 1

    setup_logging(args, config)
    if config.path:
        logger.debug("loaded config from %s", config.path)

    if args.subcommand == "repl":
        return cmd_repl(args, config)
    elif args.subcommand == "read":
        return cmd_read(args, config)
    elif args.subcommand == "check":
        return cmd_check(args, config)

    status = None
    if args.command is not None:
        status = cmd_exec_code(args.command, config, args.pretty)
    elif files_to_read:
        status = read_files(files_to_read, args.pretty or config.pretty)

    if status is None:
        # No arguments - start REPL
        return cmd_repl(args, config)
    if args.interactive:
        return cmd_repl(args, config)
    return status


if __name__ == "__main__":
    main()
