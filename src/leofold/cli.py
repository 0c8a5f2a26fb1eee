"""
leofold Command-Line Interface.

Provides commands to optimize and inspect Leo programs.

Usage:
    leofold optimize -i input.leo -c            # Fold constants, print program
    leofold optimize -i input.leo -c -e -o out  # ... and write out.leo
    leofold check input.leo                     # Report fold errors only
    leofold fmt input.leo                       # Format code
    leofold tokens input.leo                    # Dump tokens
    leofold ast input.leo                       # Dump the syntax tree
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from leofold import __version__
from leofold.compiler import fold_constants, parse_source
from leofold.compiler.ast_nodes import Program
from leofold.compiler.lexer import Lexer
from leofold.formatter import check_format, format_program, format_source, get_diff
from leofold.utils.errors import FoldError, LeoFoldError

logger = logging.getLogger("leofold")


# =============================================================================
# ANSI Color Codes for Terminal Output
# =============================================================================


class Colors:
    """ANSI escape codes for colored terminal output."""

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"

    BOLD = "\033[1m"

    RESET = "\033[0m"

    @classmethod
    def disable(cls) -> None:
        """Disable all colors (for non-TTY output)."""
        cls.RED = ""
        cls.GREEN = ""
        cls.YELLOW = ""
        cls.CYAN = ""
        cls.GRAY = ""
        cls.BOLD = ""
        cls.RESET = ""


def _init_colors() -> None:
    """Initialize colors based on terminal capabilities."""
    # Disable colors if not a TTY or if NO_COLOR is set
    if not sys.stdout.isatty() or os.environ.get("NO_COLOR"):
        Colors.disable()


# Initialize on module load
_init_colors()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="leofold",
        description="Generates Leo code with optional constant fold optimization",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="warning",
        help="Logging level (default: warning)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Optimize command
    optimize_parser = subparsers.add_parser(
        "optimize",
        help="Optimize and generate Leo code",
    )
    optimize_parser.add_argument(
        "-i",
        "--input",
        type=Path,
        required=True,
        metavar="FILE",
        help="Input Leo file",
    )
    optimize_parser.add_argument(
        "-c",
        "--constant-fold",
        action="store_true",
        help="Apply constant fold optimization",
    )
    optimize_parser.add_argument(
        "-e",
        "--emit-leo",
        action="store_true",
        help=(
            "Print the generated Leo code; it is written to a file only "
            "when --output is given"
        ),
    )
    optimize_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        metavar="FILE",
        help="Write generated Leo code to FILE (requires --emit-leo)",
    )

    # Check command
    check_parser = subparsers.add_parser(
        "check",
        help="Parse and fold a Leo file, reporting errors without writing output",
    )
    check_parser.add_argument("input", type=Path, help="Input Leo file")

    # Format command
    fmt_parser = subparsers.add_parser(
        "fmt",
        aliases=["format"],
        help="Format Leo source files",
    )
    fmt_parser.add_argument("input", type=Path, help="Input Leo file")
    fmt_parser.add_argument(
        "--check",
        action="store_true",
        help="Check if the file is formatted without modifying it",
    )
    fmt_parser.add_argument(
        "--diff",
        action="store_true",
        help="Show diff of formatting changes",
    )
    fmt_parser.add_argument(
        "-w",
        "--write",
        action="store_true",
        help="Write changes to the file (default: print to stdout)",
    )

    # Debug commands
    tokens_parser = subparsers.add_parser("tokens", help="Print the token stream (debug)")
    tokens_parser.add_argument("input", type=Path, help="Input Leo file")

    ast_parser = subparsers.add_parser("ast", help="Print the syntax tree (debug)")
    ast_parser.add_argument("input", type=Path, help="Input Leo file")

    return parser


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level_name.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _read_source(input_path: Path) -> Optional[str]:
    """Read a source file, printing an error and returning None on failure."""
    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return None
    try:
        return input_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read {input_path}: {e}", file=sys.stderr)
        return None


def _print_fold_errors(errors: tuple[FoldError, ...]) -> None:
    print(f"{Colors.RED}Constant folding encountered errors:{Colors.RESET}", file=sys.stderr)
    for error in errors:
        where = f"{error.location}: " if error.location else ""
        print(f"  {Colors.GRAY}{where}{Colors.RESET}{error}", file=sys.stderr)


def _resolve_output_path(output: Path) -> Path:
    """Append ``.leo`` when the output path has no extension."""
    if not output.suffix:
        return output.with_suffix(".leo")
    return output


def _write_output(output: Path, text: str) -> Path:
    output = _resolve_output_path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    return output


def cmd_optimize(args: argparse.Namespace) -> int:
    """Handle the optimize command."""
    input_path: Path = args.input

    source = _read_source(input_path)
    if source is None:
        return 1

    try:
        program = parse_source(source, str(input_path))
    except LeoFoldError as e:
        print(f"{Colors.RED}Error:{Colors.RESET} {e}", file=sys.stderr)
        return 1

    exit_code = 0

    if args.constant_fold:
        result = fold_constants(program)
        if result:
            print("Constant folding applied successfully.")
        else:
            _print_fold_errors(result.errors)
            exit_code = 1

    if args.emit_leo:
        output = format_program(program)
        print(f"Generated Leo code:\n\n{output}")

        if args.output is not None:
            try:
                written = _write_output(args.output, output)
            except OSError as e:
                print(f"{Colors.RED}Error:{Colors.RESET} cannot write output: {e}", file=sys.stderr)
                return 1
            logger.info("wrote %s", written)
            print(f"Leo code has been written to {written}")
    else:
        if args.output is not None:
            print(
                f"{Colors.YELLOW}Warning:{Colors.RESET} --output ignored without --emit-leo",
                file=sys.stderr,
            )
        print(f"Parsed Leo code:\n\n{format_program(program)}")

    return exit_code


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the check command."""
    input_path: Path = args.input

    source = _read_source(input_path)
    if source is None:
        return 1

    try:
        program = parse_source(source, str(input_path))
    except LeoFoldError as e:
        print(f"{Colors.RED}Error:{Colors.RESET} {e}", file=sys.stderr)
        return 1

    result = fold_constants(program)
    if not result:
        _print_fold_errors(result.errors)
        return 1

    print(f"{Colors.GREEN}OK:{Colors.RESET} {input_path} ({_describe(program)})")
    return 0


def _describe(program: Program) -> str:
    count = len(program.statements)
    return f"{count} statement{'s' if count != 1 else ''} folded"


def cmd_fmt(args: argparse.Namespace) -> int:
    """Handle the fmt command - format a source file."""
    input_path: Path = args.input

    source = _read_source(input_path)
    if source is None:
        return 1

    try:
        if args.check:
            if not check_format(source):
                print(f"{Colors.YELLOW}Would reformat:{Colors.RESET} {input_path}")
                return 1
            print(f"{Colors.GREEN}Already formatted:{Colors.RESET} {input_path}")
        elif args.diff:
            diff = get_diff(source, filename=str(input_path))
            if diff:
                print(diff)
                return 1
        elif args.write:
            formatted = format_source(source)
            if source != formatted:
                input_path.write_text(formatted, encoding="utf-8")
                print(f"{Colors.GREEN}Formatted:{Colors.RESET} {input_path}")
        else:
            print(format_source(source), end="")
    except LeoFoldError as e:
        print(f"{Colors.RED}Error formatting {input_path}:{Colors.RESET} {e}", file=sys.stderr)
        return 1

    return 0


def cmd_tokens(args: argparse.Namespace) -> int:
    """Handle the tokens command (debug)."""
    input_path: Path = args.input

    source = _read_source(input_path)
    if source is None:
        return 1

    try:
        for token in Lexer(source, str(input_path)).tokenize():
            print(token)
        return 0

    except LeoFoldError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_ast(args: argparse.Namespace) -> int:
    """Handle the ast command (debug)."""
    input_path: Path = args.input

    source = _read_source(input_path)
    if source is None:
        return 1

    try:
        program = parse_source(source, str(input_path))
    except LeoFoldError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Program {program.name!r}")
    for item in program.inputs:
        print(f"  {item!r}")
    for stmt in program.statements:
        print(f"  {stmt!r}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    if args.command is None:
        parser.print_help()
        return 0

    command_handlers = {
        "optimize": cmd_optimize,
        "check": cmd_check,
        "fmt": cmd_fmt,
        "format": cmd_fmt,
        "tokens": cmd_tokens,
        "ast": cmd_ast,
    }

    handler = command_handlers.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
