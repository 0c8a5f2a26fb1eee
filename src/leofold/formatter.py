"""
leofold Code Formatter.

Renders a Leo AST back to source text. The optimizer uses it to emit the
folded program, and ``leofold fmt`` uses it to normalize files.

Usage:
    leofold fmt input.leo
    leofold fmt --check input.leo
    leofold fmt --diff input.leo
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from pathlib import Path

from leofold.compiler import parse_source
from leofold.compiler.ast_nodes import (
    AssignStatement,
    BinaryExpression,
    Expression,
    Identifier,
    Input,
    IntegerLiteral,
    NestedExpression,
    Program,
    Statement,
    Value,
    ValueExpression,
)
from leofold.utils.errors import LeoFoldError

# =============================================================================
# Formatter Configuration
# =============================================================================


@dataclass
class FormatConfig:
    """Configuration for the code formatter."""

    indent_size: int = 4
    use_spaces: bool = True
    trailing_newline: bool = True
    space_around_operators: bool = True


# =============================================================================
# Code Formatter
# =============================================================================


class Formatter:
    """
    AST-based code formatter for Leo programs.

    Traverses the AST and produces consistently formatted source code.
    """

    def __init__(self, config: FormatConfig | None = None) -> None:
        """Initialize the formatter with optional configuration."""
        self.config = config or FormatConfig()
        self._indent_level = 0
        self._output_lines: list[str] = []

    def format_program(self, program: Program) -> str:
        """Format a complete program."""
        self._output_lines = []
        self._indent_level = 0

        inputs = ", ".join(self._format_input(i) for i in program.inputs)
        self._emit_line(f"function {program.name}({inputs}) {{")

        self._indent_level += 1
        for stmt in program.statements:
            self._format_statement(stmt)
        self._indent_level -= 1

        self._emit_line("}")

        result = "\n".join(self._output_lines)
        if self.config.trailing_newline and not result.endswith("\n"):
            result += "\n"
        return result

    def _indent(self) -> str:
        """Get the current indentation string."""
        if self.config.use_spaces:
            return " " * (self._indent_level * self.config.indent_size)
        return "\t" * self._indent_level

    def _emit_line(self, line: str) -> None:
        self._output_lines.append(self._indent() + line)

    def _format_input(self, item: Input) -> str:
        return f"{item.name}: {item.type_name}"

    # -------------------------------------------------------------------------
    # Statement Formatting
    # -------------------------------------------------------------------------

    def _format_statement(self, stmt: Statement) -> None:
        """Format a single statement."""
        if isinstance(stmt, AssignStatement):
            self._emit_line(f"let {stmt.name} = {self.format_expression(stmt.expression)};")
        else:
            raise TypeError(f"Cannot format statement {type(stmt).__name__}")

    # -------------------------------------------------------------------------
    # Expression Formatting
    # -------------------------------------------------------------------------

    def format_expression(self, expr: Expression) -> str:
        """Format an expression."""
        if isinstance(expr, ValueExpression):
            return self.format_value(expr.value)
        if isinstance(expr, BinaryExpression):
            op = expr.operator.symbol
            if self.config.space_around_operators:
                op = f" {op} "
            return f"{self.format_value(expr.left)}{op}{self.format_expression(expr.right)}"
        raise TypeError(f"Cannot format expression {type(expr).__name__}")

    def format_value(self, value: Value) -> str:
        """Format an operand."""
        if isinstance(value, IntegerLiteral):
            return f"{value.value}{value.type}"
        if isinstance(value, Identifier):
            return value.name
        if isinstance(value, NestedExpression):
            return f"({self.format_expression(value.expression)})"
        raise TypeError(f"Cannot format value {type(value).__name__}")


# =============================================================================
# Public API
# =============================================================================


def format_program(program: Program, config: FormatConfig | None = None) -> str:
    """Render a program as Leo source."""
    return Formatter(config).format_program(program)


def format_expression(expr: Expression, config: FormatConfig | None = None) -> str:
    """Render a single expression as Leo source."""
    return Formatter(config).format_expression(expr)


def format_source(source: str, config: FormatConfig | None = None) -> str:
    """
    Format Leo source code.

    Args:
        source: The Leo source code to format
        config: Optional formatting configuration

    Returns:
        The formatted source code

    Raises:
        LeoFoldError: If the source cannot be parsed
    """
    return format_program(parse_source(source), config)


def format_file(
    filepath: str | Path,
    config: FormatConfig | None = None,
    in_place: bool = False,
) -> str:
    """
    Format a Leo file.

    Args:
        filepath: Path to the .leo file
        config: Optional formatting configuration
        in_place: If True, write the formatted output back to the file

    Returns:
        The formatted source code

    Raises:
        FileNotFoundError: If the file does not exist
        LeoFoldError: If the source cannot be parsed
    """
    path = Path(filepath)
    source = path.read_text(encoding="utf-8")

    formatted = format_source(source, config)

    if in_place:
        path.write_text(formatted, encoding="utf-8")

    return formatted


def check_format(
    source: str,
    config: FormatConfig | None = None,
) -> bool:
    """
    Check if source code is properly formatted.

    Returns:
        True if the source is properly formatted, False otherwise
        (including when it does not parse)
    """
    try:
        return source == format_source(source, config)
    except LeoFoldError:
        return False


def get_diff(
    source: str,
    config: FormatConfig | None = None,
    filename: str = "<input>",
) -> str:
    """
    Get a diff showing formatting changes.

    Returns:
        A unified diff string, or empty string if no changes needed

    Raises:
        LeoFoldError: If the source cannot be parsed
    """
    formatted = format_source(source, config)
    if source == formatted:
        return ""

    diff = difflib.unified_diff(
        source.splitlines(keepends=True),
        formatted.splitlines(keepends=True),
        fromfile=f"a/{filename}",
        tofile=f"b/{filename}",
    )
    return "".join(diff)
