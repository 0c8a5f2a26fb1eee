"""
Error types and source location tracking for the leofold compiler.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from leofold.compiler.ast_nodes import Expression


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Attributes:
        line: 1-indexed line number
        column: 1-indexed column number
        offset: 0-indexed character offset from start of source
        filename: Optional filename for error reporting
    """

    line: int
    column: int
    offset: int = 0
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class LeoFoldError(Exception):
    """Base exception for all leofold compiler errors."""

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> None:
        self.message = message
        self.location = location
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []

        if self.location:
            parts.append(f"[{self.location}]")

        parts.append(self.message)

        if self.source_line and self.location:
            parts.append(f"\n    {self.source_line}")
            # Add caret pointing to the error column
            padding = " " * (4 + self.location.column - 1)
            parts.append(f"\n{padding}^")

        return " ".join(parts) if not self.source_line else parts[0] + " " + "".join(parts[1:])


class LexerError(LeoFoldError):
    """Raised when the lexer encounters an invalid token or character."""

    pass


class ParserError(LeoFoldError):
    """Raised when the parser encounters a syntax error."""

    pass


# -----------------------------------------------------------------------------
# Constant folding errors
# -----------------------------------------------------------------------------


class FoldErrorKind(Enum):
    """The closed set of reasons a statement can fail to fold."""

    OVERFLOW = auto()
    UNDERFLOW = auto()
    DIVISION_BY_ZERO = auto()
    INVALID_OPERATION = auto()
    UNSUPPORTED_EXPRESSION = auto()
    TYPE_MISMATCH = auto()


class FoldError(LeoFoldError):
    """
    Base class for failures raised while folding constant expressions.

    Unlike lexer and parser errors, the rendered message never includes the
    location; callers that want it read ``error.location`` directly.
    """

    kind: FoldErrorKind

    def __init__(self, message: str, location: Optional[SourceLocation] = None) -> None:
        super().__init__(message, location)

    def _format_message(self) -> str:
        return self.message

    def __str__(self) -> str:
        return self.message

    @staticmethod
    def from_message(message: str) -> "InvalidOperationError":
        """Wrap a plain string failure from a lower layer."""
        return InvalidOperationError(message)


class ArithmeticOverflowError(FoldError):
    """Raised when a sum or product exceeds the literal type's maximum."""

    kind = FoldErrorKind.OVERFLOW

    def __init__(self, location: Optional[SourceLocation] = None) -> None:
        super().__init__("Overflow occurred during operation", location)


class ArithmeticUnderflowError(FoldError):
    """Raised when a difference drops below zero."""

    kind = FoldErrorKind.UNDERFLOW

    def __init__(self, location: Optional[SourceLocation] = None) -> None:
        super().__init__("Underflow occurred during operation", location)


class DivisionByZeroError(FoldError):
    """Raised when the divisor of a constant division is zero."""

    kind = FoldErrorKind.DIVISION_BY_ZERO

    def __init__(self, location: Optional[SourceLocation] = None) -> None:
        super().__init__("Division by zero", location)


class InvalidOperationError(FoldError):
    """Raised for an operation the folder cannot carry out."""

    kind = FoldErrorKind.INVALID_OPERATION

    def __init__(self, detail: str, location: Optional[SourceLocation] = None) -> None:
        self.detail = detail
        super().__init__(f"Invalid operation: {detail}", location)


class UnsupportedExpressionError(FoldError):
    """Raised when the folder meets a node it has no rule for."""

    kind = FoldErrorKind.UNSUPPORTED_EXPRESSION

    def __init__(
        self,
        expression: "Expression",
        location: Optional[SourceLocation] = None,
    ) -> None:
        self.expression = expression
        super().__init__(f"Unsupported expression: {expression!r}", location)


class TypeMismatchError(FoldError):
    """
    Raised when an integer left operand meets a right operand that did not
    collapse to an integer of the same type.

    Attributes:
        expected: Name of the expected kind or type
        found: Debug form of what was actually found
    """

    kind = FoldErrorKind.TYPE_MISMATCH

    def __init__(
        self,
        expected: str,
        found: str,
        location: Optional[SourceLocation] = None,
    ) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"Type mismatch: expected {expected}, but found {found}",
            location,
        )


class FoldFailure(LeoFoldError):
    """
    Raised by ``FoldResult.raise_on_error`` when one or more statements
    failed to fold.
    """

    def __init__(self, errors: tuple[FoldError, ...]) -> None:
        self.errors = errors
        noun = "error" if len(errors) == 1 else "errors"
        lines = [f"Constant folding failed with {len(errors)} {noun}:"]
        lines.extend(f"  {error}" for error in errors)
        super().__init__("\n".join(lines))
