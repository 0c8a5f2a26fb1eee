"""
leofold Utilities Package.

Error types and source locations shared by the compiler, CLI and server.
"""

from leofold.utils.errors import (
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    DivisionByZeroError,
    FoldError,
    FoldErrorKind,
    FoldFailure,
    InvalidOperationError,
    LeoFoldError,
    LexerError,
    ParserError,
    SourceLocation,
    TypeMismatchError,
    UnsupportedExpressionError,
)

__all__ = [
    # Errors
    "LeoFoldError",
    "LexerError",
    "ParserError",
    "SourceLocation",
    # Folding errors
    "FoldError",
    "FoldErrorKind",
    "FoldFailure",
    "ArithmeticOverflowError",
    "ArithmeticUnderflowError",
    "DivisionByZeroError",
    "InvalidOperationError",
    "UnsupportedExpressionError",
    "TypeMismatchError",
]
