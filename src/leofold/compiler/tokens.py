"""
Token definitions for the leofold lexer.

This module defines all token types recognized by the Leo subset the
optimizer understands: the function header, let-bindings, integer literals
and the four arithmetic operators.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from leofold.utils.errors import SourceLocation


class TokenType(Enum):
    """Enumeration of all token types in the Leo subset."""

    # End of file
    EOF = auto()

    # Literals
    INTEGER = auto()

    # Identifiers
    IDENTIFIER = auto()

    # Keywords
    FUNCTION = auto()
    LET = auto()

    # Arithmetic operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()

    # Punctuation
    ASSIGN = auto()
    COLON = auto()
    COMMA = auto()
    SEMICOLON = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()


KEYWORDS: dict[str, TokenType] = {
    "function": TokenType.FUNCTION,
    "let": TokenType.LET,
}


SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "=": TokenType.ASSIGN,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
}


OPERATOR_TOKENS = frozenset({
    TokenType.PLUS,
    TokenType.MINUS,
    TokenType.STAR,
    TokenType.SLASH,
})


@dataclass(frozen=True, slots=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The type of this token
        value: The lexeme text, or an ``(int, IntegerType)`` pair for
            integer literals
        location: Source location of this token
    """

    type: TokenType
    value: Any
    location: SourceLocation

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.location})"
        return f"Token({self.type.name}, {self.location})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Token):
            return self.type == other.type and self.value == other.value
        if isinstance(other, TokenType):
            return self.type == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.type, self.value))

    @property
    def is_literal(self) -> bool:
        """Check if this token represents a literal value."""
        return self.type == TokenType.INTEGER

    @property
    def is_operator(self) -> bool:
        """Check if this token represents an arithmetic operator."""
        return self.type in OPERATOR_TOKENS
