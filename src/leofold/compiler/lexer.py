"""
leofold Lexer (Tokenizer).

Transforms Leo source code into a stream of tokens.
"""

from typing import Iterator, Optional

from leofold.compiler.ast_nodes import DEFAULT_INTEGER_TYPE, IntegerType
from leofold.compiler.tokens import (
    KEYWORDS,
    SINGLE_CHAR_TOKENS,
    Token,
    TokenType,
)
from leofold.utils.errors import LexerError, SourceLocation


class Lexer:
    """
    Tokenizer for Leo source code.

    The lexer supports:
    - Identifiers and the ``function`` / ``let`` keywords
    - Integer literals with an optional type suffix (``42u8``, ``1_000u32``)
    - Comments (// single line, /* multi-line */)
    - Arithmetic operators and punctuation

    Newlines are insignificant; statements end with ``;``.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()
        # or iterate: for token in lexer: ...
    """

    def __init__(self, source: str, filename: Optional[str] = None) -> None:
        """
        Initialize the lexer with source code.

        Args:
            source: The Leo source code to tokenize
            filename: Optional filename for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

        # Track the start of the current line for error reporting
        self._line_start = 0

    @property
    def _current_char(self) -> Optional[str]:
        """Return the current character or None if at end."""
        if self.pos >= len(self.source):
            return None
        return self.source[self.pos]

    @property
    def _peek_char(self) -> Optional[str]:
        """Return the next character without consuming it."""
        peek_pos = self.pos + 1
        if peek_pos >= len(self.source):
            return None
        return self.source[peek_pos]

    def _location(self) -> SourceLocation:
        """Create a SourceLocation for the current position."""
        return SourceLocation(
            line=self.line,
            column=self.column,
            offset=self.pos,
            filename=self.filename,
        )

    def _current_line_text(self) -> str:
        """Extract the current line of source for error messages."""
        end = self.source.find("\n", self._line_start)
        if end == -1:
            end = len(self.source)
        return self.source[self._line_start:end]

    def _advance(self) -> str:
        """Consume and return the current character."""
        char = self.source[self.pos]
        self.pos += 1

        if char == "\n":
            self.line += 1
            self.column = 1
            self._line_start = self.pos
        else:
            self.column += 1

        return char

    def _skip_whitespace(self) -> None:
        """Skip whitespace characters, newlines included."""
        while self._current_char is not None and self._current_char in " \t\r\n":
            self._advance()

    def _skip_line_comment(self) -> bool:
        """Skip single-line comments starting with //.

        Returns True if a comment was skipped.
        """
        if self._current_char == "/" and self._peek_char == "/":
            while self._current_char is not None and self._current_char != "\n":
                self._advance()
            return True
        return False

    def _skip_multiline_comment(self) -> bool:
        """
        Skip multi-line comments /* ... */.

        Returns:
            True if a multi-line comment was skipped, False otherwise.
        """
        if self._current_char == "/" and self._peek_char == "*":
            start_loc = self._location()
            self._advance()  # /
            self._advance()  # *

            while True:
                if self._current_char is None:
                    raise LexerError(
                        "Unterminated multi-line comment",
                        start_loc,
                        self._current_line_text(),
                    )
                if self._current_char == "*" and self._peek_char == "/":
                    self._advance()  # *
                    self._advance()  # /
                    return True
                self._advance()

        return False

    def _read_number(self) -> Token:
        """
        Read an integer literal and its optional type suffix.

        Handles:
            42, 1_000, 255u8, 70000u32

        Returns:
            An INTEGER token whose value is a ``(int, IntegerType)`` pair.
        """
        start_loc = self._location()
        digits: list[str] = []

        while self._current_char is not None and (
            self._current_char.isdigit() or self._current_char == "_"
        ):
            char = self._advance()
            if char != "_":
                digits.append(char)

        if self._previous_char() == "_":
            raise LexerError(
                "Integer literal cannot end with '_'",
                start_loc,
                self._current_line_text(),
            )

        value = int("".join(digits))
        int_type = DEFAULT_INTEGER_TYPE

        if self._current_char is not None and (
            self._current_char.isalpha() or self._current_char == "_"
        ):
            suffix_loc = self._location()
            suffix_chars: list[str] = []
            while self._current_char is not None and (
                self._current_char.isalnum() or self._current_char == "_"
            ):
                suffix_chars.append(self._advance())
            suffix = "".join(suffix_chars)
            try:
                int_type = IntegerType.from_suffix(suffix)
            except ValueError:
                raise LexerError(
                    f"Unknown integer type suffix: {suffix!r}",
                    suffix_loc,
                    self._current_line_text(),
                ) from None

        if not int_type.contains(value):
            raise LexerError(
                f"Integer literal {value} is out of range for {int_type} "
                f"({int_type.min_value}..={int_type.max_value})",
                start_loc,
                self._current_line_text(),
            )

        return Token(TokenType.INTEGER, (value, int_type), start_loc)

    def _previous_char(self) -> Optional[str]:
        if self.pos == 0:
            return None
        return self.source[self.pos - 1]

    def _read_identifier_or_keyword(self) -> Token:
        """Read an identifier or keyword."""
        start_loc = self._location()
        chars: list[str] = []

        while self._current_char is not None and (
            self._current_char.isalnum() or self._current_char == "_"
        ):
            chars.append(self._advance())

        text = "".join(chars)
        token_type = KEYWORDS.get(text, TokenType.IDENTIFIER)
        return Token(token_type, text, start_loc)

    def _next_token(self) -> Token:
        """
        Extract the next token from the source.

        Returns:
            The next token; EOF once the source is exhausted.
        """
        while True:
            self._skip_whitespace()

            if self._skip_line_comment():
                continue

            if self._skip_multiline_comment():
                continue

            break

        if self._current_char is None:
            return Token(TokenType.EOF, None, self._location())

        if self._current_char.isdigit():
            return self._read_number()

        if self._current_char.isalpha() or self._current_char == "_":
            return self._read_identifier_or_keyword()

        if self._current_char in SINGLE_CHAR_TOKENS:
            start_loc = self._location()
            char = self._advance()
            return Token(SINGLE_CHAR_TOKENS[char], char, start_loc)

        # Unknown character
        raise LexerError(
            f"Unexpected character: {self._current_char!r}",
            self._location(),
            self._current_line_text(),
        )

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source code.

        Returns:
            A list of all tokens including the final EOF token.
        """
        self.tokens = []
        self.pos = 0
        self.line = 1
        self.column = 1
        self._line_start = 0

        while True:
            token = self._next_token()
            self.tokens.append(token)
            if token.type == TokenType.EOF:
                break

        return self.tokens

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens (re-tokenizes if necessary)."""
        if not self.tokens:
            self.tokenize()
        return iter(self.tokens)


def tokenize(source: str, filename: Optional[str] = None) -> list[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: Leo source code
        filename: Optional filename for error reporting

    Returns:
        List of tokens
    """
    return Lexer(source, filename).tokenize()
