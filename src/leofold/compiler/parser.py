"""
leofold Parser.

A recursive descent parser that transforms a token stream into an Abstract
Syntax Tree (AST). The expression grammar has no precedence levels: a value
followed by an operator takes the whole remaining expression as its right
operand, so chains are right-associative and parentheses are the only way
to group to the left.

Grammar:
    program    := "function" IDENT "(" inputs? ")" "{" statement* "}"
    inputs     := input ("," input)*
    input      := IDENT ":" IDENT
    statement  := "let" IDENT "=" expression ";"
    expression := value (operator expression)?
    value      := INTEGER | IDENT | "(" expression ")"
"""

from typing import Optional

from leofold.compiler.ast_nodes import (
    AssignStatement,
    BinaryExpression,
    Expression,
    Identifier,
    Input,
    IntegerLiteral,
    NestedExpression,
    Operator,
    Program,
    Statement,
    Value,
    ValueExpression,
)
from leofold.compiler.tokens import Token, TokenType
from leofold.utils.errors import ParserError, SourceLocation


OPERATOR_MAP: dict[TokenType, Operator] = {
    TokenType.PLUS: Operator.ADD,
    TokenType.MINUS: Operator.SUB,
    TokenType.STAR: Operator.MUL,
    TokenType.SLASH: Operator.DIV,
}


class Parser:
    """
    Recursive descent parser for the Leo subset.

    Parses a list of tokens into an Abstract Syntax Tree.

    Usage:
        parser = Parser(tokens)
        ast = parser.parse()
    """

    def __init__(self, tokens: list[Token], source: str = "") -> None:
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer
            source: Optional source code, used to quote the offending line
        """
        self.tokens = tokens
        self.pos = 0
        self._source_lines: list[str] = source.splitlines() if source else []

    @property
    def _current(self) -> Token:
        """Get the current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[self.pos]

    def _is_at_end(self) -> bool:
        """Check if we've reached the end of tokens."""
        return self._current.type == TokenType.EOF

    def _check(self, *types: TokenType) -> bool:
        """Check if the current token is one of the given types."""
        return self._current.type in types

    def _advance(self) -> Token:
        """Consume and return the current token."""
        token = self._current
        if not self._is_at_end():
            self.pos += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        """Consume current token if it matches one of the given types."""
        if self._check(*types):
            self._advance()
            return True
        return False

    def _expect(self, token_type: TokenType, message: str) -> Token:
        """Consume current token if it matches, else raise error."""
        if self._check(token_type):
            return self._advance()
        raise self._error(message)

    def _source_line(self, location: Optional[SourceLocation]) -> Optional[str]:
        if location is None or not self._source_lines:
            return None
        index = location.line - 1
        if 0 <= index < len(self._source_lines):
            return self._source_lines[index]
        return None

    def _error(self, message: str) -> ParserError:
        """Create a parser error at the current token."""
        token = self._current
        found = "end of file" if token.type == TokenType.EOF else repr(token.value)
        return ParserError(
            f"{message}, found {found}",
            token.location,
            self._source_line(token.location),
        )

    def _error_too_deep(self) -> ParserError:
        """Create an error for input nested past the interpreter stack."""
        token = self._current
        return ParserError(
            "Expression nested too deeply",
            token.location,
            self._source_line(token.location),
        )

    def _error_unclosed_delimiter(self, delimiter: str, open_loc: SourceLocation) -> ParserError:
        """Create an error for an unclosed delimiter pointing at where it opened."""
        token = self._current
        return ParserError(
            f"Unclosed delimiter '{delimiter}' opened at {open_loc}",
            token.location,
            self._source_line(token.location),
        )

    # -------------------------------------------------------------------------
    # Program Parsing
    # -------------------------------------------------------------------------

    def parse(self) -> Program:
        """
        Parse the entire program.

        Returns:
            The root Program AST node.

        Raises:
            ParserError: On the first syntax error, or when the input nests
                deeper than the interpreter stack allows
        """
        try:
            return self._parse_program()
        except RecursionError:
            raise self._error_too_deep() from None

    def _parse_program(self) -> Program:
        loc = self._current.location
        self._expect(TokenType.FUNCTION, "Expected 'function'")
        name = self._expect(TokenType.IDENTIFIER, "Expected function name").value

        paren = self._expect(TokenType.LPAREN, "Expected '(' after function name")
        inputs = self._parse_inputs(paren.location)

        brace = self._expect(TokenType.LBRACE, "Expected '{' before function body")
        statements: list[Statement] = []
        while not self._check(TokenType.RBRACE):
            if self._is_at_end():
                raise self._error_unclosed_delimiter("{", brace.location)
            statements.append(self._parse_statement())
        self._advance()  # consume '}'

        if not self._is_at_end():
            raise self._error("Expected end of file after function body")

        return Program(name=name, inputs=inputs, statements=statements, location=loc)

    def _parse_inputs(self, open_loc: SourceLocation) -> list[Input]:
        """Parse the input list up to and including the closing ')'."""
        inputs: list[Input] = []
        if self._match(TokenType.RPAREN):
            return inputs

        while True:
            token = self._expect(TokenType.IDENTIFIER, "Expected input name")
            self._expect(TokenType.COLON, "Expected ':' after input name")
            type_name = self._expect(TokenType.IDENTIFIER, "Expected input type").value
            inputs.append(Input(token.value, type_name, location=token.location))

            if self._match(TokenType.COMMA):
                continue
            if self._match(TokenType.RPAREN):
                return inputs
            if self._is_at_end():
                raise self._error_unclosed_delimiter("(", open_loc)
            raise self._error("Expected ',' or ')' in input list")

    # -------------------------------------------------------------------------
    # Statement Parsing
    # -------------------------------------------------------------------------

    def _parse_statement(self) -> Statement:
        """
        Parse a let (assignment) statement.

        Handles:
            let x = expression;
        """
        loc = self._current.location
        self._expect(TokenType.LET, "Expected 'let'")
        name = self._expect(TokenType.IDENTIFIER, "Expected variable name").value
        self._expect(TokenType.ASSIGN, "Expected '=' after variable name")
        expression = self._parse_expression()
        self._expect(TokenType.SEMICOLON, "Expected ';' after expression")
        return AssignStatement(name=name, expression=expression, location=loc)

    # -------------------------------------------------------------------------
    # Expression Parsing
    # -------------------------------------------------------------------------

    def _parse_expression(self) -> Expression:
        """Parse a value optionally followed by an operator and the rest."""
        loc = self._current.location
        left = self._parse_value()

        operator = OPERATOR_MAP.get(self._current.type)
        if operator is None:
            return ValueExpression(left, location=loc)

        self._advance()
        right = self._parse_expression()
        return BinaryExpression(left, operator, right, location=loc)

    def _parse_value(self) -> Value:
        """Parse an integer literal, identifier or parenthesized expression."""
        token = self._current

        if self._match(TokenType.INTEGER):
            value, int_type = token.value
            return IntegerLiteral(value, int_type, location=token.location)

        if self._match(TokenType.IDENTIFIER):
            return Identifier(token.value, location=token.location)

        if self._match(TokenType.LPAREN):
            inner = self._parse_expression()
            if not self._match(TokenType.RPAREN):
                if self._is_at_end():
                    raise self._error_unclosed_delimiter("(", token.location)
                raise self._error("Expected ')' after expression")
            return NestedExpression(inner, location=token.location)

        raise self._error("Expected an integer, identifier or '('")

