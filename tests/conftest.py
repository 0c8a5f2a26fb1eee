"""
Pytest configuration and shared fixtures for leofold tests.
"""

import pytest

from leofold.compiler.ast_nodes import (
    AssignStatement,
    Expression,
    Program,
    ValueExpression,
    IntegerLiteral,
)
from leofold.compiler.lexer import Lexer
from leofold.compiler.parser import Parser
from leofold.compiler.tokens import Token


@pytest.fixture
def lexer_factory():
    """Factory fixture for creating lexers."""

    def _create_lexer(source: str, filename: str = "test.leo") -> Lexer:
        return Lexer(source, filename)

    return _create_lexer


@pytest.fixture
def parser_factory(lexer_factory):
    """Factory fixture for creating parsers from source."""

    def _create_parser(source: str) -> Parser:
        lexer = lexer_factory(source)
        tokens = lexer.tokenize()
        return Parser(tokens, source=source)

    return _create_parser


@pytest.fixture
def tokenize(lexer_factory):
    """Fixture to tokenize source code."""

    def _tokenize(source: str) -> list[Token]:
        lexer = lexer_factory(source)
        return lexer.tokenize()

    return _tokenize


@pytest.fixture
def parse(parser_factory):
    """Fixture to parse source code into AST."""

    def _parse(source: str) -> Program:
        parser = parser_factory(source)
        return parser.parse()

    return _parse


@pytest.fixture
def parse_main(parse):
    """Fixture to parse let-statements wrapped in ``function main() { ... }``."""

    def _parse_main(*lines: str) -> Program:
        body = "".join(f"    {line}\n" for line in lines)
        return parse(f"function main() {{\n{body}}}\n")

    return _parse_main


@pytest.fixture
def folded_values():
    """Fixture returning the integer each statement of a program folded to."""

    def _folded_values(program: Program) -> list[int]:
        values = []
        for index, stmt in enumerate(program.statements):
            assert isinstance(stmt, AssignStatement)
            expr: Expression = stmt.expression
            assert isinstance(expr, ValueExpression), (
                f"Expected folded constant at statement {index}, got: {expr!r}"
            )
            assert isinstance(expr.value, IntegerLiteral), (
                f"Expected folded Integer at statement {index}, got: {expr.value!r}"
            )
            values.append(expr.value.value)
        return values

    return _folded_values
