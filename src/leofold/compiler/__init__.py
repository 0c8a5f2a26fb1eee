"""
leofold Compiler Package.

This package contains the compiler components:
- Lexer: Tokenizes Leo source code
- Parser: Produces an Abstract Syntax Tree from tokens
- AST: Node definitions for the syntax tree
- ConstantFolder: Evaluates constant sub-expressions at compile time
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from leofold.compiler.ast_nodes import (
    AssignStatement,
    BinaryExpression,
    Expression,
    Identifier,
    Input,
    IntegerLiteral,
    IntegerType,
    NestedExpression,
    Operator,
    Program,
    Statement,
    Value,
    ValueExpression,
)
from leofold.compiler.const_fold import (
    ConstantFolder,
    FoldResult,
    evaluate_binary,
    fold_constants,
    fold_expression,
    fold_value,
)
from leofold.compiler.lexer import Lexer, tokenize
from leofold.compiler.parser import Parser
from leofold.utils.errors import FoldError


@dataclass
class OptimizationResult:
    """
    Result of running the optimizer over one source file.

    Attributes:
        program: The parsed program, folded in place when folding ran
        errors: Fold errors in statement order
        folded: Whether constant folding was applied
    """

    program: Program
    errors: list[FoldError] = field(default_factory=list)
    folded: bool = False

    @property
    def success(self) -> bool:
        return not self.errors


def parse_source(source: str, filename: str = "<input>") -> Program:
    """
    Lex and parse Leo source code.

    Raises:
        LexerError: On invalid characters or literals
        ParserError: On syntax errors
    """
    tokens = Lexer(source, filename).tokenize()
    return Parser(tokens, source=source).parse()


def parse_file(filepath: str | Path) -> Program:
    """Read and parse a Leo file."""
    path = Path(filepath)
    source = path.read_text(encoding="utf-8")
    return parse_source(source, str(path))


def optimize_source(
    source: str,
    filename: str = "<input>",
    constant_fold: bool = True,
) -> OptimizationResult:
    """
    Parse Leo source and optionally fold its constants.

    Fold errors are returned, not raised; lexer and parser errors propagate.

    Args:
        source: Leo source code string
        filename: Filename for error reporting
        constant_fold: Whether to run the constant folder

    Returns:
        An OptimizationResult holding the (possibly partially folded) program
    """
    program = parse_source(source, filename)
    if not constant_fold:
        return OptimizationResult(program)

    result = fold_constants(program)
    return OptimizationResult(program, list(result.errors), folded=True)


def optimize_file(filepath: str | Path, constant_fold: bool = True) -> OptimizationResult:
    """Read a Leo file and optimize it. See ``optimize_source``."""
    path = Path(filepath)
    return optimize_source(path.read_text(encoding="utf-8"), str(path), constant_fold)


__all__ = [
    # AST
    "AssignStatement",
    "BinaryExpression",
    "Expression",
    "Identifier",
    "Input",
    "IntegerLiteral",
    "IntegerType",
    "NestedExpression",
    "Operator",
    "Program",
    "Statement",
    "Value",
    "ValueExpression",
    # Front end
    "Lexer",
    "Parser",
    "tokenize",
    "parse_source",
    "parse_file",
    # Folding
    "ConstantFolder",
    "FoldResult",
    "evaluate_binary",
    "fold_constants",
    "fold_expression",
    "fold_value",
    # Pipeline
    "OptimizationResult",
    "optimize_source",
    "optimize_file",
]
