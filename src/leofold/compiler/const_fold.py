"""
Constant Folding Optimizer for leofold.

Replaces every sub-expression whose operands are all integer literals with
the literal it evaluates to, at compile time:

    let a = 1u8 + 2u8;              ->  let a = 3u8;
    let b = (1u8 + 2u8) * (5u8 - 4u8);  ->  let b = 3u8;
    let c = x + (2u8 * 3u8);        ->  let c = x + 6u8;

Arithmetic is checked at the literal's declared width. Overflow, underflow
and division by zero are reported as errors instead of wrapping.

Each statement is folded independently. A statement that fails keeps its
original expression and contributes one error; the others are still folded.
Expression nodes are never mutated, only the statement's expression field is
replaced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from leofold.compiler.ast_nodes import (
    AssignStatement,
    BinaryExpression,
    Expression,
    Identifier,
    IntegerLiteral,
    NestedExpression,
    Operator,
    Program,
    Statement,
    Value,
    ValueExpression,
)
from leofold.utils.errors import (
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    DivisionByZeroError,
    FoldError,
    FoldFailure,
    InvalidOperationError,
    SourceLocation,
    TypeMismatchError,
    UnsupportedExpressionError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Fold Result
# =============================================================================


@dataclass(frozen=True)
class FoldResult:
    """
    Outcome of folding a whole program.

    ``errors`` holds one entry per failing statement, in statement order.
    An empty tuple means every statement folded. The result is truthy on
    success.
    """

    errors: tuple[FoldError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.ok

    def raise_on_error(self) -> None:
        """Raise FoldFailure carrying every error if any statement failed."""
        if self.errors:
            raise FoldFailure(self.errors)


# =============================================================================
# Integer Evaluation
# =============================================================================


def evaluate_binary(
    left: IntegerLiteral,
    operator: Operator,
    right: IntegerLiteral,
    location: SourceLocation | None = None,
) -> IntegerLiteral:
    """
    Apply ``operator`` to two literals using checked fixed-width arithmetic.

    Both operands must share one integer type; the result has that type.

    Raises:
        TypeMismatchError: The operands are declared with different widths
        ArithmeticOverflowError: The result exceeds the type's maximum
        ArithmeticUnderflowError: The result is below the type's minimum
        DivisionByZeroError: The divisor is zero
        InvalidOperationError: The operator is not arithmetic
    """
    int_type = left.type
    if right.type is not int_type:
        raise TypeMismatchError(str(int_type), str(right.type), location)

    a, b = left.value, right.value

    if operator is Operator.ADD:
        result = a + b
        if result > int_type.max_value:
            raise ArithmeticOverflowError(location)
    elif operator is Operator.SUB:
        result = a - b
        if result < int_type.min_value:
            raise ArithmeticUnderflowError(location)
    elif operator is Operator.MUL:
        result = a * b
        if result > int_type.max_value:
            raise ArithmeticOverflowError(location)
    elif operator is Operator.DIV:
        if b == 0:
            raise DivisionByZeroError(location)
        result = a // b
    else:
        raise InvalidOperationError(f"unknown operator {operator!r}", location)

    return IntegerLiteral(result, int_type, location=location)


# =============================================================================
# Recursive Folding
# =============================================================================


def fold_value(value: Value) -> Value:
    """
    Fold a single operand.

    Literals and identifiers are returned unchanged. A nested expression is
    folded; if it collapses to a single value the parentheses are dropped,
    otherwise the folded expression is re-wrapped.
    """
    if isinstance(value, (IntegerLiteral, Identifier)):
        return value

    if isinstance(value, NestedExpression):
        folded = fold_expression(value.expression)
        if isinstance(folded, ValueExpression):
            return folded.value
        return NestedExpression(folded, location=value.location)

    raise UnsupportedExpressionError(value, value.location)


def fold_expression(expression: Expression) -> Expression:
    """
    Return an expression at least as folded as ``expression``.

    For a binary node both sides are folded first. When the left side is an
    integer and the right side collapsed to a single integer, the operation
    is evaluated. When the left side is an integer and the right side
    collapsed to some other single value, that is a type mismatch. In every
    other case the node is rebuilt from its folded operands.

    Raises:
        FoldError: On the first arithmetic or type failure in the tree
    """
    if isinstance(expression, ValueExpression):
        return ValueExpression(fold_value(expression.value), location=expression.location)

    if isinstance(expression, BinaryExpression):
        folded_left = fold_value(expression.left)
        folded_right = fold_expression(expression.right)

        if isinstance(folded_left, IntegerLiteral) and isinstance(folded_right, ValueExpression):
            right_value = folded_right.value
            if not isinstance(right_value, IntegerLiteral):
                raise TypeMismatchError("Integer", repr(right_value), expression.location)

            result = evaluate_binary(
                folded_left,
                expression.operator,
                right_value,
                expression.location,
            )
            return ValueExpression(result, location=expression.location)

        return BinaryExpression(
            left=folded_left,
            operator=expression.operator,
            right=folded_right,
            location=expression.location,
        )

    raise UnsupportedExpressionError(expression, expression.location)


# =============================================================================
# Program Folding
# =============================================================================


class ConstantFolder:
    """
    Fold constant expressions in every statement of a program.

    The program is updated in place. Folding never stops at the first
    failing statement: errors are collected and returned together.

    Usage:
        folder = ConstantFolder()
        result = folder.fold(program)
        if not result:
            for error in result.errors: ...
    """

    @property
    def name(self) -> str:
        return "Constant Folding"

    def optimize(self, program: Program) -> FoldResult:
        """Apply constant folding to the entire program."""
        return self.fold(program)

    def fold(self, program: Program) -> FoldResult:
        """
        Fold each statement of ``program`` in place.

        Args:
            program: The program to fold; successful statements have their
                expression replaced

        Returns:
            A FoldResult holding one error per failing statement
        """
        errors: list[FoldError] = []

        for index, statement in enumerate(program.statements):
            error: FoldError
            try:
                self._fold_statement(statement)
                continue
            except RecursionError:
                error = InvalidOperationError("expression nested too deeply")
            except FoldError as exc:
                error = exc

            if error.location is None:
                error.location = getattr(statement, "location", None)
            logger.debug("statement %d of %s not folded: %s", index, program.name, error)
            errors.append(error)

        if errors:
            logger.debug(
                "folded %s with %d failing statement(s)", program.name, len(errors)
            )
        return FoldResult(tuple(errors))

    def _fold_statement(self, statement: Statement) -> None:
        if not isinstance(statement, AssignStatement):
            raise InvalidOperationError(
                f"cannot fold statement {type(statement).__name__}",
                getattr(statement, "location", None),
            )
        folded = fold_expression(statement.expression)
        logger.debug("folded %s = %r", statement.name, folded)
        statement.expression = folded


def fold_constants(program: Program) -> FoldResult:
    """
    Convenience function to fold constants in a program in place.

    Args:
        program: The input program AST

    Returns:
        A FoldResult; falsy if any statement failed
    """
    return ConstantFolder().fold(program)
