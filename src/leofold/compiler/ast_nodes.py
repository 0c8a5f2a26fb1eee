"""
Abstract Syntax Tree (AST) node definitions for leofold.

This module defines the node types of a parsed Leo program: a named
function holding typed inputs and a sequence of assignment statements over
arithmetic expressions. Expression and value nodes are immutable; an
assignment statement's expression is the only field the optimizer replaces.

Source locations are carried for error reporting but are excluded from
equality and repr, so two trees compare equal when their structure does.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from leofold.utils.errors import SourceLocation


class ASTNode:
    """Base class for all AST nodes."""

    location: Optional[SourceLocation]


def _location_field() -> Optional[SourceLocation]:
    return field(default=None, compare=False, repr=False)


# -----------------------------------------------------------------------------
# Integer Types
# -----------------------------------------------------------------------------


class IntegerType(Enum):
    """
    Fixed-width unsigned integer types a literal may be declared with.

    The enum value is the suffix used in source (``1u8``, ``40u32``).
    """

    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    U128 = "u128"

    @property
    def bits(self) -> int:
        return int(self.value[1:])

    @property
    def min_value(self) -> int:
        return 0

    @property
    def max_value(self) -> int:
        return (1 << self.bits) - 1

    def contains(self, value: int) -> bool:
        """Check whether ``value`` is representable in this type."""
        return self.min_value <= value <= self.max_value

    @classmethod
    def from_suffix(cls, suffix: str) -> "IntegerType":
        """Look up a type by its source suffix, raising ValueError if unknown."""
        return cls(suffix)

    def __str__(self) -> str:
        return self.value


DEFAULT_INTEGER_TYPE = IntegerType.U8


# -----------------------------------------------------------------------------
# Operators
# -----------------------------------------------------------------------------


class Operator(Enum):
    """
    Binary arithmetic operators.

    Precedence is not encoded here; the parser bakes grouping into the
    shape of the tree.
    """

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @property
    def symbol(self) -> str:
        return self.value


# -----------------------------------------------------------------------------
# Values
# -----------------------------------------------------------------------------


class Value(ASTNode):
    """Base class for operands: literals, identifiers and nested expressions."""

    pass


@dataclass(frozen=True, slots=True)
class IntegerLiteral(Value):
    """
    A fixed-width unsigned integer literal.

    Examples:
        1u8, 255u8, 1000u32
    """

    value: int
    type: IntegerType = DEFAULT_INTEGER_TYPE
    location: Optional[SourceLocation] = _location_field()

    def __post_init__(self) -> None:
        if not self.type.contains(self.value):
            raise ValueError(f"{self.value} is out of range for {self.type}")


@dataclass(frozen=True, slots=True)
class Identifier(Value):
    """
    An unresolved symbolic reference.

    Example:
        a, total, _tmp
    """

    name: str
    location: Optional[SourceLocation] = _location_field()


@dataclass(frozen=True, slots=True)
class NestedExpression(Value):
    """
    A parenthesized sub-expression used as an operand.

    Example:
        (1u8 + 2u8)
    """

    expression: Expression
    location: Optional[SourceLocation] = _location_field()


# -----------------------------------------------------------------------------
# Expressions
# -----------------------------------------------------------------------------


class Expression(ASTNode):
    """Base class for expressions."""

    pass


@dataclass(frozen=True, slots=True)
class ValueExpression(Expression):
    """An expression consisting of a single value."""

    value: Value
    location: Optional[SourceLocation] = _location_field()


@dataclass(frozen=True, slots=True)
class BinaryExpression(Expression):
    """
    A binary operation.

    The left operand is always a bare value and the right operand a full
    expression, so chains associate to the right:

        7u8 + 3u8 * 2u8   ->   7u8 + (3u8 * 2u8)
    """

    left: Value
    operator: Operator
    right: Expression
    location: Optional[SourceLocation] = _location_field()


# -----------------------------------------------------------------------------
# Statements
# -----------------------------------------------------------------------------


class Statement(ASTNode):
    """Base class for statements."""

    pass


@dataclass(slots=True)
class AssignStatement(Statement):
    """
    Bind a name to an expression.

    Example:
        let total = 1u8 + 2u8;
    """

    name: str
    expression: Expression
    location: Optional[SourceLocation] = _location_field()


# -----------------------------------------------------------------------------
# Program
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Input:
    """A typed function input. The type is kept as written."""

    name: str
    type_name: str
    location: Optional[SourceLocation] = _location_field()


@dataclass(slots=True)
class Program(ASTNode):
    """
    The root node of a Leo program.

    Statement order is evaluation order and is never changed by the
    optimizer.
    """

    name: str
    inputs: list[Input] = field(default_factory=list)
    statements: list[Statement] = field(default_factory=list)
    location: Optional[SourceLocation] = _location_field()


# -----------------------------------------------------------------------------
# Construction helpers
# -----------------------------------------------------------------------------


Operand = Union[Value, Expression, int, str]


def as_value(operand: Operand) -> Value:
    """
    Coerce a convenience operand into a Value.

    ints become u8 literals, strings become identifiers and expressions are
    wrapped as nested expressions.
    """
    if isinstance(operand, Value):
        return operand
    if isinstance(operand, Expression):
        return NestedExpression(operand)
    if isinstance(operand, bool):
        raise TypeError("bool is not a valid operand")
    if isinstance(operand, int):
        return IntegerLiteral(operand)
    if isinstance(operand, str):
        return Identifier(operand)
    raise TypeError(f"Cannot use {type(operand).__name__} as an operand")


def as_expression(operand: Operand) -> Expression:
    """Coerce a convenience operand into an Expression."""
    if isinstance(operand, Expression):
        return operand
    return ValueExpression(as_value(operand))


def binary(left: Operand, operator: Operator, right: Operand) -> BinaryExpression:
    """
    Build a binary expression from convenience operands.

    Example:
        binary(1, Operator.ADD, binary("x", Operator.MUL, 2))
    """
    return BinaryExpression(as_value(left), operator, as_expression(right))
