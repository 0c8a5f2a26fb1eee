"""
Unit tests for the leofold constant folder.

Tests cover:
- Folding of basic arithmetic
- Right-associative grouping and parentheses
- Deeply nested expressions and boundary values
- Overflow, underflow and division by zero
- Partial folding around identifiers
- Per-statement error aggregation
"""

import itertools
import sys

import pytest

from leofold.compiler.ast_nodes import (
    AssignStatement,
    BinaryExpression,
    Expression,
    Identifier,
    IntegerLiteral,
    IntegerType,
    NestedExpression,
    Operator,
    Program,
    Statement,
    ValueExpression,
    as_expression,
    binary,
)
from leofold.compiler.const_fold import (
    ConstantFolder,
    FoldResult,
    evaluate_binary,
    fold_constants,
    fold_expression,
    fold_value,
)
from leofold.formatter import format_expression
from leofold.utils.errors import (
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    DivisionByZeroError,
    FoldError,
    FoldErrorKind,
    FoldFailure,
    InvalidOperationError,
    SourceLocation,
    TypeMismatchError,
    UnsupportedExpressionError,
)


def u8(value: int) -> IntegerLiteral:
    return IntegerLiteral(value, IntegerType.U8)


class TestBasicFolding:
    """Tests for folding whole statements made of literals."""

    def test_fold_simple_addition(self, parse_main, folded_values):
        """1 + 2 folds to 3."""
        program = parse_main("let a = 1u8 + 2u8;")
        result = fold_constants(program)

        assert result.ok
        assert folded_values(program) == [3]

    def test_basic_arithmetic_operations(self, parse_main, folded_values):
        """Each of the four operators folds."""
        program = parse_main(
            "let a = 1u8 + 2u8;",
            "let b = 3u8 * 4u8;",
            "let c = 10u8 - 5u8;",
            "let d = 20u8 / 4u8;",
        )
        assert fold_constants(program)
        assert folded_values(program) == [3, 12, 5, 5]

    def test_order_of_operations_and_parentheses(self, parse_main, folded_values):
        """Chains group to the right; parentheses group to the left."""
        program = parse_main(
            "let a = 7u8 + 3u8 * 2u8;",
            "let b = (1u8 + 2u8) * (5u8 - 4u8);",
            "let c = 2u8 + (3u8 * (4u8 + 5u8));",
            "let d = (6u8 + 2u8) * (3u8 - 1u8);",
        )
        assert fold_constants(program)
        assert folded_values(program) == [13, 3, 29, 16]

    def test_nested_expressions(self, parse_main, folded_values):
        """Deeply nested expressions collapse to one literal."""
        program = parse_main(
            "let a = ((12u8 * 2u8) * 2u8) + 2u8 + (3u8 * (4u8 - 2u8));",
            "let b = (5u8 + 3u8) * (10u8 / 2u8);",
            "let c = 10u8 + (2u8 * (3u8 + 4u8));",
            "let d = (2u8 + 3u8) * ((4u8 - 1u8) / (2u8 + 1u8));",
            "let e = (1u8 + (2u8 * (3u8 + (4u8 * (5u8 - 1u8))))) + 6u8;",
            "let f = 255u8 - (1u8 * (2u8 + (3u8 * 4u8)));",
            "let g = ((10u8 / 2u8) * 3u8) + (4u8 * (2u8 + 1u8));",
        )
        assert fold_constants(program)
        assert folded_values(program) == [56, 40, 24, 5, 45, 241, 27]

    def test_smallest_and_largest_values(self, parse_main, folded_values):
        """Results at the edges of the u8 range are not errors."""
        program = parse_main(
            "let a = 0u8 + 0u8;",
            "let b = 255u8 + 0u8;",
            "let c = 255u8 * 1u8;",
            "let d = 0u8 * 255u8;",
            "let e = 255u8 - 255u8;",
            "let f = 0u8 - 0u8;",
            "let g = 255u8 / 1u8;",
            "let h = 255u8 / 255u8;",
        )
        assert fold_constants(program)
        assert folded_values(program) == [0, 255, 255, 0, 0, 0, 255, 1]

    def test_division_floors(self, parse_main, folded_values):
        """Integer division rounds toward zero."""
        program = parse_main("let a = 7u8 / 2u8;", "let b = 1u8 / 3u8;")
        assert fold_constants(program)
        assert folded_values(program) == [3, 0]

    def test_parenthesized_literal_unwraps(self, parse_main):
        """A parenthesized literal loses its parentheses."""
        program = parse_main("let a = ((42u8));")
        assert fold_constants(program)
        assert program.statements[0].expression == ValueExpression(u8(42))

    def test_statement_names_untouched(self, parse_main):
        """Folding only replaces expressions."""
        program = parse_main("let first = 1u8 + 1u8;", "let second = 2u8 * 2u8;")
        fold_constants(program)
        assert [s.name for s in program.statements] == ["first", "second"]

    def test_result_keeps_literal_type(self, parse_main):
        """The folded literal has the operands' type."""
        program = parse_main("let a = 300u16 + 1000u16;")
        assert fold_constants(program)
        literal = program.statements[0].expression.value
        assert literal == IntegerLiteral(1300, IntegerType.U16)

    def test_empty_program(self):
        """A program without statements folds trivially."""
        program = Program(name="main")
        result = fold_constants(program)
        assert result.ok
        assert result.errors == ()


class TestArithmeticErrors:
    """Tests for overflow, underflow and division by zero."""

    def test_overflow_and_underflow_handling(self, parse_main):
        """Each out-of-range statement reports its own error."""
        program = parse_main(
            "let a = 255u8 + 1u8;",
            "let b = 128u8 * 2u8;",
            "let c = 0u8 - 1u8;",
            "let d = 1u8 - 2u8;",
        )
        result = fold_constants(program)

        assert not result
        assert [type(e) for e in result.errors] == [
            ArithmeticOverflowError,
            ArithmeticOverflowError,
            ArithmeticUnderflowError,
            ArithmeticUnderflowError,
        ]

    def test_division_by_zero(self, parse_main):
        """Division by zero fails, including inside a nested right operand."""
        program = parse_main(
            "let a = 10u8 / 0u8;",
            "let b = 0u8 / 0u8;",
            "let c = 5u8 * (1u8 / 0u8);",
        )
        result = fold_constants(program)

        assert len(result.errors) == 3
        assert all(isinstance(e, DivisionByZeroError) for e in result.errors)

    def test_error_inside_left_operand(self, parse_main):
        """A failure in a nested left operand fails the statement."""
        program = parse_main("let a = (255u8 + 1u8) * 0u8;")
        result = fold_constants(program)
        assert isinstance(result.errors[0], ArithmeticOverflowError)

    def test_wider_types_do_not_overflow_at_u8(self, parse_main, folded_values):
        """Overflow is checked at the literal's own width."""
        program = parse_main("let a = 255u16 + 1u16;", "let b = 16u32 * 16u32;")
        assert fold_constants(program)
        assert folded_values(program) == [256, 256]

    def test_u16_overflow(self, parse_main):
        """u16 arithmetic overflows past 65535."""
        program = parse_main("let a = 65535u16 + 1u16;")
        result = fold_constants(program)
        assert isinstance(result.errors[0], ArithmeticOverflowError)

    def test_u128_overflow(self):
        """The widest type is checked too."""
        top = IntegerLiteral(IntegerType.U128.max_value, IntegerType.U128)
        one = IntegerLiteral(1, IntegerType.U128)
        with pytest.raises(ArithmeticOverflowError):
            evaluate_binary(top, Operator.ADD, one)

    def test_error_location_points_at_expression(self, parse_main):
        """Errors carry the location of the failing expression."""
        program = parse_main("let a = 1u8 + 1u8;", "let b = 10u8 / 0u8;")
        result = fold_constants(program)

        error = result.errors[0]
        assert error.location is not None
        assert error.location.line == 3
        assert error.location.column == 13

    def test_error_without_location_uses_statement(self):
        """Hand-built trees fall back to the statement's location."""
        loc = SourceLocation(line=7, column=5)
        stmt = AssignStatement("a", binary(1, Operator.DIV, 0), location=loc)
        result = fold_constants(Program("main", statements=[stmt]))
        assert result.errors[0].location == loc


class TestEvaluateBinary:
    """Tests for checked fixed-width arithmetic on two literals."""

    SAMPLES = [0, 1, 2, 15, 16, 127, 128, 254, 255]

    @pytest.mark.parametrize("a,b", list(itertools.product(SAMPLES, SAMPLES)))
    def test_u8_arithmetic_exactness(self, a, b):
        """Results match exact arithmetic or fail with the matching error."""
        cases = [
            (Operator.ADD, a + b, ArithmeticOverflowError),
            (Operator.SUB, a - b, ArithmeticUnderflowError),
            (Operator.MUL, a * b, ArithmeticOverflowError),
        ]
        for op, exact, error_type in cases:
            if 0 <= exact <= 255:
                assert evaluate_binary(u8(a), op, u8(b)).value == exact
            else:
                with pytest.raises(error_type):
                    evaluate_binary(u8(a), op, u8(b))

        if b == 0:
            with pytest.raises(DivisionByZeroError):
                evaluate_binary(u8(a), Operator.DIV, u8(b))
        else:
            assert evaluate_binary(u8(a), Operator.DIV, u8(b)).value == a // b

    def test_mixed_widths_mismatch(self):
        """Operands of different widths are a type mismatch."""
        with pytest.raises(TypeMismatchError) as excinfo:
            evaluate_binary(u8(1), Operator.ADD, IntegerLiteral(1, IntegerType.U16))

        assert excinfo.value.expected == "u8"
        assert excinfo.value.found == "u16"


class TestPartialFolding:
    """Tests for expressions that reference identifiers."""

    def test_identifier_left_folds_right(self):
        """A non-integer left operand keeps the node; the right side still folds."""
        expr = binary("x", Operator.ADD, NestedExpression(binary(2, Operator.MUL, 3)))
        folded = fold_expression(expr)

        assert folded == BinaryExpression(Identifier("x"), Operator.ADD, ValueExpression(u8(6)))
        assert format_expression(folded) == "x + 6u8"

    def test_identifier_alone_passes_through(self):
        """A bare identifier is returned unchanged."""
        expr = ValueExpression(Identifier("x"))
        assert fold_expression(expr) == expr

    def test_right_chain_with_identifier_is_rebuilt(self):
        """An integer left with an unresolved binary right is left as is."""
        expr = binary(1, Operator.ADD, binary("x", Operator.ADD, 2))
        folded = fold_expression(expr)

        assert isinstance(folded, BinaryExpression)
        assert folded == expr

    def test_integer_left_identifier_right_is_mismatch(self):
        """An integer left meeting a lone identifier on the right is an error."""
        expr = binary(1, Operator.ADD, "x")
        with pytest.raises(TypeMismatchError) as excinfo:
            fold_expression(expr)

        assert excinfo.value.expected == "Integer"
        assert excinfo.value.found == "Identifier(name='x')"
        assert str(excinfo.value) == (
            "Type mismatch: expected Integer, but found Identifier(name='x')"
        )

    def test_integer_left_nested_partial_right_is_mismatch(self):
        """A right side that collapsed to a partially folded group also mismatches."""
        expr = binary(1, Operator.ADD, NestedExpression(binary("x", Operator.ADD, 2)))
        with pytest.raises(TypeMismatchError):
            fold_expression(expr)

    def test_nested_partial_keeps_parentheses(self):
        """A group that cannot collapse stays wrapped, with its inside folded."""
        inner = NestedExpression(binary(2, Operator.MUL, 3))
        value = NestedExpression(binary("x", Operator.ADD, inner))
        folded = fold_value(value)

        assert isinstance(folded, NestedExpression)
        assert format_expression(ValueExpression(folded)) == "(x + 6u8)"

    def test_partial_statement_is_not_an_error(self, parse_main):
        """Statements that only partially fold still succeed."""
        program = parse_main("let a = y - (x + (2u8 * 3u8));")
        result = fold_constants(program)

        assert result.ok
        assert format_expression(program.statements[0].expression) == "y - (x + 6u8)"

    def test_fold_value_literals_unchanged(self):
        """Literals and identifiers are already folded."""
        literal = u8(9)
        name = Identifier("n")
        assert fold_value(literal) is literal
        assert fold_value(name) is name


class TestProgramFolding:
    """Tests for folding whole programs."""

    def test_failing_statement_in_the_middle(self, parse_main):
        """Other statements fold; the failing one is reported and kept."""
        program = parse_main(
            "let a = 1u8 + 2u8;",
            "let b = 10u8 / 0u8;",
            "let c = 2u8 * 3u8;",
        )
        original = program.statements[1].expression

        result = fold_constants(program)

        assert len(result.errors) == 1
        assert isinstance(result.errors[0], DivisionByZeroError)
        assert program.statements[0].expression == ValueExpression(u8(3))
        assert program.statements[1].expression is original
        assert program.statements[2].expression == ValueExpression(u8(6))

    def test_failed_statement_tree_is_unchanged(self, parse_main):
        """A failing statement keeps an identical tree, even where parts folded."""
        program = parse_main("let a = (1u8 + 2u8) * (255u8 + 1u8);")
        before = format_expression(program.statements[0].expression)
        original = program.statements[0].expression

        fold_constants(program)

        assert program.statements[0].expression is original
        assert format_expression(program.statements[0].expression) == before

    def test_statement_order_preserved(self, parse_main):
        """Statement order is unchanged whatever fails."""
        program = parse_main(
            "let a = 0u8 - 1u8;",
            "let b = 1u8;",
            "let c = 255u8 * 2u8;",
            "let d = x;",
        )
        fold_constants(program)
        assert [s.name for s in program.statements] == ["a", "b", "c", "d"]

    def test_errors_in_statement_order(self, parse_main):
        """One error per failing statement, in order."""
        program = parse_main(
            "let a = 0u8 - 1u8;",
            "let b = 1u8 + 1u8;",
            "let c = 1u8 / 0u8;",
            "let d = 200u8 + 100u8;",
        )
        result = fold_constants(program)
        assert [e.kind for e in result.errors] == [
            FoldErrorKind.UNDERFLOW,
            FoldErrorKind.DIVISION_BY_ZERO,
            FoldErrorKind.OVERFLOW,
        ]

    def test_folding_is_idempotent(self, parse_main):
        """Folding a fully folded program again changes nothing."""
        program = parse_main(
            "let a = (1u8 + 2u8) * (5u8 - 4u8);",
            "let b = 7u8 + 3u8 * 2u8;",
        )
        fold_constants(program)
        once = [s.expression for s in program.statements]

        assert fold_constants(program)
        assert [s.expression for s in program.statements] == once

    def test_unknown_statement_reported(self):
        """A statement kind the folder has no rule for is an invalid operation."""

        class Assert(Statement):
            location = None

        program = Program(
            "main",
            statements=[Assert(), AssignStatement("a", binary(1, Operator.ADD, 1))],
        )
        result = fold_constants(program)

        assert len(result.errors) == 1
        assert isinstance(result.errors[0], InvalidOperationError)
        assert str(result.errors[0]) == "Invalid operation: cannot fold statement Assert"
        assert program.statements[1].expression == ValueExpression(u8(2))

    def test_unknown_expression_reported(self):
        """An expression kind the folder has no rule for is unsupported."""

        class Call(Expression):
            location = None

            def __repr__(self) -> str:
                return "Call()"

        with pytest.raises(UnsupportedExpressionError) as excinfo:
            fold_expression(Call())
        assert str(excinfo.value) == "Unsupported expression: Call()"

    def test_constant_folder_class(self, parse_main):
        """ConstantFolder.optimize is the same as fold_constants."""
        program = parse_main("let a = 2u8 * 2u8;")
        folder = ConstantFolder()

        assert folder.name == "Constant Folding"
        assert folder.optimize(program).ok
        assert program.statements[0].expression == ValueExpression(u8(4))


class TestFoldResult:
    """Tests for the FoldResult container."""

    def test_success_is_truthy(self):
        """An empty result is a success."""
        result = FoldResult()
        assert result
        assert result.ok
        result.raise_on_error()

    def test_failure_raises_with_all_errors(self, parse_main):
        """raise_on_error carries every error."""
        program = parse_main("let a = 0u8 - 1u8;", "let b = 1u8 / 0u8;")
        result = fold_constants(program)

        with pytest.raises(FoldFailure) as excinfo:
            result.raise_on_error()

        assert excinfo.value.errors == result.errors
        assert "2 errors" in str(excinfo.value)
        assert "Division by zero" in str(excinfo.value)


class TestFoldErrors:
    """Tests for fold error messages and kinds."""

    def test_messages(self):
        """Each error renders its fixed message without the location."""
        loc = SourceLocation(line=2, column=9, filename="m.leo")
        assert str(ArithmeticOverflowError(loc)) == "Overflow occurred during operation"
        assert str(ArithmeticUnderflowError(loc)) == "Underflow occurred during operation"
        assert str(DivisionByZeroError(loc)) == "Division by zero"
        assert str(TypeMismatchError("u8", "u16", loc)) == (
            "Type mismatch: expected u8, but found u16"
        )

    def test_from_message(self):
        """A plain string failure becomes an invalid operation."""
        error = FoldError.from_message("bad input")
        assert isinstance(error, InvalidOperationError)
        assert error.kind is FoldErrorKind.INVALID_OPERATION
        assert str(error) == "Invalid operation: bad input"
        assert error.location is None

    def test_kinds(self):
        """Every concrete error has its own kind."""
        errors = [
            ArithmeticOverflowError(),
            ArithmeticUnderflowError(),
            DivisionByZeroError(),
            InvalidOperationError("x"),
            UnsupportedExpressionError(ValueExpression(u8(1))),
            TypeMismatchError("a", "b"),
        ]
        assert {e.kind for e in errors} == set(FoldErrorKind)


class TestDeepNesting:
    """Tests for trees deeper than the interpreter stack."""

    def test_deep_chain_reported_per_statement(self):
        """A too-deep statement fails alone; later statements still fold."""
        deep = as_expression(0)
        for _ in range(sys.getrecursionlimit() * 2):
            deep = BinaryExpression(u8(0), Operator.ADD, deep)

        loc = SourceLocation(line=2, column=5)
        program = Program(
            "main",
            statements=[
                AssignStatement("a", deep, location=loc),
                AssignStatement("b", binary(2, Operator.MUL, 3)),
            ],
        )

        result = fold_constants(program)

        assert len(result.errors) == 1
        error = result.errors[0]
        assert isinstance(error, InvalidOperationError)
        assert str(error) == "Invalid operation: expression nested too deeply"
        assert error.location == loc
        assert program.statements[0].expression is deep
        assert program.statements[1].expression == ValueExpression(u8(6))
