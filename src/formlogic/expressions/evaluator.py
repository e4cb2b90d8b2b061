"""Tree-walking evaluator and the public evaluation entry points.

`evaluate` is total: parse errors, type mismatches and failing functions
all come back as an `EvaluationFailure` instead of an exception. Boolean,
number and string conveniences narrow the outcome further for callers that
only need a decision.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from formlogic.context import EvaluationContext
from formlogic.exceptions import ExpressionError
from formlogic.expressions.ast import (
    BinaryExpr,
    BinaryOp,
    Expr,
    FuncCall,
    IfExpr,
    Index,
    InExpr,
    ListExpr,
    Literal,
    Member,
    Name,
    UnaryExpr,
    UnaryOp,
)
from formlogic.expressions.functions import align_temporal, call_function, is_number, values_equal
from formlogic.expressions.parser import parse_expression
from formlogic.logging import get_logger

logger = get_logger(__name__)

_NULL_MESSAGE = (
    "Expression returned null, a referenced field is probably undefined. "
    "Use null-safe patterns such as (field != null and field > 0)"
)


@dataclass(frozen=True)
class EvaluationSuccess:
    """Successful evaluation outcome."""

    value: Any
    success: bool = field(default=True, init=False)


@dataclass(frozen=True)
class EvaluationFailure:
    """Failed evaluation outcome with a human-readable reason."""

    error: str
    success: bool = field(default=False, init=False)


EvaluationResult = EvaluationSuccess | EvaluationFailure


def _type_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "list"
    if isinstance(value, Mapping):
        return "context"
    if isinstance(value, (date, datetime)):
        return "date"
    return type(value).__name__


def _compare(op: BinaryOp, left: Any, right: Any) -> bool | None:
    if left is None or right is None:
        return None
    left, right = align_temporal(left, right)
    comparable = (
        (is_number(left) and is_number(right))
        or (isinstance(left, str) and isinstance(right, str))
        or (isinstance(left, date) and isinstance(right, date))
    )
    if not comparable:
        raise ExpressionError(f"Cannot compare {_type_name(left)} {op} {_type_name(right)}")
    if op == BinaryOp.LT:
        return left < right
    if op == BinaryOp.LE:
        return left <= right
    if op == BinaryOp.GT:
        return left > right
    return left >= right


def _arithmetic(op: BinaryOp, left: Any, right: Any) -> Any:
    if left is None or right is None:
        return None
    if op == BinaryOp.ADD and isinstance(left, str) and isinstance(right, str):
        return left + right
    if not (is_number(left) and is_number(right)):
        raise ExpressionError(f"Cannot apply {op} to {_type_name(left)} and {_type_name(right)}")
    if op == BinaryOp.ADD:
        return left + right
    if op == BinaryOp.SUB:
        return left - right
    if op == BinaryOp.MUL:
        return left * right
    if right == 0:
        raise ExpressionError("Division by zero")
    return left / right


def _logical(op: BinaryOp, left: Any, right_thunk: Any) -> bool | None:
    """Three-valued and/or; non-boolean operands count as null."""
    decisive = op == BinaryOp.OR
    left = left if isinstance(left, bool) else None
    if left is decisive:
        return decisive
    right = right_thunk()
    right = right if isinstance(right, bool) else None
    if right is decisive:
        return decisive
    if left is None or right is None:
        return None
    return not decisive


class _Evaluator:
    """Evaluate an AST against one context scope."""

    def __init__(self, context: EvaluationContext) -> None:
        self.scope = context.scope()

    def eval(self, expr: Expr) -> Any:  # noqa: PLR0911
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Name):
            return self.scope.get(expr.name)
        if isinstance(expr, Member):
            return self._member(self.eval(expr.target), expr.name)
        if isinstance(expr, Index):
            return self._index(self.eval(expr.target), self.eval(expr.index))
        if isinstance(expr, ListExpr):
            return [self.eval(item) for item in expr.items]
        if isinstance(expr, UnaryExpr):
            return self._unary(expr)
        if isinstance(expr, BinaryExpr):
            return self._binary(expr)
        if isinstance(expr, InExpr):
            return self._membership(expr)
        if isinstance(expr, FuncCall):
            return call_function(expr.name, [self.eval(arg) for arg in expr.args])
        if isinstance(expr, IfExpr):
            condition = self.eval(expr.condition)
            return self.eval(expr.then_expr if condition is True else expr.else_expr)
        raise ExpressionError(f"Unsupported expression node: {type(expr).__name__}")

    @staticmethod
    def _member(target: Any, name: str) -> Any:
        if isinstance(target, Mapping):
            return target.get(name)
        if isinstance(target, list):
            # Path projection over a list of contexts (``items.price``).
            return [element.get(name) if isinstance(element, Mapping) else None for element in target]
        return None

    @staticmethod
    def _index(target: Any, index: Any) -> Any:
        if target is None or index is None:
            return None
        if isinstance(target, Mapping):
            return target.get(str(index))
        if isinstance(target, list):
            if not is_number(index) or int(index) != index:
                raise ExpressionError(f"List index must be a whole number, got {_type_name(index)}")
            position = int(index)
            if position == 0 or abs(position) > len(target):
                return None
            return target[position - 1] if position > 0 else target[position]
        raise ExpressionError(f"Cannot index {_type_name(target)}")

    def _unary(self, expr: UnaryExpr) -> Any:
        operand = self.eval(expr.operand)
        if operand is None:
            return None
        if expr.op == UnaryOp.NOT:
            if not isinstance(operand, bool):
                raise ExpressionError(f"not() requires a boolean, got {_type_name(operand)}")
            return not operand
        if not is_number(operand):
            raise ExpressionError(f"Cannot negate {_type_name(operand)}")
        return -operand

    def _binary(self, expr: BinaryExpr) -> Any:
        op = expr.op
        if op in (BinaryOp.AND, BinaryOp.OR):
            return _logical(op, self.eval(expr.left), lambda: self.eval(expr.right))
        left = self.eval(expr.left)
        right = self.eval(expr.right)
        if op == BinaryOp.EQ:
            return values_equal(left, right)
        if op == BinaryOp.NE:
            return not values_equal(left, right)
        if op in (BinaryOp.LT, BinaryOp.LE, BinaryOp.GT, BinaryOp.GE):
            return _compare(op, left, right)
        return _arithmetic(op, left, right)

    def _membership(self, expr: InExpr) -> bool | None:
        value = self.eval(expr.value)
        container = self.eval(expr.container)
        if container is None:
            return None
        if isinstance(container, list):
            found = any(values_equal(value, element) for element in container)
        elif isinstance(container, str):
            if value is None:
                return None
            if not isinstance(value, str):
                raise ExpressionError(f"Cannot search a string for {_type_name(value)}")
            found = value in container
        elif isinstance(container, Mapping):
            found = value in container
        else:
            raise ExpressionError(f"Cannot test membership in {_type_name(container)}")
        return not found if expr.negated else found


def _coerce_context(context: EvaluationContext | Mapping[str, Any] | None) -> EvaluationContext:
    if isinstance(context, EvaluationContext):
        return context
    return EvaluationContext(data=context or {})


def evaluate(expression: str, context: EvaluationContext | Mapping[str, Any] | None = None) -> EvaluationResult:
    """Evaluate an expression against a context without ever raising.

    Args:
        expression (str): Expression text.
        context (EvaluationContext | Mapping[str, Any] | None): Evaluation
            context, or a plain data mapping.

    Returns:
        EvaluationResult: Success with the value, or failure with a message.
    """
    if not isinstance(expression, str):
        return EvaluationFailure(error=f"Expression must be a string, got {type(expression).__name__}")
    try:
        expr = parse_expression(expression)
        value = _Evaluator(_coerce_context(context)).eval(expr)
    except ExpressionError as exc:
        return EvaluationFailure(error=str(exc))
    except (TypeError, ValueError, ArithmeticError, RecursionError) as exc:
        return EvaluationFailure(error=f"Evaluation error: {exc}")
    return EvaluationSuccess(value=value)


def evaluate_boolean(expression: str, context: EvaluationContext | Mapping[str, Any] | None = None) -> bool:
    """Evaluate a condition; anything but boolean ``true`` is ``False``.

    Null results, non-boolean results and failures are logged as warnings
    so that authoring mistakes stay visible without breaking the form.

    Args:
        expression (str): Condition expression.
        context (EvaluationContext | Mapping[str, Any] | None): Evaluation context.

    Returns:
        bool: Decision.
    """
    result = evaluate(expression, context)
    if isinstance(result, EvaluationFailure):
        logger.warning("Expression evaluation failed", extra={"expression": expression, "error": result.error})
        return False
    if result.value is None:
        logger.warning(
            _NULL_MESSAGE,
            extra={"expression": expression},
        )
        return False
    if not isinstance(result.value, bool):
        logger.warning(
            "Expression did not return boolean",
            extra={"expression": expression, "type": _type_name(result.value)},
        )
        return False
    return result.value


def evaluate_number(
    expression: str,
    context: EvaluationContext | Mapping[str, Any] | None = None,
) -> int | float | None:
    """Evaluate an expression expected to yield a number.

    Numeric strings are converted; failures and other values give ``None``.
    """
    result = evaluate(expression, context)
    if isinstance(result, EvaluationFailure):
        return None
    value = result.value
    if isinstance(value, str):
        value = call_function("number", [value])
    if not is_number(value) or (isinstance(value, float) and not math.isfinite(value)):
        if result.value is not None:
            logger.debug("Expression did not return number", extra={"expression": expression})
        return None
    return value


def evaluate_string(expression: str, context: EvaluationContext | Mapping[str, Any] | None = None) -> str | None:
    """Evaluate an expression and render a scalar result as a string.

    Booleans render as ``true``/``false`` and dates in ISO form. Failures,
    null, lists and contexts give ``None``.
    """
    result = evaluate(expression, context)
    if isinstance(result, EvaluationFailure) or result.value is None:
        return None
    if isinstance(result.value, (list, Mapping)):
        logger.debug(
            "Expression did not return a scalar",
            extra={"expression": expression, "type": _type_name(result.value)},
        )
        return None
    return call_function("string", [result.value])


def evaluate_boolean_batch(
    expressions: Mapping[str, str],
    context: EvaluationContext | Mapping[str, Any] | None = None,
) -> dict[str, bool]:
    """Evaluate several named conditions against the same context.

    Args:
        expressions (Mapping[str, str]): Name to condition expression.
        context (EvaluationContext | Mapping[str, Any] | None): Shared context.

    Returns:
        dict[str, bool]: Name to decision.
    """
    shared = _coerce_context(context)
    return {key: evaluate_boolean(expression, shared) for key, expression in expressions.items()}


def validate_expression(expression: str) -> str | None:
    """Return the parse error message of an expression, or ``None`` when it parses."""
    try:
        parse_expression(expression)
    except ExpressionError as exc:
        return str(exc)
    except RecursionError:
        return "Expression is nested too deeply"
    return None


def is_valid_expression(expression: str) -> bool:
    """Parse-only syntax check for authoring tools."""
    return validate_expression(expression) is None
