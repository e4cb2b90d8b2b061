"""Built-in functions of the expression language (closed set).

Every function receives already-evaluated arguments. Unless stated
otherwise a null argument makes the result null.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any

from formlogic.exceptions import ExpressionError


def is_number(value: object) -> bool:
    """Return whether a value is a real number (booleans excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_temporal(value: Any, other: Any) -> Any:
    """Coerce an ISO string to the temporal type of the other operand."""
    if not isinstance(value, str) or not isinstance(other, date):
        return value
    try:
        if isinstance(other, datetime):
            return datetime.fromisoformat(value)
        return date.fromisoformat(value[:10])
    except ValueError:
        return value


def align_temporal(left: Any, right: Any) -> tuple[Any, Any]:
    """Bring a date/string or date/datetime pair to a comparable form."""
    left, right = _as_temporal(left, right), _as_temporal(right, left)
    if isinstance(left, datetime) and type(right) is date:
        return left.date(), right
    if isinstance(right, datetime) and type(left) is date:
        return left, right.date()
    return left, right


def values_equal(left: Any, right: Any) -> bool:
    """Null-safe, type-aware equality used by ``=``, ``!=`` and ``in``.

    Booleans never equal numbers, so ``true`` does not match ``1``.
    """
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) and is_number(right):
        return left == right
    left, right = align_temporal(left, right)
    if type(left) is not type(right) and not (isinstance(left, Mapping) and isinstance(right, Mapping)):
        return False
    return left == right


@dataclass(frozen=True)
class Builtin:
    """Registered function with its arity bounds."""

    name: str
    impl: Callable[..., Any]
    min_args: int
    max_args: int | None
    null_safe: bool = True

    def __call__(self, args: Sequence[Any]) -> Any:
        """Check arity then apply the function.

        Args:
            args (Sequence[Any]): Evaluated arguments.

        Raises:
            ExpressionError: On arity mismatch.

        Returns:
            Any: Function result.
        """
        if len(args) < self.min_args or (self.max_args is not None and len(args) > self.max_args):
            raise ExpressionError(f"{self.name}() takes {self._arity_text()} argument(s), got {len(args)}")
        if self.null_safe and any(arg is None for arg in args):
            return None
        return self.impl(*args)

    def _arity_text(self) -> str:
        if self.max_args is None:
            return f"at least {self.min_args}"
        if self.min_args == self.max_args:
            return str(self.min_args)
        return f"{self.min_args} to {self.max_args}"


def _require(name: str, value: object, check: Callable[[object], bool], expected: str) -> None:
    if not check(value):
        raise ExpressionError(f"{name}() requires {expected}, got {type(value).__name__}")


def _is_str(value: object) -> bool:
    return isinstance(value, str)


def _is_list(value: object) -> bool:
    return isinstance(value, list)


def _string_length(value: Any) -> int:
    _require("string length", value, _is_str, "a string")
    return len(value)


def _upper_case(value: Any) -> str:
    _require("upper case", value, _is_str, "a string")
    return value.upper()


def _lower_case(value: Any) -> str:
    _require("lower case", value, _is_str, "a string")
    return value.lower()


def _substring(value: Any, start: Any, length: Any = None) -> str:
    _require("substring", value, _is_str, "a string")
    _require("substring", start, is_number, "a numeric start position")
    begin = int(start) - 1 if start > 0 else len(value) + int(start)
    begin = max(begin, 0)
    if length is None:
        return value[begin:]
    _require("substring", length, is_number, "a numeric length")
    return value[begin : begin + int(length)]


def _contains(value: Any, match: Any) -> bool:
    _require("contains", value, _is_str, "a string")
    _require("contains", match, _is_str, "a string")
    return match in value


def _starts_with(value: Any, match: Any) -> bool:
    _require("starts with", value, _is_str, "a string")
    _require("starts with", match, _is_str, "a string")
    return value.startswith(match)


def _ends_with(value: Any, match: Any) -> bool:
    _require("ends with", value, _is_str, "a string")
    _require("ends with", match, _is_str, "a string")
    return value.endswith(match)


def _string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _number(value: Any) -> int | float | None:
    if is_number(value):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _numbers_of(name: str, args: Sequence[Any]) -> list[int | float]:
    values = args[0] if len(args) == 1 and isinstance(args[0], list) else list(args)
    numbers = [value for value in values if value is not None]
    for value in numbers:
        _require(name, value, is_number, "numbers")
    return numbers


def _count(values: Any) -> int:
    _require("count", values, _is_list, "a list")
    return len(values)


def _sum(values: Any) -> int | float:
    _require("sum", values, _is_list, "a list")
    return sum(_numbers_of("sum", [values]))


def _mean(values: Any) -> float | None:
    _require("mean", values, _is_list, "a list")
    numbers = _numbers_of("mean", [values])
    return sum(numbers) / len(numbers) if numbers else None


def _min(*args: Any) -> Any:
    numbers = _numbers_of("min", args)
    return min(numbers) if numbers else None


def _max(*args: Any) -> Any:
    numbers = _numbers_of("max", args)
    return max(numbers) if numbers else None


def _abs(value: Any) -> int | float:
    _require("abs", value, is_number, "a number")
    return abs(value)


def _floor(value: Any) -> int:
    _require("floor", value, is_number, "a number")
    return math.floor(value)


def _ceiling(value: Any) -> int:
    _require("ceiling", value, is_number, "a number")
    return math.ceil(value)


def _round(value: Any, digits: Any = 0) -> int | float:
    _require("round", value, is_number, "a number")
    _require("round", digits, is_number, "numeric digits")
    rounded = round(value, int(digits))
    return int(rounded) if int(digits) == 0 else rounded


def _decimal(value: Any, scale: Any) -> float:
    _require("decimal", value, is_number, "a number")
    _require("decimal", scale, is_number, "a numeric scale")
    try:
        quantized = Decimal(str(value)).quantize(Decimal(1).scaleb(-int(scale)), rounding=ROUND_HALF_EVEN)
    except InvalidOperation as exc:
        raise ExpressionError(f"decimal() cannot scale {value!r}") from exc
    return float(quantized)


def _modulo(dividend: Any, divisor: Any) -> int | float:
    _require("modulo", dividend, is_number, "numbers")
    _require("modulo", divisor, is_number, "numbers")
    if divisor == 0:
        raise ExpressionError("Modulo by zero")
    return dividend % divisor


def _list_contains(values: Any, element: Any) -> bool:
    _require("list contains", values, _is_list, "a list")
    return any(values_equal(item, element) for item in values)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, dict)):
        return len(value.strip() if isinstance(value, str) else value) == 0
    return False


def _today() -> date:
    return date.today()  # noqa: DTZ011


def _now() -> datetime:
    return datetime.now()  # noqa: DTZ005


def _date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    _require("date", value, _is_str, "an ISO date string")
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError as exc:
        raise ExpressionError(f"date() cannot parse {value!r}") from exc


_BUILTINS = (
    Builtin("string length", _string_length, 1, 1),
    Builtin("upper case", _upper_case, 1, 1),
    Builtin("lower case", _lower_case, 1, 1),
    Builtin("substring", _substring, 2, 3),
    Builtin("contains", _contains, 2, 2),
    Builtin("starts with", _starts_with, 2, 2),
    Builtin("ends with", _ends_with, 2, 2),
    Builtin("string", _string, 1, 1),
    Builtin("number", _number, 1, 1),
    Builtin("count", _count, 1, 1),
    Builtin("sum", _sum, 1, 1),
    Builtin("mean", _mean, 1, 1),
    Builtin("min", _min, 1, None, null_safe=False),
    Builtin("max", _max, 1, None, null_safe=False),
    Builtin("abs", _abs, 1, 1),
    Builtin("floor", _floor, 1, 1),
    Builtin("ceiling", _ceiling, 1, 1),
    Builtin("round", _round, 1, 2),
    Builtin("decimal", _decimal, 2, 2),
    Builtin("modulo", _modulo, 2, 2),
    Builtin("list contains", _list_contains, 2, 2),
    Builtin("is empty", _is_empty, 1, 1, null_safe=False),
    Builtin("today", _today, 0, 0),
    Builtin("now", _now, 0, 0),
    Builtin("date", _date, 1, 1),
)

FUNCTIONS: dict[str, Builtin] = {builtin.name: builtin for builtin in _BUILTINS}


def call_function(name: str, args: Sequence[Any]) -> Any:
    """Invoke a built-in by name.

    Args:
        name (str): Function name as written in the expression.
        args (Sequence[Any]): Evaluated arguments.

    Raises:
        ExpressionError: If the function is unknown or its arguments are invalid.

    Returns:
        Any: Function result.
    """
    builtin = FUNCTIONS.get(name)
    if builtin is None:
        raise ExpressionError(f"Unknown function: {name}()")
    return builtin(args)
