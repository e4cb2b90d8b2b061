from __future__ import annotations

from datetime import date

import pytest

from formlogic.context import EvaluationContext, build_context
from formlogic.expressions import (
    EvaluationFailure,
    EvaluationSuccess,
    evaluate,
    evaluate_boolean,
    evaluate_boolean_batch,
    evaluate_number,
    evaluate_string,
    is_valid_expression,
    validate_expression,
)
from formlogic.expressions import evaluator


def _value(expression: str, data: dict | None = None, **context: object) -> object:
    result = evaluate(expression, build_context(data or {}, **context))  # type: ignore[arg-type]
    assert isinstance(result, EvaluationSuccess), result
    return result.value


@pytest.mark.parametrize(
    ("data", "expected"),
    [({"age": 25}, True), ({"age": 16}, False), ({}, False)],
)
def test_age_condition(data: dict, expected: bool) -> None:
    assert evaluate_boolean("age >= 18", EvaluationContext(data=data)) is expected


def test_evaluate_returns_success_outcome() -> None:
    result = evaluate("price * quantity", {"price": 10, "quantity": 3})

    assert result.success is True
    assert isinstance(result, EvaluationSuccess)
    assert result.value == 30


def test_evaluate_never_raises_on_parse_error() -> None:
    result = evaluate("price *", {})

    assert result.success is False
    assert isinstance(result, EvaluationFailure)
    assert "end of expression" in result.error


def test_evaluate_rejects_non_string_expression() -> None:
    result = evaluate(None, {})  # type: ignore[arg-type]
    assert isinstance(result, EvaluationFailure)


def test_names_may_use_any_script() -> None:
    assert _value("café = 1", {"café": 1}) is True
    assert evaluate_boolean("prénom = 'Zoé'", {"prénom": "Zoé"}) is True
    assert _value("naïve_2 + 1", {"naïve_2": 1}) == 2


@pytest.mark.parametrize("expression", ["x = ²", "²", "x = ٣", "size > 1½"])
def test_non_ascii_digits_are_rejected(expression: str) -> None:
    result = evaluate(expression, {"x": 2})

    assert isinstance(result, EvaluationFailure)
    assert "Unexpected character" in result.error
    assert evaluate_boolean(expression, {"x": 2}) is False
    assert is_valid_expression(expression) is False


def test_missing_names_are_null() -> None:
    assert _value("missing") is None
    assert _value("address.city", {"address": {}}) is None
    assert _value("address.city", {}) is None


def test_equality_is_null_safe_and_type_aware() -> None:
    assert _value('email = null or email = ""', {"email": ""}) is True
    assert _value('email = null or email = ""', {"email": "a@b.com"}) is False
    assert _value("email = null", {}) is True
    assert _value("flag = 1", {"flag": True}) is False
    assert _value("count != 0", {"count": 0}) is False
    assert _value("1 = 1.0") is True
    assert _value('"1" = 1') is False


def test_ordering_with_null_is_null() -> None:
    assert _value("age > 18", {}) is None
    assert _value("age <= null", {"age": 3}) is None


def test_ordering_incompatible_types_fails() -> None:
    result = evaluate('age > "ten"', {"age": 3})
    assert isinstance(result, EvaluationFailure)
    assert "Cannot compare" in result.error


def test_three_valued_logic_short_circuits() -> None:
    assert _value("false and missing > 1") is False
    assert _value("true or 1 / 0 > 1") is True
    assert _value("true and missing > 1") is None
    assert _value("false or missing > 1") is None
    assert _value("not missing") is None
    assert _value("not (1 = 2)") is True


def test_arithmetic_semantics() -> None:
    assert _value("a + b", {"a": 2, "b": None}) is None
    assert _value("-a * 2", {"a": 4}) == -8
    assert _value('first + " " + last', {"first": "Ada", "last": "Lovelace"}) == "Ada Lovelace"
    assert _value("7 / 2") == 3.5


def test_arithmetic_failures() -> None:
    assert isinstance(evaluate("1 / 0", {}), EvaluationFailure)
    assert isinstance(evaluate('"a" * 2', {}), EvaluationFailure)
    assert isinstance(evaluate("flag + 1", {"flag": True}), EvaluationFailure)


def test_membership() -> None:
    assert _value('status in ["new", "open"]', {"status": "open"}) is True
    assert _value("status not in [1, 2]", {"status": 3}) is True
    assert _value('"@" in email', {"email": "a@b.com"}) is True
    assert _value("x in tags", {"x": "a"}) is None


def test_list_indexing_is_one_based() -> None:
    data = {"items": [10, 20, 30]}

    assert _value("items[1]", data) == 10
    assert _value("items[-1]", data) == 30
    assert _value("items[4]", data) is None
    assert _value("items[0]", data) is None


def test_member_access_projects_over_lists() -> None:
    data = {"lines": [{"price": 2}, {"price": 3}]}
    assert _value("sum(lines.price)", data) == 5


def test_reserved_roots() -> None:
    context = build_context(
        {"total": 5, "value": "data value"},
        {"subtotal": 100},
        {"rates": {"FR": 0.2}},
        item={"qty": 2},
        item_index=1,
    )

    assert evaluate("computed.subtotal + total", context).value == 105  # type: ignore[union-attr]
    assert evaluate('ref.rates["FR"]', context).value == 0.2  # type: ignore[union-attr]
    assert evaluate("item.qty * itemIndex", context).value == 2  # type: ignore[union-attr]
    assert evaluate("value", context).value == "data value"  # type: ignore[union-attr]
    assert evaluate("value", context.with_value(7)).value == 7  # type: ignore[union-attr]


def test_if_then_else() -> None:
    assert _value('if age >= 18 then "adult" else "minor"', {"age": 20}) == "adult"
    assert _value('if age >= 18 then "adult" else "minor"', {}) == "minor"


def test_dates_compare_with_iso_strings() -> None:
    assert _value('birth < date("2000-01-01")', {"birth": "1990-05-04"}) is True
    assert _value("start = date(start)", {"start": "2024-02-29"}) is True
    assert _value("today() > date(\"2000-01-01\")") is True
    assert isinstance(_value("today()"), date)


def test_unknown_function_is_a_failure() -> None:
    result = evaluate("shout(name)", {"name": "x"})
    assert isinstance(result, EvaluationFailure)
    assert "Unknown function" in result.error


def test_evaluate_boolean_logs_null_results(mocker) -> None:
    warning = mocker.patch.object(evaluator.logger, "warning")

    assert evaluate_boolean("age >= 18", {}) is False

    message = warning.call_args.args[0]
    assert "returned null" in message
    assert "null-safe patterns" in message


def test_evaluate_boolean_logs_non_boolean_results(mocker) -> None:
    warning = mocker.patch.object(evaluator.logger, "warning")

    assert evaluate_boolean("age", {"age": 3}) is False
    assert "did not return boolean" in warning.call_args.args[0]


def test_evaluate_boolean_swallows_failures(mocker) -> None:
    warning = mocker.patch.object(evaluator.logger, "warning")

    assert evaluate_boolean("1 / 0 > 1", {}) is False
    assert warning.call_args.kwargs["extra"]["error"] == "Division by zero"


def test_evaluate_number_and_string() -> None:
    assert evaluate_number("a * 2", {"a": 1.5}) == 3.0
    assert evaluate_number("amount", {"amount": "12.5"}) == 12.5
    assert evaluate_number("name", {"name": "abc"}) is None
    assert evaluate_number("1 / 0", {}) is None
    assert evaluate_string("a + 1", {"a": 1}) == "2"
    assert evaluate_string("flag", {"flag": True}) == "true"
    assert evaluate_string("missing", {}) is None


def test_evaluate_boolean_batch() -> None:
    result = evaluate_boolean_batch({"adult": "age >= 18", "named": "name != null"}, {"age": 30})
    assert result == {"adult": True, "named": False}


def test_parse_only_checks() -> None:
    assert is_valid_expression("undefined_field > 1") is True
    assert is_valid_expression("a >") is False
    assert validate_expression("a >") is not None
    assert validate_expression("a > 1") is None


def test_deeply_nested_expressions_fail_cleanly() -> None:
    deep = "(" * 2000 + "1" + ")" * 2000

    assert is_valid_expression(deep) is False
    assert validate_expression(deep) == "Expression is nested too deeply"
    assert isinstance(evaluate(deep, {}), EvaluationFailure)


def test_evaluate_string_renders_scalars_only(mocker) -> None:
    debug = mocker.patch.object(evaluator.logger, "debug")

    assert evaluate_string("born", {"born": date(2024, 2, 29)}) == "2024-02-29"
    debug.assert_not_called()
    assert evaluate_string("[1, 2]", {}) is None
    assert evaluate_string("address", {"address": {"city": "Lyon"}}) is None

    assert debug.call_count == 2
    assert debug.call_args_list[0].kwargs["extra"]["type"] == "list"
    assert debug.call_args_list[1].kwargs["extra"]["type"] == "context"
