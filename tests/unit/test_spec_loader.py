from __future__ import annotations

import json
from pathlib import Path

import pytest

from formlogic import spec_loader
from formlogic.exceptions import SpecLoadError
from formlogic.spec_loader import check_form_spec, load_form_spec, parse_form_spec, read_json


def _payload(**parts: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "meta": {"id": "signup", "title": "Signup"},
        "schema": {"type": "object", "properties": {"email": {"type": "string"}}, "required": ["email"]},
        "fields": {"email": {"type": "email", "label": "Email"}},
        "fieldOrder": ["email"],
    }
    payload.update(parts)
    return payload


def test_parse_valid_payload() -> None:
    spec = parse_form_spec(_payload(computed={"greeting": {"expression": "upper case(email)"}}))

    assert spec.meta.title == "Signup"
    assert spec.is_structurally_required("email") is True
    assert spec.get_computed("greeting") is not None


def test_field_order_defaults_to_field_keys() -> None:
    payload = _payload()
    del payload["fieldOrder"]

    assert parse_form_spec(payload).field_order == ["email"]


def test_non_object_payload_is_rejected() -> None:
    with pytest.raises(SpecLoadError, match="must be a JSON object"):
        parse_form_spec(["not", "a", "spec"])


def test_model_errors_are_listed() -> None:
    with pytest.raises(SpecLoadError) as exc_info:
        parse_form_spec(_payload(fields={"email": {"type": "colour"}}))

    assert exc_info.value.message == "Invalid form specification"
    assert exc_info.value.problems


def test_invariant_violations_are_reported(make_spec) -> None:
    spec = make_spec(
        fields={
            "intro": {"type": "display", "requiredWhen": "true"},
            "age": {"type": "number", "visibleWhen": "age >"},
            "lines": {"type": "array", "itemFields": {"qty": {"type": "integer", "enabledWhen": "(("}}},
        },
        fieldOrder=["intro", "age", "lines", "ghost"],
        computed=[{"name": "x", "expression": "1"}, {"name": "x", "expression": "2 +"}],
        pages=[{"id": "p1", "title": "One", "fields": ["age", "other"], "visibleWhen": "and"}],
    )

    problems = check_form_spec(spec)

    assert "fieldOrder entry 'ghost' has no field definition" in problems
    assert "page 'p1' references 'other' missing from fieldOrder" in problems
    assert "display field 'intro' must not define required_when" in problems
    assert "computed field 'x' is declared more than once" in problems
    assert any(problem.startswith("page 'p1' visibleWhen:") for problem in problems)
    assert any(problem.startswith("field 'age' visibleWhen:") for problem in problems)
    assert any(problem.startswith("field 'lines[].qty' enabledWhen:") for problem in problems)
    assert any(problem.startswith("computed field 'x':") for problem in problems)


def test_unknown_format_is_only_a_warning(make_spec, mocker) -> None:
    warning = mocker.patch.object(spec_loader.logger, "warning")
    spec = make_spec(computed=[{"name": "x", "expression": "1", "format": "money"}])

    assert check_form_spec(spec) == []
    warning.assert_called_once()


def test_read_json_errors(tmp_path: Path) -> None:
    with pytest.raises(SpecLoadError, match="file not found"):
        read_json(tmp_path / "missing.json", what="Data")

    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(SpecLoadError, match="not valid JSON"):
        read_json(broken)


def test_load_form_spec(tmp_path: Path, mocker) -> None:
    info = mocker.patch.object(spec_loader.logger, "info")
    path = tmp_path / "spec.json"
    path.write_text(json.dumps(_payload()), encoding="utf-8")

    spec = load_form_spec(path)

    assert list(spec.fields) == ["email"]
    info.assert_called_once()


@pytest.mark.parametrize("condition", ["x = ²", "(" * 2000 + "x" + ")" * 2000])
def test_unparseable_conditions_are_load_errors(condition: str) -> None:
    payload = _payload(fields={"email": {"type": "email", "visibleWhen": condition}})

    with pytest.raises(SpecLoadError) as exc_info:
        parse_form_spec(payload)

    assert any(problem.startswith("field 'email' visibleWhen:") for problem in exc_info.value.problems)


def test_non_ascii_field_names_are_accepted() -> None:
    spec = parse_form_spec(
        _payload(
            fields={"email": {"type": "email"}, "prénom": {"type": "text", "requiredWhen": "email != null"}},
            fieldOrder=["email", "prénom"],
        ),
    )

    assert check_form_spec(spec) == []
