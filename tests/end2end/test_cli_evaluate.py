from __future__ import annotations

import json
import sys
from subprocess import run as subprocess_run  # noqa: S404
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

_SPEC = {
    "meta": {"id": "signup", "title": "Signup"},
    "schema": {"type": "object", "properties": {"name": {"type": "string"}}, "required": ["name"]},
    "fields": {
        "name": {"type": "text", "label": "Name"},
        "age": {"type": "integer", "label": "Age", "validations": [{"rule": "value >= 18", "message": "Too young"}]},
        "guardian": {"type": "text", "label": "Guardian", "visibleWhen": "age < 18", "requiredWhen": "age < 18"},
    },
    "computed": [{"name": "adult", "expression": "age >= 18"}],
}


def _run(*args: str):
    return subprocess_run(  # noqa: S603
        [sys.executable, "-m", "formlogic.cli", *args],
        capture_output=True,
        encoding="utf-8",
        check=False,
    )


def test_cli_evaluate_writes_form_state(tmp_path: Path) -> None:
    spec_path = tmp_path / "spec.json"
    data_path = tmp_path / "data.json"
    output_path = tmp_path / "state.json"
    spec_path.write_text(json.dumps(_SPEC), encoding="utf-8")
    data_path.write_text(json.dumps({"name": "", "age": 12}), encoding="utf-8")

    result = _run("evaluate", "--spec", str(spec_path), "--data", str(data_path), "--output", str(output_path))

    assert result.returncode == 0
    state = json.loads(output_path.read_text(encoding="utf-8"))
    assert state["computed"] == {"adult": False}
    assert state["visibility"]["guardian"] is True
    assert state["required"] == {"name": True, "age": False, "guardian": True}
    messages = [error["message"] for error in state["validation"]["errors"]]
    assert messages == ["Name is required", "Too young", "Guardian is required"]


def test_cli_check_rejects_bad_expression(tmp_path: Path) -> None:
    spec_path = tmp_path / "spec.json"
    spec_path.write_text(json.dumps({**_SPEC, "computed": [{"name": "broken", "expression": "age >="}]}), "utf-8")

    result = _run("check", "--spec", str(spec_path))

    assert result.returncode == 1
    assert "computed field 'broken'" in result.stderr


def test_cli_expr() -> None:
    result = _run("expr", 'upper case("ok")')

    assert result.returncode == 0
    assert json.loads(result.stdout) == {"success": True, "value": "OK"}


def test_cli_help_lists_commands() -> None:
    result = _run("--help")

    assert result.returncode == 0
    assert result.stdout.startswith("usage: formlogic")
    for command in ("evaluate", "check", "expr"):
        assert command in result.stdout


def test_cli_expr_reports_bad_characters() -> None:
    result = _run("expr", "x = ²")

    assert result.returncode == 1
    assert json.loads(result.stdout)["success"] is False
