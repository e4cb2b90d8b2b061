from __future__ import annotations

import json

from formlogic import logger as package_logger
from formlogic.logging import EXPRESSION_PREVIEW_LENGTH, configure_logging, get_logger
from formlogic.settings import Settings


def _json_events(err: str) -> list[dict]:
    return [json.loads(line) for line in err.splitlines() if line.startswith("{")]


def test_console_output(capsys) -> None:
    configure_logging(settings=Settings(LOG_JSON=False, LOG_LEVEL="INFO"), force=True)
    get_logger("tests").info("hello", extra={"field": "age"})

    captured = capsys.readouterr()
    assert "hello" in captured.err.lower()
    assert "age" in captured.err


def test_extra_context_becomes_top_level_keys(capsys) -> None:
    configure_logging(settings=Settings(LOG_JSON=True, LOG_LEVEL="INFO"), force=True)
    get_logger("formlogic.engine.calculation").warning(
        "Computed field evaluation failed",
        extra={"field": "total", "expression": "price * qty", "error": "Division by zero"},
    )

    [event] = _json_events(capsys.readouterr().err)
    assert event["message"] == "Computed field evaluation failed"
    assert event["field"] == "total"
    assert event["expression"] == "price * qty"
    assert event["logger"] == "formlogic.engine.calculation"
    assert event["level"] == "warning"
    assert "extra" not in event
    assert "event" not in event


def test_long_expressions_are_shortened(capsys) -> None:
    configure_logging(settings=Settings(LOG_JSON=True, LOG_LEVEL="INFO"), force=True)
    expression = " or ".join(f"flag{i} = true" for i in range(50))
    get_logger("tests").warning("Expression did not return boolean", extra={"expression": expression})

    [event] = _json_events(capsys.readouterr().err)
    assert len(event["expression"]) == EXPRESSION_PREVIEW_LENGTH
    assert event["expression"].endswith("...")
    assert event["expression"].startswith("flag0 = true or flag1")


def test_level_filters_debug(capsys) -> None:
    configure_logging(settings=Settings(LOG_JSON=True, LOG_LEVEL="WARNING"), force=True)
    get_logger("tests").debug("Expression did not return a scalar", extra={"expression": "[1]"})

    assert _json_events(capsys.readouterr().err) == []


def test_package_logger_created_on_import() -> None:
    assert callable(getattr(package_logger, "info", None))
