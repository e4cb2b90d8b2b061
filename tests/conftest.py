"""Suite markers derived from the tests/ sub-folder, plus shared form fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from formlogic import logger
from formlogic.typing.models import FormSpec

SUITES = ("unit", "integration", "end2end")


def _suite_of(tests_root: Path, item: pytest.Item) -> str | None:
    try:
        relative = Path(str(item.fspath)).resolve().relative_to(tests_root)
    except (OSError, ValueError):
        logger.warning("Test outside a suite folder left unmarked", extra={"test": item.nodeid})
        return None
    suite = relative.parts[0] if relative.parts else None
    return suite if suite in SUITES else None


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Mark each test with the suite folder it lives in (tests/<suite>/...)."""
    tests_root = (Path(config.rootpath) / "tests").resolve()
    for item in items:
        suite = _suite_of(tests_root, item)
        if suite is not None:
            item.add_marker(getattr(pytest.mark, suite))


@pytest.fixture
def make_spec() -> Callable[..., FormSpec]:
    """Build a `FormSpec` from camelCase keyword parts."""

    def _make(**parts: Any) -> FormSpec:
        payload: dict[str, Any] = {"meta": {"id": "test", "title": "Test form"}}
        payload.update(parts)
        return FormSpec.model_validate(payload)

    return _make
