from __future__ import annotations

import pytest

from formlogic.typing.enums import FieldType, OutputFormat, Severity, ValidationRuleKind


def test_severity_from_str() -> None:
    assert Severity.from_str("warning") == Severity.WARNING


def test_severity_from_str_raises_on_invalid_value() -> None:
    with pytest.raises(ValueError, match="Expected one of: error, warning"):
        Severity.from_str("fatal")


def test_enum_values_are_wire_strings() -> None:
    assert FieldType.MULTISELECT.to_str() == "multiselect"
    assert ValidationRuleKind.MULTIPLE_OF == "multiple_of"
    assert [member.value for member in OutputFormat] == ["currency", "percent", "date", "datetime"]
