from formlogic.exceptions import (
    ExpressionError,
    PackageError,
    SettingsError,
    SpecLoadError,
)


def test_root_exception_hierarchy() -> None:
    assert issubclass(SettingsError, PackageError)
    assert issubclass(ExpressionError, PackageError)
    assert issubclass(SpecLoadError, PackageError)


def test_expression_error_reports_position() -> None:
    assert str(ExpressionError("Unexpected token", 4)) == "Unexpected token (at position 4)"
    assert str(ExpressionError("Division by zero")) == "Division by zero"


def test_spec_load_error_lists_problems() -> None:
    error = SpecLoadError(message="Invalid form specification", problems=["a", "b"])

    assert str(error) == "Invalid form specification: a; b"
    assert str(SpecLoadError(message="Missing")) == "Missing"


def test_settings_error_includes_cause() -> None:
    assert str(SettingsError(exc=ValueError("bad"))) == "Failed to load settings: bad"
