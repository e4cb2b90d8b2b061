from __future__ import annotations

from datetime import date

import pytest

from formlogic.formatting import (
    SUPPORTED_FORMATS,
    FormatOptions,
    format_value,
    is_valid_format,
    parse_decimal_format,
)
from formlogic.settings import Settings


def test_supported_formats() -> None:
    assert SUPPORTED_FORMATS == ("currency", "percent", "date", "datetime")
    assert is_valid_format("decimal(2)") is True
    assert is_valid_format("currency") is True
    assert is_valid_format("decimal(x)") is False
    assert is_valid_format("money") is False


def test_parse_decimal_format() -> None:
    assert parse_decimal_format("decimal(3)") == 3
    assert parse_decimal_format("percent") is None


def test_decimal_format_is_fixed_point() -> None:
    assert format_value(3.14159, "decimal(2)") == "3.14"
    assert format_value(5, "decimal(1)") == "5.0"


def test_currency_format() -> None:
    assert format_value(30, "currency") == "$30.00"
    assert format_value(1234.5, "currency", FormatOptions(currency="EUR", locale="en_US")) == "€1,234.50"


def test_percent_format() -> None:
    assert format_value(0.156, "percent") == "15.6%"
    assert format_value(0.5, "percent") == "50%"


def test_date_formats() -> None:
    assert format_value("2024-01-15", "date") == "Jan 15, 2024"
    assert format_value(date(2024, 1, 15), "date") == "Jan 15, 2024"
    assert "2024" in (format_value("2024-01-15T10:30:00", "datetime") or "")


def test_unparseable_date_falls_back_to_text() -> None:
    assert format_value("soon", "date") == "soon"


def test_non_numeric_values_under_numeric_formats() -> None:
    assert format_value("abc", "currency") == "abc"
    assert format_value(True, "decimal(2)") == "True"


def test_null_and_unknown_formats() -> None:
    assert format_value(None, "currency") is None
    assert format_value(None, "currency", FormatOptions(null_display="-")) == "-"
    assert format_value(12, None) == "12"
    assert format_value(12, "money") == "12"


def test_unknown_locale_falls_back_to_text(mocker) -> None:
    from formlogic import formatting

    warning = mocker.patch.object(formatting.logger, "warning")

    assert format_value(3, "currency", FormatOptions(locale="xx_YY")) == "3"
    warning.assert_called_once()


@pytest.mark.parametrize("locale", ["fr-FR", "fr_FR"])
def test_format_options_from_settings(locale: str) -> None:
    options = FormatOptions.from_settings(Settings(FORMAT_LOCALE=locale, FORMAT_CURRENCY="eur", NULL_DISPLAY="n/a"))

    assert options.locale == "fr_FR"
    assert options.currency == "EUR"
    assert options.null_display == "n/a"
