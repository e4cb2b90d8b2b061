"""Output formatting of computed values."""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any

from babel import UnknownLocaleError
from babel.dates import format_date, format_datetime
from babel.numbers import format_currency, format_percent
from pydantic import BaseModel, ConfigDict

from formlogic.logging import get_logger
from formlogic.settings import Settings, get_settings
from formlogic.typing.enums import OutputFormat

logger = get_logger(__name__)

SUPPORTED_FORMATS: tuple[str, ...] = tuple(member.value for member in OutputFormat)
DECIMAL_FORMAT_PATTERN = re.compile(r"^decimal\((\d+)\)$")
_PERCENT_PATTERN = "#,##0.##%"


class FormatOptions(BaseModel):
    """Locale-dependent formatting options."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    locale: str = "en_US"
    currency: str = "USD"
    null_display: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> FormatOptions:
        """Build options from runtime settings.

        Args:
            settings (Settings | None): Settings instance, defaults to cached settings.

        Returns:
            FormatOptions: Formatting options.
        """
        config = settings or get_settings()
        return cls(locale=config.format_locale, currency=config.format_currency, null_display=config.null_display)


def is_valid_format(fmt: str) -> bool:
    """Return whether a format specifier is known (named or ``decimal(N)``)."""
    return fmt in SUPPORTED_FORMATS or DECIMAL_FORMAT_PATTERN.match(fmt) is not None


def parse_decimal_format(fmt: str) -> int | None:
    """Return N for a ``decimal(N)`` specifier, else ``None``."""
    match = DECIMAL_FORMAT_PATTERN.match(fmt)
    return int(match.group(1)) if match else None


def _is_finite_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _as_datetime(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text) if "T" in text or " " in text else date.fromisoformat(text)
    except ValueError:
        return None


def format_value(value: Any, fmt: str | None = None, options: FormatOptions | None = None) -> str | None:
    """Format a value for display.

    Args:
        value (Any): Raw value.
        fmt (str | None): Format specifier: ``decimal(N)``, ``currency``,
            ``percent``, ``date`` or ``datetime``.
        options (FormatOptions | None): Locale options, defaults to ``FormatOptions()``.

    Returns:
        str | None: Formatted text, ``null_display`` (or ``None``) for null values.
    """
    opts = options or FormatOptions()
    if value is None:
        return opts.null_display
    if not fmt:
        return str(value)

    decimals = parse_decimal_format(fmt)
    try:
        numeric = _is_finite_number(value)
        if decimals is not None and numeric:
            return f"{value:.{decimals}f}"
        if fmt == OutputFormat.CURRENCY and numeric:
            return format_currency(value, opts.currency, locale=opts.locale)
        if fmt == OutputFormat.PERCENT and numeric:
            return format_percent(value, _PERCENT_PATTERN, locale=opts.locale)
        if fmt in (OutputFormat.DATE, OutputFormat.DATETIME):
            moment = _as_datetime(value)
            if moment is None:
                logger.info("Value is not a date, formatting skipped", extra={"format": fmt})
                return str(value)
            if fmt == OutputFormat.DATE:
                return format_date(moment, format="medium", locale=opts.locale)
            if not isinstance(moment, datetime):
                moment = datetime(moment.year, moment.month, moment.day)  # noqa: DTZ001
            return format_datetime(moment, format="medium", locale=opts.locale)
    except (UnknownLocaleError, ValueError) as exc:
        logger.warning(
            "Locale formatting failed, falling back to plain text",
            extra={"format": fmt, "locale": opts.locale, "error": str(exc)},
        )
    return str(value)
