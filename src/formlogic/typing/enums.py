"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class FieldType(_EnumMixin):
    """Discriminant of a field definition."""

    TEXT = "text"
    EMAIL = "email"
    URL = "url"
    PASSWORD = "password"  # noqa: S105
    NUMBER = "number"
    INTEGER = "integer"
    TEXTAREA = "textarea"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    SELECT = "select"
    MULTISELECT = "multiselect"
    ARRAY = "array"
    OBJECT = "object"
    DISPLAY = "display"
    COMPUTED = "computed"


class Severity(_EnumMixin):
    """Severity of a validation finding."""

    ERROR = "error"
    WARNING = "warning"


class ValidationRuleKind(_EnumMixin):
    """Kind of check that produced a validation finding."""

    REQUIRED = "required"
    TYPE = "type"
    FORMAT = "format"
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    INTEGER = "integer"
    MULTIPLE_OF = "multiple_of"
    LENGTH = "length"
    PATTERN = "pattern"
    ENUM = "enum"
    MIN_ITEMS = "min_items"
    MAX_ITEMS = "max_items"
    CUSTOM = "custom"


class OutputFormat(_EnumMixin):
    """Named output formats for computed fields (``decimal(N)`` is a pattern)."""

    CURRENCY = "currency"
    PERCENT = "percent"
    DATE = "date"
    DATETIME = "datetime"
