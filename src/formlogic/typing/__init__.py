"""Typing-centric domain modules."""

from formlogic.typing.enums import FieldType, OutputFormat, Severity, ValidationRuleKind
from formlogic.typing.models import (
    CalculationError,
    CalculationResult,
    FieldDefinition,
    FieldError,
    FormSpec,
    FormState,
    PageState,
    ValidationResult,
)

__all__ = [
    "CalculationError",
    "CalculationResult",
    "FieldDefinition",
    "FieldError",
    "FieldType",
    "FormSpec",
    "FormState",
    "OutputFormat",
    "PageState",
    "Severity",
    "ValidationResult",
    "ValidationRuleKind",
]
