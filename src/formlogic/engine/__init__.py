"""Derived-state engines built on the expression evaluator."""

from formlogic.engine.calculation import (
    calculate,
    calculate_field,
    calculate_raw,
    calculate_with_errors,
    get_formatted_value,
)
from formlogic.engine.enabled import get_enabled, is_enabled, is_field_enabled
from formlogic.engine.pipeline import evaluate_form, get_initial_data, get_page_errors
from formlogic.engine.readonly import get_readonly, is_field_readonly, is_readonly
from formlogic.engine.required import get_required, is_field_required, is_required
from formlogic.engine.validation import is_empty, validate, validate_field, validate_single_field
from formlogic.engine.visibility import (
    get_options_visibility,
    get_page_visibility,
    get_visibility,
    get_visible_options,
    is_field_visible,
)

__all__ = [
    "calculate",
    "calculate_field",
    "calculate_raw",
    "calculate_with_errors",
    "evaluate_form",
    "get_enabled",
    "get_formatted_value",
    "get_initial_data",
    "get_options_visibility",
    "get_page_errors",
    "get_page_visibility",
    "get_readonly",
    "get_required",
    "get_visibility",
    "get_visible_options",
    "is_empty",
    "is_enabled",
    "is_field_enabled",
    "is_field_readonly",
    "is_field_required",
    "is_field_visible",
    "is_readonly",
    "is_required",
    "validate",
    "validate_field",
    "validate_single_field",
]
