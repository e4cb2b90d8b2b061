"""formlogic package."""

from formlogic.context import EvaluationContext, build_context
from formlogic.engine import (
    calculate,
    calculate_field,
    calculate_with_errors,
    evaluate_form,
    get_enabled,
    get_formatted_value,
    get_initial_data,
    get_options_visibility,
    get_page_visibility,
    get_readonly,
    get_required,
    get_visibility,
    get_visible_options,
    is_enabled,
    is_field_visible,
    is_readonly,
    is_required,
    validate,
    validate_single_field,
)
from formlogic.exceptions import ExpressionError, PackageError, SettingsError, SpecLoadError
from formlogic.expressions import (
    evaluate,
    evaluate_boolean,
    evaluate_boolean_batch,
    evaluate_number,
    evaluate_string,
    is_valid_expression,
    validate_expression,
)
from formlogic.formatting import FormatOptions, format_value
from formlogic.logging import configure_logging, get_logger
from formlogic.settings import Settings, get_settings
from formlogic.spec_loader import load_form_spec, parse_form_spec

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("formlogic")

__all__ = [
    "EvaluationContext",
    "ExpressionError",
    "FormatOptions",
    "PackageError",
    "Settings",
    "SettingsError",
    "SpecLoadError",
    "__version__",
    "build_context",
    "calculate",
    "calculate_field",
    "calculate_with_errors",
    "configure_logging",
    "evaluate",
    "evaluate_boolean",
    "evaluate_boolean_batch",
    "evaluate_form",
    "evaluate_number",
    "evaluate_string",
    "format_value",
    "get_enabled",
    "get_formatted_value",
    "get_initial_data",
    "get_logger",
    "get_options_visibility",
    "get_page_visibility",
    "get_readonly",
    "get_required",
    "get_settings",
    "get_visibility",
    "get_visible_options",
    "is_enabled",
    "is_field_visible",
    "is_readonly",
    "is_required",
    "is_valid_expression",
    "load_form_spec",
    "logger",
    "parse_form_spec",
    "validate",
    "validate_expression",
    "validate_single_field",
]
