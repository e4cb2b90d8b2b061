"""Calculation engine for computed fields.

Computed fields are evaluated strictly in declaration order. Each one sees
the raw values of the fields declared before it through ``computed.<name>``;
a reference to a field declared later resolves to null.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from formlogic.context import EvaluationContext, build_context
from formlogic.expressions import EvaluationFailure, computed_references, evaluate, parse_expression
from formlogic.exceptions import ExpressionError
from formlogic.formatting import FormatOptions, format_value, is_valid_format
from formlogic.logging import get_logger
from formlogic.typing.models import CalculationError, CalculationResult, ComputedFieldDefinition, FormSpec

logger = get_logger(__name__)


def _references(expression: str) -> set[str]:
    try:
        return computed_references(parse_expression(expression))
    except (ExpressionError, RecursionError):
        return set()


def _compute(definition: ComputedFieldDefinition, context: EvaluationContext) -> Any:
    """Evaluate one computed field against a context whose `computed` holds prior values.

    Raises:
        ExpressionError: If the expression fails.
    """
    computed = context.computed or {}
    for name in _references(definition.expression):
        if name in computed and computed[name] is None:
            return None

    result = evaluate(definition.expression, context)
    if isinstance(result, EvaluationFailure):
        raise ExpressionError(result.error)
    value = result.value
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _apply_format(value: Any, definition: ComputedFieldDefinition, options: FormatOptions | None) -> Any:
    if value is None or not definition.format or not is_valid_format(definition.format):
        return value
    return format_value(value, definition.format, options)


def calculate_with_errors(
    data: Mapping[str, Any],
    spec: FormSpec,
    options: FormatOptions | None = None,
) -> CalculationResult:
    """Evaluate every computed field and collect failures.

    A failing field is stored as ``None`` and reported; later fields are
    still computed.

    Args:
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.
        options (FormatOptions | None): Formatting options for ``format``.

    Returns:
        CalculationResult: Formatted values, raw values and errors.
    """
    raw: dict[str, Any] = {}
    values: dict[str, Any] = {}
    errors: list[CalculationError] = []
    context = build_context(data, raw, spec.reference_data)

    for definition in spec.computed:
        try:
            value = _compute(definition, context)
        except ExpressionError as exc:
            logger.warning(
                "Computed field evaluation failed",
                extra={"field": definition.name, "expression": definition.expression, "error": exc.message},
            )
            errors.append(
                CalculationError(field=definition.name, message=exc.message, expression=definition.expression),
            )
            value = None
        raw[definition.name] = value
        values[definition.name] = _apply_format(value, definition, options)

    return CalculationResult(values=values, raw_values=raw, errors=errors)


def calculate(data: Mapping[str, Any], spec: FormSpec, options: FormatOptions | None = None) -> dict[str, Any]:
    """Return computed values (formatted when a format is declared)."""
    return calculate_with_errors(data, spec, options).values


def calculate_raw(data: Mapping[str, Any], spec: FormSpec) -> dict[str, Any]:
    """Return unformatted computed values, as conditions see them."""
    return calculate_with_errors(data, spec).raw_values


def calculate_field(
    name: str,
    data: Mapping[str, Any],
    spec: FormSpec,
    existing_computed: Mapping[str, Any] | None = None,
) -> Any:
    """Compute a single field.

    Args:
        name (str): Computed field name.
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.
        existing_computed (Mapping[str, Any] | None): Raw values already
            computed in this pass; when omitted, the fields declared before
            ``name`` are computed first.

    Returns:
        Any: Raw value, or ``None`` if unknown or failing.
    """
    definition = spec.get_computed(name)
    if definition is None:
        return None

    if existing_computed is None:
        prior: dict[str, Any] = {}
        prior_context = build_context(data, prior, spec.reference_data)
        for candidate in spec.computed:
            if candidate.name == name:
                break
            try:
                prior[candidate.name] = _compute(candidate, prior_context)
            except ExpressionError:
                prior[candidate.name] = None
        existing_computed = prior

    try:
        return _compute(definition, build_context(data, existing_computed, spec.reference_data))
    except ExpressionError as exc:
        logger.warning(
            "Computed field evaluation failed",
            extra={"field": name, "expression": definition.expression, "error": exc.message},
        )
        return None


def get_formatted_value(
    name: str,
    data: Mapping[str, Any],
    spec: FormSpec,
    options: FormatOptions | None = None,
) -> str | None:
    """Return the display text of a computed field.

    Args:
        name (str): Computed field name.
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.
        options (FormatOptions | None): Formatting options.

    Returns:
        str | None: Formatted value; ``null_display`` or ``None`` for null
        values and unknown fields.
    """
    definition = spec.get_computed(name)
    if definition is None:
        return None
    value = calculate_raw(data, spec).get(name)
    return format_value(value, definition.format, options)
