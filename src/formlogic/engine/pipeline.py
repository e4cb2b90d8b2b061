"""Composed evaluation of every derived state from one data snapshot."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from formlogic.engine.calculation import calculate_with_errors
from formlogic.engine.enabled import get_enabled
from formlogic.engine.readonly import get_readonly
from formlogic.engine.required import get_required
from formlogic.engine.validation import validate
from formlogic.engine.visibility import get_options_visibility, get_page_visibility, get_visibility
from formlogic.formatting import FormatOptions
from formlogic.logging import get_logger
from formlogic.typing.enums import Severity
from formlogic.typing.models import FieldError, FormSpec, FormState, PageDefinition, PageState, ValidationResult

logger = get_logger(__name__)


def get_initial_data(spec: FormSpec, initial: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Return starting data for a new form.

    Boolean fields (by field type or schema type) start as ``False``, then
    each field's ``defaultValue`` applies, then ``initial`` overrides both.

    Args:
        spec (FormSpec): Form specification.
        initial (Mapping[str, Any] | None): Caller-provided values.

    Returns:
        dict[str, Any]: Initial data.
    """
    data: dict[str, Any] = {}
    for path in spec.field_order:
        definition = spec.fields.get(path)
        if definition is not None and not definition.is_data_field:
            continue
        schema_type = spec.json_schema.properties.get(path, {}).get("type")
        if schema_type == "boolean" or (definition is not None and definition.type == "boolean"):
            data[path] = False
    for path, definition in spec.fields.items():
        if definition.is_data_field and definition.default_value is not None:
            data[path] = copy.deepcopy(definition.default_value)
    if initial:
        data.update(initial)
    return data


def _on_page(path: str, page: PageDefinition) -> bool:
    return path in page.fields or any(path.startswith(f"{field}[") for field in page.fields)


def get_page_errors(
    page: PageDefinition,
    validation: ValidationResult,
    visibility: Mapping[str, bool],
) -> list[FieldError]:
    """Return blocking errors of a page.

    Counts error-severity entries of visible fields listed on the page,
    including their array item paths.

    Args:
        page (PageDefinition): Page.
        validation (ValidationResult): Validation of the current snapshot.
        visibility (Mapping[str, bool]): Visibility of the current snapshot.

    Returns:
        list[FieldError]: Blocking errors.
    """
    return [
        error
        for error in validation.errors
        if error.severity == Severity.ERROR and _on_page(error.field, page) and visibility.get(error.field) is not False
    ]


def evaluate_form(
    data: Mapping[str, Any],
    spec: FormSpec,
    only_visible: bool = True,
    format_options: FormatOptions | None = None,
) -> FormState:
    """Derive every form state from a single consistent snapshot.

    Computed values are calculated first and the same raw values feed the
    condition maps, option filtering, validation and page states.

    Args:
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.
        only_visible (bool): Validate visible fields only.
        format_options (FormatOptions | None): Formatting of computed values.

    Returns:
        FormState: Derived state.
    """
    calculation = calculate_with_errors(data, spec, format_options)
    computed = calculation.raw_values

    visibility = get_visibility(data, spec, computed)
    validation = validate(data, spec, only_visible=only_visible, computed=computed, visibility=visibility)
    page_visibility = get_page_visibility(data, spec, computed)

    pages = [
        PageState(
            id=page.id,
            title=page.title,
            description=page.description,
            visible=page_visibility.get(page.id, True),
            fields=list(page.fields),
            can_proceed=not get_page_errors(page, validation, visibility),
        )
        for page in spec.pages or []
    ]

    state = FormState(
        computed=calculation.values,
        computed_raw=computed,
        calculation_errors=calculation.errors,
        visibility=visibility,
        required=get_required(data, spec, computed),
        enabled=get_enabled(data, spec, computed),
        readonly=get_readonly(data, spec, computed),
        options=get_options_visibility(data, spec, computed),
        pages=pages,
        validation=validation,
    )
    logger.debug(
        "Form evaluated",
        extra={"form": spec.meta.id or spec.meta.title, "valid": validation.valid, "errors": len(validation.errors)},
    )
    return state
