"""Visibility engine: fields, array items, pages and select options."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from formlogic.context import EvaluationContext
from formlogic.engine.conditions import base_context, evaluate_condition_map, site_context
from formlogic.expressions import evaluate_boolean
from formlogic.paths import FieldSite, iter_field_sites, resolve_field_site
from formlogic.typing.models import (
    FormSpec,
    OptionsVisibilityResult,
    SelectionFieldDefinition,
    SelectOption,
    VisibilityResult,
)


def _site_visible(site: FieldSite, context: EvaluationContext) -> bool:
    expression = site.definition.visible_when
    return evaluate_boolean(expression, context) if expression else True


def get_visibility(
    data: Mapping[str, Any],
    spec: FormSpec,
    computed: Mapping[str, Any] | None = None,
) -> VisibilityResult:
    """Return the visibility of every field path.

    Fields without ``visibleWhen`` are visible. Item fields of a hidden
    array are reported hidden without being evaluated.

    Args:
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.
        computed (Mapping[str, Any] | None): Raw computed values, computed when omitted.

    Returns:
        VisibilityResult: Field path to visibility.
    """
    return evaluate_condition_map(data, spec, _site_visible, computed, cascade_false=True)


def is_field_visible(
    path: str,
    data: Mapping[str, Any],
    spec: FormSpec,
    computed: Mapping[str, Any] | None = None,
) -> bool:
    """Return the visibility of a single field or item field path.

    Unknown paths are visible.
    """
    site = resolve_field_site(spec, data, path)
    if site is None:
        return True
    context = base_context(data, spec, computed)
    if site.is_item:
        parent = resolve_field_site(spec, data, site.array_path or "")
        if parent is not None and not _site_visible(parent, context):
            return False
    return _site_visible(site, site_context(site, context))


def get_page_visibility(
    data: Mapping[str, Any],
    spec: FormSpec,
    computed: Mapping[str, Any] | None = None,
) -> dict[str, bool]:
    """Return page id to visibility; independent of field visibility."""
    if not spec.pages:
        return {}
    context = base_context(data, spec, computed)
    return {page.id: evaluate_boolean(page.visible_when, context) if page.visible_when else True for page in spec.pages}


def _filter_options(options: Sequence[SelectOption], context: EvaluationContext) -> list[SelectOption]:
    return [option for option in options if not option.visible_when or evaluate_boolean(option.visible_when, context)]


def get_options_visibility(
    data: Mapping[str, Any],
    spec: FormSpec,
    computed: Mapping[str, Any] | None = None,
) -> OptionsVisibilityResult:
    """Return the visible options of every selection field path.

    Item selection fields are evaluated in their item scope. Options whose
    ``visibleWhen`` fails to evaluate are hidden.

    Args:
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.
        computed (Mapping[str, Any] | None): Raw computed values.

    Returns:
        OptionsVisibilityResult: Field path to visible options.
    """
    context = base_context(data, spec, computed)
    result: OptionsVisibilityResult = {}
    for site, item_sites in iter_field_sites(spec, data):
        for candidate in (site, *item_sites):
            definition = candidate.definition
            if isinstance(definition, SelectionFieldDefinition) and definition.options:
                result[candidate.path] = _filter_options(definition.options, site_context(candidate, context))
    return result


def get_visible_options(
    options: Sequence[SelectOption] | None,
    data: Mapping[str, Any],
    spec: FormSpec,
    computed: Mapping[str, Any] | None = None,
    item: Mapping[str, Any] | None = None,
    item_index: int | None = None,
) -> list[SelectOption]:
    """Filter one option list, optionally in an array item scope.

    Args:
        options (Sequence[SelectOption] | None): Options to filter.
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.
        computed (Mapping[str, Any] | None): Raw computed values.
        item (Mapping[str, Any] | None): Current array item.
        item_index (int | None): Index of `item`.

    Returns:
        list[SelectOption]: Visible options, in declaration order.
    """
    if not options:
        return []
    context = base_context(data, spec, computed)
    if item is not None or item_index is not None:
        context = context.with_item(item, item_index or 0)
    return _filter_options(options, context)
