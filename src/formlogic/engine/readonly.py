"""Readonly engine.

A readonly field looks normal and is still submitted, but cannot be
edited. This is a separate state from enabled.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from formlogic.context import EvaluationContext
from formlogic.engine.conditions import base_context, evaluate_condition_map, site_context
from formlogic.expressions import evaluate_boolean
from formlogic.paths import FieldSite, resolve_field_site
from formlogic.typing.models import FormSpec, ReadonlyResult


def is_field_readonly(site: FieldSite, context: EvaluationContext) -> bool:
    """Evaluate ``readonlyWhen``; fields without one are editable."""
    definition = site.definition
    if not definition.is_data_field or not definition.readonly_when:
        return False
    return evaluate_boolean(definition.readonly_when, context)


def get_readonly(
    data: Mapping[str, Any],
    spec: FormSpec,
    computed: Mapping[str, Any] | None = None,
) -> ReadonlyResult:
    """Return the readonly state of every field path.

    Args:
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.
        computed (Mapping[str, Any] | None): Raw computed values.

    Returns:
        ReadonlyResult: Field path to readonly state.
    """
    return evaluate_condition_map(data, spec, is_field_readonly, computed)


def is_readonly(
    path: str,
    data: Mapping[str, Any],
    spec: FormSpec,
    computed: Mapping[str, Any] | None = None,
) -> bool:
    """Return the readonly state of one path (unknown paths are editable)."""
    site = resolve_field_site(spec, data, path)
    if site is None:
        return False
    return is_field_readonly(site, site_context(site, base_context(data, spec, computed)))
