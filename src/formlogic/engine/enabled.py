"""Enabled engine.

A disabled field is dimmed and its value may be left out of submission.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from formlogic.context import EvaluationContext
from formlogic.engine.conditions import base_context, evaluate_condition_map, site_context
from formlogic.expressions import evaluate_boolean
from formlogic.paths import FieldSite, resolve_field_site
from formlogic.typing.models import EnabledResult, FormSpec


def is_field_enabled(site: FieldSite, context: EvaluationContext) -> bool:
    """Evaluate ``enabledWhen``; fields without one are enabled."""
    definition = site.definition
    if not definition.is_data_field or not definition.enabled_when:
        return True
    return evaluate_boolean(definition.enabled_when, context)


def get_enabled(
    data: Mapping[str, Any],
    spec: FormSpec,
    computed: Mapping[str, Any] | None = None,
) -> EnabledResult:
    """Return the enabled state of every field path."""
    return evaluate_condition_map(data, spec, is_field_enabled, computed)


def is_enabled(
    path: str,
    data: Mapping[str, Any],
    spec: FormSpec,
    computed: Mapping[str, Any] | None = None,
) -> bool:
    """Return the enabled state of one path (unknown paths are enabled)."""
    site = resolve_field_site(spec, data, path)
    if site is None:
        return True
    return is_field_enabled(site, site_context(site, base_context(data, spec, computed)))
