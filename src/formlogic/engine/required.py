"""Required engine."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from formlogic.context import EvaluationContext
from formlogic.engine.conditions import base_context, evaluate_condition_map, site_context
from formlogic.expressions import evaluate_boolean
from formlogic.paths import FieldSite, resolve_field_site
from formlogic.typing.models import FormSpec, RequiredResult


def is_structurally_required(site: FieldSite, spec: FormSpec) -> bool:
    """Return whether the schema requires the site.

    Top-level fields use ``schema.required``; item fields use the
    ``items.required`` list of their array property.
    """
    if not site.is_item:
        return spec.is_structurally_required(site.path)
    array_property = spec.json_schema.properties.get(site.array_path or "", {})
    items_schema = array_property.get("items")
    if not isinstance(items_schema, Mapping):
        return False
    required = items_schema.get("required")
    return isinstance(required, list) and site.path.rsplit(".", 1)[-1] in required


def is_field_required(site: FieldSite, spec: FormSpec, context: EvaluationContext) -> bool:
    """Decide required-ness of one site in an already built context.

    ``requiredWhen`` wins over the structural required list in both
    directions. Display and computed-reference fields are never required.
    """
    definition = site.definition
    if not definition.is_data_field:
        return False
    if definition.required_when:
        return evaluate_boolean(definition.required_when, context)
    return is_structurally_required(site, spec)


def get_required(
    data: Mapping[str, Any],
    spec: FormSpec,
    computed: Mapping[str, Any] | None = None,
) -> RequiredResult:
    """Return the required state of every field path.

    Args:
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.
        computed (Mapping[str, Any] | None): Raw computed values.

    Returns:
        RequiredResult: Field path to required state.
    """
    return evaluate_condition_map(data, spec, lambda site, context: is_field_required(site, spec, context), computed)


def is_required(
    path: str,
    data: Mapping[str, Any],
    spec: FormSpec,
    computed: Mapping[str, Any] | None = None,
) -> bool:
    """Return the required state of one path; unknown paths fall back to ``schema.required``."""
    site = resolve_field_site(spec, data, path)
    if site is None:
        return spec.is_structurally_required(path)
    return is_field_required(site, spec, site_context(site, base_context(data, spec, computed)))
