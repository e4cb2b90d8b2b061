"""Shared traversal of the per-field boolean engines.

Visibility, required, enabled and readonly maps all have the same shape:
one entry per field in field order, plus one entry per item field of each
array element currently present in the data.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from formlogic.context import EvaluationContext, build_context
from formlogic.engine.calculation import calculate_raw
from formlogic.paths import FieldSite, iter_field_sites
from formlogic.typing.models import FormSpec

SiteRule = Callable[[FieldSite, EvaluationContext], bool]


def base_context(
    data: Mapping[str, Any],
    spec: FormSpec,
    computed: Mapping[str, Any] | None = None,
) -> EvaluationContext:
    """Build the shared context of one pass, computing values when not supplied.

    Args:
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.
        computed (Mapping[str, Any] | None): Raw computed values of the same
            data snapshot.

    Returns:
        EvaluationContext: Base context without item scope.
    """
    values = computed if computed is not None else calculate_raw(data, spec)
    return build_context(data, values, spec.reference_data)


def site_context(site: FieldSite, context: EvaluationContext) -> EvaluationContext:
    """Return the item-scoped variant for item sites, the base context otherwise."""
    if site.is_item:
        return context.with_item(site.item, site.index or 0)
    return context


def evaluate_condition_map(
    data: Mapping[str, Any],
    spec: FormSpec,
    rule: SiteRule,
    computed: Mapping[str, Any] | None = None,
    *,
    cascade_false: bool = False,
) -> dict[str, bool]:
    """Apply a per-site rule over every field path.

    Args:
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.
        rule (SiteRule): Decision for one site given its context.
        computed (Mapping[str, Any] | None): Raw computed values.
        cascade_false (bool): When an array field itself decides ``False``,
            record its item paths as ``False`` without evaluating them.

    Returns:
        dict[str, bool]: Field path to decision.
    """
    context = base_context(data, spec, computed)
    result: dict[str, bool] = {}
    for site, item_sites in iter_field_sites(spec, data):
        decision = rule(site, context)
        result[site.path] = decision
        for item_site in item_sites:
            if cascade_false and not decision:
                result[item_site.path] = False
            else:
                result[item_site.path] = rule(item_site, site_context(item_site, context))
    return result
