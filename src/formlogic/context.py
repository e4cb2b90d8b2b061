"""Evaluation context assembly."""

from __future__ import annotations

from collections import ChainMap
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

_EMPTY: Mapping[str, Any] = {}


class _Unset:
    """Marker for an absent ambient ``value``."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class EvaluationContext:
    """Read-only view handed to one expression evaluation.

    The base mappings are borrowed from the caller and never copied; item
    variants built with `with_item` share them with the base context.

    Attributes:
        data: Current form data.
        computed: Computed values produced so far in the current pass.
        reference_data: External read-only lookup table, exposed as ``ref``.
        item: Current array item when evaluating an item field.
        item_index: Zero-based position of `item` in its array.
        value: Field value under validation, exposed as ``value``.
    """

    data: Mapping[str, Any] = field(default_factory=dict)
    computed: Mapping[str, Any] | None = None
    reference_data: Mapping[str, Any] | None = None
    item: Mapping[str, Any] | None = None
    item_index: int | None = None
    value: Any = UNSET

    def with_item(self, item: Mapping[str, Any] | None, item_index: int) -> EvaluationContext:
        """Return an item-scoped variant sharing this context's base mappings."""
        return replace(self, item=item if isinstance(item, Mapping) else _EMPTY, item_index=item_index)

    def with_value(self, value: Any) -> EvaluationContext:
        """Return a variant exposing ``value`` for field-level rules."""
        return replace(self, value=value)

    def scope(self) -> ChainMap[str, Any]:
        """Return the name scope: reserved roots layered over `data`.

        Reserved roots only shadow data keys of the same name when the
        context actually supplies them.
        """
        overlay: dict[str, Any] = {}
        if self.computed is not None:
            overlay["computed"] = self.computed
        if self.reference_data is not None:
            overlay["ref"] = self.reference_data
        if self.item is not None:
            overlay["item"] = self.item
        if self.item_index is not None:
            overlay["itemIndex"] = self.item_index
        if self.value is not UNSET:
            overlay["value"] = self.value
        return ChainMap(overlay, self.data)


def build_context(
    data: Mapping[str, Any] | None = None,
    computed: Mapping[str, Any] | None = None,
    reference_data: Mapping[str, Any] | None = None,
    *,
    item: Mapping[str, Any] | None = None,
    item_index: int | None = None,
) -> EvaluationContext:
    """Assemble an evaluation context.

    Args:
        data (Mapping[str, Any] | None): Current form data.
        computed (Mapping[str, Any] | None): Computed values available to the evaluation.
        reference_data (Mapping[str, Any] | None): Reference table exposed as ``ref``.
        item (Mapping[str, Any] | None): Current array item, if any.
        item_index (int | None): Zero-based index of `item`.

    Returns:
        EvaluationContext: Immutable context.
    """
    context = EvaluationContext(
        data=data if data is not None else {},
        computed=computed if computed is not None else {},
        reference_data=reference_data if reference_data is not None else {},
    )
    if item is not None or item_index is not None:
        return context.with_item(item, item_index if item_index is not None else 0)
    return context
