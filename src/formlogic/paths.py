"""Field path helpers and the shared field traversal.

A field path is either a bare top-level name (``"email"``) or the address
of a field inside an array item (``"items[0].price"``, zero-based).
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from typing import Any, NamedTuple

from formlogic.typing.models import ArrayFieldDefinition, FieldDefinition, FormSpec

_ITEM_PATH_RE = re.compile(r"^(?P<array>.+)\[(?P<index>\d+)\]\.(?P<field>[^.\[\]]+)$")


class FieldPath(NamedTuple):
    """Parsed field path."""

    array_path: str | None
    index: int | None
    field: str

    @property
    def is_item(self) -> bool:
        """Return whether the path addresses an array item field."""
        return self.array_path is not None


class FieldSite(NamedTuple):
    """One evaluation site produced by the traversal.

    For item fields, ``item`` and ``index`` locate the current array element.
    """

    path: str
    definition: FieldDefinition
    array_path: str | None = None
    index: int | None = None
    item: Mapping[str, Any] | None = None

    @property
    def is_item(self) -> bool:
        """Return whether the site is an array item field."""
        return self.array_path is not None

    @property
    def value(self) -> Any:
        """Return the site's current value from its item (item sites only)."""
        return self.item.get(self.path.rsplit(".", 1)[-1]) if self.item is not None else None


def item_field_path(array_path: str, index: int, field_name: str) -> str:
    """Return the path of an item field, e.g. ``items[0].price``."""
    return f"{array_path}[{index}].{field_name}"


def parse_field_path(path: str) -> FieldPath:
    """Split a path into its array, index and field parts.

    Args:
        path (str): Top-level or item field path.

    Returns:
        FieldPath: Parsed path; ``array_path`` and ``index`` are ``None`` for
        top-level fields.
    """
    match = _ITEM_PATH_RE.match(path)
    if match is None:
        return FieldPath(array_path=None, index=None, field=path)
    return FieldPath(array_path=match.group("array"), index=int(match.group("index")), field=match.group("field"))


def array_items(data: Mapping[str, Any], array_path: str) -> list[Any]:
    """Return the current items of an array field (empty when absent or malformed)."""
    items = data.get(array_path)
    return items if isinstance(items, list) else []


def _as_item(raw: Any) -> Mapping[str, Any]:
    return raw if isinstance(raw, Mapping) else {}


def get_value_at_path(data: Mapping[str, Any], path: str) -> Any:
    """Read the value a field path points to.

    Args:
        data (Mapping[str, Any]): Form data.
        path (str): Field path.

    Returns:
        Any: Value, or ``None`` when any segment is missing.
    """
    parsed = parse_field_path(path)
    if not parsed.is_item:
        return data.get(path)
    items = array_items(data, parsed.array_path or "")
    if parsed.index is None or parsed.index >= len(items):
        return None
    return _as_item(items[parsed.index]).get(parsed.field)


def iter_item_sites(path: str, definition: ArrayFieldDefinition, data: Mapping[str, Any]) -> Iterator[FieldSite]:
    """Yield one site per (present item, item field) of an array field."""
    for index, raw in enumerate(array_items(data, path)):
        item = _as_item(raw)
        for name, item_definition in definition.item_fields.items():
            yield FieldSite(
                path=item_field_path(path, index, name),
                definition=item_definition,
                array_path=path,
                index=index,
                item=item,
            )


def iter_field_sites(spec: FormSpec, data: Mapping[str, Any]) -> Iterator[tuple[FieldSite, list[FieldSite]]]:
    """Walk the form in field order.

    Args:
        spec (FormSpec): Form specification.
        data (Mapping[str, Any]): Current data; only present array items expand.

    Yields:
        tuple[FieldSite, list[FieldSite]]: Each top-level site with the item
        sites of its current array elements (empty for non-array fields).
    """
    for path in spec.field_order:
        definition = spec.fields.get(path)
        if definition is None:
            continue
        site = FieldSite(path=path, definition=definition)
        if isinstance(definition, ArrayFieldDefinition) and definition.item_fields:
            yield site, list(iter_item_sites(path, definition, data))
        else:
            yield site, []


def resolve_field_site(spec: FormSpec, data: Mapping[str, Any], path: str) -> FieldSite | None:
    """Return the site for a single path, or ``None`` when it is unknown.

    Item paths resolve against the item currently present at that index; an
    index past the end of the array resolves to an empty item.
    """
    parsed = parse_field_path(path)
    if not parsed.is_item:
        definition = spec.fields.get(path)
        return FieldSite(path=path, definition=definition) if definition is not None else None

    array_path = parsed.array_path or ""
    array_definition = spec.fields.get(array_path)
    if not isinstance(array_definition, ArrayFieldDefinition):
        return None
    item_definition = array_definition.item_fields.get(parsed.field)
    if item_definition is None:
        return None
    items = array_items(data, array_path)
    index = parsed.index or 0
    item = _as_item(items[index]) if index < len(items) else {}
    return FieldSite(path=path, definition=item_definition, array_path=array_path, index=index, item=item)
