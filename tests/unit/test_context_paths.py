from __future__ import annotations

import dataclasses

import pytest

from formlogic.context import UNSET, EvaluationContext, build_context
from formlogic.paths import (
    get_value_at_path,
    item_field_path,
    iter_field_sites,
    parse_field_path,
    resolve_field_site,
)


def test_build_context_defaults_to_empty_mappings() -> None:
    context = build_context()

    assert context.data == {}
    assert context.computed == {}
    assert context.reference_data == {}
    assert context.item is None
    assert context.value is UNSET


def test_item_variant_shares_base_mappings() -> None:
    data = {"items": [{"qty": 1}]}
    computed = {"total": 3}
    base = build_context(data, computed)

    scoped = base.with_item({"qty": 1}, 0)

    assert scoped.data is data
    assert scoped.computed is computed
    assert scoped.item == {"qty": 1}
    assert scoped.item_index == 0
    assert base.item is None


def test_context_is_immutable() -> None:
    context = EvaluationContext(data={})
    with pytest.raises(dataclasses.FrozenInstanceError):
        context.data = {"x": 1}  # type: ignore[misc]


def test_scope_only_shadows_supplied_roots() -> None:
    scope = EvaluationContext(data={"computed": "data", "item": "data"}).scope()

    assert scope["computed"] == "data"
    assert scope["item"] == "data"
    assert build_context({"computed": "data"}).scope()["computed"] == {}


def test_item_field_path_round_trip() -> None:
    path = item_field_path("lines", 2, "price")

    assert path == "lines[2].price"
    parsed = parse_field_path(path)
    assert parsed.array_path == "lines"
    assert parsed.index == 2
    assert parsed.field == "price"
    assert parsed.is_item is True
    assert parse_field_path("email").is_item is False


def test_get_value_at_path() -> None:
    data = {"name": "Ada", "lines": [{"price": 4}, "broken"]}

    assert get_value_at_path(data, "name") == "Ada"
    assert get_value_at_path(data, "lines[0].price") == 4
    assert get_value_at_path(data, "lines[1].price") is None
    assert get_value_at_path(data, "lines[5].price") is None


def test_iter_field_sites_follows_field_order_and_expands_items(make_spec) -> None:
    spec = make_spec(
        fields={
            "lines": {
                "type": "array",
                "itemFields": {"name": {"type": "text"}, "price": {"type": "number"}},
            },
            "title": {"type": "text"},
        },
        fieldOrder=["title", "lines"],
    )
    data = {"lines": [{"name": "a"}, {"name": "b"}]}

    walked = list(iter_field_sites(spec, data))

    assert [site.path for site, _ in walked] == ["title", "lines"]
    assert walked[0][1] == []
    item_paths = [site.path for site in walked[1][1]]
    assert item_paths == ["lines[0].name", "lines[0].price", "lines[1].name", "lines[1].price"]
    assert walked[1][1][2].item == {"name": "b"}
    assert walked[1][1][2].value == "b"


def test_resolve_field_site(make_spec) -> None:
    spec = make_spec(
        fields={
            "lines": {"type": "array", "itemFields": {"price": {"type": "number"}}},
            "title": {"type": "text"},
        },
    )
    data = {"lines": [{"price": 9}]}

    top = resolve_field_site(spec, data, "title")
    assert top is not None
    assert top.is_item is False

    item = resolve_field_site(spec, data, "lines[0].price")
    assert item is not None
    assert item.item == {"price": 9}
    assert item.index == 0

    beyond = resolve_field_site(spec, data, "lines[3].price")
    assert beyond is not None
    assert beyond.item == {}

    assert resolve_field_site(spec, data, "lines[0].missing") is None
    assert resolve_field_site(spec, data, "unknown") is None
