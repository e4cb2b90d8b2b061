from __future__ import annotations

from formlogic.engine import (
    get_options_visibility,
    get_page_visibility,
    get_visibility,
    get_visible_options,
    is_field_visible,
)
from formlogic.typing.models import SelectOption


def _account_spec(make_spec):
    return make_spec(
        fields={
            "accountType": {"type": "select", "options": [{"value": "personal", "label": "Personal"}]},
            "companyName": {"type": "text", "visibleWhen": 'accountType = "business"'},
            "notes": {"type": "textarea"},
        },
    )


def _lines_spec(make_spec, **array_extra):
    return make_spec(
        fields={
            "hasLines": {"type": "boolean"},
            "lines": {
                "type": "array",
                "visibleWhen": "hasLines = true",
                "itemFields": {
                    "name": {"type": "text"},
                    "discount": {"type": "number", "visibleWhen": "item.price > 100"},
                },
                **array_extra,
            },
        },
    )


def test_fields_without_condition_are_visible(make_spec) -> None:
    visibility = get_visibility({"accountType": "personal"}, _account_spec(make_spec))

    assert visibility == {"accountType": True, "companyName": False, "notes": True}


def test_condition_follows_data(make_spec) -> None:
    visibility = get_visibility({"accountType": "business"}, _account_spec(make_spec))
    assert visibility["companyName"] is True


def test_array_items_are_expanded_per_element(make_spec) -> None:
    data = {"hasLines": True, "lines": [{"price": 50}, {"price": 150}]}

    visibility = get_visibility(data, _lines_spec(make_spec))

    assert visibility == {
        "hasLines": True,
        "lines": True,
        "lines[0].name": True,
        "lines[0].discount": False,
        "lines[1].name": True,
        "lines[1].discount": True,
    }


def test_hidden_array_hides_its_items(make_spec) -> None:
    data = {"hasLines": False, "lines": [{"price": 150}]}

    visibility = get_visibility(data, _lines_spec(make_spec))

    assert visibility["lines"] is False
    assert visibility["lines[0].name"] is False
    assert visibility["lines[0].discount"] is False


def test_item_entries_track_array_length(make_spec) -> None:
    spec = _lines_spec(make_spec)

    one = get_visibility({"hasLines": True, "lines": [{}]}, spec)
    three = get_visibility({"hasLines": True, "lines": [{}, {}, {}]}, spec)

    assert len(one) == 2 + 2
    assert len(three) == 2 + 6
    assert "lines[2].discount" in three


def test_failing_condition_hides_field(make_spec, mocker) -> None:
    from formlogic.expressions import evaluator

    mocker.patch.object(evaluator.logger, "warning")
    spec = make_spec(fields={"x": {"type": "text", "visibleWhen": "unknownFn(1)"}})

    assert get_visibility({}, spec) == {"x": False}


def test_conditions_can_read_computed_values(make_spec) -> None:
    spec = make_spec(
        fields={"bonus": {"type": "number", "visibleWhen": "computed.total > 100"}},
        computed=[{"name": "total", "expression": "price * quantity"}],
    )

    assert get_visibility({"price": 60, "quantity": 2}, spec) == {"bonus": True}
    assert get_visibility({"price": 60, "quantity": 1}, spec) == {"bonus": False}
    assert get_visibility({"price": 60, "quantity": 1}, spec, computed={"total": 500}) == {"bonus": True}


def test_is_field_visible(make_spec) -> None:
    spec = _lines_spec(make_spec)
    data = {"hasLines": True, "lines": [{"price": 150}]}

    assert is_field_visible("lines[0].discount", data, spec) is True
    assert is_field_visible("lines[0].discount", {**data, "hasLines": False}, spec) is False
    assert is_field_visible("unknown", data, spec) is True


def test_page_visibility_is_independent_of_fields(make_spec) -> None:
    spec = make_spec(
        fields={"plan": {"type": "text", "visibleWhen": "false"}},
        pages=[
            {"id": "basics", "title": "Basics", "fields": ["plan"]},
            {"id": "billing", "title": "Billing", "fields": [], "visibleWhen": 'plan = "paid"'},
        ],
    )

    assert get_page_visibility({"plan": "paid"}, spec) == {"basics": True, "billing": True}
    assert get_page_visibility({"plan": "free"}, spec) == {"basics": True, "billing": False}
    assert get_page_visibility({}, make_spec()) == {}


def test_options_visibility_filters_by_condition(make_spec) -> None:
    spec = make_spec(
        fields={
            "country": {"type": "text"},
            "shipping": {
                "type": "select",
                "options": [
                    {"value": "standard", "label": "Standard"},
                    {"value": "express", "label": "Express", "visibleWhen": 'country = "US"'},
                ],
            },
        },
    )

    options = get_options_visibility({"country": "FR"}, spec)

    assert [option.value for option in options["shipping"]] == ["standard"]
    assert "country" not in options


def test_item_options_use_item_scope(make_spec) -> None:
    spec = make_spec(
        fields={
            "lines": {
                "type": "array",
                "itemFields": {
                    "size": {
                        "type": "select",
                        "options": [
                            {"value": "s", "label": "Small"},
                            {"value": "xl", "label": "Extra large", "visibleWhen": 'item.kind = "shirt"'},
                        ],
                    },
                },
            },
        },
    )
    data = {"lines": [{"kind": "shirt"}, {"kind": "mug"}]}

    options = get_options_visibility(data, spec)

    assert [option.value for option in options["lines[0].size"]] == ["s", "xl"]
    assert [option.value for option in options["lines[1].size"]] == ["s"]


def test_get_visible_options(make_spec, mocker) -> None:
    from formlogic.expressions import evaluator

    mocker.patch.object(evaluator.logger, "warning")
    options = [
        SelectOption(value=1, label="One"),
        SelectOption(value=2, label="Two", visible_when="itemIndex > 0"),
        SelectOption(value=3, label="Three", visible_when="broken("),
    ]
    spec = make_spec()

    assert [option.value for option in get_visible_options(options, {}, spec)] == [1]
    assert [option.value for option in get_visible_options(options, {}, spec, item={}, item_index=1)] == [1, 2]
    assert get_visible_options(None, {}, spec) == []


def test_conditions_on_accented_field_names(make_spec) -> None:
    spec = make_spec(
        fields={
            "société": {"type": "text"},
            "siège": {"type": "text", "visibleWhen": "société != null"},
        },
    )

    assert get_visibility({"société": "ACME"}, spec) == {"société": True, "siège": True}
    assert get_visibility({}, spec)["siège"] is False
