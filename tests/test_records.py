import pytest

import records
from records import (
    extract_records,
    find_number,
    resolve_field,
    resolve_name,
    resolve_number,
    resolve_text,
)


def test_extract_records_returns_top_level_list_unchanged():
    rows = [{"name": "Golden Egg"}, {"name": "Cat"}]
    assert extract_records(rows) is rows


def test_extract_records_reads_rows_key():
    assert extract_records({"rows": [{"name": "A"}], "total": 1}) == [{"name": "A"}]


def test_extract_records_prefers_known_container_key_over_earlier_list():
    doc = {"tags": ["x"], "items": [{"name": "A"}]}
    assert extract_records(doc) == [{"name": "A"}]


def test_extract_records_falls_back_to_first_list_property():
    doc = {"data": {"page": 1}, "meta": "ok", "stuff": [1, 2], "more": [3]}
    assert extract_records(doc) == [1, 2]


@pytest.mark.parametrize("doc", [
    {"a": {"b": {"c": [1]}}},
    {},
    42,
    "rows",
    None,
    True,
    3.5,
])
def test_extract_records_degrades_to_empty_list(doc):
    assert extract_records(doc) == []


def test_deep_search_finds_nested_number(monkeypatch):
    monkeypatch.setitem(records.FIELD_CANDIDATES, "tokenValue", ("missing", "a"))
    assert resolve_number({"a": {"b": {"c": 42}}}, "tokenValue") == 42


def test_find_number_walks_lists_and_dicts_in_order():
    assert find_number({"x": "n/a", "y": [None, {"z": "300"}], "w": 5}) == 300
    assert find_number({"x": {"y": []}}) is None


def test_numeric_strings_are_coerced():
    assert resolve_number({"value": "1,250"}, "tokenValue") == 1250
    assert resolve_number({"value": " 12.5 "}, "tokenValue") == 12.5
    assert resolve_number({"price": "-3"}, "cost") == -3


def test_unusable_candidate_falls_through_to_next_key():
    assert resolve_number({"value": "lots", "tokenValue": 7}, "tokenValue") == 7
    assert resolve_number({"value": True, "worth": 3}, "tokenValue") == 3
    assert resolve_number({"price": {"label": "free"}, "cost": 99}, "cost") == 99


def test_missing_or_malformed_fields_resolve_to_none():
    assert resolve_number({}, "cost") is None
    assert resolve_number({"price": None}, "cost") is None
    assert resolve_number({"price": float("nan")}, "cost") is None
    assert resolve_number("not a record", "cost") is None
    assert resolve_number(None, "tokenValue") is None


def test_resolve_name_probes_candidates_and_defaults_to_unknown():
    assert resolve_name({"name": "Golden Egg"}) == "Golden Egg"
    assert resolve_name({"name": "   ", "title": "Shadow Egg"}) == "Shadow Egg"
    assert resolve_name({"name": 5, "eggName": "Void Egg"}) == "Void Egg"
    assert resolve_name({"itemName": "Huge Cat"}) == "Huge Cat"
    assert resolve_name({}) == "Unknown"
    assert resolve_name([1, 2]) == "Unknown"


def test_resolve_text_joins_lists():
    ad = {"offering": ["Cat", {"name": "Dog"}, 3], "wants": "Huge Cat"}
    assert resolve_text(ad, "offering") == "Cat, Dog"
    assert resolve_text(ad, "wanting") == "Huge Cat"
    assert resolve_text({}, "offering") is None


def test_resolve_field_dispatches_by_kind():
    rec = {"name": "Golden Egg", "price": "1000", "offering": "Cat"}
    assert resolve_field(rec, "name") == "Golden Egg"
    assert resolve_field(rec, "cost") == 1000
    assert resolve_field(rec, "offering") == "Cat"
    with pytest.raises(ValueError):
        resolve_field(rec, "colour")


def test_overlong_numeric_strings_never_become_infinity():
    assert resolve_number({"price": "9" * 400}, "cost") == int("9" * 400)
    assert resolve_number({"price": "9" * 400 + ".5", "cost": 7}, "cost") == 7
    assert resolve_number({"price": "1" * 400 + ".0"}, "cost") is None
