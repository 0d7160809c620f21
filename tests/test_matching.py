from matching import (
    MAX_MATCHES,
    TIER_COMPACT,
    TIER_EXACT,
    TIER_SUBSTRING,
    TIER_TOKENS,
    match_records,
    normalize_name,
)


def names(recs):
    return [r["name"] for r in recs]


def test_normalize_name():
    assert normalize_name("  Golden-Egg  (Deluxe)") == "goldenegg deluxe"
    assert normalize_name("Shiny\tDragon!!") == "shiny dragon"
    assert normalize_name("") == ""


def test_exact_match_excludes_substring_hits():
    recs = [{"name": "Golden Egg"}, {"name": "Golden Egg Deluxe"}]
    res = match_records(recs, "Golden Egg")
    assert res.tier == TIER_EXACT
    assert res.records == [recs[0]]


def test_exact_match_ignores_case_and_punctuation():
    recs = [{"name": "Golden Egg!"}, {"name": "Other"}]
    assert match_records(recs, "  golden   EGG ").records == [recs[0]]


def test_substring_tier_keeps_input_order():
    recs = [{"name": "Shadow Egg"}, {"name": "Dragon"}, {"name": "Golden Egg"}]
    res = match_records(recs, "egg")
    assert res.tier == TIER_SUBSTRING
    assert names(res.records) == ["Shadow Egg", "Golden Egg"]


def test_space_insensitive_tier():
    recs = [{"name": "Golden Egg"}, {"name": "Cat"}]
    res = match_records(recs, "goldenegg")
    assert res.tier == TIER_COMPACT
    assert res.records == [recs[0]]


def test_space_insensitive_tier_finds_squashed_query():
    recs = [{"name": "Golden Egg"}]
    res = match_records(recs, "gldnegg")
    assert res.tier == TIER_COMPACT
    assert res.records == recs


def test_token_overlap_ranks_by_score_then_input_order():
    recs = [
        {"name": "Golden Egg"},
        {"name": "Dragon Pet"},
        {"name": "Golden Dragon"},
        {"name": "Cat"},
    ]
    res = match_records(recs, "dragon golden")
    assert res.tier == TIER_TOKENS
    assert names(res.records) == ["Golden Dragon", "Golden Egg", "Dragon Pet"]


def test_duplicate_query_tokens_count_once():
    recs = [{"name": "Cat Egg"}, {"name": "Dog Cat"}]
    res = match_records(recs, "dog cat cat")
    assert names(res.records) == ["Dog Cat", "Cat Egg"]


def test_no_match_is_empty():
    recs = [{"name": "Golden Egg"}]
    res = match_records(recs, "zzz")
    assert res.records == []
    assert res.tier is None


def test_blank_query_matches_nothing():
    assert match_records([{"name": "Golden Egg"}], "  !! ").records == []


def test_results_are_capped():
    recs = [{"name": f"Egg {i}"} for i in range(1, 16)]
    res = match_records(recs, "egg").records
    assert len(res) == MAX_MATCHES
    assert res[0] is recs[0]


def test_results_are_the_input_objects():
    recs = [{"title": "Rainbow Egg"}, {"eggName": "Void Egg"}]
    res = match_records(recs, "egg").records
    assert all(any(r is x for x in recs) for r in res)
    assert len(res) == 2


def test_records_without_a_name_do_not_break_matching():
    recs = [{}, None, {"name": "Unknown Egg"}]
    assert match_records(recs, "unknown egg").records == [recs[2]]
