"""Test catalog matching tiers."""
import pytest
from fruttagest.ordering.matching import (
    MatchTier,
    find_match,
    levenshtein_distance,
    resolve_item,
    resolve_items,
    similarity,
)
from tests.factories import make_catalog, make_catalog_entry, make_raw_item


class TestLevenshtein:
    def test_classic_example(self):
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_identical(self):
        assert levenshtein_distance("pomodoro", "pomodoro") == 0

    def test_empty(self):
        assert levenshtein_distance("", "mele") == 4
        assert levenshtein_distance("mele", "") == 4

    def test_symmetric(self):
        assert levenshtein_distance("meleh", "mele golden") == levenshtein_distance("mele golden", "meleh") == 7


class TestSimilarity:
    def test_one_char_short(self):
        assert similarity("pomodor", "pomodoro") == pytest.approx(7 / 8)

    def test_identical_is_one(self):
        assert similarity("zucchine", "zucchine") == 1.0

    def test_both_empty_is_one(self):
        assert similarity("", "") == 1.0

    def test_range(self):
        assert 0.0 <= similarity("xyzqqq", "mele golden") <= 1.0


class TestExactTier:
    def test_exact_beats_longer_name(self):
        catalog = make_catalog("Pomodoro Cuore di Bue", "Pomodoro")
        entry, tier = find_match("pomodoro", catalog)
        assert entry.name == "Pomodoro"
        assert tier == MatchTier.EXACT

    def test_case_and_whitespace_ignored(self):
        catalog = make_catalog("Pomodoro Cuore di Bue", "Pomodoro")
        entry, tier = find_match("  POMODORO \n", catalog)
        assert entry.id == "p2"
        assert tier == MatchTier.EXACT

    def test_first_duplicate_wins(self):
        catalog = make_catalog("Zucchine", "zucchine")
        entry, _ = find_match("zucchine", catalog)
        assert entry.id == "p1"


class TestSubstringTier:
    def test_catalog_name_contains_text(self):
        catalog = make_catalog("Pomodoro", "Mele Golden")
        entry, tier = find_match("mele", catalog)
        assert entry.name == "Mele Golden"
        assert tier == MatchTier.SUBSTRING

    def test_text_contains_catalog_name(self):
        catalog = make_catalog("Basilico", "Zucchine")
        entry, tier = find_match("zucchine romanesche", catalog)
        assert entry.name == "Zucchine"
        assert tier == MatchTier.SUBSTRING

    def test_first_in_catalog_order(self):
        catalog = make_catalog("Mele Golden", "Mele Fuji")
        entry, _ = find_match("mele", catalog)
        assert entry.id == "p1"

    def test_empty_text_matches_nothing(self):
        catalog = make_catalog("Mele Golden")
        assert find_match("   ", catalog) is None


class TestSimilarityTier:
    def test_typo_matches(self):
        catalog = make_catalog("Mele Golden", "Zucchine")
        entry, tier = find_match("zuchine", catalog)
        assert entry.name == "Zucchine"
        assert tier == MatchTier.SIMILARITY

    def test_one_char_short_of_name(self):
        catalog = make_catalog("Pomodoro", "Mele Golden")
        entry, _ = find_match("pomodor", catalog)
        assert entry.name == "Pomodoro"

    def test_gibberish_unmatched(self):
        catalog = make_catalog("Pomodoro", "Mele Golden", "Zucchine", "Basilico")
        assert find_match("xyzqqq", catalog) is None

    def test_score_at_threshold_is_rejected(self):
        # 3/5 == 0.6 exactly
        catalog = make_catalog("abcxy")
        assert find_match("abcde", catalog) is None

    def test_score_above_threshold_is_accepted(self):
        catalog = make_catalog("abcdx")
        entry, tier = find_match("abcde", catalog)
        assert entry.id == "p1"
        assert tier == MatchTier.SIMILARITY

    def test_custom_threshold(self):
        catalog = make_catalog("abcdx")
        assert find_match("abcde", catalog, threshold=0.9) is None

    def test_best_score_wins(self):
        catalog = make_catalog("Carote", "Carciofi")
        entry, _ = find_match("carciofo", catalog)
        assert entry.name == "Carciofi"

    def test_tie_keeps_first_seen(self):
        assert find_match("abcd", make_catalog("abcx", "abcy"))[0].name == "abcx"
        assert find_match("abcd", make_catalog("abcy", "abcx"))[0].name == "abcy"

    def test_far_misspelling_stays_unmatched(self):
        # (11 - 7) / 11 is well below the threshold
        catalog = make_catalog("Pomodori San Marzano", "Mele Golden")
        assert find_match("meleh", catalog) is None


class TestAvailability:
    def test_unavailable_entries_skipped(self):
        catalog = [
            make_catalog_entry("p1", "Pomodoro", available=False),
            make_catalog_entry("p2", "Pomodoro Ciliegino"),
        ]
        entry, tier = find_match("pomodoro", catalog)
        assert entry.id == "p2"
        assert tier == MatchTier.SUBSTRING

    def test_empty_catalog(self):
        assert find_match("pomodoro", []) is None


class TestResolveItem:
    def test_matched_item(self):
        catalog = make_catalog("Pomodoro")
        item = resolve_item(make_raw_item("pomodoro", 3, "CASSETTA"), catalog)
        assert item.product_id == "p1"
        assert item.matched is True
        assert item.confidence == 1.0
        assert item.quantity == 3
        assert item.unit == "CASSETTA"
        assert item.product_name == "pomodoro"

    def test_unmatched_item(self):
        item = resolve_item(make_raw_item("xyzqqq", 2), make_catalog("Pomodoro"))
        assert item.product_id is None
        assert item.matched is False
        assert item.confidence == 0.5

    def test_missing_quantity_defaults_to_one(self):
        item = resolve_item(make_raw_item("pomodoro", quantity=None), make_catalog("Pomodoro"))
        assert item.quantity == 1

    def test_unit_passes_through(self):
        item = resolve_item(make_raw_item("pomodoro", unit=None), make_catalog("Pomodoro"))
        assert item.unit is None

    def test_similarity_match_reports_same_confidence_as_exact(self):
        catalog = make_catalog("Zucchine")
        exact = resolve_item(make_raw_item("zucchine"), catalog)
        fuzzy = resolve_item(make_raw_item("zuchine"), catalog)
        assert exact.confidence == fuzzy.confidence == 1.0

    def test_resolve_items_keeps_order(self):
        catalog = make_catalog("Pomodoro", "Zucchine")
        items = resolve_items(
            [make_raw_item("zucchine"), make_raw_item("xyzqqq"), make_raw_item("pomodoro")],
            catalog,
        )
        assert [i.product_name for i in items] == ["zucchine", "xyzqqq", "pomodoro"]
        assert [i.product_id for i in items] == ["p2", None, "p1"]
