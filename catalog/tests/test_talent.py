"""Tests for talent name normalization."""

import pytest

from catalog.talent import (
    TALENT_JP_TO_EN,
    build_search_terms,
    english_only,
    is_generic_vendor,
    resolve_talent,
)


class TestEnglishOnly:

    @pytest.mark.parametrize("raw, expected", [
        ("Houshou Marine / 宝鐘マリン", "Houshou Marine"),
        ("Houshou Marine／宝鐘マリン", "Houshou Marine"),
        ("Houshou Marine（宝鐘マリン）", "Houshou Marine"),
        ("Houshou Marine (宝鐘マリン)", "Houshou Marine"),
        ("  Gawr Gura  ", "Gawr Gura"),
        ("宝鐘マリン", "宝鐘マリン"),
        ("", ""),
    ])
    def test_keeps_leading_segment(self, raw, expected):
        assert english_only(raw) == expected

    def test_separator_at_start_is_not_a_split(self):
        assert english_only("(Unit) Members") == "(Unit) Members"


class TestResolveTalent:

    def test_non_generic_vendor_wins(self):
        assert resolve_talent("Houshou Marine", []) == "Houshou Marine"

    def test_generic_vendor_falls_back_to_talent_tag(self):
        talent = resolve_talent(
            "hololive production official shop",
            ["Goods", "Talent_宝鐘マリン"],
        )
        assert talent == "Houshou Marine"

    def test_generic_vendor_match_is_case_insensitive(self):
        assert is_generic_vendor("Hololive Production Official Shop")
        assert resolve_talent("Hololive Production Official Shop", ["Talent_Gawr Gura"]) == "Gawr Gura"

    def test_first_matching_tag_is_used(self):
        tags = ["Talent_兎田ぺこら", "Talent_宝鐘マリン"]
        assert resolve_talent("", tags) == "Usada Pekora"

    def test_bilingual_vendor_is_reduced_then_mapped(self):
        assert resolve_talent("宝鐘マリン / Houshou Marine", []) == "Houshou Marine"

    def test_unknown_name_is_returned_unchanged(self):
        assert resolve_talent("", ["Talent_New Talent"]) == "New Talent"

    def test_nothing_known_gives_placeholder(self):
        assert resolve_talent("", []) == "—"
        assert resolve_talent("hololive production official shop", ["Goods"]) == "hololive production official shop"

    def test_custom_name_map(self):
        assert resolve_talent("", ["Talent_テスト"], name_map={"テスト": "Test"}) == "Test"

    def test_tag_order_beyond_first_match_does_not_matter(self):
        a = resolve_talent("", ["x", "Talent_宝鐘マリン", "y"])
        b = resolve_talent("", ["y", "Talent_宝鐘マリン", "x"])
        assert a == b == "Houshou Marine"


class TestBuildSearchTerms:

    def test_inverts_name_map(self):
        terms = build_search_terms({"宝鐘マリン": "Houshou Marine", "マリン": "Houshou Marine"}, [])
        assert terms == {"Houshou Marine": ["Houshou Marine", "宝鐘マリン", "マリン"]}

    def test_observed_talents_get_self_entries(self):
        terms = build_search_terms({"宝鐘マリン": "Houshou Marine"}, ["Houshou Marine", "AZKi"])
        assert terms["AZKi"] == ["AZKi"]
        assert terms["Houshou Marine"] == ["Houshou Marine", "宝鐘マリン"]

    def test_every_observed_talent_has_non_empty_entry(self):
        seen = {"Houshou Marine", "Someone", "Gawr Gura"}
        terms = build_search_terms(TALENT_JP_TO_EN, seen)
        for talent in seen:
            assert terms[talent]
            assert talent in terms[talent]
