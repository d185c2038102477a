"""
Tests for search query classification.

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

import pytest

from pharmacy_tools.search.query import classify_query, indicates_combination


class TestClassifyQuery:
    """Tests for classify_query."""

    def test_number_with_unit(self):
        """Test a number followed by a unit is the required strength."""
        profile = classify_query("75 mg")

        assert profile.number_with_unit == "75"
        assert profile.required_strength_tokens == ["75"]
        assert profile.required_text_tokens == []
        assert not profile.is_likely_id_search

    def test_identifier(self):
        """Test a bare long number is an identifier search."""
        profile = classify_query("3111")

        assert profile.is_likely_id_search
        assert profile.id_number_tokens == ["3111"]
        assert profile.required_strength_tokens == []

    def test_short_number_not_identifier(self):
        """Test numbers under four digits are not identifiers."""
        profile = classify_query("311")

        assert not profile.is_likely_id_search
        assert profile.required_strength_tokens == ["311"]

    def test_number_with_text_not_identifier(self):
        """Test text next to a long number disables identifier search."""
        profile = classify_query("paracet 311148")

        assert not profile.is_likely_id_search
        assert profile.required_text_tokens == ["paracet"]

    def test_short_text_all_required(self):
        """Test up to four meaningful words are all required."""
        profile = classify_query("oxycodone naloxone orion actavis")

        assert profile.required_text_tokens == ["oxycodone", "naloxone", "orion", "actavis"]

    def test_long_text_first_two_required(self):
        """Test long pasted lines only require the first two words."""
        profile = classify_query("paracetamol tabletter filmdrasjert kodein fosfat hemihydrat")

        assert len(profile.meaningful_text_tokens) == 6
        assert profile.required_text_tokens == ["paracetamol", "tabletter"]

    def test_short_words_not_meaningful(self):
        """Test words under four letters are not required."""
        profile = classify_query("ibu krka")

        assert profile.meaningful_text_tokens == ["krka"]

    def test_two_strength_numbers(self):
        """Test combination strengths require both numbers."""
        profile = classify_query("Symbicort 160/4,5 120 doser")

        assert profile.required_strength_tokens == ["160", "4.5"]

    def test_pack_size_skipped(self):
        """Test numbers next to a pack-size word are not strengths."""
        profile = classify_query("Ibux 400 30 stk")

        assert profile.required_strength_tokens == ["400"]

    def test_decimal_strength(self):
        """Test a decimal number is a strength even without unit."""
        profile = classify_query("zopiclone 7,5")

        assert profile.required_strength_tokens == ["7.5"]

    def test_unit_preferred_over_numbers(self):
        """Test number-with-unit wins over other numbers."""
        profile = classify_query("Paracet 500 mg 20 stk")

        assert profile.required_strength_tokens == ["500"]

    @pytest.mark.parametrize("query", ["", "   ", "stk", "tab stk"])
    def test_empty(self, query: str):
        """Test queries without usable tokens."""
        assert classify_query(query).is_empty

    def test_combination_flag(self):
        """Test combination detection on the raw query."""
        assert classify_query("candesartan/hydrochlorothiazide").indicates_combination
        assert not classify_query("kandesartan").indicates_combination


class TestIndicatesCombination:
    """Tests for indicates_combination."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("a/b", True),
            ("kandesartan og hydroklortiazid", True),
            ("Budesonide AND formoterol", True),
            ("Tramadol", False),
            ("ogiv", False),
            ("Bogota", False),
        ],
    )
    def test_indicates_combination(self, text: str, expected: bool):
        """Test separators that mark combinations."""
        assert indicates_combination(text) is expected
