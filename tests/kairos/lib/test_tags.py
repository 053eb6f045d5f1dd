"""Tests for tag helpers (kairos/lib/tags.py)."""

from __future__ import annotations

from kairos.lib.tags import format_tags_for_input, normalize_tags, parse_tags


class TestParseTags:
    """parse_tags."""

    def test_splits_and_strips(self) -> None:
        assert parse_tags("a, b ,,c") == ["a", "b", "c"]

    def test_empty_and_blank(self) -> None:
        assert parse_tags("") == []
        assert parse_tags("   ") == []
        assert parse_tags(None) == []

    def test_lowercased(self) -> None:
        assert parse_tags("Next, Home") == ["next", "home"]

    def test_case_insensitive_duplicates_dropped(self) -> None:
        assert parse_tags("Next, home, NEXT") == ["next", "home"]


class TestFormatTags:
    """format_tags_for_input."""

    def test_joins_with_comma_space(self) -> None:
        assert format_tags_for_input(["a", "b"]) == "a, b"

    def test_round_trips_through_parse(self) -> None:
        tags = ["errand", "next"]
        assert parse_tags(format_tags_for_input(tags)) == tags


class TestNormalizeTags:
    """normalize_tags."""

    def test_lowercases(self) -> None:
        assert normalize_tags(["NEXT", " Blocked "]) == frozenset({"next", "blocked"})

    def test_none_and_blank_entries(self) -> None:
        assert normalize_tags(None) == frozenset()
        assert normalize_tags(["", "  "]) == frozenset()
