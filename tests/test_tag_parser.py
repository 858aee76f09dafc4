"""Tests for splitting tag text into tags."""

import pytest

from timew_timer.tag_parser import parse_tags


class TestSeparators:
    """Whitespace, commas and semicolons are interchangeable."""

    @pytest.mark.parametrize(
        "text",
        [
            "a b c",
            "a, b; c",
            "a,b,c",
            "a;b;c",
            "  a \t b\nc  ",
            "a ,; b ;;, c",
        ],
    )
    def test_mixed_separators_parse_identically(self, text: str) -> None:
        assert parse_tags(text) == ["a", "b", "c"]

    def test_order_is_preserved(self) -> None:
        assert parse_tags("zeta, alpha; mid") == ["zeta", "alpha", "mid"]

    def test_leading_and_trailing_separators_ignored(self) -> None:
        assert parse_tags(",;work project;,") == ["work", "project"]

    def test_duplicates_keep_first_position(self) -> None:
        assert parse_tags("work, project work") == ["work", "project"]


class TestEmptyInput:
    """Empty input of any kind yields no tags."""

    @pytest.mark.parametrize("text", ["", "   ", None, ",;,", "\t\n"])
    def test_empty_inputs(self, text) -> None:
        assert parse_tags(text) == []


class TestTokenContent:
    def test_other_punctuation_is_kept(self) -> None:
        """Only the three separator kinds split tags."""
        assert parse_tags("client:acme 4work v1.2") == ["client:acme", "4work", "v1.2"]

    def test_unicode_tags(self) -> None:
        assert parse_tags("møte, réunion") == ["møte", "réunion"]
