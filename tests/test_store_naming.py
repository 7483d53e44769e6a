"""
Unit tests for task file naming and label parsing.
"""

import pytest

from gitpm.core.store.labels import is_label_token, normalize_labels, parse_entry, validate_label
from gitpm.core.store.slug import kebab_case, parse_task_id, slug


class TestKebabCase:
    """Test title to kebab-case conversion."""

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Write spec", "write-spec"),
            ("Write the Spec (v2)!", "write-the-spec-v2"),
            ("  leading and trailing  ", "leading-and-trailing"),
            ("snake_case and dots.here", "snake-case-and-dots-here"),
            ("Café au lait", "cafe-au-lait"),
        ],
    )
    def test_conversion(self, title: str, expected: str) -> None:
        assert kebab_case(title) == expected

    def test_falls_back_when_nothing_usable(self) -> None:
        assert kebab_case("!!! ???") == "task"
        assert kebab_case("日本語") == "task"

    def test_truncates_at_word_boundary(self) -> None:
        result = kebab_case("alpha beta gamma delta", max_length=13)

        assert result == "alpha-beta"

    def test_keeps_whole_words_that_fit_exactly(self) -> None:
        assert kebab_case("alpha beta gamma", max_length=10) == "alpha-beta"

    def test_truncates_single_long_word(self) -> None:
        assert kebab_case("a" * 30, max_length=10) == "a" * 10


class TestSlug:
    """Test file stem generation."""

    def test_zero_pads_id(self) -> None:
        assert slug(7, "Write spec") == "007-write-spec"

    def test_wide_ids_are_not_truncated(self) -> None:
        assert slug(1234, "Big") == "1234-big"

    def test_custom_width(self) -> None:
        assert slug(7, "Write spec", width=5) == "00007-write-spec"

    def test_rejects_non_positive_id(self) -> None:
        with pytest.raises(ValueError):
            slug(0, "Nope")

    def test_same_input_same_slug(self) -> None:
        assert slug(3, "Ship it") == slug(3, "Ship it")


class TestParseTaskId:
    """Test recovering ids from file stems."""

    @pytest.mark.parametrize(
        "stem,expected",
        [
            ("001-write-spec", 1),
            ("042-task", 42),
            ("1234-big", 1234),
            ("7", 7),
        ],
    )
    def test_valid_stems(self, stem: str, expected: int) -> None:
        assert parse_task_id(stem) == expected

    @pytest.mark.parametrize("stem", ["README", "write-001", "000-zero", "", "-1-x"])
    def test_invalid_stems(self, stem: str) -> None:
        assert parse_task_id(stem) is None


class TestLabels:
    """Test :label: token parsing."""

    def test_parse_entry_splits_title_and_labels(self) -> None:
        title, labels = parse_entry(["Fix", "login", "redirect", ":bug:auth:"])

        assert title == "Fix login redirect"
        assert labels == ["auth", "bug"]

    def test_parse_entry_accepts_quoted_title(self) -> None:
        title, labels = parse_entry(["Write   the spec", ":docs:"])

        assert title == "Write the spec"
        assert labels == ["docs"]

    def test_parse_entry_multiple_label_tokens(self) -> None:
        _, labels = parse_entry([":ui:", "Dark", "mode", ":ui:feature:"])

        assert labels == ["feature", "ui"]

    def test_parse_entry_without_labels(self) -> None:
        assert parse_entry(["Ship", "it"]) == ("Ship it", [])

    @pytest.mark.parametrize("word", [":", "::", ":::", "ratio:1:", "a:b"])
    def test_non_label_tokens(self, word: str) -> None:
        assert not is_label_token(word)

    def test_validate_label_rejects_whitespace(self) -> None:
        with pytest.raises(ValueError, match="whitespace"):
            validate_label("two words")

    def test_validate_label_rejects_delimiter(self) -> None:
        with pytest.raises(ValueError, match="cannot contain ':'"):
            validate_label("a:b")

    def test_validate_label_rejects_empty(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            validate_label("")

    def test_normalize_labels(self) -> None:
        assert normalize_labels(["b", "a", "b"]) == ["a", "b"]
