"""Unit tests for collaboration query expansion."""

from __future__ import annotations

import pytest

from unstream.services.query_expander import expand_query, split_collaborators, validate_query
from unstream.utils.errors import InvalidQueryError


class TestExpandQuery:
    @pytest.mark.parametrize(
        "query",
        ["Kid Lightbulbs", "The xx", "Andy Stott", "Xiu Xiu", "Sandman", "Mo-Rice", "xx"],
    )
    def test_no_separator_returns_singleton(self, query: str) -> None:
        assert expand_query(query) == [query]

    def test_feat_splits_with_original_first(self) -> None:
        assert expand_query("A feat. B") == ["A feat. B", "A", "B"]

    @pytest.mark.parametrize(
        "query, expected",
        [
            ("Mo-Rice and Babebee", ["Mo-Rice and Babebee", "Mo-Rice", "Babebee"]),
            ("Bonobo & Totally Enormous", ["Bonobo & Totally Enormous", "Bonobo", "Totally Enormous"]),
            ("Floating Points featuring Pharoah", ["Floating Points featuring Pharoah", "Floating Points", "Pharoah"]),
            ("Skee Mask feat Actress", ["Skee Mask feat Actress", "Skee Mask", "Actress"]),
            ("Burial + Four Tet", ["Burial + Four Tet", "Burial", "Four Tet"]),
            ("Tom x Jerry", ["Tom x Jerry", "Tom", "Jerry"]),
        ],
    )
    def test_each_separator(self, query: str, expected: list[str]) -> None:
        assert expand_query(query) == expected

    def test_separators_are_case_insensitive(self) -> None:
        assert expand_query("Alpha FEAT. Beta") == ["Alpha FEAT. Beta", "Alpha", "Beta"]
        assert expand_query("Alpha AND Beta") == ["Alpha AND Beta", "Alpha", "Beta"]

    def test_comma_list(self) -> None:
        assert expand_query("One, Two & Three") == ["One, Two & Three", "One", "Two", "Three"]

    def test_dedup_keeps_first_spelling(self) -> None:
        assert expand_query("Kiwi and KIWI") == ["Kiwi and KIWI", "Kiwi"]

    def test_dedup_ignores_punctuation(self) -> None:
        assert expand_query("Mo-Rice, Mo Rice") == ["Mo-Rice, Mo Rice", "Mo-Rice"]

    def test_trailing_separator_is_not_a_split(self) -> None:
        assert expand_query("Solo,") == ["Solo,"]

    def test_empty_query_raises(self) -> None:
        with pytest.raises(InvalidQueryError):
            expand_query("   ")

    def test_symbol_only_query_raises(self) -> None:
        with pytest.raises(InvalidQueryError):
            expand_query("&&&")


class TestHelpers:
    def test_split_collaborators_trims(self) -> None:
        assert split_collaborators("  A  and   B ") == ["A", "B"]

    def test_validate_query_strips(self) -> None:
        assert validate_query("  Static Age ") == "Static Age"

    def test_validate_query_rejects_none(self) -> None:
        with pytest.raises(InvalidQueryError):
            validate_query(None)
