"""
Tests for bmk/search.py search, filtering and sorting.
"""
import pytest

from bmk.search import (
    filter_by_collection,
    filter_by_tags,
    normalize_search_text,
    search_bookmarks,
    sort_bookmarks,
)


def ids(bookmarks):
    return [b.id for b in bookmarks]


class TestNormalizeSearchText:
    """Test text folding."""

    def test_accents_and_punctuation(self):
        assert normalize_search_text("Café-Crème!  Déjà") == "cafe creme deja"

    def test_empty(self):
        assert normalize_search_text("") == ""


class TestSearchBookmarks:
    """Test free-text and tag search."""

    def test_text_search(self, sample_bookmarks):
        assert ids(search_bookmarks(sample_bookmarks, "python")) == ["b1"]

    def test_all_tokens_must_match(self, sample_bookmarks):
        assert ids(search_bookmarks(sample_bookmarks, "python docs")) == ["b1"]
        assert search_bookmarks(sample_bookmarks, "python github") == []

    def test_accent_insensitive(self, sample_bookmarks):
        assert ids(search_bookmarks(sample_bookmarks, "CAFE")) == ["b3"]

    def test_description_searched(self, sample_bookmarks):
        assert ids(search_bookmarks(sample_bookmarks, "hosting")) == ["b2"]

    def test_compact_match(self, sample_bookmarks):
        """A single token can match across word breaks."""
        assert ids(search_bookmarks(sample_bookmarks, "githubcom")) == ["b2"]

    @pytest.mark.parametrize("query", ["#git", "tag:git", "TAG: git"])
    def test_tag_search(self, sample_bookmarks, query):
        assert ids(search_bookmarks(sample_bookmarks, query)) == ["b2"]

    def test_tag_search_ignores_title(self, sample_bookmarks):
        assert search_bookmarks(sample_bookmarks, "#github") == []

    def test_bare_hash_lists_tagged(self, sample_bookmarks):
        assert ids(search_bookmarks(sample_bookmarks, "#")) == ["b1", "b2"]

    def test_empty_query_returns_all(self, sample_bookmarks):
        assert ids(search_bookmarks(sample_bookmarks, "  ")) == ["b1", "b2", "b3"]


class TestFiltersAndSorting:
    """Test collection and tag filters and sort orders."""

    def test_filter_by_collection(self, sample_bookmarks):
        assert ids(filter_by_collection(sample_bookmarks, "work")) == ["b2"]

    def test_default_collection_shows_all(self, sample_bookmarks):
        assert len(filter_by_collection(sample_bookmarks, "default")) == 3

    def test_filter_by_tags(self, sample_bookmarks):
        assert ids(filter_by_tags(sample_bookmarks, ["python", "documentation"])) == ["b1"]
        assert filter_by_tags(sample_bookmarks, ["python", "git"]) == []

    def test_sort_orders(self, sample_bookmarks):
        assert ids(sort_bookmarks(sample_bookmarks, "newest")) == ["b3", "b2", "b1"]
        assert ids(sort_bookmarks(sample_bookmarks, "oldest")) == ["b1", "b2", "b3"]
        assert ids(sort_bookmarks(sample_bookmarks, "alphabetical")) == ["b3", "b2", "b1"]

    def test_unknown_sort(self, sample_bookmarks):
        with pytest.raises(ValueError):
            sort_bookmarks(sample_bookmarks, "random")
