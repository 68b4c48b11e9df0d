"""
Bookmark search, filtering and sorting.

Search is token based: the query and every searchable field are folded to
lower-case ASCII words, and a bookmark matches when each query token appears
somewhere in its title, URL, description or tags. Prefixing the query with
``#`` or ``tag:`` restricts matching to tags.
"""
import re
import unicodedata
from typing import List

from bmk.constants import DEFAULT_COLLECTION_ID
from bmk.models import Bookmark

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_search_text(value: str) -> str:
    """Lower-case, strip accents and collapse punctuation to single spaces."""
    decomposed = unicodedata.normalize("NFD", value.lower())
    without_marks = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub(" ", without_marks).strip()


def _matches_tokens(text: str, tokens: List[str]) -> bool:
    return all(token in text for token in tokens)


def search_bookmarks(bookmarks: List[Bookmark], query: str) -> List[Bookmark]:
    """
    Filter bookmarks by a free-text or tag query.

    Args:
        bookmarks: Bookmarks to search
        query: Search text; ``#tag`` or ``tag:name`` searches tags only

    Returns:
        Matching bookmarks in their original order
    """
    trimmed = query.strip()
    if not trimmed:
        return bookmarks

    tag_only = trimmed.startswith("#") or trimmed.lower().startswith("tag:")
    if tag_only:
        raw = re.sub(r"^tag:", "", trimmed.lstrip("#"), flags=re.IGNORECASE).strip()
    else:
        raw = trimmed

    tokens = normalize_search_text(raw).split()
    if not tokens:
        if not tag_only:
            return bookmarks
        return [b for b in bookmarks if b.tags]

    results = []
    for bookmark in bookmarks:
        tags_text = " ".join(normalize_search_text(tag) for tag in bookmark.tags)

        if tag_only:
            if _matches_tokens(tags_text, tokens):
                results.append(bookmark)
            continue

        combined = " ".join([
            normalize_search_text(bookmark.title),
            normalize_search_text(bookmark.url),
            normalize_search_text(bookmark.description or ""),
            tags_text,
        ])
        if _matches_tokens(combined, tokens):
            results.append(bookmark)
        elif len(tokens) == 1 and tokens[0] in re.sub(r"\s+", "", combined):
            # "githubcom" still finds "github.com"
            results.append(bookmark)

    return results


def filter_by_collection(bookmarks: List[Bookmark], collection_id: str) -> List[Bookmark]:
    """Bookmarks in a collection; the default collection shows everything."""
    if not collection_id or collection_id == DEFAULT_COLLECTION_ID:
        return bookmarks
    return [b for b in bookmarks if b.collection_id == collection_id]


def filter_by_tags(bookmarks: List[Bookmark], tags: List[str]) -> List[Bookmark]:
    """Bookmarks carrying every one of ``tags``."""
    return [b for b in bookmarks if all(tag in b.tags for tag in tags)]


def sort_bookmarks(bookmarks: List[Bookmark], sort_by: str = "newest") -> List[Bookmark]:
    """
    Sort bookmarks for display.

    Args:
        sort_by: "newest" or "oldest" (by creation time) or "alphabetical"

    Raises:
        ValueError: For an unknown sort order
    """
    if sort_by == "newest":
        return sorted(bookmarks, key=lambda b: b.created_at or 0, reverse=True)
    if sort_by == "oldest":
        return sorted(bookmarks, key=lambda b: b.created_at or 0)
    if sort_by == "alphabetical":
        return sorted(bookmarks, key=lambda b: b.title.lower())
    raise ValueError(f"Unknown sort order: {sort_by}")
