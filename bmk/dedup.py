"""
Bookmark deduplication by canonical URL.

Two bookmarks are duplicates when their URLs canonicalize to the same key
(see ``bmk.urls.canonicalize``). Collisions are resolved deterministically:

1. A bookmark filed in a real collection beats one left in the default
   collection.
2. Otherwise the more recently updated bookmark wins (missing ``updated_at``
   counts as 0). Exact ties keep the one seen first.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from bmk.models import Bookmark, now_ms
from bmk.urls import canonicalize, strip_ref_param


@dataclass
class DedupeReport:
    """Result of a dedupe pass over a whole store."""
    deduped: List[Bookmark] = field(default_factory=list)
    removed_count: int = 0
    ref_stripped_count: int = 0

    @property
    def changed(self) -> bool:
        return self.removed_count > 0 or self.ref_stripped_count > 0


def dedupe_key(bookmark: Bookmark) -> str:
    """Comparison key for a bookmark's URL."""
    return canonicalize(strip_ref_param(bookmark.url))


def prefer_incoming(existing: Optional[Bookmark], incoming: Bookmark) -> bool:
    """
    Decide whether ``incoming`` replaces ``existing`` for the same key.

    Returns:
        True if incoming should be kept instead of existing
    """
    if existing is None:
        return True

    existing_default = existing.in_default_collection
    incoming_default = incoming.in_default_collection

    if existing_default and not incoming_default:
        return True
    if existing_default == incoming_default:
        return (incoming.updated_at or 0) > (existing.updated_at or 0)
    return False


def dedupe(records: List[Bookmark]) -> List[Bookmark]:
    """
    Collapse bookmarks to at most one per canonical URL.

    The kept record is a copy whose ``url`` is rewritten to the canonical key
    and whose missing timestamps are filled with the current time. Input
    records are not modified.

    Args:
        records: Bookmarks in priority order (earlier wins exact ties)

    Returns:
        Deduplicated bookmarks, ordered by first occurrence of each key

    Example:
        >>> a = Bookmark(id="1", url="http://a.com", updated_at=1)
        >>> b = Bookmark(id="2", url="http://a.com/", collection_id="work", updated_at=1)
        >>> [r.id for r in dedupe([a, b])]
        ['2']
    """
    # Compare the records as given; only survivors get backfilled timestamps
    by_key: Dict[str, Bookmark] = {}
    for bookmark in records:
        key = dedupe_key(bookmark)
        if prefer_incoming(by_key.get(key), bookmark):
            by_key[key] = bookmark

    now = now_ms()
    return [
        bookmark.copy(
            url=key,
            updated_at=bookmark.updated_at if bookmark.updated_at is not None else now,
            created_at=bookmark.created_at if bookmark.created_at is not None else now,
        )
        for key, bookmark in by_key.items()
    ]


def dedupe_report(records: List[Bookmark]) -> DedupeReport:
    """
    Strip ``ref`` parameters from every bookmark, then dedupe.

    The two counts are measured separately: ``ref_stripped_count`` is the
    number of records whose URL changed by ref stripping (before dedupe),
    ``removed_count`` is the size difference after dedupe.
    """
    ref_stripped_count = 0
    stripped = []
    for bookmark in records:
        sanitized = strip_ref_param(bookmark.url)
        if sanitized != bookmark.url:
            ref_stripped_count += 1
            stripped.append(bookmark.copy(url=sanitized))
        else:
            stripped.append(bookmark)

    deduped = dedupe(stripped)

    return DedupeReport(
        deduped=deduped,
        removed_count=max(0, len(records) - len(deduped)),
        ref_stripped_count=ref_stripped_count,
    )


def find_duplicate(url: str, bookmarks: List[Bookmark]) -> Optional[Bookmark]:
    """
    Find an existing bookmark for a URL about to be added.

    URLs are compared after ref stripping only, matching what gets stored.
    """
    normalized = strip_ref_param(url)
    for bookmark in bookmarks:
        if strip_ref_param(bookmark.url) == normalized:
            return bookmark
    return None


def is_duplicate_url(url: str, bookmarks: List[Bookmark]) -> bool:
    return find_duplicate(url, bookmarks) is not None


def find_duplicates(bookmarks: List[Bookmark]) -> Dict[str, List[Bookmark]]:
    """
    Group bookmarks that share a canonical URL.

    Returns:
        Dictionary mapping canonical keys to groups of two or more bookmarks
    """
    groups = defaultdict(list)
    for bookmark in bookmarks:
        groups[dedupe_key(bookmark)].append(bookmark)

    return {k: v for k, v in groups.items() if len(v) > 1}
