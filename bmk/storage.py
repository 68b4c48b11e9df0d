"""
JSON file storage for BMK.

Bookmarks, collections and tag definitions each live in their own JSON array
file inside the data directory. Every write replaces the whole file; there is
no locking, the last writer wins.
"""
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from bmk.config import get_config
from bmk.constants import (
    BOOKMARKS_FILE,
    COLLECTIONS_FILE,
    COLLECTION_COLORS,
    DEFAULT_COLLECTION_ID,
    DEFAULT_COLLECTION_NAME,
    TAGS_FILE,
)
from bmk.dedup import DedupeReport, dedupe_report
from bmk.models import Bookmark, Collection, TagDefinition, now_ms
from bmk.utils import StorageError, get_tag_color, read_json_file, write_json_file

logger = logging.getLogger(__name__)

__all__ = ["Storage", "StorageError", "get_storage", "default_collection"]


def default_collection() -> Collection:
    now = now_ms()
    return Collection(
        id=DEFAULT_COLLECTION_ID,
        name=DEFAULT_COLLECTION_NAME,
        icon="",
        color=COLLECTION_COLORS[0],
        created_at=now,
        updated_at=now,
    )


class Storage:
    """
    File-backed store for bookmarks, collections and tags.

    Each call reads or rewrites the relevant file, so two Storage instances
    on the same directory always see each other's writes.
    """

    def __init__(self, data_dir: Optional[str] = None):
        """
        Args:
            data_dir: Directory holding the JSON files. Uses config default if not provided.
        """
        self.data_dir = Path(data_dir) if data_dir else get_config().get_data_path()
        self.bookmarks_path = self.data_dir / BOOKMARKS_FILE
        self.collections_path = self.data_dir / COLLECTIONS_FILE
        self.tags_path = self.data_dir / TAGS_FILE

    def _read_list(self, path: Path) -> list:
        data = read_json_file(path, [])
        if not isinstance(data, list):
            raise StorageError(f"Expected a JSON array in {path}")
        return data

    # Bookmarks

    def get_bookmarks(self) -> List[Bookmark]:
        return [Bookmark.from_dict(item) for item in self._read_list(self.bookmarks_path)]

    def save_bookmarks(self, bookmarks: Iterable[Bookmark]) -> None:
        write_json_file(self.bookmarks_path, [b.to_dict() for b in bookmarks])

    def get_bookmark(self, id: str) -> Optional[Bookmark]:
        for bookmark in self.get_bookmarks():
            if bookmark.id == id:
                return bookmark
        return None

    def add_bookmark(self, bookmark: Bookmark) -> Bookmark:
        """Add a bookmark at the front of the list (newest first)."""
        bookmarks = self.get_bookmarks()
        bookmarks.insert(0, bookmark)
        self.save_bookmarks(bookmarks)
        logger.debug(f"Added bookmark {bookmark.id}: {bookmark.url}")
        return bookmark

    def update_bookmark(self, id: str, **updates) -> Optional[Bookmark]:
        """
        Update fields of a bookmark and refresh its ``updated_at``.

        Returns:
            The updated bookmark, or None if no bookmark has this id
        """
        bookmarks = self.get_bookmarks()
        for index, bookmark in enumerate(bookmarks):
            if bookmark.id == id:
                updates["updated_at"] = max(now_ms(), bookmark.updated_at or 0)
                bookmarks[index] = bookmark.copy(**updates)
                self.save_bookmarks(bookmarks)
                return bookmarks[index]
        return None

    def delete_bookmark(self, id: str) -> bool:
        return self.delete_bookmarks([id]) > 0

    def delete_bookmarks(self, ids: Iterable[str]) -> int:
        """
        Delete bookmarks by id.

        Returns:
            Number of bookmarks removed
        """
        id_set = set(ids)
        bookmarks = self.get_bookmarks()
        remaining = [b for b in bookmarks if b.id not in id_set]
        self.save_bookmarks(remaining)
        return len(bookmarks) - len(remaining)

    def dedupe_by_url(self) -> DedupeReport:
        """
        Strip ``ref`` parameters and remove duplicate bookmarks in place.

        The file is only rewritten when something changed.
        """
        report = dedupe_report(self.get_bookmarks())
        if report.changed:
            self.save_bookmarks(report.deduped)
        logger.info(
            f"Dedupe: {report.removed_count} duplicates removed, "
            f"{report.ref_stripped_count} ref params stripped"
        )
        return report

    # Collections

    def get_collections(self) -> List[Collection]:
        """
        Load collections.

        An empty store gets the default collection, and collections without
        a color get one from the palette; both are persisted immediately.
        """
        collections = [Collection.from_dict(c) for c in self._read_list(self.collections_path)]

        if not collections:
            collections = [default_collection()]
            self.save_collections(collections)
            return collections

        did_update = False
        for index, collection in enumerate(collections):
            if not collection.color:
                collection.color = COLLECTION_COLORS[index % len(COLLECTION_COLORS)]
                did_update = True
        if did_update:
            self.save_collections(collections)
        return collections

    def save_collections(self, collections: Iterable[Collection]) -> None:
        write_json_file(self.collections_path, [c.to_dict() for c in collections])

    def get_collection(self, id: str) -> Optional[Collection]:
        for collection in self.get_collections():
            if collection.id == id:
                return collection
        return None

    def add_collection(self, collection: Collection) -> Collection:
        collections = self.get_collections()
        collections.append(collection)
        self.save_collections(collections)
        return collection

    def update_collection(self, id: str, **updates) -> Optional[Collection]:
        collections = self.get_collections()
        for collection in collections:
            if collection.id == id:
                for key, value in updates.items():
                    setattr(collection, key, value)
                collection.updated_at = now_ms()
                self.save_collections(collections)
                return collection
        return None

    def delete_collection(self, id: str) -> int:
        """
        Delete a collection and every bookmark filed in it.

        Returns:
            Number of bookmarks removed with the collection

        Raises:
            ValueError: If asked to delete the default collection
        """
        if id == DEFAULT_COLLECTION_ID:
            raise ValueError("The default collection cannot be deleted")

        collections = [c for c in self.get_collections() if c.id != id]
        self.save_collections(collections)

        bookmarks = self.get_bookmarks()
        remaining = [b for b in bookmarks if b.collection_id != id]
        self.save_bookmarks(remaining)
        return len(bookmarks) - len(remaining)

    # Tags

    def get_tags(self) -> List[TagDefinition]:
        return [TagDefinition.from_dict(t) for t in self._read_list(self.tags_path)]

    def save_tags(self, tags: Iterable[TagDefinition]) -> None:
        write_json_file(self.tags_path, [t.to_dict() for t in tags])

    def sync_tags(self, bookmarks: Optional[List[Bookmark]] = None) -> List[TagDefinition]:
        """
        Make sure every tag used by a bookmark has a definition.

        Returns:
            All tag definitions, sorted by name
        """
        if bookmarks is None:
            bookmarks = self.get_bookmarks()
        existing = self.get_tags()
        by_name = {t.name: t for t in existing}

        for bookmark in bookmarks:
            for tag in bookmark.tags:
                if tag not in by_name:
                    by_name[tag] = TagDefinition(name=tag, color=get_tag_color(tag))

        tags = sorted(by_name.values(), key=lambda t: t.name)
        if len(tags) != len(existing):
            self.save_tags(tags)
        return tags


# Global storage instance
_storage: Optional[Storage] = None


def get_storage(data_dir: Optional[str] = None, reload: bool = False) -> Storage:
    """
    Get the global storage instance.

    Args:
        data_dir: Data directory
        reload: Force a new instance

    Returns:
        Storage instance
    """
    global _storage
    if _storage is None or reload or data_dir:
        _storage = Storage(data_dir)
    return _storage
