"""
Importers for BMK.

Provides URL extraction from pasted text and import functions for markdown,
plain text, Netscape HTML and JSON bookmark files.
"""
import json
import logging
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from bmk.config import get_config
from bmk.constants import COLLECTION_COLORS, DEFAULT_COLLECTION_ID
from bmk.dedup import dedupe, dedupe_key, find_duplicate
from bmk.metadata import fetch_metadata
from bmk.models import Bookmark, Collection, ExtractedMetadata, now_ms
from bmk.progress import track_progress
from bmk.storage import Storage
from bmk.urls import is_likely_url, normalize_url, strip_ref_param
from bmk.utils import generate_id

logger = logging.getLogger(__name__)

MetadataFetcher = Callable[[str], ExtractedMetadata]

_CODE_BLOCK_RE = re.compile(r"```.*?```", re.DOTALL)
_INLINE_CODE_RE = re.compile(r"`[^`]+`")
_MARKDOWN_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_PLAIN_URL_RE = re.compile(r"(https?://[^\s)]+|www\.[^\s)]+)", re.IGNORECASE)


@dataclass
class ImportResult:
    """Outcome of importing a batch of URLs."""
    imported: int = 0
    skipped: int = 0
    failed: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)
    bookmarks: List[Bookmark] = field(default_factory=list)

    def summary(self) -> str:
        return (f"Import complete: {self.imported} imported, "
                f"{self.skipped} skipped (duplicates), {self.failed} failed.")


def extract_urls_from_markdown(markdown: str) -> List[str]:
    """
    Extract URLs from markdown text.

    Supports ``[text](url)``, ``[text](url "title")`` and bare
    ``http(s)://`` or ``www.`` URLs. Anything inside code spans or fenced
    code blocks is ignored, as are ``#anchor`` links.

    Returns:
        Normalized URLs in order of first appearance, without repeats
    """
    text = _INLINE_CODE_RE.sub("", _CODE_BLOCK_RE.sub("", markdown))

    urls: List[str] = []
    seen = set()

    def add(url: str):
        normalized = normalize_url(url)
        if normalized not in seen:
            seen.add(normalized)
            urls.append(normalized)

    for match in _MARKDOWN_LINK_RE.finditer(text):
        target = match.group(2).strip().split()
        if target and not target[0].startswith("#"):
            add(target[0])

    for match in _PLAIN_URL_RE.finditer(text):
        add(match.group(0).strip())

    return urls


def parse_bulk_links(text: str) -> List[str]:
    """One link per line; only lines starting with ``http`` are kept."""
    return [line.strip() for line in text.splitlines()
            if line.strip() and line.strip().startswith("http")]


def default_fetcher() -> MetadataFetcher:
    config = get_config()
    return lambda url: fetch_metadata(url, timeout=config.timeout, user_agent=config.user_agent)


def bookmark_from_metadata(url: str, metadata: ExtractedMetadata,
                           collection_id: str = DEFAULT_COLLECTION_ID) -> Bookmark:
    now = now_ms()
    return Bookmark(
        id=generate_id(),
        url=url,
        title=metadata.title or url,
        description=metadata.description or "",
        icon=metadata.icon,
        image=metadata.image,
        tags=[],
        collection_id=collection_id,
        created_at=now,
        updated_at=now,
    )


def add_url(storage: Storage, value: str, collection_id: str = DEFAULT_COLLECTION_ID,
            fetcher: Optional[MetadataFetcher] = None) -> Tuple[Optional[Bookmark], str]:
    """
    Add a single pasted link.

    The stored URL is ref-stripped. If fetching metadata fails the bookmark
    is still saved, titled with its URL.

    Returns:
        (bookmark, status message); bookmark is None for a duplicate

    Raises:
        ValueError: If the value does not look like a URL
    """
    trimmed = value.strip()
    if not is_likely_url(trimmed):
        raise ValueError(f"Not a URL: {value!r}")

    if find_duplicate(trimmed, storage.get_bookmarks()):
        return None, "This link already exists in your list."

    url = strip_ref_param(trimmed)
    fetcher = fetcher or default_fetcher()
    try:
        metadata = fetcher(url)
        bookmark = bookmark_from_metadata(url, metadata, collection_id)
        message = "Saved."
    except Exception as e:
        logger.warning(f"Saving {url} without metadata: {e}")
        bookmark = bookmark_from_metadata(url, ExtractedMetadata(title=url), collection_id)
        bookmark.icon = ""
        bookmark.image = ""
        message = "Saved without metadata."

    storage.add_bookmark(bookmark)
    return bookmark, message


def import_urls(storage: Storage, urls: List[str],
                collection_id: str = DEFAULT_COLLECTION_ID,
                fetcher: Optional[MetadataFetcher] = None,
                delay: Optional[float] = None,
                sleep: Callable[[float], None] = time.sleep,
                no_progress: bool = False) -> ImportResult:
    """
    Import URLs one at a time, fetching metadata for each.

    Duplicates of existing bookmarks (or of URLs earlier in the batch) are
    skipped. Fetches are sequential with ``delay`` seconds between them.

    Args:
        storage: Target storage
        urls: URLs to import
        collection_id: Collection for the new bookmarks
        fetcher: Callable returning ExtractedMetadata for a URL
        delay: Pause between fetches (default: config import_delay)
        sleep: Sleep function, replaceable in tests
        no_progress: Never show a progress bar

    Returns:
        ImportResult with counts and per-URL failures
    """
    fetcher = fetcher or default_fetcher()
    if delay is None:
        delay = get_config().import_delay

    urls = list(urls)
    existing = storage.get_bookmarks()
    result = ImportResult()

    for i, url in enumerate(track_progress(urls, "Importing links", no_progress)):
        if find_duplicate(url, existing):
            result.skipped += 1
            continue

        try:
            metadata = fetcher(url)
            bookmark = bookmark_from_metadata(normalize_url(url), metadata, collection_id)
            storage.add_bookmark(bookmark)
            existing.append(bookmark)
            result.bookmarks.append(bookmark)
            result.imported += 1
        except Exception as e:
            logger.error(f"Failed to import {url}: {e}")
            result.failed += 1
            result.failures.append((url, str(e) or "Unexpected error occurred"))

        if delay and i < len(urls) - 1:
            sleep(delay)

    logger.info(result.summary())
    return result


def import_file(storage: Storage, path: Path, format: Optional[str] = None,
                collection_id: str = DEFAULT_COLLECTION_ID,
                fetcher: Optional[MetadataFetcher] = None) -> ImportResult:
    """
    Import bookmarks from a file.

    Args:
        storage: Target storage
        path: File path to import
        format: Format override (auto-detected if not specified)
        collection_id: Collection for the new bookmarks
        fetcher: Metadata fetcher for formats that only carry URLs

    Returns:
        ImportResult
    """
    path = Path(path)
    if format is None:
        format_map = {
            ".html": "html",
            ".htm": "html",
            ".json": "json",
            ".md": "markdown",
            ".markdown": "markdown",
            ".txt": "text",
        }
        format = format_map.get(path.suffix.lower(), "markdown")

    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    if format in ("markdown", "text"):
        urls = extract_urls_from_markdown(content)
        if not urls:
            logger.warning(f"No URLs found in {path}")
            return ImportResult()
        return import_urls(storage, urls, collection_id=collection_id, fetcher=fetcher)
    if format == "html":
        return import_html(storage, content, collection_id)
    if format == "json":
        return import_json(storage, json.loads(content))
    raise ValueError(f"Unknown format: {format}")


def import_html(storage: Storage, html: str,
                collection_id: str = DEFAULT_COLLECTION_ID) -> ImportResult:
    """Import bookmarks from HTML (Netscape format or generic links)."""
    soup = BeautifulSoup(html, "html.parser")
    existing = storage.get_bookmarks()
    result = ImportResult()

    def add(url: str, title: str, tags: List[str], added: Optional[int]):
        if find_duplicate(url, existing):
            result.skipped += 1
            return
        now = now_ms()
        bookmark = Bookmark(
            id=generate_id(),
            url=strip_ref_param(url),
            title=title or url,
            tags=tags,
            collection_id=collection_id,
            created_at=added or now,
            updated_at=now,
        )
        existing.insert(0, bookmark)
        result.bookmarks.append(bookmark)
        result.imported += 1

    links = [dt.find("a", recursive=False) for dt in soup.find_all("dt")]
    links = [a for a in links if a is not None and a.get("href")]
    netscape = bool(links)
    if not netscape:
        links = [a for a in soup.find_all("a", href=True)
                 if a["href"].startswith(("http://", "https://"))]

    for link in links:
        tags = _folder_tags(link) if netscape else []
        added = None
        add_date = link.get("add_date")
        if add_date:
            try:
                added = int(add_date) * 1000
            except ValueError:
                logger.debug(f"Ignoring bad ADD_DATE {add_date!r}")
        add(link["href"], link.get_text(strip=True), tags, added)

    storage.save_bookmarks(existing)
    storage.sync_tags(existing)
    logger.info(result.summary())
    return result


def _folder_tags(link) -> List[str]:
    """Folder names enclosing a Netscape bookmark, innermost first."""
    tags = []
    parent = link.find_parent("dl")
    while parent is not None:
        header = parent.find_previous_sibling("h3") or parent.find_previous("h3")
        # The H3 only names this DL if it is the DL's own header
        if header is not None and header.find_next("dl") is parent:
            name = header.get_text(strip=True)
            if name:
                tags.append(name.lower().replace(" ", "-"))
        parent = parent.find_parent("dl")
    return tags


def import_json(storage: Storage, data: List[Dict]) -> ImportResult:
    """
    Merge an exported JSON array of bookmarks into the store.

    URLs are ref-stripped, unknown collections fall back to the default
    collection and the combined store is deduplicated.

    Raises:
        ValueError: If data is not a list of objects
    """
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError("Expected a JSON array of bookmark objects")

    collection_ids = {c.id for c in storage.get_collections()}
    now = now_ms()
    incoming = []
    for item in data:
        bookmark = Bookmark.from_dict(item)
        incoming.append(bookmark.copy(
            id=bookmark.id or generate_id(),
            url=strip_ref_param(bookmark.url),
            collection_id=(bookmark.collection_id
                           if bookmark.collection_id in collection_ids
                           else DEFAULT_COLLECTION_ID),
            created_at=bookmark.created_at if bookmark.created_at is not None else now,
            updated_at=bookmark.updated_at if bookmark.updated_at is not None else now,
        ))

    existing = storage.get_bookmarks()
    merged = dedupe(existing + incoming)
    storage.save_bookmarks(merged)
    storage.sync_tags(merged)

    # Count new canonical URLs; the existing store may itself hold duplicates
    known = {dedupe_key(b) for b in existing}
    imported = len({dedupe_key(b) for b in incoming} - known)
    result = ImportResult(imported=imported, skipped=len(incoming) - imported)
    logger.info(result.summary())
    return result


def import_bulk_links(storage: Storage, text: str, collection_id: Optional[str] = None,
                      fetcher: Optional[MetadataFetcher] = None,
                      **kwargs) -> Tuple[Collection, ImportResult]:
    """
    Add pasted links (one per line) to a collection.

    Args:
        storage: Target storage
        text: Pasted links
        collection_id: Existing collection; a new "Collection N" is created if None
        fetcher: Metadata fetcher
        **kwargs: Passed through to import_urls

    Returns:
        (collection, ImportResult)

    Raises:
        ValueError: If no links are found or the collection does not exist
    """
    links = parse_bulk_links(text)
    if not links:
        raise ValueError("No valid links found.")

    collections = storage.get_collections()
    if collection_id is None:
        now = now_ms()
        collection = storage.add_collection(Collection(
            id=generate_id(),
            name=f"Collection {len(collections)}",
            color=COLLECTION_COLORS[len(collections) % len(COLLECTION_COLORS)],
            created_at=now,
            updated_at=now,
        ))
    else:
        collection = next((c for c in collections if c.id == collection_id), None)
        if collection is None:
            raise ValueError(f"Collection not found: {collection_id}")

    result = import_urls(storage, links, collection_id=collection.id, fetcher=fetcher, **kwargs)
    return collection, result
