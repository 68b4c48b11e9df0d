"""
Exporters for BMK.

Provides export of bookmarks as an HTML link list, Markdown, plain text
(one URL per line) or JSON.
"""
import json
import re
from pathlib import Path
from typing import List, Optional

from bmk.constants import DEFAULT_COLLECTION_ID, EXPORT_FORMATS
from bmk.models import Bookmark, Collection
from bmk.utils import to_file_name


def escape_html(value: str) -> str:
    return (value
            .replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
            .replace("'", "&#39;"))


def escape_markdown(value: str) -> str:
    return re.sub(r"([\[\]\\])", r"\\\1", value)


def export_html(bookmarks: List[Bookmark]) -> str:
    """Export bookmarks as a minimal HTML page with a list of links."""
    items = "".join(
        f'<li><a href="{escape_html(b.url)}">{escape_html(b.title or b.url)}</a></li>'
        for b in bookmarks
    )
    return ('<!DOCTYPE html><html><head><meta charset="utf-8">'
            '<title>Bookmarks Export</title></head>'
            f'<body><ul>{items}</ul></body></html>')


def export_markdown(bookmarks: List[Bookmark]) -> str:
    """Export bookmarks as a Markdown list of links."""
    return "\n".join(f"- [{escape_markdown(b.title or b.url)}]({b.url})" for b in bookmarks)


def export_text(bookmarks: List[Bookmark]) -> str:
    """Export bookmark URLs, one per line."""
    return "\n".join(b.url for b in bookmarks)


def export_json(bookmarks: List[Bookmark]) -> str:
    """Export bookmarks to JSON."""
    data = [{
        "title": b.title,
        "url": b.url,
        "description": b.description,
        "tags": list(b.tags),
        "createdAt": b.created_at,
        "updatedAt": b.updated_at,
        "collectionId": b.collection_id,
    } for b in bookmarks]
    return json.dumps(data, indent=2, ensure_ascii=False)


EXPORTERS = {
    "html": export_html,
    "markdown": export_markdown,
    "text": export_text,
    "json": export_json,
}


def build_export(bookmarks: List[Bookmark], format: str) -> str:
    """
    Render bookmarks in an export format.

    Raises:
        ValueError: For an unknown format
    """
    exporter = EXPORTERS.get(format)
    if not exporter:
        raise ValueError(f"Unknown format: {format}")
    return exporter(bookmarks)


def export_file(bookmarks: List[Bookmark], path: Path, format: str) -> None:
    """
    Export bookmarks to a file.

    Args:
        bookmarks: List of bookmarks to export
        path: Output file path
        format: Export format (html, markdown, text, json)
    """
    content = build_export(bookmarks, format)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def select_for_export(bookmarks: List[Bookmark], active_collection_id: str = DEFAULT_COLLECTION_ID,
                      export_collection_ids: Optional[List[str]] = None) -> List[Bookmark]:
    """
    Pick the bookmarks to export.

    An explicit selection of collections wins over the active collection;
    either one naming the default collection exports everything.
    """
    selected = export_collection_ids or []
    if not selected:
        if active_collection_id == DEFAULT_COLLECTION_ID:
            return list(bookmarks)
        return [b for b in bookmarks if b.collection_id == active_collection_id]

    if DEFAULT_COLLECTION_ID in selected:
        return list(bookmarks)
    return [b for b in bookmarks if b.collection_id in selected]


def export_filename(format: str, collections: List[Collection],
                    active_collection_id: str = DEFAULT_COLLECTION_ID,
                    export_collection_ids: Optional[List[str]] = None) -> str:
    """
    Suggest a file name for an export, e.g. ``all-bookmarks.html`` or
    ``reading-list.md``.
    """
    extension = EXPORT_FORMATS.get(format)
    if extension is None:
        raise ValueError(f"Unknown format: {format}")

    selected = export_collection_ids or []
    names = {c.id: c.name for c in collections}

    if DEFAULT_COLLECTION_ID in selected or (not selected and active_collection_id == DEFAULT_COLLECTION_ID):
        base = "all-bookmarks"
    elif not selected:
        base = names.get(active_collection_id) or "bookmarks"
    elif len(selected) == 1:
        base = names.get(selected[0]) or "bookmarks"
    else:
        base = "collections"

    return f"{to_file_name(base)}.{extension}"
