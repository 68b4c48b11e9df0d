"""
Data models for BMK bookmark management.

Records are plain dataclasses persisted as JSON arrays. The JSON form keeps
camelCase keys (``collectionId``, ``createdAt``, ``updatedAt``) so data files
stay compatible with the web front end.
"""
import time
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

from bmk.constants import DEFAULT_COLLECTION_ID


def now_ms() -> int:
    """Current time as integer milliseconds since the epoch."""
    return int(time.time() * 1000)


def _timestamp(value: Any) -> Optional[int]:
    """Millisecond timestamp from JSON; anything non-numeric is treated as missing."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


@dataclass
class Bookmark:
    """
    A saved URL with metadata.

    Attributes:
        id: Opaque unique identifier
        url: Stored URL (ref-stripped; canonical after a dedupe pass)
        title: Bookmark title
        description: Optional description, "" when unknown
        icon: Favicon URL
        image: Preview image URL
        tags: Tag names
        collection_id: Owning collection, the default collection means "all"
        created_at: Creation time in milliseconds, None if unknown
        updated_at: Last modification time in milliseconds, None if unknown
    """
    id: str
    url: str
    title: str = ""
    description: str = ""
    icon: Optional[str] = None
    image: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    collection_id: str = DEFAULT_COLLECTION_ID
    created_at: Optional[int] = None
    updated_at: Optional[int] = None

    @property
    def in_default_collection(self) -> bool:
        return self.collection_id == DEFAULT_COLLECTION_ID

    def copy(self, **changes) -> "Bookmark":
        """Return a copy with ``changes`` applied; tags are not shared."""
        changes.setdefault("tags", list(self.tags))
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
            "collectionId": self.collection_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.icon is not None:
            data["icon"] = self.icon
        if self.image is not None:
            data["image"] = self.image
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bookmark":
        return cls(
            id=str(data.get("id") or ""),
            url=str(data.get("url") or ""),
            title=data.get("title") or "",
            description=data.get("description") or "",
            icon=data.get("icon"),
            image=data.get("image"),
            tags=[str(t) for t in data.get("tags") or [] if t],
            collection_id=data.get("collectionId") or DEFAULT_COLLECTION_ID,
            created_at=_timestamp(data.get("createdAt")),
            updated_at=_timestamp(data.get("updatedAt")),
        )

    def __repr__(self):
        return f"<Bookmark(id={self.id}, title='{self.title[:50]}', url='{self.url[:50]}')>"


@dataclass
class Collection:
    """A named group of bookmarks."""
    id: str
    name: str
    icon: str = ""
    color: str = ""
    created_at: Optional[int] = None
    updated_at: Optional[int] = None

    @property
    def is_default(self) -> bool:
        return self.id == DEFAULT_COLLECTION_ID

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Collection":
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name") or "",
            icon=data.get("icon") or "",
            color=data.get("color") or "",
            created_at=_timestamp(data.get("createdAt")),
            updated_at=_timestamp(data.get("updatedAt")),
        )


@dataclass
class TagDefinition:
    """A tag name and its display color."""
    name: str
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TagDefinition":
        return cls(name=data.get("name", ""), color=data.get("color", ""))


@dataclass
class ExtractedMetadata:
    """Title, description, icon and image scraped from one HTML document."""
    title: str
    description: str = ""
    icon: Optional[str] = None
    image: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
