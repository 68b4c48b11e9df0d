"""
Constants for BMK.

These constants are used by various modules for sensible defaults.
Many are now also available via the config system.
"""
from enum import Enum


class CollectionKind(str, Enum):
    """Well-known collection identifiers."""
    DEFAULT = "default"


# The sentinel collection that represents "all bookmarks"
DEFAULT_COLLECTION_ID = CollectionKind.DEFAULT.value
DEFAULT_COLLECTION_NAME = "All Bookmarks"

# Network settings
DEFAULT_REQUEST_TIMEOUT = 10
METADATA_USER_AGENT = "Mozilla/5.0 (compatible; CollectionBot/1.0)"

# Delay between sequential metadata fetches during bulk import (seconds)
DEFAULT_IMPORT_DELAY = 0.2

# Storage layout
DEFAULT_DATA_DIR = "data"
BOOKMARKS_FILE = "bookmarks.json"
COLLECTIONS_FILE = "collections.json"
TAGS_FILE = "tags.json"

# Sorting
SORT_OPTIONS = ("newest", "oldest", "alphabetical")

# Export formats mapped to their file extension
EXPORT_FORMATS = {
    "html": "html",
    "markdown": "md",
    "text": "txt",
    "json": "json",
}

COLLECTION_COLORS = [
    "bg-red-500",
    "bg-orange-500",
    "bg-amber-500",
    "bg-yellow-500",
    "bg-green-500",
    "bg-cyan-500",
    "bg-sky-500",
    "bg-blue-500",
    "bg-indigo-500",
    "bg-purple-500",
    "bg-pink-500",
]

TAG_COLORS = [
    "bg-amber-100 text-amber-900 border-amber-200",
    "bg-emerald-100 text-emerald-900 border-emerald-200",
    "bg-sky-100 text-sky-900 border-sky-200",
    "bg-rose-100 text-rose-900 border-rose-200",
    "bg-violet-100 text-violet-900 border-violet-200",
    "bg-lime-100 text-lime-900 border-lime-200",
    "bg-orange-100 text-orange-900 border-orange-200",
    "bg-cyan-100 text-cyan-900 border-cyan-200",
]

# Display limits
DEFAULT_LIST_LIMIT = 50
