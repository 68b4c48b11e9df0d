"""
BMK - Bookmark Keeper

A personal bookmark manager stored as plain JSON files.

Design Principles:
- One directory of JSON files (bookmarks, collections, tags)
- One canonical form per URL, so duplicates collapse reliably
- Page metadata extracted from raw HTML without a browser
- Composable CLI that pipes well with other tools

Example Usage:
    >>> from bmk import Storage, canonicalize
    >>> canonicalize("http://www.example.com/path/?utm_source=x#top")
    'https://example.com/path'
    >>> storage = Storage("data")
    >>> storage.dedupe_by_url()
"""

__version__ = "0.1.0"
__author__ = "BMK Contributors"

# Storage
from bmk.storage import Storage, StorageError, get_storage

# Configuration
from bmk.config import BmkConfig, get_config, init_config

# Models
from bmk.models import Bookmark, Collection, TagDefinition, ExtractedMetadata

# URL handling and deduplication
from bmk.urls import canonicalize, strip_ref_param, normalize_url
from bmk.dedup import dedupe, dedupe_report, find_duplicate, is_duplicate_url

# Metadata
from bmk.metadata import extract_metadata, fetch_metadata, MetadataFetchError

# Import/Export
from bmk.importers import import_file
from bmk.exporters import export_file

__all__ = [
    # Storage
    "Storage",
    "StorageError",
    "get_storage",
    # Config
    "BmkConfig",
    "get_config",
    "init_config",
    # Models
    "Bookmark",
    "Collection",
    "TagDefinition",
    "ExtractedMetadata",
    # URLs
    "canonicalize",
    "strip_ref_param",
    "normalize_url",
    "dedupe",
    "dedupe_report",
    "find_duplicate",
    "is_duplicate_url",
    # Metadata
    "extract_metadata",
    "fetch_metadata",
    "MetadataFetchError",
    # Import/Export
    "import_file",
    "export_file",
]
