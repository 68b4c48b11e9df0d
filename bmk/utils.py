import os
import json
import logging
import random
import re
import string
import time
from typing import Any

from bmk.constants import TAG_COLORS

logger = logging.getLogger(__name__)

class StorageError(Exception):
    """Raised when a data file exists but cannot be read or decoded."""

def ensure_dir(path):
    os.makedirs(path, exist_ok=True)

def generate_id() -> str:
    """Generate an opaque bookmark/collection id: ``<millis>-<9 random chars>``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{int(time.time() * 1000)}-{suffix}"

def read_json_file(path, fallback: Any) -> Any:
    """
    Read a JSON data file.

    Returns ``fallback`` if the file does not exist.

    Args:
        path: File to read
        fallback: Value returned for a missing file

    Raises:
        StorageError: If the file exists but cannot be read or parsed
    """
    if not os.path.exists(path):
        logger.debug(f"No existing {path} found. Using fallback.")
        return fallback
    try:
        with open(path, 'r', encoding='utf-8') as file:
            data = json.load(file)
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Error reading {path}: {e}") from e
    logger.debug(f"Loaded {path}.")
    return data

def write_json_file(path, data: Any) -> None:
    """Replace a JSON data file, creating its directory if needed."""
    ensure_dir(os.path.dirname(os.path.abspath(path)))
    with open(path, 'w', encoding='utf-8') as file:
        json.dump(data, file, ensure_ascii=False, indent=2)
    logger.debug(f"Saved {path}.")

def get_tag_color(tag: str, tag_colors: dict = None) -> str:
    """Pick a display color for a tag, stable across runs."""
    if not tag:
        return "bg-black/5 text-black/70 border-black/10"
    if tag_colors and tag in tag_colors:
        return tag_colors[tag]
    h = 0
    for ch in tag:
        h = (h * 31 + ord(ch)) % 2147483647
    return TAG_COLORS[h % len(TAG_COLORS)]

def parse_tags(value: str) -> list:
    """Split a comma-separated tag list, dropping blanks and repeats."""
    if not value:
        return []
    tags = []
    for tag in value.split(","):
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags

def to_file_name(value: str) -> str:
    """Slug a name for use as a file name, defaulting to "bookmarks"."""
    base = re.sub(r"[^a-z0-9\-_]+", "-", value.lower()).strip("-")
    return base or "bookmarks"
