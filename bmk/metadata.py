"""
Metadata extraction for pasted links.

Title, description, icon and image are pulled out of raw HTML with an ordered
list of patterns, each one a fallback for the previous. No HTML parser is
involved: attribute order matters (``property``/``name`` before ``content``,
``rel`` before ``href``) exactly as the tags are commonly written.

The extraction functions are pure and never raise. ``fetch_metadata`` is the
network-facing wrapper used when adding or importing bookmarks.
"""
import logging
import re
from typing import Optional

import requests

from bmk.constants import DEFAULT_REQUEST_TIMEOUT, METADATA_USER_AGENT
from bmk.models import ExtractedMetadata
from bmk.urls import parse_url

logger = logging.getLogger(__name__)

_VALUE = r"""["']([^"']*)["']"""


def _meta(attr: str, name: str) -> re.Pattern:
    return re.compile(
        rf"""<meta[^>]*{attr}=["']{re.escape(name)}["'][^>]*content={_VALUE}""",
        re.IGNORECASE,
    )


def _link(rel: str, extra: str = "") -> re.Pattern:
    return re.compile(
        rf"""<link[^>]*rel=["']{re.escape(rel)}["']{extra}[^>]*href={_VALUE}""",
        re.IGNORECASE,
    )


TITLE_PATTERNS = [
    _meta("property", "og:title"),
    _meta("name", "twitter:title"),
    re.compile(r"<title[^>]*>([^<]*)</title>", re.IGNORECASE),
]

DESCRIPTION_PATTERNS = [
    _meta("property", "og:description"),
    _meta("name", "twitter:description"),
    _meta("name", "description"),
]

ICON_PATTERNS = [
    _link("apple-touch-icon"),
    _link("icon", r"""[^>]*type=["']image/png["']"""),
    _link("shortcut icon"),
    _link("icon"),
]

IMAGE_PATTERNS = [
    _meta("property", "og:image"),
    _meta("name", "twitter:image"),
]

# Only these entities are decoded; anything else is left verbatim
HTML_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&apos;": "'",
}

_ENTITY_RE = re.compile(r"&[^;&]+;")


class MetadataFetchError(Exception):
    """Raised when a page could not be fetched for metadata extraction."""


def decode_html_entities(text: str) -> str:
    return _ENTITY_RE.sub(lambda m: HTML_ENTITIES.get(m.group(0), m.group(0)), text)


def _first_match(html: str, patterns) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(html)
        if match and match.group(1):
            return match.group(1)
    return None


def resolve_url(href: str, origin: str) -> str:
    """
    Make an extracted href absolute.

    Relative paths are resolved against the site origin, not against the
    page path: ``img/a.png`` on ``https://x.com/blog/post`` becomes
    ``https://x.com/img/a.png``.
    """
    if re.match(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:", href):
        return href
    if href.startswith("//"):
        return f"https:{href}"
    if href.startswith("/"):
        return f"{origin}{href}"
    return f"{origin}/{href}"


def _origin(url: str) -> Optional[str]:
    parsed = parse_url(url) if url and "://" in url else None
    return parsed.origin if parsed else None


def extract_title(html: str, url: str) -> str:
    """
    Extract a page title.

    Fallback order: og:title, twitter:title, <title>, the URL's hostname
    without ``www.``, and finally "Untitled".
    """
    match = _first_match(html, TITLE_PATTERNS)
    if match:
        return decode_html_entities(match)

    parsed = parse_url(url) if url and "://" in url else None
    if parsed is None:
        return "Untitled"
    host = parsed.host
    return host[4:] if host.startswith("www.") else host


def extract_description(html: str) -> str:
    """Extract a page description, or "" if none is declared."""
    match = _first_match(html, DESCRIPTION_PATTERNS)
    return decode_html_entities(match) if match else ""


def extract_icon(html: str, url: str) -> Optional[str]:
    """
    Extract a favicon URL.

    Falls back to ``{origin}/favicon.ico``; only returns None when ``url``
    itself cannot be parsed.
    """
    origin = _origin(url)
    if origin is None:
        return None

    match = _first_match(html, ICON_PATTERNS)
    if match:
        return resolve_url(match, origin)
    return f"{origin}/favicon.ico"


def extract_image(html: str, url: str) -> Optional[str]:
    """Extract a preview image from og:image or twitter:image."""
    origin = _origin(url)
    if origin is None:
        return None

    match = _first_match(html, IMAGE_PATTERNS)
    return resolve_url(match, origin) if match else None


def extract_metadata(html: str, url: str) -> ExtractedMetadata:
    return ExtractedMetadata(
        title=extract_title(html, url),
        description=extract_description(html),
        icon=extract_icon(html, url),
        image=extract_image(html, url),
    )


def fetch_metadata(url: str, timeout: Optional[float] = None, user_agent: Optional[str] = None,
                   session: Optional[requests.Session] = None) -> ExtractedMetadata:
    """
    Fetch a page and extract its metadata.

    Args:
        url: Page URL
        timeout: Request timeout in seconds (default: 10)
        user_agent: User-Agent header (default: the CollectionBot agent)
        session: Optional requests session to reuse

    Returns:
        Extracted metadata

    Raises:
        ValueError: If url is empty
        MetadataFetchError: If the page could not be fetched
    """
    if not url:
        raise ValueError("URL is required")

    http = session or requests
    try:
        response = http.get(
            url,
            headers={"User-Agent": user_agent or METADATA_USER_AGENT},
            timeout=timeout or DEFAULT_REQUEST_TIMEOUT,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Failed to fetch metadata for {url}: {e}")
        raise MetadataFetchError(f"Metadata request failed: {e}") from e

    logger.debug(f"Fetched {url} ({len(response.text)} chars)")
    return extract_metadata(response.text, url)
