"""
URL canonicalization for BMK.

Two levels of normalization are provided:

- ``canonicalize`` produces the comparison key used for duplicate detection.
  Scheme, ``www.`` prefix, trailing slash, fragment and tracking parameters
  (``ref`` and ``utm_*``) never take part in identity.
- ``strip_ref_param`` is the narrower form applied to the URL that is actually
  stored: it only drops the ``ref`` parameter and leaves everything else alone.

Neither function raises. Input that cannot be parsed as a URL is returned as
given so callers can still store it verbatim.
"""
import re
from typing import Callable, NamedTuple, Optional
from urllib.parse import unquote_plus, urlsplit, urlunsplit

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
_FORBIDDEN_HOST_CHARS = re.compile(r"[\s<>\\^|%\"`{}]")

_DEFAULT_PORTS = {"http": 80, "https": 443, "ftp": 21, "ws": 80, "wss": 443}

TRACKING_PREFIX = "utm_"
REF_PARAM = "ref"


class ParsedUrl(NamedTuple):
    """A parsed absolute URL with a lower-cased scheme and host."""
    scheme: str
    userinfo: str
    host: str
    port: Optional[int]
    path: str
    query: str
    fragment: str

    @property
    def netloc(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        netloc = f"{self.userinfo}@{host}" if self.userinfo else host
        if self.port is not None:
            netloc = f"{netloc}:{self.port}"
        return netloc

    @property
    def origin(self) -> str:
        return f"{self.scheme}://{self.netloc.rpartition('@')[2]}"

    def geturl(self) -> str:
        return urlunsplit((self.scheme, self.netloc, self.path, self.query, self.fragment))


def with_default_scheme(raw: str) -> str:
    """Prefix ``https://`` unless the string already names a scheme."""
    return raw if _SCHEME_RE.match(raw) else f"https://{raw}"


def parse_url(raw: str) -> Optional[ParsedUrl]:
    """
    Parse a URL, accepting bare domains such as ``example.com``.

    Returns:
        ParsedUrl, or None when the input is not a usable absolute URL
        (no host, invalid host characters, bad port or IPv6 literal).
    """
    try:
        parts = urlsplit(with_default_scheme(raw))
        port = parts.port
    except ValueError:
        return None

    host = parts.hostname
    if not host or _FORBIDDEN_HOST_CHARS.search(host):
        return None

    userinfo = parts.netloc.rpartition("@")[0] if "@" in parts.netloc else ""
    scheme = parts.scheme.lower()
    if port == _DEFAULT_PORTS.get(scheme):
        port = None

    # An http(s) URL always has at least the root path
    path = (parts.path or "/").replace(" ", "%20")
    query = parts.query.replace(" ", "%20")

    return ParsedUrl(scheme, userinfo, host, port, path, query, parts.fragment)


def remove_query_params(query: str, should_remove: Callable[[str], bool]) -> str:
    """
    Drop query parameters whose decoded name matches ``should_remove``.

    Remaining parameters keep their order and their original encoding.
    """
    if not query:
        return query
    kept = []
    for pair in query.split("&"):
        if not pair:
            continue
        name = unquote_plus(pair.split("=", 1)[0])
        if should_remove(name):
            continue
        kept.append(pair)
    return "&".join(kept)


def is_tracking_param(name: str) -> bool:
    """True for ``ref`` and any ``utm_*`` parameter."""
    return name == REF_PARAM or name.lower().startswith(TRACKING_PREFIX)


def canonicalize(raw: str) -> str:
    """
    Normalize a URL into its comparison key.

    Args:
        raw: URL as typed, pasted or stored

    Returns:
        Canonical absolute URL, or the trimmed input if it cannot be parsed.
        Empty input is returned unchanged.

    Example:
        >>> canonicalize("http://www.example.com/page/?ref=abc&utm_source=x#frag")
        'https://example.com/page'
    """
    trimmed = raw.strip()
    if not trimmed:
        return raw

    url = parse_url(trimmed)
    if url is None:
        return trimmed

    scheme = "https" if url.scheme == "http" else url.scheme
    port = None if url.port == _DEFAULT_PORTS.get(scheme) else url.port

    host = url.host
    if host.startswith("www.") and len(host) > 4:
        host = host[4:]

    path = url.path
    if path != "/" and path.endswith("/"):
        path = path[:-1]

    return url._replace(
        scheme=scheme,
        host=host,
        port=port,
        path=path,
        query=remove_query_params(url.query, is_tracking_param),
        fragment="",
    ).geturl()


def strip_ref_param(raw: str) -> str:
    """
    Remove only the ``ref`` query parameter from a URL.

    Host, path, fragment and all other parameters are preserved. Input that
    cannot be parsed is returned unchanged.
    """
    trimmed = raw.strip()
    if not trimmed:
        return raw

    url = parse_url(trimmed)
    if url is None:
        return raw

    query = remove_query_params(url.query, lambda name: name == REF_PARAM)
    return url._replace(query=query).geturl()


def normalize_url(raw: str) -> str:
    """Parse and re-serialize a URL, adding ``https://`` to bare domains."""
    url = parse_url(raw.strip()) if raw else None
    if url is None:
        return raw
    return url.geturl()


def get_domain(url: str) -> str:
    """Get the host of a URL without a leading ``www.``, or "" if unparsable."""
    parsed = parse_url(url.strip()) if url else None
    if parsed is None:
        return ""
    host = parsed.host
    return host[4:] if host.startswith("www.") else host


def is_likely_url(value: str) -> bool:
    """
    Decide whether user input looks like a link rather than a search query.

    Plain words are rejected: the host must contain a dot (or be localhost).
    """
    if not value:
        return False
    trimmed = value.strip()
    if not trimmed or " " in trimmed:
        return False
    parsed = parse_url(trimmed)
    if parsed is None:
        return False
    return "." in parsed.host or parsed.host == "localhost" or ":" in parsed.host
