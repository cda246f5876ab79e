# linkpreview/urltools.py
from __future__ import annotations
from urllib.parse import urlsplit, urljoin, SplitResult

_HTTP_SCHEMES = {"http", "https"}


def parse_absolute(url: str) -> SplitResult | None:
    """
    Parse an absolute http(s) URL the way an HTTP client would accept it.
    Returns None for anything it would refuse: other schemes, a missing host,
    a host that cannot be IDNA-encoded, or a bad port.
    """
    try:
        parts = urlsplit(url.strip())
        if parts.scheme not in _HTTP_SCHEMES:
            return None
        hostname = parts.hostname
        if not hostname:
            return None
        hostname.encode("idna")
        parts.port  # raises ValueError when out of range or not numeric
    except (ValueError, UnicodeError):
        return None
    return parts


def absolutize(base_url: str, maybe_relative: str) -> str:
    """Resolve a relative image/favicon URL against the page it came from."""
    try:
        return urljoin(base_url, maybe_relative)
    except ValueError:
        return maybe_relative


def host(url: str) -> str | None:
    try:
        h = urlsplit(url).hostname
        return h.lower() if h else None
    except ValueError:
        return None
