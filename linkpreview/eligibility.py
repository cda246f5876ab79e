# linkpreview/eligibility.py
from __future__ import annotations
import re
from typing import Callable, Optional
from .share_links import is_allow_listed_share_link
from .urltools import parse_absolute

_DOMAIN_RE = re.compile(r"(https?://)?([^/]+).*")
_ALL_ASCII_RE = re.compile(r"[\x00-\x7F]*")
_ALL_NON_ASCII_RE = re.compile(r"[^\x00-\x7F]*")


def is_eligible(
    url: Optional[str],
    share_link_check: Callable[[str], bool] = is_allow_listed_share_link,
) -> bool:
    """
    True if `url` may be fetched and previewed.

    Allow-listed first-party share links pass as-is. Everything else must
    parse as an absolute https URL whose domain is not a mix of ASCII and
    non-ASCII characters.
    """
    if url is None:
        return False
    if share_link_check(url):
        return True

    parts = parse_absolute(url)
    return (
        parts is not None
        and bool(parts.scheme)
        and parts.scheme == "https"
        and is_legal_domain(url)
    )


def is_legal_domain(url: str) -> bool:
    """
    Reject mixed-script domains (e.g. Latin letters next to Cyrillic look-alikes).
    Dots are ignored; an all-ASCII or an all-non-ASCII domain is fine.
    """
    m = _DOMAIN_RE.fullmatch(url)
    if not m:
        return False
    cleaned = m.group(2).replace(".", "")
    return bool(_ALL_ASCII_RE.fullmatch(cleaned) or _ALL_NON_ASCII_RE.fullmatch(cleaned))
