# linkpreview/og_parser.py
from __future__ import annotations
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterator, Mapping, Optional
from .decoder import decode_html

# Open Graph tags live in <head>; anything past this is not scanned.
MAX_HTML_CHARS = 2_000_000

# Tag openings only. Each tag is then cut at its first ">" and the attribute
# patterns run on that slice, so every scan is a single forward pass.
_META_OPEN_RE = re.compile(r"<\s*meta", re.IGNORECASE)
_LINK_OPEN_RE = re.compile(r"<\s*link", re.IGNORECASE)
_TITLE_OPEN_RE = re.compile(r"<\s*title", re.IGNORECASE)
_TITLE_CLOSE_RE = re.compile(r"<\s*/title", re.IGNORECASE)

_OG_PROPERTY_RE = re.compile(r'property\s*=\s*"\s*og:(?P<name>[^"]+)"', re.IGNORECASE)
_OG_CONTENT_RE = re.compile(r'content\s*=\s*"(?P<v>[^"]*)"', re.IGNORECASE)
_REL_RE = re.compile(r'rel\s*=\s*"(?P<rel>[^"]*)"', re.IGNORECASE)
_HREF_RE = re.compile(r'href\s*=\s*"(?P<u>[^"]*)"', re.IGNORECASE)

KEY_TITLE = "title"
KEY_IMAGE = "image"
KEY_DESCRIPTION = "description"


def _first_non_empty(*values: Optional[str]) -> Optional[str]:
    for v in values:
        if v:
            return v
    return None


@dataclass(frozen=True)
class OpenGraph:
    """
    What a page says about itself: og:* tags plus <title> and favicon fallbacks.
    Empty strings count as missing everywhere.
    """
    tags: Mapping[str, str] = field(default_factory=dict)
    fallback_title: Optional[str] = None
    fallback_favicon_url: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))
        object.__setattr__(self, "fallback_title", self.fallback_title or None)
        object.__setattr__(self, "fallback_favicon_url", self.fallback_favicon_url or None)

    def get(self, name: str) -> Optional[str]:
        return self.tags.get(name) or None

    def best_title(self) -> Optional[str]:
        return _first_non_empty(self.tags.get(KEY_TITLE), self.fallback_title)

    def best_image_url(self) -> Optional[str]:
        return _first_non_empty(self.tags.get(KEY_IMAGE), self.fallback_favicon_url)

    def description(self) -> Optional[str]:
        return self.get(KEY_DESCRIPTION)


def _tags(html: str, opening: re.Pattern) -> Iterator[str]:
    """Each tag starting with `opening`, up to and including its first ">"."""
    pos = 0
    while True:
        m = opening.search(html, pos)
        if not m:
            return
        end = html.find(">", m.end())
        if end < 0:
            return  # no later tag can be closed either
        yield html[m.start():end + 1]
        pos = end + 1


def extract_og_tags(html: str, decoder: Callable[[str], str] = decode_html) -> Dict[str, str]:
    """og:<name> -> decoded content. A later tag with the same name wins."""
    tags: Dict[str, str] = {}
    for tag in _tags(html, _META_OPEN_RE):
        p = _OG_PROPERTY_RE.search(tag)
        if not p:
            continue
        c = _OG_CONTENT_RE.search(tag)
        if c:
            tags[p.group("name")] = decoder(c.group("v"))
    return tags


def extract_title(html: str) -> Optional[str]:
    """Inner text of the first <title>, as written in the page."""
    m = _TITLE_OPEN_RE.search(html)
    if not m:
        return None
    start = html.find(">", m.end())
    if start < 0:
        return None
    close = _TITLE_CLOSE_RE.search(html, start + 1)
    if not close or html.find(">", close.end()) < 0:
        return None
    return html[start + 1:close.start()]


def extract_favicon(html: str) -> Optional[str]:
    """href of the first <link> whose rel mentions "icon"."""
    for tag in _tags(html, _LINK_OPEN_RE):
        if any("icon" in r.group("rel").lower() for r in _REL_RE.finditer(tag)):
            h = _HREF_RE.search(tag)
            return h.group("u") if h else None
    return None


def extract(
    html: Optional[str],
    decoder: Callable[[str], str] = decode_html,
    max_chars: Optional[int] = MAX_HTML_CHARS,
) -> OpenGraph:
    """
    Pull preview data out of raw HTML with independent pattern scans (no DOM).
    Missing or malformed HTML gives an empty result rather than an error.
    Only og:* content values go through `decoder`.
    """
    if html is None:
        return OpenGraph()
    if max_chars is not None:
        html = html[:max_chars]
    return OpenGraph(
        tags=extract_og_tags(html, decoder),
        fallback_title=extract_title(html),
        fallback_favicon_url=extract_favicon(html),
    )
