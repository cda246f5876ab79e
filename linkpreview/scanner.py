# linkpreview/scanner.py
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Callable, List
from .eligibility import is_eligible

@dataclass(frozen=True)
class Link:
    url: str
    position: int

@dataclass(frozen=True)
class DetectedUrl:
    url: str
    start: int

# Schemed URLs first, then bare hosts (www.example.com, example.co.uk/path).
# A bare host may not continue a word, an e-mail address or a dotted name.
_URL_RE = re.compile(
    r"(?P<scheme>(?:https?|rtsp)://)[^\s<>\"]+"
    r"|(?<![\w@.\-])(?:[^\W_][\w\-]{0,62}\.)+[^\W\d_]{2,63}(?::\d{1,5})?(?:/[^\s<>\"]*)?",
    re.IGNORECASE,
)
_TRAILING_PUNCT = ".,;:!?'\")]}"

def _trim(span: str) -> str:
    while span and span[-1] in _TRAILING_PUNCT:
        # keep a closing paren that balances one inside the URL: /wiki/Foo_(bar)
        if span[-1] == ")" and span.count("(") >= span.count(")"):
            break
        span = span[:-1]
    return span

def detect_urls(text: str) -> List[DetectedUrl]:
    """Web-URL spans in left-to-right order; bare hosts get an http:// prefix."""
    out: List[DetectedUrl] = []
    if not text:
        return out
    for m in _URL_RE.finditer(text):
        span = _trim(m.group(0))
        scheme = m.group("scheme")
        if scheme:
            rest = span[len(scheme):]
            if not rest:
                continue
            url = scheme.lower() + rest
        else:
            url = "http://" + span
        out.append(DetectedUrl(url, m.start()))
    return out

def find_eligible_links(
    text: str,
    detector: Callable[[str], List[DetectedUrl]] = detect_urls,
    checker: Callable[[str], bool] = is_eligible,
) -> List[Link]:
    """All links in `text` that may be previewed, in order of appearance."""
    return [Link(d.url, d.start) for d in detector(text or "") if checker(d.url)]
