# linkpreview/fetcher.py
from __future__ import annotations
import codecs
import time
import requests
from dataclasses import dataclass

DEFAULT_RPS = 2.0
DEFAULT_TIMEOUT = 15
DEFAULT_MAX_BYTES = 2_000_000
DEFAULT_RETRIES = 3
DEFAULT_USER_AGENT = "linkpreview/0.1"

def _charset(content_type: str | None) -> str | None:
    """charset parameter of a Content-Type header: "text/html; charset=ISO-8859-1" -> "ISO-8859-1"."""
    for param in (content_type or "").split(";")[1:]:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset":
            return value.strip().strip("\"'") or None
    return None

@dataclass
class FetchResult:
    ok: bool
    status: int
    mime: str | None
    data: bytes | None
    url: str
    error: str | None = None
    bytes_read: int = 0
    charset: str | None = None

    def text(self) -> str:
        """Body decoded with the server's charset; UTF-8 when it sent none we know."""
        encoding = self.charset or "utf-8"
        try:
            codecs.lookup(encoding)
        except LookupError:
            encoding = "utf-8"
        return (self.data or b"").decode(encoding, errors="replace")

    @property
    def is_html(self) -> bool:
        return bool(self.mime) and self.mime.lower().startswith(("text/html", "application/xhtml"))

class Fetcher:
    def __init__(
        self,
        rps: float = DEFAULT_RPS,
        timeout: int = DEFAULT_TIMEOUT,
        max_bytes: int = DEFAULT_MAX_BYTES,
        retries: int = DEFAULT_RETRIES,
        user_agent: str | None = DEFAULT_USER_AGENT,
        session: requests.Session | None = None,
    ):
        self.rps = max(0.1, rps)
        self._min_interval = 1.0 / self.rps
        self._last = 0.0
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.retries = max(1, retries)
        self.sess = session or requests.Session()
        if user_agent:
            self.sess.headers.update({"User-Agent": user_agent})

    def _throttle(self):
        now = time.time()
        delta = now - self._last
        if delta < self._min_interval:
            time.sleep(self._min_interval - delta)
        self._last = time.time()

    def get(self, url: str) -> FetchResult:
        """Stream a page with a size cap + retries. Network errors end up in .error, never raised."""
        error = None
        for attempt in range(self.retries):
            try:
                self._throttle()
                with self.sess.get(url, stream=True, timeout=self.timeout) as r:
                    mime = r.headers.get("Content-Type")
                    status = r.status_code
                    if status != 200:
                        return FetchResult(False, status, mime, None, url, error=None, bytes_read=0)
                    chunks = []
                    total = 0
                    for chunk in r.iter_content(chunk_size=8192):
                        if not chunk:
                            continue
                        total += len(chunk)
                        if total > self.max_bytes:
                            return FetchResult(False, status, mime, None, url, error="too_large", bytes_read=total)
                        chunks.append(chunk)
                    data = b"".join(chunks)
                    return FetchResult(True, status, mime.split(";")[0].strip() if mime else None, data, url, None, total,
                                       charset=_charset(mime))
            except requests.RequestException as e:
                error = str(e)
                if attempt + 1 < self.retries:
                    time.sleep(1.5 * (attempt + 1))
        return FetchResult(False, 0, None, None, url, error=error or "fetch_failed", bytes_read=0)
