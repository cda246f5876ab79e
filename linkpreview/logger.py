# linkpreview/logger.py
from __future__ import annotations
from datetime import datetime
import sys

from .share_links import ShareLinkRule

# Page titles end up in the log; keep lines readable
MAX_VALUE_CHARS = 200

def _fmt(v) -> str:
    s = "" if v is None else str(v)
    if len(s) > MAX_VALUE_CHARS:
        s = s[:MAX_VALUE_CHARS] + "..."
    if any(c.isspace() for c in s) or "=" in s or '"' in s:
        s = '"' + s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'
    return s

class RunLogger:
    """
    Run log for a scan/preview session, one line per event:
    [2026-01-31 12:00:00] WARN SKIP_HTML url=https://example.com status=404 reason=
    Counters are summed up in a [SUMMARY] line on close().
    """
    def __init__(self, path: str = "run.log", mirror_stdout: bool = False):
        self.path = path
        self._fh = open(path, "w", encoding="utf-8", errors="replace")
        self._mirror = mirror_stdout
        self._counters = {
            "LINKS_FOUND": 0, "LINKS_ELIGIBLE": 0, "SHARE_LINKS": 0,
            "URL_SKIPPED": 0, "HTML_KEPT": 0, "HTML_SKIPPED": 0,
            "PREVIEW_OK": 0, "PREVIEW_EMPTY": 0,
        }

    def __enter__(self) -> "RunLogger":
        return self

    def __exit__(self, *exc):
        self.close()

    def _write(self, line: str):
        self._fh.write(line)
        if self._mirror:
            sys.stderr.write(line)

    def log(self, level: str, phase: str, url: str = "", **kv):
        ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        parts = [f"[{ts}] {level} {phase}"]
        if url:
            parts.append(f"url={url}")
        parts.extend(f"{k}={_fmt(v)}" for k, v in kv.items())
        self._write(" ".join(parts) + "\n")

    def count(self, key: str, inc: int = 1):
        if key in self._counters:
            self._counters[key] += inc

    def skip(self, counter: str, phase: str, url: str, **kv):
        """Count a URL that was dropped and say why."""
        self.count(counter)
        self.log("WARN", phase, url=url, **kv)

    def share_link(self, url: str, rule: ShareLinkRule):
        """An allow-listed share link went through without the https/domain checks."""
        self.count("SHARE_LINKS")
        self.log("INFO", "SHARE_LINK", url=url, rule_id=rule.rule_id, source=rule.source)

    def counters(self) -> dict:
        return dict(self._counters)

    def close(self):
        if self._fh.closed:
            return
        try:
            self._write("[SUMMARY] " + " ".join(f"{k}={v}" for k, v in self._counters.items()) + "\n")
        finally:
            self._fh.close()
