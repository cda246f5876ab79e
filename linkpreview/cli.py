# linkpreview/cli.py
from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Dict, List, Optional

from .eligibility import is_eligible
from .exporters import write_previews_csv, write_previews_jsonl
from .fetcher import (
    Fetcher, FetchResult,
    DEFAULT_RPS, DEFAULT_TIMEOUT, DEFAULT_MAX_BYTES, DEFAULT_RETRIES, DEFAULT_USER_AGENT,
)
from .logger import RunLogger
from .og_parser import extract
from .scanner import detect_urls, find_eligible_links
from .share_links import ShareLinkRule, load_share_link_rules, match_share_link
from .urltools import absolutize, host

DEFAULT_SHARE_LINKS = os.path.join("rules", "share_links.json")


def _read_text(args) -> str:
    if args.file:
        with open(args.file, "r", encoding="utf-8", errors="replace") as fh:
            return fh.read()
    if args.text is not None:
        return args.text
    return sys.stdin.read()


def _check_url(url: str, runlog: RunLogger, rules: Optional[List[ShareLinkRule]]) -> bool:
    """is_eligible with the loaded share-link rules; logs the rule that let a share link through."""
    rule = match_share_link(url, rules)
    if rule is not None:
        runlog.share_link(url, rule)
    return is_eligible(url, lambda _: rule is not None)


def preview_url(
    url: str,
    fetch: Fetcher,
    runlog: RunLogger,
    rules: Optional[List[ShareLinkRule]] = None,
) -> Optional[Dict[str, Any]]:
    """Fetch one eligible URL and build its preview record; None when skipped."""
    if not _check_url(url, runlog, rules):
        runlog.skip("URL_SKIPPED", "SKIP_URL", url, reason="not_eligible")
        return None

    fr: FetchResult = fetch.get(url)
    if not (fr.ok and fr.is_html):
        runlog.skip("HTML_SKIPPED", "SKIP_HTML", url, status=fr.status, mime=fr.mime or "", reason=fr.error or "")
        return None

    runlog.count("HTML_KEPT", 1)
    runlog.log("INFO", "FETCH_HTML", url=url, host=host(url) or "", status=fr.status, mime=fr.mime,
               charset=fr.charset or "", bytes=fr.bytes_read)

    og = extract(fr.text())
    title = og.best_title()
    image_url = og.best_image_url()
    if image_url:
        image_url = absolutize(url, image_url)

    if title or image_url:
        runlog.count("PREVIEW_OK", 1)
        runlog.log("INFO", "PREVIEW", url=url, tags=len(og.tags), title=title or "", image=image_url or "")
    else:
        runlog.count("PREVIEW_EMPTY", 1)
        runlog.log("WARN", "PREVIEW_EMPTY", url=url)

    return {
        "url": url,
        "status": fr.status,
        "mime": fr.mime,
        "bytes": fr.bytes_read,
        "title": title,
        "image_url": image_url,
        "description": og.description(),
    }


def cmd_scan(args, runlog: RunLogger) -> int:
    rules = load_share_link_rules(args.share_links)
    text = _read_text(args)
    detected = detect_urls(text)
    runlog.count("LINKS_FOUND", len(detected))

    links = find_eligible_links(
        text,
        detector=lambda _: detected,
        checker=lambda u: _check_url(u, runlog, rules),
    )
    runlog.count("LINKS_ELIGIBLE", len(links))
    for link in links:
        runlog.log("INFO", "LINK", url=link.url, position=link.position)
        print(f"{link.position}\t{link.url}")
    return 0


def cmd_preview(args, runlog: RunLogger) -> int:
    rules = load_share_link_rules(args.share_links)
    fetch = Fetcher(
        rps=args.rps, timeout=args.timeout, max_bytes=args.max_bytes,
        retries=args.retries, user_agent=args.user_agent,
    )

    rows: List[Dict[str, Any]] = []
    for url in args.urls:
        row = preview_url(url, fetch, runlog, rules)
        if row is None:
            continue
        rows.append(row)
        print(json.dumps(row, ensure_ascii=False))

    if args.jsonl:
        write_previews_jsonl(args.jsonl, rows)
    if args.csv:
        write_previews_csv(args.csv, rows)
    return 0 if rows else 1


def _add_share_links_arg(p: argparse.ArgumentParser):
    p.add_argument("--share-links", default=DEFAULT_SHARE_LINKS,
                   help="JSON list of allow-listed share-link rules (optional)")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("linkpreview")
    p.add_argument("--log-file", default="run.log")
    p.add_argument("--mirror-log", action="store_true")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("scan", help="List links in a message that may be previewed")
    s.add_argument("text", nargs="?", default=None, help="Message text (default: stdin)")
    s.add_argument("--file", default="", help="Read the message from a file instead")
    _add_share_links_arg(s)

    v = sub.add_parser("preview", help="Fetch URLs and print their title/image")
    v.add_argument("urls", nargs="+")
    v.add_argument("--rps", type=float, default=DEFAULT_RPS)
    v.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT)
    v.add_argument("--retries", type=int, default=DEFAULT_RETRIES)
    v.add_argument("--max-bytes", type=int, default=DEFAULT_MAX_BYTES)
    v.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    _add_share_links_arg(v)
    v.add_argument("--jsonl", default="")
    v.add_argument("--csv", default="")
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)
    runlog = RunLogger(args.log_file, mirror_stdout=args.mirror_log)
    try:
        if args.command == "scan":
            return cmd_scan(args, runlog)
        return cmd_preview(args, runlog)
    finally:
        runlog.close()


if __name__ == "__main__":
    sys.exit(main())
