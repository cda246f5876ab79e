# linkpreview/exporters.py
from __future__ import annotations
import csv, json
from typing import Dict, Any, Iterable

PREVIEW_COLS = ["url", "status", "mime", "bytes", "title", "image_url", "description"]

def write_previews_csv(path: str, rows: Iterable[Dict[str, Any]]):
    with open(path, "w", newline="", encoding="utf-8", errors="replace") as fh:
        w = csv.DictWriter(fh, fieldnames=PREVIEW_COLS)
        w.writeheader()
        for r in rows:
            w.writerow({k: "" if r.get(k) is None else r.get(k) for k in PREVIEW_COLS})

def write_previews_jsonl(path: str, rows: Iterable[Dict[str, Any]]):
    with open(path, "w", encoding="utf-8", errors="replace") as fh:
        for r in rows:
            fh.write(json.dumps({
                "record_type": "link_preview",
                **r
            }, ensure_ascii=False) + "\n")
