# linkpreview/share_links.py
from __future__ import annotations
import json, re, os
from dataclasses import dataclass
from typing import List, Optional

@dataclass(frozen=True)
class ShareLinkRule:
    rule_id: str
    pattern: str
    flags: int = 0
    source: str = "local"

# First-party share links that may be previewed without the https/domain checks
_FALLBACK_RULES = [
    ShareLinkRule(
        "sticker_pack",
        r"https://signal\.art/addstickers/#pack_id=[0-9a-f]{32}&pack_key=[0-9a-f]{64}",
        0,
    ),
]

def _load_json_rules(path: str) -> List[ShareLinkRule]:
    with open(path, "r", encoding="utf-8", errors="replace") as fh:
        data = json.load(fh)
    out: List[ShareLinkRule] = []
    for obj in data:
        try:
            rule = ShareLinkRule(
                rule_id=obj["rule_id"],
                pattern=obj["pattern"],
                flags=re.IGNORECASE if obj.get("ignorecase", False) else 0,
                source=obj.get("source", "file"),
            )
            re.compile(rule.pattern, rule.flags)
        except (KeyError, TypeError, re.error):
            continue
        out.append(rule)
    return out

def load_share_link_rules(path: str = os.path.join("rules", "share_links.json")) -> List[ShareLinkRule]:
    """
    Load allow-listed share-link rules. If `path` exists and yields rules, use them; else fallback.
    File format: list of {rule_id, pattern, ignorecase?, source?}
    """
    if os.path.isfile(path):
        rules = _load_json_rules(path)
        if rules:
            return rules
    return _FALLBACK_RULES[:]  # copy

def match_share_link(url: str, rules: Optional[List[ShareLinkRule]] = None) -> Optional[ShareLinkRule]:
    """The first rule that matches the whole URL, or None."""
    if not url:
        return None
    for r in (rules if rules is not None else _FALLBACK_RULES):
        if re.fullmatch(r.pattern, url, r.flags):
            return r
    return None

def is_allow_listed_share_link(url: str, rules: Optional[List[ShareLinkRule]] = None) -> bool:
    return match_share_link(url, rules) is not None
