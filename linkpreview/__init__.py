# linkpreview/__init__.py
from .eligibility import is_eligible, is_legal_domain
from .og_parser import OpenGraph, extract
from .scanner import Link, find_eligible_links

__all__ = ["is_eligible", "is_legal_domain", "OpenGraph", "extract", "Link", "find_eligible_links"]
