# linkpreview/decoder.py
from __future__ import annotations
import warnings
from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

def decode_html(fragment: str) -> str:
    """Turn an attribute value into plain text: resolve &entities; and drop any tags."""
    if not fragment or ("<" not in fragment and "&" not in fragment):
        return fragment
    # og:image / og:url values look like URLs to bs4, which warns about them
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        return BeautifulSoup(fragment, "html.parser").get_text()
