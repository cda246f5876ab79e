import time

import pytest

from linkpreview.decoder import decode_html
from linkpreview.og_parser import OpenGraph, extract


def identity(text):
    return text


def test_missing_html_gives_empty_result():
    og = extract(None)
    assert og.tags == {}
    assert og.best_title() is None
    assert og.best_image_url() is None


def test_og_title_is_entity_decoded():
    og = extract('<meta property="og:title" content="Hello &amp; World"/>')
    assert og.best_title() == "Hello & World"


def test_title_fallback_and_og_image():
    html = """
    <html><head>
      <title>Fallback</title>
      <meta property="og:image" content="X">
    </head><body></body></html>
    """
    og = extract(html)
    assert og.best_title() == "Fallback"
    assert og.best_image_url() == "X"


def test_favicon_fallback():
    html = '<head><link rel="shortcut icon" href="/f.ico"></head>'
    assert extract(html).best_image_url() == "/f.ico"


def test_og_image_beats_favicon():
    html = (
        '<link rel="icon" href="/f.ico">'
        '<meta property="og:image" content="https://cdn.example.com/hero.png" />'
    )
    assert extract(html).best_image_url() == "https://cdn.example.com/hero.png"


def test_favicon_skips_links_that_are_not_icons():
    html = '<link rel="stylesheet" href="a.css"><link rel="apple-touch-icon" href="/touch.png">'
    assert extract(html).fallback_favicon_url == "/touch.png"


def test_decoder_is_injectable():
    og = extract('<meta property="og:title" content="Hello &amp; World"/>', decoder=identity)
    assert og.best_title() == "Hello &amp; World"


def test_decoder_only_applies_to_og_content():
    calls = []

    def decoder(text):
        calls.append(text)
        return text.upper()

    html = (
        '<title>A &amp; B</title>'
        '<meta property="og:site_name" content="site">'
        '<link rel="icon" href="/x&amp;y.ico">'
    )
    og = extract(html, decoder=decoder)
    assert calls == ["site"]
    assert og.get("site_name") == "SITE"
    assert og.fallback_title == "A &amp; B"
    assert og.fallback_favicon_url == "/x&amp;y.ico"


def test_last_duplicate_property_wins():
    html = (
        '<meta property="og:title" content="first">'
        '<meta property="og:title" content="second">'
    )
    assert extract(html, decoder=identity).tags == {"title": "second"}


def test_keywords_are_case_insensitive():
    html = '<META PROPERTY = "og:title" CONTENT = "Loud"><TITLE>Other</TITLE>'
    og = extract(html)
    assert og.best_title() == "Loud"
    assert og.fallback_title == "Other"


def test_meta_without_content_is_ignored():
    og = extract('<meta property="og:title"><title>Plain</title>')
    assert og.tags == {}
    assert og.best_title() == "Plain"


def test_empty_og_title_falls_back_to_html_title():
    og = extract('<meta property="og:title" content=""><title>Plain</title>')
    assert og.best_title() == "Plain"


def test_title_spanning_lines_is_kept_verbatim():
    og = extract("<title>\n  Line one\n</title>")
    assert og.best_title() == "\n  Line one\n"


def test_first_title_wins():
    og = extract("<title>One</title><svg><title>Two</title></svg>")
    assert og.fallback_title == "One"


def test_empty_title_and_favicon_are_absent():
    og = extract('<title></title><link rel="icon" href="">')
    assert og.fallback_title is None
    assert og.fallback_favicon_url is None
    assert og.best_title() is None
    assert og.best_image_url() is None


def test_truncated_html_does_not_raise():
    og = extract('<html><head><meta property="og:title" content="Trunc')
    assert og.tags == {}
    assert og.best_title() is None


def test_description_and_other_tags():
    html = (
        '<meta property="og:description" content="About &lt;this&gt; page">'
        '<meta property="og:type" content="article">'
    )
    og = extract(html)
    assert og.description() == "About <this> page"
    assert og.get("type") == "article"
    assert og.get("url") is None


def test_input_is_capped_before_scanning():
    html = "x" * 100 + '<meta property="og:title" content="late">'
    assert extract(html, max_chars=50).tags == {}
    assert extract(html, max_chars=None).best_title() == "late"


def test_extraction_is_repeatable():
    html = '<title>T</title><meta property="og:image" content="i.png">'
    assert extract(html) == extract(html)


def test_result_is_read_only():
    og = extract('<meta property="og:title" content="T">')
    with pytest.raises(TypeError):
        og.tags["title"] = "changed"
    with pytest.raises(AttributeError):
        og.fallback_title = "changed"


def test_result_accessors_treat_empty_as_absent():
    og = OpenGraph({"title": "", "image": ""}, "", "")
    assert og.best_title() is None
    assert og.best_image_url() is None


def test_decode_html_strips_tags_and_entities():
    assert decode_html("<b>Bold</b> &#39;q&#39; &amp; more") == "Bold 'q' & more"
    assert decode_html("https://example.com/a.png") == "https://example.com/a.png"
    assert decode_html("") == ""


@pytest.mark.parametrize("chunk", [
    "<title>",
    "<title>x</title",
    "<meta ",
    '<meta property="og:',
    '<link rel="',
    '<link rel="icon" ',
    "< ",
])
def test_hostile_markup_is_scanned_in_linear_time(chunk):
    # 40k repeats is ~0.3-0.8 MB; a quadratic scan takes minutes on this
    html = chunk * 40_000
    started = time.perf_counter()
    extract(html, decoder=identity)
    assert time.perf_counter() - started < 5


def test_unclosed_tags_yield_nothing():
    og = extract('<title>open <meta property="og:title" content="x" <link rel="icon" href="/i"')
    assert og.tags == {}
    assert og.fallback_title is None
    assert og.fallback_favicon_url is None


def test_tag_with_unclosed_meta_inside_is_cut_at_first_gt():
    og = extract('<meta name="x" <meta property="og:title" content="inner">', decoder=identity)
    assert og.tags == {"title": "inner"}
