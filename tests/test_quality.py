from __future__ import annotations

import pytest

from site_markdown.crawler.quality import clean_markdown, is_minimal

URL = "http://example.com/page"
LINE = "A sentence of ordinary documentation prose that is long enough to matter here."
RICH = "\n\n".join([LINE, LINE, LINE])


def test_clean_markdown_collapses_blank_runs_and_trims():
    raw = "\n\n  # Title\n\n\n\nBody\n\n\n\n\n\nEnd  \n\n"
    assert clean_markdown(raw) == "# Title\n\nBody\n\nEnd"


def test_clean_markdown_keeps_double_newlines():
    assert clean_markdown("a\n\nb\nc") == "a\n\nb\nc"


def test_rich_page_is_kept():
    assert not is_minimal("Guide", RICH, URL)


@pytest.mark.parametrize("title", ["", "   ", URL])
def test_missing_title_is_minimal(title):
    assert is_minimal(title, RICH, URL)


def test_short_markdown_is_minimal():
    short = "x" * 50
    assert is_minimal("Guide", short, URL)
    assert is_minimal("Guide", "  " + "x" * 199 + "  ", URL)


def test_navigation_only_page_is_minimal():
    nav = "\n".join(f"* [Section {i} with a fairly long label]({URL}/{i})" for i in range(12))
    markdown = "# Docs\n\n" + nav + "\n\n" + LINE + "\n\n" + LINE
    assert len(markdown) > 200
    assert is_minimal("Docs", markdown, URL)


def test_headings_and_boilerplate_do_not_count():
    markdown = "\n".join([
        "# Heading one that is long enough to pad the size of this page",
        "## Heading two that is long enough to pad the size of this page",
        "Skip to main content and some more words to make it long enough",
        LINE,
        LINE,
    ])
    assert is_minimal("Docs", markdown, URL)
    assert not is_minimal("Docs", markdown + "\n" + LINE, URL)
