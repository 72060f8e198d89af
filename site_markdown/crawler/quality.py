"""
Markdown clean-up and the "is this page worth keeping" heuristic.
"""
from __future__ import annotations

import re

__all__ = ("clean_markdown", "is_minimal", "MIN_CONTENT_CHARS", "MIN_CONTENT_LINES")

MIN_CONTENT_CHARS = 200
MIN_CONTENT_LINES = 3
_BOILERPLATE = "Skip to main content"
_EXTRA_NEWLINES_RE = re.compile(r"\n{3,}")


def clean_markdown(markdown: str) -> str:
    """Collapse 3+ consecutive newlines to exactly two and trim."""
    return _EXTRA_NEWLINES_RE.sub("\n\n", markdown).strip()


def _is_content_line(line: str) -> bool:
    line = line.strip()
    if not line or line.startswith("#"):
        return False
    if _BOILERPLATE in line:
        return False
    # navigation lists and link directories
    return "[" not in line and "](" not in line


def is_minimal(title: str, markdown: str, url: str) -> bool:
    """
    True for navigation shells and near-empty pages.

    A page is minimal when it has no real ``<title>`` (blank, or the URL
    fallback), when its markdown is shorter than 200 characters, or when
    fewer than three lines remain after dropping headings, links, blank
    lines and the "Skip to main content" boilerplate.
    """
    if not title.strip() or title == url:
        return True
    if len(markdown.strip()) < MIN_CONTENT_CHARS:
        return True
    content_lines = sum(1 for line in markdown.split("\n") if _is_content_line(line))
    return content_lines < MIN_CONTENT_LINES
