"""
Link extraction and URL normalization utilities for site_markdown.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Set
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__ = (
    "LinkScan",
    "TRACKING_PARAMS",
    "FILE_EXTENSIONS",
    "normalize_url",
    "host_of",
    "is_file_link",
    "extract_links",
)

TRACKING_PARAMS: FrozenSet[str] = frozenset({
    "utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content",
    "gclid", "fbclid", "ref", "source", "from",
    "_ga", "_gl", "mc_cid", "mc_eid",
})

FILE_EXTENSIONS: FrozenSet[str] = frozenset({
    # documents
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    # archives
    ".zip", ".rar", ".tar", ".gz", ".7z",
    # media
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg",
    ".mp4", ".avi", ".mov", ".wmv", ".flv",
    ".mp3", ".wav", ".flac", ".ogg",
    # assets
    ".css", ".js", ".json", ".xml", ".rss",
})

_FILE_SUFFIXES = tuple(FILE_EXTENSIONS)


@dataclass(slots=True)
class LinkScan:
    """Candidate links of one page in document order, and how many in-page repeats were dropped."""

    links: List[str] = field(default_factory=list)
    repeated: int = 0


def normalize_url(url: str) -> str:
    """
    Canonical comparison key for *url*.

    Lower-cases scheme and host, drops the fragment and trailing slashes
    (an empty path becomes the root ``/``), removes tracking parameters and sorts the rest by
    key. Unparseable input is returned unchanged. Idempotent.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    userinfo, at, hostport = parts.netloc.rpartition("@")
    netloc = f"{userinfo}{at}{hostport.lower()}"

    path = parts.path
    if path.endswith("/") and path != "/":
        path = path.rstrip("/") or "/"
    elif not path and netloc:
        path = "/"

    query = parts.query
    if query:
        pairs = [
            (key, value)
            for key, value in parse_qsl(query, keep_blank_values=True)
            if key not in TRACKING_PARAMS
        ]
        pairs.sort(key=lambda kv: kv[0])
        query = urlencode(pairs)

    return urlunsplit((parts.scheme.lower(), netloc, path, query, ""))


def host_of(url: str) -> str:
    """Lower-cased ``host[:port]`` of *url*, or ``""`` when it cannot be parsed."""
    try:
        netloc = urlsplit(url).netloc
    except ValueError:
        return ""
    return netloc.rpartition("@")[2].lower()


def is_file_link(url: str) -> bool:
    """True if the URL path ends with a known non-document extension."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return False
    return path.lower().endswith(_FILE_SUFFIXES)


def extract_links(
    soup: BeautifulSoup,
    base_url: str,
    base_host: str,
    follow_external: bool = False,
) -> LinkScan:
    """
    Collect outbound HTTP(S) links of a parsed page.

    Relative hrefs are resolved against *base_url*. Links to other hosts are
    skipped unless *follow_external*; links to binary files and assets are
    skipped always. Each normalized link is returned once per page.
    """
    scan = LinkScan()
    seen: Set[str] = set()
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw:
            continue
        try:
            absolute = urljoin(base_url, raw)
            parsed = urlsplit(absolute)
        except ValueError:
            continue
        if parsed.scheme.lower() not in ("http", "https"):
            continue
        if not follow_external and host_of(absolute) != base_host:
            continue
        normalized = normalize_url(absolute)
        if normalized in seen:
            scan.repeated += 1
            continue
        seen.add(normalized)
        if is_file_link(normalized):
            continue
        scan.links.append(normalized)
    return scan
