"""
Data models for the site_markdown crawler.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

__all__ = (
    "ErrorKind",
    "PageError",
    "PageRecord",
    "FetchOutcome",
    "CrawlResult",
    "InvalidURLError",
)


class InvalidURLError(ValueError):
    """Seed URL cannot be parsed as an http(s) URL; aborts the whole crawl."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Invalid URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


class ErrorKind(enum.Enum):
    """Per-page failure kinds. None of them stop the crawl."""

    FETCH_ERROR = "fetch_error"
    HTTP_STATUS_ERROR = "http_status_error"
    UNSUPPORTED_CONTENT_TYPE = "unsupported_content_type"
    PARSE_ERROR = "parse_error"
    CONVERSION_ERROR = "conversion_error"


@dataclass(frozen=True, slots=True)
class PageError:
    kind: ErrorKind
    message: str = ""
    status: Optional[int] = None

    def __str__(self) -> str:
        if self.kind is ErrorKind.HTTP_STATUS_ERROR:
            return f"HTTP {self.status}: {self.message}" if self.message else f"HTTP {self.status}"
        if self.kind is ErrorKind.UNSUPPORTED_CONTENT_TYPE:
            return f"Not an HTML page ({self.message})" if self.message else "Not an HTML page"
        prefix = {
            ErrorKind.FETCH_ERROR: "Failed to fetch page",
            ErrorKind.PARSE_ERROR: "Failed to parse HTML",
            ErrorKind.CONVERSION_ERROR: "Failed to convert to markdown",
        }[self.kind]
        return f"{prefix}: {self.message}" if self.message else prefix


@dataclass(frozen=True, slots=True)
class PageRecord:
    """One fetched page: normalized URL, title, markdown body and crawl depth."""

    url: str
    title: str
    markdown: str
    depth: int
    error: Optional[PageError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, url: str, depth: int, error: PageError) -> PageRecord:
        return cls(url=url, title=url, markdown="", depth=depth, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Presentation form; the error is rendered as text and omitted when absent."""
        data: Dict[str, Any] = {
            "url": self.url,
            "title": self.title,
            "markdown": self.markdown,
            "depth": self.depth,
        }
        if self.error is not None:
            data["error"] = str(self.error)
            data["errorKind"] = self.error.kind.value
        return data


@dataclass(slots=True)
class FetchOutcome:
    """What a worker hands back: the record (None if dropped) and candidate links."""

    record: Optional[PageRecord]
    links: List[str] = field(default_factory=list)
    repeated: int = 0


@dataclass(slots=True)
class CrawlResult:
    """Kept pages in level order plus the number of duplicate link discoveries."""

    seed_url: str
    pages: List[PageRecord] = field(default_factory=list)
    duplicate_count: int = 0

    def __iter__(self) -> Iterator[PageRecord]:
        return iter(self.pages)

    def __len__(self) -> int:
        return len(self.pages)

    @property
    def success_count(self) -> int:
        return sum(1 for p in self.pages if p.ok)

    @property
    def error_count(self) -> int:
        return len(self.pages) - self.success_count
