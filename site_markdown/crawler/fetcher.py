"""
Fetcher module: one GET per page, HTML parsing, markdown conversion and link discovery.
"""
from __future__ import annotations

import asyncio
import contextlib
import time
from typing import AsyncContextManager, Callable, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from markdownify import markdownify

from site_markdown.config import CrawlConfig
from site_markdown.crawler.link_extractor import extract_links
from site_markdown.crawler.models import ErrorKind, FetchOutcome, PageError, PageRecord
from site_markdown.crawler.quality import clean_markdown, is_minimal
from site_markdown.logger import logger

__all__ = ("RateLimiter", "PageFetcher", "to_markdown")

Converter = Callable[[str], str]


def to_markdown(html: str) -> str:
    """Default HTML -> markdown converter."""
    return markdownify(html, heading_style="ATX")


class RateLimiter:
    """Spaces request starts at least *interval* seconds apart across all workers."""

    def __init__(self, interval: float) -> None:
        self.interval = interval
        self._lock = asyncio.Lock()
        self._last_request_ts: Optional[float] = None

    async def wait(self) -> None:
        if self.interval <= 0:
            return
        async with self._lock:
            if self._last_request_ts is not None:
                wait = self.interval - (time.monotonic() - self._last_request_ts)
                if wait > 0:
                    await asyncio.sleep(wait)
            self._last_request_ts = time.monotonic()


class PageFetcher:
    """Fetches a single URL and turns it into a :class:`PageRecord` plus candidate links.

    Nothing is retried: one failed attempt is final and is reported on the
    record's ``error``. Pages that fail the quality heuristic come back with
    ``record=None``.
    """

    def __init__(
        self,
        session: ClientSession,
        config: CrawlConfig,
        base_host: str,
        *,
        limiter: Optional[RateLimiter] = None,
        semaphore: Optional[asyncio.Semaphore] = None,
        converter: Converter = to_markdown,
    ) -> None:
        self.session = session
        self.config = config
        self.base_host = base_host
        self._limiter = limiter or RateLimiter(config.inter_request_delay)
        self._semaphore = semaphore
        self._converter = converter
        self._timeout = ClientTimeout(total=config.request_timeout)

    def _slot(self) -> AsyncContextManager[object]:
        return self._semaphore if self._semaphore is not None else contextlib.nullcontext()

    async def fetch_and_convert(self, url: str, depth: int) -> FetchOutcome:
        try:
            async with self._slot():
                await self._limiter.wait()
                async with self.session.get(
                    url,
                    headers={"User-Agent": self.config.user_agent},
                    timeout=self._timeout,
                ) as resp:
                    status = resp.status
                    reason = resp.reason or ""
                    ctype = resp.headers.get("Content-Type", "")
                    wanted = status == 200 and "text/html" in ctype.lower()
                    body = await resp.read() if wanted else b""
        # ValueError: hosts that fail IDNA encoding or URLs aiohttp rejects
        except (ClientError, asyncio.TimeoutError, ValueError) as exc:
            detail = str(exc) or type(exc).__name__
            logger.warning("Failed %s: %s", url, detail)
            return self._failed(url, depth, ErrorKind.FETCH_ERROR, detail)

        if status != 200:
            logger.debug("HTTP %d for %s", status, url)
            return self._failed(url, depth, ErrorKind.HTTP_STATUS_ERROR, reason, status=status)
        if "text/html" not in ctype.lower():
            logger.debug("Skipping non-HTML %s (%s)", url, ctype or "no content type")
            return self._failed(url, depth, ErrorKind.UNSUPPORTED_CONTENT_TYPE, ctype)

        try:
            soup = BeautifulSoup(body, "html.parser")
        except (ParserRejectedMarkup, ValueError) as exc:
            logger.warning("Cannot parse %s: %s", url, exc)
            return self._failed(url, depth, ErrorKind.PARSE_ERROR, str(exc))

        title_tag = soup.find("title")
        title = title_tag.get_text(strip=True) if title_tag else ""
        title = title or url

        try:
            markdown = self._converter(str(soup))
        except Exception as exc:  # converter is third-party code; any failure is per-page
            logger.warning("Markdown conversion failed for %s: %s", url, exc)
            return self._failed(url, depth, ErrorKind.CONVERSION_ERROR, str(exc))

        markdown = clean_markdown(markdown)
        if is_minimal(title, markdown, url):
            logger.debug("Skipping page with minimal content: %s", url)
            return FetchOutcome(record=None)

        record = PageRecord(url=url, title=title, markdown=markdown, depth=depth)
        if depth >= self.config.max_depth:
            return FetchOutcome(record=record)

        scan = extract_links(soup, url, self.base_host, self.config.follow_external_links)
        return FetchOutcome(record=record, links=scan.links, repeated=scan.repeated)

    @staticmethod
    def _failed(
        url: str, depth: int, kind: ErrorKind, message: str, status: Optional[int] = None
    ) -> FetchOutcome:
        error = PageError(kind=kind, message=message, status=status)
        return FetchOutcome(record=PageRecord.failed(url, depth, error))
