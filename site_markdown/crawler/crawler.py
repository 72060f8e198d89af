from __future__ import annotations

import asyncio
import time
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

from aiohttp import ClientSession, ClientTimeout

from site_markdown.config import CrawlConfig
from site_markdown.crawler.dedup import DedupStore
from site_markdown.crawler.fetcher import Converter, PageFetcher, RateLimiter, to_markdown
from site_markdown.crawler.link_extractor import host_of, normalize_url
from site_markdown.crawler.models import CrawlResult, FetchOutcome, InvalidURLError
from site_markdown.logger import logger

__all__ = ("AsyncCrawler", "scrape_website", "check_seed_url")


def check_seed_url(url: str) -> str:
    """Return the stripped seed URL or raise :class:`InvalidURLError`."""
    candidate = url.strip()
    try:
        parts = urlsplit(candidate)
    except ValueError as exc:
        raise InvalidURLError(url, str(exc)) from exc
    if parts.scheme.lower() not in ("http", "https"):
        raise InvalidURLError(url, "scheme must be http or https")
    if not parts.hostname:
        raise InvalidURLError(url, "missing host")
    return candidate


class AsyncCrawler:
    """Breadth-first crawler: one level at a time, all pages of a level fetched concurrently.

    Level N+1 starts only after every fetch of level N has finished and its
    links have been claimed, so a link found late in a level can never slip
    past the dedup check.
    """

    def __init__(self, config: CrawlConfig, *, converter: Converter = to_markdown) -> None:
        self.config = config
        self.converter = converter
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> AsyncCrawler:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.request_timeout),
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self, seed_url: str, stop_event: Optional[asyncio.Event] = None) -> CrawlResult:
        if not self.session:
            raise RuntimeError("Session not initialized")
        seed = check_seed_url(seed_url)

        store = DedupStore()
        start_url = normalize_url(seed)
        store.try_claim(start_url)
        fetcher = PageFetcher(
            self.session,
            self.config,
            host_of(seed),
            limiter=RateLimiter(self.config.inter_request_delay),
            semaphore=asyncio.Semaphore(self.config.max_concurrency) if self.config.max_concurrency else None,
            converter=self.converter,
        )

        logger.info(
            "Starting level-based crawl of %s (max depth: %d, concurrency: %s)",
            start_url, self.config.max_depth, self.config.max_concurrency or "unbounded",
        )
        started = time.monotonic()
        result = CrawlResult(seed_url=start_url)
        frontier: List[str] = [start_url]
        depth = 0
        while depth <= self.config.max_depth and frontier:
            if stop_event is not None and stop_event.is_set():
                logger.info("Stop requested, not starting depth %d", depth)
                break
            logger.info("Processing depth %d (%d pages)", depth, len(frontier))
            outcomes = await asyncio.gather(
                *(fetcher.fetch_and_convert(url, depth) for url in frontier)
            )
            result.pages.extend(o.record for o in outcomes if o.record is not None)
            frontier = self._next_frontier(outcomes, store)
            if frontier and depth < self.config.max_depth:
                logger.info("Found %d new pages for depth %d", len(frontier), depth + 1)
            depth += 1

        result.duplicate_count = store.duplicate_count
        duration = time.monotonic() - started
        if result.duplicate_count:
            logger.info(
                "Completed: %d unique pages in %.2f s (skipped %d duplicates)",
                len(result), duration, result.duplicate_count,
            )
        else:
            logger.info("Completed: %d pages in %.2f s", len(result), duration)
        return result

    @staticmethod
    def _next_frontier(outcomes: Iterable[FetchOutcome], store: DedupStore) -> List[str]:
        frontier: List[str] = []
        for outcome in outcomes:
            store.note_duplicates(outcome.repeated)
            for link in outcome.links:
                key = normalize_url(link)
                if store.try_claim(key):
                    frontier.append(key)
        return frontier


async def scrape_website(
    seed_url: str,
    config: CrawlConfig,
    *,
    stop_event: Optional[asyncio.Event] = None,
    converter: Converter = to_markdown,
) -> CrawlResult:
    """Crawl *seed_url* with *config* and return the kept pages in level order.

    Raises :class:`InvalidURLError` if the seed is not a usable http(s) URL;
    every other failure is recorded on the page it happened to.
    """
    check_seed_url(seed_url)
    async with AsyncCrawler(config, converter=converter) as crawler:
        return await crawler.crawl(seed_url, stop_event=stop_event)
