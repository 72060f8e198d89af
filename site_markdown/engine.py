"""site_markdown.engine: запуск обхода и сборка отчёта для CLI и HTTP API."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Optional

from site_markdown.aggregator import CrawlReport, aggregate_results
from site_markdown.config import CrawlConfig
from site_markdown.crawler.crawler import scrape_website
from site_markdown.logger import logger

__all__ = ["start_crawl"]


async def start_crawl(
    seed_url: str,
    config: CrawlConfig,
    stop_event: Optional[asyncio.Event] = None,
) -> CrawlReport:
    """Обходит сайт от seed_url и возвращает CrawlReport со статистикой.

    InvalidURLError пробрасывается вызывающему коду без изменений.
    """
    started_at = datetime.now(timezone.utc)
    try:
        result = await scrape_website(seed_url, config, stop_event=stop_event)
    except asyncio.CancelledError:
        logger.warning("Crawl of %s cancelled", seed_url)
        raise
    completed_at = datetime.now(timezone.utc)
    report = aggregate_results(result, started_at, completed_at)
    logger.info(
        "Crawl finished: %d pages (%d successful, %d errors) in %.2f s",
        report.stats.total_pages,
        report.stats.success_pages,
        report.stats.error_pages,
        report.stats.processing_time,
    )
    return report
