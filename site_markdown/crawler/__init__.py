"""Breadth-first crawl engine: fetch, convert, deduplicate, discover."""
from site_markdown.crawler.crawler import AsyncCrawler, check_seed_url, scrape_website
from site_markdown.crawler.dedup import DedupStore
from site_markdown.crawler.link_extractor import extract_links, is_file_link, normalize_url
from site_markdown.crawler.models import (
    CrawlResult,
    ErrorKind,
    InvalidURLError,
    PageError,
    PageRecord,
)
from site_markdown.crawler.quality import clean_markdown, is_minimal

__all__ = [
    "AsyncCrawler",
    "CrawlResult",
    "DedupStore",
    "ErrorKind",
    "InvalidURLError",
    "PageError",
    "PageRecord",
    "check_seed_url",
    "clean_markdown",
    "extract_links",
    "is_file_link",
    "is_minimal",
    "normalize_url",
    "scrape_website",
]
