"""
site_markdown package initializer.
Defines package version and exposes the crawl entry point and CLI.
"""
__version__ = "0.1.0"

from site_markdown.crawler import CrawlResult, InvalidURLError, PageRecord, scrape_website
from site_markdown.config import CrawlConfig

__all__ = ["__version__", "CrawlConfig", "CrawlResult", "InvalidURLError", "PageRecord", "scrape_website"]
