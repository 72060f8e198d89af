# File: tests/conftest.py
from __future__ import annotations

from typing import Awaitable, Callable, Dict, Iterable, List, Optional

import pytest
import pytest_asyncio
from aiohttp import web

from site_markdown.config import CrawlConfig

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

PARAGRAPH = (
    "This paragraph carries enough ordinary prose to count as real content "
    "for the quality heuristic, number {n}."
)


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


def html_doc(
    title: Optional[str],
    paragraphs: int = 4,
    links: Iterable[str] = (),
    body: str = "",
) -> str:
    """Build an HTML page: optional <title>, N prose paragraphs, then a link list."""
    head = f"<head><title>{title}</title></head>" if title is not None else "<head></head>"
    prose = "".join(f"<p>{PARAGRAPH.format(n=i)}</p>" for i in range(paragraphs))
    items = "".join(f'<li><a href="{href}">{href}</a></li>' for href in links)
    nav = f"<ul>{items}</ul>" if items else ""
    return f"<html>{head}<body>{body}{prose}{nav}</body></html>"


def html_response(text: str, status: int = 200, content_type: str = "text/html") -> Handler:
    async def handler(_):
        return web.Response(text=text, status=status, content_type=content_type)

    return handler


class Hits:
    """Counts requests per path on a test site."""

    def __init__(self) -> None:
        self.paths: List[str] = []

    def __call__(self, path: str) -> int:
        return self.paths.count(path)

    @web.middleware
    async def middleware(self, request: web.Request, handler: Handler) -> web.StreamResponse:
        self.paths.append(request.path)
        return await handler(request)


@pytest.fixture()
def crawl_config() -> CrawlConfig:
    """Fast config for tests: no courtesy delay, short timeouts."""
    return CrawlConfig(
        max_depth=1,
        request_timeout=5.0,
        inter_request_delay=0,
        user_agent="TestAgent/1.0",
        max_concurrency=5,
    )


@pytest_asyncio.fixture
async def serve_site(unused_tcp_port_factory):
    """Factory: start an aiohttp app for a {path: handler} mapping, yield its base URL."""
    runners: List[web.AppRunner] = []

    async def _start(routes: Dict[str, Handler], hits: Optional[Hits] = None) -> str:
        app = web.Application(middlewares=[hits.middleware] if hits else [])
        for path, handler in routes.items():
            app.router.add_get(path, handler)
        runner = web.AppRunner(app)
        await runner.setup()
        runners.append(runner)
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        return f"http://127.0.0.1:{port}"

    yield _start

    for runner in runners:
        await runner.cleanup()
