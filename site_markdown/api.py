"""
HTTP API for site_markdown built on aiohttp.web.

Endpoints:
  GET  /health          liveness probe
  GET  /api/v1/status   service status and endpoint list
  POST /api/v1/scrape   crawl a site and return its pages as markdown
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from aiohttp import web
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from site_markdown import __version__, engine
from site_markdown.config import CrawlConfig
from site_markdown.crawler.models import InvalidURLError
from site_markdown.logger import logger

__all__ = ["ScrapeRequest", "ScrapeResponse", "create_app", "run_server"]

API_USER_AGENT = "Website-Markdown-API/1.0"
SERVICE_NAME = "website-markdown-converter"
DEFAULT_DEPTH = 3
MAX_DEPTH = 10
DEFAULT_DELAY_MS = 1000
MIN_DELAY_MS = 500
ALLOWED_ORIGINS = ("http://localhost:5173", "http://localhost:4173")
ENDPOINTS = ["POST /api/v1/scrape", "GET /api/v1/status", "GET /health"]

CONFIG_KEY = web.AppKey("config", CrawlConfig)
MIN_DELAY_KEY = web.AppKey("min_delay_ms", int)


class ScrapeRequest(BaseModel):
    """Тело запроса POST /api/v1/scrape."""
    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(..., description="Seed URL.")
    max_depth: Optional[int] = Field(None, alias="maxDepth")
    delay: Optional[int] = Field(None, description="Delay between requests, ms.")
    follow_external: bool = Field(False, alias="followExternal")

    @field_validator("url")
    def _url_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("URL is required")
        return v

    def to_config(self, base: CrawlConfig, min_delay_ms: int = MIN_DELAY_MS) -> CrawlConfig:
        """Apply API defaults and limits: depth 1..10 (3 if unset), delay >= min_delay_ms."""
        depth = self.max_depth if self.max_depth and self.max_depth > 0 else DEFAULT_DEPTH
        depth = min(depth, MAX_DEPTH)
        delay = self.delay if self.delay and self.delay > 0 else DEFAULT_DELAY_MS
        delay = max(delay, min_delay_ms)
        return base.with_overrides(
            max_depth=depth,
            inter_request_delay=delay / 1000,
            follow_external_links=self.follow_external,
            user_agent=API_USER_AGENT,
        )


class ScrapeResponse(BaseModel):
    success: bool
    message: str = ""
    pages: Optional[List[Dict[str, Any]]] = None
    error: Optional[str] = None
    stats: Optional[Dict[str, Any]] = None


def _reply(payload: ScrapeResponse, status: int = 200) -> web.Response:
    return web.json_response(payload.model_dump(exclude_none=True), status=status)


async def health(request: web.Request) -> web.Response:
    return web.json_response({
        "status": "healthy",
        "time": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
    })


async def status(request: web.Request) -> web.Response:
    return web.json_response({"status": "running", "version": __version__, "endpoints": ENDPOINTS})


async def scrape(request: web.Request) -> web.Response:
    try:
        payload = await request.json()
    except ValueError as exc:
        return _reply(ScrapeResponse(success=False, error=f"Invalid request: {exc}"), status=400)
    try:
        req = ScrapeRequest.model_validate(payload)
    except ValidationError as exc:
        problems = "; ".join(err["msg"] for err in exc.errors())
        return _reply(ScrapeResponse(success=False, error=f"Invalid request: {problems}"), status=400)

    config = req.to_config(request.app[CONFIG_KEY], request.app[MIN_DELAY_KEY])
    logger.info(
        "API scrape request: %s (depth: %d, delay: %.0fms, external: %s)",
        req.url, config.max_depth, config.inter_request_delay * 1000, config.follow_external_links,
    )
    try:
        report = await engine.start_crawl(req.url, config)
    except InvalidURLError as exc:
        logger.warning("Scraping rejected: %s", exc)
        return _reply(ScrapeResponse(success=False, error=str(exc)), status=400)

    return _reply(ScrapeResponse(
        success=True,
        message=f"Successfully scraped {report.stats.success_pages} pages",
        pages=report.pages,
        stats=report.stats.to_dict(),
    ))


Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    if request.method == "OPTIONS":
        response: web.StreamResponse = web.Response(status=204)
    else:
        response = await handler(request)
    origin = request.headers.get("Origin")
    if origin in ALLOWED_ORIGINS:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Origin, Content-Type, Accept, Authorization"
        response.headers["Vary"] = "Origin"
    return response


def create_app(config: Optional[CrawlConfig] = None, *, min_delay_ms: int = MIN_DELAY_MS) -> web.Application:
    """Build the aiohttp application; *config* supplies timeouts, concurrency and such."""
    app = web.Application(middlewares=[cors_middleware])
    app[CONFIG_KEY] = config or CrawlConfig()
    app[MIN_DELAY_KEY] = min_delay_ms
    app.router.add_get("/health", health)
    app.router.add_get("/api/v1/status", status)
    app.router.add_post("/api/v1/scrape", scrape)
    return app


def run_server(host: str = "0.0.0.0", port: int = 8080, config: Optional[CrawlConfig] = None) -> None:
    logger.info("Starting API server on %s:%d", host, port)
    for endpoint in ENDPOINTS:
        logger.info("  %s", endpoint)
    web.run_app(create_app(config), host=host, port=port, print=None)
