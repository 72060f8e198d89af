"""Тесты для CLI (`site_markdown/cli.py`) с использованием click.testing.CliRunner.
Проверяют команды `scrape`, `serve`, `config`, `--version`, а также обработку ошибок.
"""
import asyncio
import json
import logging
from datetime import datetime

import pytest
import site_markdown.cli as cli_module
from click.testing import CliRunner
from site_markdown.aggregator import aggregate_results
from site_markdown.cli import cli
from site_markdown.crawler.models import (
    CrawlResult,
    ErrorKind,
    InvalidURLError,
    PageError,
    PageRecord,
)
from site_markdown.logger import LOGGER_NAME, init_logging

SEED = "https://example.com/"


def make_report(pages):
    result = CrawlResult(seed_url=SEED, pages=pages, duplicate_count=1)
    return aggregate_results(result, datetime(2024, 1, 1, 12, 0, 0), datetime(2024, 1, 1, 12, 0, 2))


DUMMY_PAGES = [
    PageRecord(url=SEED, title="Home", markdown="Welcome home.", depth=0),
    PageRecord.failed("https://example.com/x", 1, PageError(ErrorKind.FETCH_ERROR, "boom")),
]


@pytest.fixture(autouse=True)
def restore_logging():
    """CliRunner подменяет stdout; после теста возвращаем обычный обработчик."""
    yield
    init_logging()


@pytest.fixture(autouse=True)
def patch_start_crawl(monkeypatch):
    """Патчим start_crawl, чтобы не ходить в сеть; запоминаем переданный конфиг."""
    calls = []

    async def fake_crawl(url, cfg, stop_event=None):
        calls.append((url, cfg, stop_event))
        return make_report(list(DUMMY_PAGES))

    monkeypatch.setattr(cli_module, "start_crawl", fake_crawl)
    return calls


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "site-markdown" in result.output


def test_show_config(tmp_path):
    cfg_file = tmp_path / "config.json"
    cfg_file.write_text(json.dumps({"max_depth": 1, "user_agent": "Agent/1.0"}), encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["max_depth"] == 1
    assert data["user_agent"] == "Agent/1.0"


def test_bad_config_reports_error(tmp_path):
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("max_depth: -5\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_scrape_passes_overrides(tmp_path, patch_start_crawl):
    runner = CliRunner()
    result = runner.invoke(cli, [
        "scrape", SEED,
        "--depth", "2", "--delay", "250", "--external", "--concurrency", "3",
        "--timeout", "7.5", "--user-agent", "Bot/2.0",
        "--output", str(tmp_path), "--format", "json",
    ])
    assert result.exit_code == 0, result.output
    url, cfg, stop_event = patch_start_crawl[0]
    assert url == SEED
    assert cfg.max_depth == 2
    assert cfg.inter_request_delay == 0.25
    assert cfg.follow_external_links is True
    assert cfg.max_concurrency == 3
    assert cfg.request_timeout == 7.5
    assert cfg.user_agent == "Bot/2.0"
    assert stop_event is not None and not stop_event.is_set()


def test_scrape_json_output(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["scrape", SEED, "-o", str(tmp_path), "-f", "json"])
    assert result.exit_code == 0, result.output
    assert "JSON output saved to" in result.output
    files = list(tmp_path.glob("example-com_*.json"))
    assert len(files) == 1
    data = json.loads(files[0].read_text(encoding="utf-8"))
    assert data[0]["url"] == SEED
    assert data[1]["error"] == "Failed to fetch page: boom"


def test_scrape_single_output(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["scrape", SEED, "-o", str(tmp_path), "-f", "single"])
    assert result.exit_code == 0, result.output
    files = list(tmp_path.glob("example-com_*.md"))
    assert len(files) == 1
    assert "Welcome home." in files[0].read_text(encoding="utf-8")


def test_scrape_files_output(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["scrape", SEED, "-o", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert [p.name for p in tmp_path.iterdir()] == ["page-001-Home.md"]
    assert "Successfully saved 1 files" in result.output
    assert "1 pages had errors" in result.output
    assert "1 duplicates skipped" in result.output


def test_scrape_no_pages(tmp_path, monkeypatch):
    async def empty(url, cfg, stop_event=None):
        return make_report([])

    monkeypatch.setattr(cli_module, "start_crawl", empty)
    runner = CliRunner()
    result = runner.invoke(cli, ["scrape", SEED, "-o", str(tmp_path)])
    assert result.exit_code == 0
    assert "No pages were scraped" in result.output
    assert list(tmp_path.iterdir()) == []


def test_scrape_invalid_url(monkeypatch, tmp_path):
    async def invalid(url, cfg, stop_event=None):
        raise InvalidURLError(url, "scheme must be http or https")

    monkeypatch.setattr(cli_module, "start_crawl", invalid)
    runner = CliRunner()
    result = runner.invoke(cli, ["scrape", "ftp://example.com", "-o", str(tmp_path)])
    assert result.exit_code == 1
    assert "Scraping failed" in result.output


def test_scrape_timeout_sets_stop_event(monkeypatch, tmp_path):
    seen = {}

    async def slow(url, cfg, stop_event=None):
        await asyncio.sleep(0.2)
        seen["stopped"] = stop_event.is_set()
        return make_report([])

    monkeypatch.setattr(cli_module, "start_crawl", slow)
    runner = CliRunner()
    result = runner.invoke(cli, ["scrape", SEED, "-o", str(tmp_path), "--scan-timeout", "0.05"])
    assert result.exit_code == 0
    assert seen["stopped"] is True


def test_scrape_rejects_bad_format(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["scrape", SEED, "-f", "pdf"])
    assert result.exit_code != 0


def test_serve_uses_config(monkeypatch, tmp_path):
    called = {}

    def fake_run_server(host, port, config):
        called.update(host=host, port=port, config=config)

    monkeypatch.setattr(cli_module, "run_server", fake_run_server)
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("max_concurrency: 2\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "serve", "--port", "9000"])
    assert result.exit_code == 0
    assert called["port"] == 9000
    assert called["host"] == "0.0.0.0"
    assert called["config"].max_concurrency == 2


def test_log_file_receives_page_errors(tmp_path):
    log_file = tmp_path / "run.log"
    runner = CliRunner()
    result = runner.invoke(cli, [
        "--log-file", str(log_file), "--log-level", "DEBUG",
        "scrape", SEED, "-o", str(tmp_path / "out"),
    ])
    assert result.exit_code == 0, result.output
    text = log_file.read_text(encoding="utf-8")
    assert "WARNING" in text
    assert "https://example.com/x" in text


def test_init_logging_replaces_handlers(tmp_path):
    init_logging(level="DEBUG", log_file=tmp_path / "a.log")
    lg = init_logging(level="WARNING")
    assert lg is logging.getLogger(LOGGER_NAME)
    assert lg.level == logging.WARNING
    assert len(lg.handlers) == 1
    assert not lg.propagate
