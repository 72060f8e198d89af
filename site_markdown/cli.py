#!/usr/bin/env python3
"""
Точка входа site_markdown для командной строки.

Команды:
  scrape URL  Обойти сайт и сохранить страницы в markdown/JSON
  serve       Запустить HTTP API
  config      Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда scrape опции:
  --depth, -d INT     Максимальная глубина обхода
  --delay MS          Пауза между запросами (мс)
  --external          Переходить по внешним ссылкам
  --concurrency INT   Лимит одновременных запросов
  --timeout SEC       Таймаут одного запроса
  --user-agent STR    Заголовок User-Agent
  --output, -o DIR    Каталог для результата (default: .)
  --format, -f FMT    files | json | single
  --scan-timeout SEC  Не начинать новые уровни обхода после SEC секунд

Пример:
  site-markdown scrape https://example.com --depth 2 --output ./docs
"""
import asyncio
import sys
from pathlib import Path
from typing import Optional

import click

from site_markdown import __version__
from site_markdown.aggregator import CrawlReport
from site_markdown.api import run_server
from site_markdown.config import CrawlConfig, load_config
from site_markdown.crawler.models import InvalidURLError
from site_markdown.engine import start_crawl
from site_markdown.logger import init_logging
from site_markdown.report.json_report import render_json
from site_markdown.report.markdown_report import render_files, render_single

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


async def _run_crawl(url: str, cfg: CrawlConfig, scan_timeout: Optional[float]) -> CrawlReport:
    """Запускает обход; по истечении scan_timeout новые уровни не начинаются."""
    stop = asyncio.Event()
    handle = asyncio.get_running_loop().call_later(scan_timeout, stop.set) if scan_timeout else None
    try:
        return await start_crawl(url, cfg, stop)
    finally:
        if handle is not None:
            handle.cancel()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='site-markdown, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Конвертация сайтов в markdown: CLI и HTTP API."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('scrape', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--depth', '-d', type=click.IntRange(min=0), default=None,
              help='Максимальная глубина обхода (из конфига, по умолчанию 3)')
@click.option('--delay', type=click.IntRange(min=0), default=None,
              help='Пауза между запросами в миллисекундах (по умолчанию 1000)')
@click.option('--external/--no-external', default=None,
              help='Переходить по ссылкам на другие хосты')
@click.option('--concurrency', type=click.IntRange(min=1), default=None,
              help='Лимит одновременных запросов на весь обход')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=None,
              help='Таймаут одного запроса (секунд)')
@click.option('--user-agent', 'user_agent', default=None, help='Заголовок User-Agent')
@click.option(
    '--output', '-o', 'output',
    default='.',
    show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help='Каталог для результата'
)
@click.option(
    '--format', '-f', 'output_format',
    default='files',
    show_default=True,
    type=click.Choice(['files', 'json', 'single']),
    help='Формат результата'
)
@click.option('--scan-timeout', 'scan_timeout', type=float, default=None,
              help='Не начинать новые уровни после SEC секунд')
@click.pass_context
def scrape(ctx, url, depth, delay, external, concurrency, timeout, user_agent,
           output, output_format, scan_timeout):
    """Обойти сайт начиная с URL и сохранить страницы."""
    try:
        cfg = ctx.obj['config'].with_overrides(
            max_depth=depth,
            inter_request_delay=delay / 1000 if delay is not None else None,
            follow_external_links=external,
            max_concurrency=concurrency,
            request_timeout=timeout,
            user_agent=user_agent,
        )
    except ValueError as e:
        print_error(f'Некорректные параметры: {e}')

    click.echo(f'URL: {url}')
    click.echo(f'Max depth: {cfg.max_depth}')
    click.echo(f'Delay: {cfg.inter_request_delay * 1000:.0f}ms')
    click.echo(f'Follow external: {cfg.follow_external_links}')

    try:
        report = asyncio.run(_run_crawl(url, cfg, scan_timeout))
    except InvalidURLError as e:
        print_error(f'Scraping failed: {e}')

    if not len(report.result):
        click.echo('No pages were scraped')
        return

    try:
        if output_format == 'json':
            path = render_json(report.result, output, url)
            click.echo(f'JSON output saved to: {path}')
        elif output_format == 'single':
            path = render_single(report.result, output, url)
            click.echo(f'Single markdown file saved to: {path}')
        else:
            saved, errors = render_files(report.result, output)
            click.echo(f'Successfully saved {saved} files to: {output}')
            if errors:
                click.echo(f'{errors} pages had errors')
    except OSError as e:
        print_error(f'Ошибка при сохранении результата: {e}')

    stats = report.stats
    click.echo(
        f'Pages: {stats.total_pages} ({stats.success_pages} ok, {stats.error_pages} errors, '
        f'{stats.duplicates} duplicates skipped) in {stats.processing_time:.2f}s'
    )


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default='0.0.0.0', show_default=True, help='Адрес для прослушивания')
@click.option('--port', '-p', default=8080, show_default=True, type=click.IntRange(1, 65535),
              help='Порт HTTP API')
@click.pass_context
def serve(ctx, host, port):
    """Запустить HTTP API."""
    run_server(host=host, port=port, config=ctx.obj['config'])


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
