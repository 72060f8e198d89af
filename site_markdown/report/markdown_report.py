"""site_markdown.report.markdown_report: markdown-выгрузка через Jinja2-шаблоны."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from site_markdown.crawler.models import CrawlResult
from site_markdown.logger import logger
from site_markdown.utils import generate_filename, sanitize_filename

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _environment(template_dir: Union[Path, str, None]) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(template_dir or DEFAULT_TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        keep_trailing_newline=True,
    )


def render_single(
    result: CrawlResult,
    output_dir: Union[Path, str],
    base_url: str,
    template_dir: Union[Path, str, None] = None,
    now: Optional[datetime] = None,
) -> Path:
    """Пишет все страницы в один markdown-документ и возвращает его путь.

    Страницы с ошибкой попадают в документ отдельной секцией с текстом ошибки.
    """
    now = now or datetime.now()
    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)
    path = output / generate_filename(base_url, "md", now)

    template = _environment(template_dir).get_template("single.md.j2")
    content = template.render(
        base_url=base_url,
        scraped_at=now.strftime(_DATE_FORMAT),
        pages=[page.to_dict() for page in result],
    )
    path.write_text(content, encoding="utf-8")
    return path


def render_files(
    result: CrawlResult,
    output_dir: Union[Path, str],
    template_dir: Union[Path, str, None] = None,
    now: Optional[datetime] = None,
) -> Tuple[int, int]:
    """Пишет по одному файлу ``page-NNN-<title>.md`` на успешную страницу.

    Returns:
        (число сохранённых файлов, число страниц с ошибками)
    """
    now = now or datetime.now()
    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)
    template = _environment(template_dir).get_template("page.md.j2")

    saved = errors = 0
    for index, page in enumerate(result, start=1):
        if not page.ok:
            errors += 1
            logger.warning("Error on %s: %s", page.url, page.error)
            continue
        filename = f"page-{index:03d}-{sanitize_filename(page.title)}.md"
        content = template.render(page=page.to_dict(), scraped_at=now.strftime(_DATE_FORMAT))
        try:
            (output / filename).write_text(content, encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to write %s: %s", filename, exc)
            errors += 1
            continue
        saved += 1
    return saved, errors
