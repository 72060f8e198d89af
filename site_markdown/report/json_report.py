# site_markdown/report/json_report.py

"""
Генерация JSON-выгрузки для проекта site_markdown.

Сериализация списка страниц CrawlResult в файл.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from site_markdown.crawler.models import CrawlResult
from site_markdown.utils import generate_filename


def render_json(
    result: CrawlResult,
    output_dir: Path | str,
    base_url: str,
    now: Optional[datetime] = None,
) -> Path:
    """
    Сохраняет страницы result в формате JSON в каталог output_dir.

    :param result: результат обхода
    :param output_dir: каталог для файла
    :param base_url: исходный URL, из него строится имя файла
    :return: Path сохранённого файла

    Пример:
    ```python
    from site_markdown.report.json_report import render_json
    path = render_json(result, 'out', 'https://example.com')
    print(f"JSON output saved to: {path}")
    ```
    """
    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)
    path = output / generate_filename(base_url, "json", now)

    data = [page.to_dict() for page in result]

    with path.open('w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return path
