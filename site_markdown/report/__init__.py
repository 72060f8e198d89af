"""site_markdown.report: выгрузка результата обхода в файлы (markdown и JSON) для CLI."""

from site_markdown.report.json_report import render_json
from site_markdown.report.markdown_report import render_files, render_single

__all__ = ["render_json", "render_single", "render_files"]
