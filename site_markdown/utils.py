"""site_markdown.utils: имена выходных файлов для сохранённых страниц."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional, Sequence
from urllib.parse import urlsplit

from site_markdown.logger import logger

__all__: Sequence[str] = ("sanitize_filename", "generate_filename", "TIMESTAMP_FORMAT")

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
_INVALID_CHARS_RE = re.compile(r'[/\\:*?"<>|]')
_DASHES_RE = re.compile(r"-{2,}")
_MAX_NAME_LEN = 50


def sanitize_filename(title: str) -> str:
    """Заменяет недопустимые символы на '-', обрезает до 50 символов, пустое -> 'untitled'."""
    name = _INVALID_CHARS_RE.sub("-", title)[:_MAX_NAME_LEN]
    name = _DASHES_RE.sub("-", name).strip("-").strip()
    return name or "untitled"


def generate_filename(website_url: str, extension: str, now: Optional[datetime] = None) -> str:
    """Имя вида ``example-com_2024-01-31_12-00-00.md`` по хосту сайта и времени."""
    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    try:
        host = urlsplit(website_url).hostname or ""
    except ValueError:
        host = ""
    if not host:
        logger.debug("Cannot take host from %s, using generic file name", website_url)
        return f"website_{timestamp}.{extension}"
    site = host.removeprefix("www.").replace(".", "-")
    return f"{sanitize_filename(site)}_{timestamp}.{extension}"
