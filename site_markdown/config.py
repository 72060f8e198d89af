"""
Модуль для загрузки и валидации конфигурации краулера site_markdown.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER_AGENT = "Website-Markdown-Converter/1.0"


class CrawlConfig(BaseModel):
    """Конфигурация одного обхода сайта. Неизменяема после создания."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_depth: int = Field(3, ge=0, description="Максимальная глубина обхода ссылок (включительно).")
    request_timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    inter_request_delay: float = Field(1.0, ge=0, description="Минимальный интервал между запросами (секунд).")
    follow_external_links: bool = Field(False, description="Переходить ли по ссылкам на другие хосты.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    max_concurrency: Optional[int] = Field(
        5, ge=1, description="Лимит одновременных запросов на весь обход (None - без лимита)."
    )

    @field_validator("user_agent", mode="before")
    def _strip_user_agent(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    def with_overrides(self, **changes: Any) -> CrawlConfig:
        """Возвращает новую проверенную копию с заменёнными полями (None игнорируется)."""
        data = self.model_dump()
        data.update({k: v for k, v in changes.items() if v is not None})
        return CrawlConfig(**data)


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlConfig.
    Без пути берёт configs/default.yaml, а если его нет - значения по умолчанию.
    При отсутствии явно указанного файла бросает FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return CrawlConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return CrawlConfig(**data)
