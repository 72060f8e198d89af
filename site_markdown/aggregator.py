"""site_markdown.aggregator: сводная статистика по результату обхода."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from site_markdown.crawler.models import CrawlResult


@dataclass(slots=True)
class CrawlStats:
    """Счётчики страниц и время обработки одного обхода."""

    total_pages: int = 0
    success_pages: int = 0
    error_pages: int = 0
    duplicates: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def processing_time(self) -> float:
        """Длительность обхода в секундах."""
        if self.started_at is None or self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalPages": self.total_pages,
            "successPages": self.success_pages,
            "errorPages": self.error_pages,
            "duplicates": self.duplicates,
            "processingTime": f"{self.processing_time:.3f}s",
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass(slots=True)
class CrawlReport:
    """Результат обхода вместе со статистикой."""

    result: CrawlResult
    stats: CrawlStats = field(default_factory=CrawlStats)

    @property
    def pages(self) -> List[Dict[str, Any]]:
        return [page.to_dict() for page in self.result]

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        output = {"pages": self.pages, "stats": self.stats.to_dict()}
        return json.dumps(output, ensure_ascii=False, indent=2 if pretty else None)


def aggregate_results(result: CrawlResult, started_at: datetime, completed_at: datetime) -> CrawlReport:
    """Считает успешные и ошибочные страницы и собирает CrawlReport."""
    stats = CrawlStats(
        total_pages=len(result),
        success_pages=result.success_count,
        error_pages=result.error_count,
        duplicates=result.duplicate_count,
        started_at=started_at,
        completed_at=completed_at,
    )
    return CrawlReport(result=result, stats=stats)
