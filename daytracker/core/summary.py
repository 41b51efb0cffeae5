from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from daytracker.core.dates import coerce_date


@dataclass(slots=True)
class TaskSummary:
    title: str
    count: int
    last_completed: date

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "count": self.count, "last_completed": self.last_completed.isoformat()}


def _normalize_title(title: str) -> str:
    return title.strip().casefold()


def monthly_summary(rows: Iterable[dict[str, Any]]) -> list[TaskSummary]:
    """
    Completion frequency per task title.

    ``rows`` are completed root todos (``title``, ``task_date``). Titles are
    compared trimmed and case-insensitively; the first spelling seen is kept.
    """
    by_title: dict[str, TaskSummary] = {}
    for row in rows:
        title = str(row.get("title") or "")
        key = _normalize_title(title)
        day = coerce_date(row["task_date"], field="task_date")
        summary = by_title.get(key)
        if summary is None:
            by_title[key] = TaskSummary(title=title, count=1, last_completed=day)
            continue
        summary.count += 1
        if day > summary.last_completed:
            summary.last_completed = day
    return sorted(by_title.values(), key=lambda s: s.count, reverse=True)
