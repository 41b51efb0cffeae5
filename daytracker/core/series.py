from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable

from daytracker.core.hierarchy import effective_done, organize_into_forest
from daytracker.core.models import Todo

UNCATEGORIZED = "Uncategorized"


@dataclass(slots=True)
class SeriesProgress:
    series_id: str
    title: str
    category: str
    repeat_days: int
    start_date: date
    completed: int = 0
    total: int = 0

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.completed / self.total * 100, 1)

    def to_dict(self) -> dict[str, Any]:
        return {
            "series_id": self.series_id,
            "title": self.title,
            "category": self.category,
            "repeat_days": self.repeat_days,
            "start_date": self.start_date.isoformat(),
            "completed": self.completed,
            "total": self.total,
            "percent": self.percent,
        }


@dataclass(slots=True)
class SeriesCategory:
    category: str
    series: list[SeriesProgress] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "series": [s.to_dict() for s in self.series]}


def group_recurring_series(todos: Iterable[Todo]) -> list[SeriesCategory]:
    """
    Per-series completion over a date range, grouped by category.

    Only root todos carrying a recurrence count as series instances. An
    instance with subtasks counts as done when all of them are done.
    """
    by_series: dict[str, SeriesProgress] = {}
    for node in organize_into_forest(todos):
        todo = node.item
        if todo.recurrence is None:
            continue
        progress = by_series.get(todo.recurrence.series_id)
        if progress is None:
            progress = SeriesProgress(
                series_id=todo.recurrence.series_id,
                title=todo.title,
                category=todo.category or UNCATEGORIZED,
                repeat_days=todo.recurrence.repeat_days,
                start_date=todo.recurrence.start_date,
            )
            by_series[progress.series_id] = progress
        progress.total += 1
        if effective_done(node):
            progress.completed += 1

    categories: dict[str, SeriesCategory] = {}
    for progress in by_series.values():
        categories.setdefault(progress.category, SeriesCategory(progress.category)).series.append(progress)
    return [categories[name] for name in sorted(categories)]


def build_series_rows(
    *,
    title: str,
    user_id: str,
    start: date,
    repeat_days: int,
    category: str | None = None,
    series_id: str | None = None,
) -> list[dict[str, Any]]:
    """Rows for a new todo: one per day when repeating, a single row otherwise."""
    if repeat_days < 0:
        raise ValueError("repeat_days must be >= 0")
    recurring = repeat_days > 0
    series_id = series_id or str(uuid.uuid4())
    rows = []
    for offset in range(repeat_days if recurring else 1):
        rows.append(
            {
                "title": title,
                "task_date": (start + timedelta(days=offset)).isoformat(),
                "user_id": user_id,
                "parent_id": None,
                "category": category,
                "repeat_days": repeat_days,
                "repeat_start_date": start.isoformat() if recurring else None,
                "template_id": series_id if recurring else None,
            }
        )
    return rows
