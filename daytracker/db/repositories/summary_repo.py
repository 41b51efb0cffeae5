from __future__ import annotations

from datetime import date

from daytracker.core.dates import month_end, month_start
from daytracker.core.series import SeriesCategory, group_recurring_series
from daytracker.core.summary import TaskSummary, monthly_summary
from daytracker.db.repositories import todos_repo
from daytracker.db.store import TODOS, Store, eq, gte, is_null, lte


def monthly_completion(store: Store, user_id: str, month: date) -> list[TaskSummary]:
    rows = store.select(
        TODOS,
        [
            eq("user_id", user_id),
            eq("done", True),
            is_null("parent_id"),
            gte("task_date", month_start(month).isoformat()),
            lte("task_date", month_end(month).isoformat()),
        ],
        order=[("task_date", False)],
    )
    return monthly_summary(rows)


def recurring_overview(store: Store, user_id: str, start: date, end: date) -> list[SeriesCategory]:
    return group_recurring_series(todos_repo.list_range(store, user_id, start, end))
