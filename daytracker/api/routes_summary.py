from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query

from daytracker.api.deps import get_store, get_streak_store, get_today, get_user_id, parse_month, surface_errors
from daytracker.core.dates import next_month, previous_month
from daytracker.core.streak import StreakStore
from daytracker.db.repositories import summary_repo
from daytracker.db.store import Store

router = APIRouter(tags=["summary"])


@router.get("/summary")
def get_summary(
    month: str | None = Query(default=None),
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
) -> dict[str, Any]:
    target = parse_month(month, today)
    with surface_errors("Error loading summary. Please try again."):
        tasks = summary_repo.monthly_completion(store, user_id, target)

    following = next_month(target)
    return {
        "month": target.isoformat(),
        "previous_month": previous_month(target).isoformat(),
        # no navigation into months that have not started
        "next_month": following.isoformat() if following <= today else None,
        "total_completed": sum(task.count for task in tasks),
        "unique_tasks": len(tasks),
        "tasks": [task.to_dict() for task in tasks],
    }


@router.get("/streak")
def get_streak(
    today: date = Depends(get_today),
    streaks: StreakStore = Depends(get_streak_store),
) -> dict[str, Any]:
    current = streaks.validate(today)
    data = streaks.load()
    return {"current_streak": current, "last_completed_date": data.last_completed_date}
