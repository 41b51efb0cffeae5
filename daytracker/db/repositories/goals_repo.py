from __future__ import annotations

from datetime import date, datetime, timezone

from loguru import logger

from daytracker.core.dates import month_start
from daytracker.core.hierarchy import Node, organize_into_forest
from daytracker.core.models import ChildOf, Goal
from daytracker.db.store import GOALS, RowNotFound, Store, eq


def _clean_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValueError("Title is required")
    return title


def get_goal(store: Store, goal_id: str) -> Goal:
    rows = store.select(GOALS, [eq("id", goal_id)])
    if not rows:
        raise RowNotFound("Goal not found")
    return Goal.from_row(rows[0])


def list_for_month(store: Store, user_id: str, month: date) -> list[Node[Goal]]:
    rows = store.select(
        GOALS,
        [eq("user_id", user_id), eq("target_month", month_start(month).isoformat())],
        order=[("created_at", True)],
    )
    return organize_into_forest(Goal.from_row(row) for row in rows)


def add_goal(store: Store, *, user_id: str, title: str, month: date) -> Goal:
    rows = store.insert(
        GOALS,
        [{"title": _clean_title(title), "user_id": user_id, "target_month": month_start(month).isoformat()}],
    )
    if not rows:
        raise RowNotFound("Goal was not stored")
    logger.info("goal created user={} month={}", user_id, month_start(month).isoformat())
    return Goal.from_row(rows[0])


def add_subgoal(store: Store, *, user_id: str, parent_id: str, title: str) -> Goal:
    parent = get_goal(store, parent_id)
    if isinstance(parent.parent, ChildOf):
        raise ValueError("Cannot create a sub-goal under another sub-goal")
    if parent.done:
        raise ValueError("Cannot add a sub-goal to a done goal")
    rows = store.insert(
        GOALS,
        [
            {
                "title": _clean_title(title),
                "user_id": user_id,
                "target_month": parent.target_month.isoformat(),
                "parent_id": parent.id,
            }
        ],
    )
    if not rows:
        raise RowNotFound("Sub-goal was not stored")
    return Goal.from_row(rows[0])


def ensure_toggleable(store: Store, goal_id: str) -> None:
    if store.select(GOALS, [eq("parent_id", goal_id)]):
        raise ValueError("Goal with sub-goals is completed through its sub-goals")


def set_done(store: Store, goal_id: str, done: bool, *, now: datetime | None = None) -> Goal:
    """
    Toggle a goal. A goal with sub-goals has no flag of its own: it is done
    when all sub-goals are done.
    """
    ensure_toggleable(store, goal_id)
    completed_at = (now or datetime.now(timezone.utc)).isoformat() if done else None
    rows = store.update(GOALS, {"done": bool(done), "completed_at": completed_at}, [eq("id", goal_id)])
    if not rows:
        raise RowNotFound("Goal not found")
    return Goal.from_row(rows[0])


def rename(store: Store, goal_id: str, title: str) -> Goal:
    rows = store.update(GOALS, {"title": _clean_title(title)}, [eq("id", goal_id)])
    if not rows:
        raise RowNotFound("Goal not found")
    return Goal.from_row(rows[0])


def delete(store: Store, goal_id: str) -> None:
    store.delete(GOALS, [eq("id", goal_id)])
    logger.info("goal deleted id={}", goal_id)
