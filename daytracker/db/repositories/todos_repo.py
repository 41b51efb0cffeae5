from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from loguru import logger

from daytracker.core.hierarchy import Node, organize_into_forest
from daytracker.core.models import ChildOf, Todo
from daytracker.core.series import build_series_rows
from daytracker.db.store import TODOS, RowNotFound, Store, eq, gte, lte


@dataclass(slots=True)
class DayBoard:
    day: date
    forest: list[Node[Todo]]
    completed: int
    total: int

    @property
    def all_done(self) -> bool:
        return self.total > 0 and self.completed == self.total


def _clean_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValueError("Title is required")
    return title


def get_todo(store: Store, todo_id: str) -> Todo:
    rows = store.select(TODOS, [eq("id", todo_id)])
    if not rows:
        raise RowNotFound("Todo not found")
    return Todo.from_row(rows[0])


def list_for_day(store: Store, user_id: str, day: date) -> list[Todo]:
    rows = store.select(
        TODOS,
        [eq("user_id", user_id), eq("task_date", day.isoformat())],
        order=[("created_at", False)],
    )
    return [Todo.from_row(row) for row in rows]


def list_range(store: Store, user_id: str, start: date, end: date) -> list[Todo]:
    if end < start:
        raise ValueError("end must not be before start")
    rows = store.select(
        TODOS,
        [eq("user_id", user_id), gte("task_date", start.isoformat()), lte("task_date", end.isoformat())],
        order=[("category", True), ("title", True), ("task_date", True)],
    )
    return [Todo.from_row(row) for row in rows]


def day_board(store: Store, user_id: str, day: date) -> DayBoard:
    todos = list_for_day(store, user_id, day)
    forest = organize_into_forest(todos)
    # a parent counts through its subtasks, its stored flag is never toggled
    completed = sum(int(node.done) + node.children_done for node in forest)
    return DayBoard(day=day, forest=forest, completed=completed, total=len(todos))


def add_todo(
    store: Store,
    *,
    user_id: str,
    title: str,
    today: date,
    category: str | None = None,
    repeat_days: int = 0,
) -> list[Todo]:
    """
    Create a todo for ``today``. With ``repeat_days > 0`` one row per day is
    created, all sharing a series id, in a single write.
    """
    rows = build_series_rows(
        title=_clean_title(title),
        user_id=user_id,
        start=today,
        repeat_days=int(repeat_days),
        category=(category or "").strip() or None,
    )
    created = [Todo.from_row(row) for row in store.insert(TODOS, rows)]
    logger.info("todo created user={} rows={} repeat_days={}", user_id, len(created), repeat_days)
    return created


def add_subtask(store: Store, *, user_id: str, parent_id: str, title: str) -> Todo:
    """
    Subtasks live on their parent's day.
    - parent must exist and be a root todo
    """
    parent = get_todo(store, parent_id)
    if isinstance(parent.parent, ChildOf):
        raise ValueError("Cannot create a subtask under another subtask")
    rows = store.insert(
        TODOS,
        [
            {
                "title": _clean_title(title),
                "task_date": parent.task_date.isoformat(),
                "user_id": user_id,
                "parent_id": parent.id,
            }
        ],
    )
    if not rows:
        raise RowNotFound("Subtask was not stored")
    logger.info("todo subtask created parent={}", parent.id)
    return Todo.from_row(rows[0])


def ensure_toggleable(store: Store, todo_id: str) -> None:
    if store.select(TODOS, [eq("parent_id", todo_id)]):
        raise ValueError("Task with subtasks is completed through its subtasks")


def set_done(store: Store, todo_id: str, done: bool) -> Todo:
    ensure_toggleable(store, todo_id)
    rows = store.update(TODOS, {"done": bool(done)}, [eq("id", todo_id)])
    if not rows:
        raise RowNotFound("Todo not found")
    return Todo.from_row(rows[0])


def rename(store: Store, todo_id: str, title: str) -> Todo:
    rows = store.update(TODOS, {"title": _clean_title(title)}, [eq("id", todo_id)])
    if not rows:
        raise RowNotFound("Todo not found")
    return Todo.from_row(rows[0])


def delete(store: Store, todo_id: str) -> None:
    # subtasks go with the parent via ON DELETE CASCADE
    store.delete(TODOS, [eq("id", todo_id)])
    logger.info("todo deleted id={}", todo_id)
