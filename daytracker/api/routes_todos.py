from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from daytracker.api.deps import get_store, get_streak_store, get_today, get_user_id, parse_day, surface_errors
from daytracker.core.dates import month_start
from daytracker.core.hierarchy import Node
from daytracker.core.models import Todo
from daytracker.core.streak import StreakStore
from daytracker.db.repositories import summary_repo, todos_repo
from daytracker.db.store import Store

router = APIRouter(prefix="/todos", tags=["todos"])


class TodoCreate(BaseModel):
    title: str
    category: str | None = None
    repeat_days: int = 0


class SubtaskCreate(BaseModel):
    title: str


class TodoPatch(BaseModel):
    title: str | None = None
    done: bool | None = None


def node_payload(node: Node[Todo]) -> dict[str, Any]:
    payload = node.item.to_dict()
    payload["effective_done"] = node.done
    payload["subtasks_done"] = node.children_done
    payload["subtasks"] = [child.to_dict() for child in node.children]
    return payload


@router.get("")
def get_day_board(
    day: str | None = Query(default=None, alias="date"),
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
    streaks: StreakStore = Depends(get_streak_store),
) -> dict[str, Any]:
    target = parse_day(day, today)
    with surface_errors("Error loading tasks. Please try again."):
        board = todos_repo.day_board(store, user_id, target)

    is_today = target == today
    if is_today and board.total > 0:
        streak = streaks.update(board.all_done, today)
    else:
        streak = streaks.validate(today)

    return {
        "date": target.isoformat(),
        "is_today": is_today,
        "todos": [node_payload(node) for node in board.forest],
        "completed": board.completed,
        "total": board.total,
        "all_done": board.all_done,
        "streak": streak,
    }


@router.post("", status_code=201)
def create_todo(
    body: TodoCreate,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
) -> dict[str, Any]:
    with surface_errors("Error adding task. Please try again."):
        created = todos_repo.add_todo(
            store,
            user_id=user_id,
            title=body.title,
            today=today,
            category=body.category,
            repeat_days=body.repeat_days,
        )
    todays = [todo.to_dict() for todo in created if todo.task_date == today]
    return {"created": len(created), "today": todays[0] if todays else None}


@router.get("/series")
def get_series(
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
) -> list[dict[str, Any]]:
    start_day = parse_day(start, month_start(today), "start")
    end_day = parse_day(end, today, "end")
    with surface_errors("Error loading recurring tasks. Please try again."):
        categories = summary_repo.recurring_overview(store, user_id, start_day, end_day)
    return [category.to_dict() for category in categories]


@router.post("/{todo_id}/subtasks", status_code=201)
def create_subtask(
    todo_id: str,
    body: SubtaskCreate,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> dict[str, Any]:
    with surface_errors("Error adding subtask. Please try again."):
        return todos_repo.add_subtask(store, user_id=user_id, parent_id=todo_id, title=body.title).to_dict()


@router.patch("/{todo_id}")
def patch_todo(
    todo_id: str,
    body: TodoPatch,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> dict[str, Any]:
    with surface_errors("Error updating task. Please try again."):
        todo = todos_repo.get_todo(store, todo_id)
        if body.done is not None:
            todos_repo.ensure_toggleable(store, todo_id)
        if body.title is not None:
            todo = todos_repo.rename(store, todo_id, body.title)
        if body.done is not None:
            todo = todos_repo.set_done(store, todo_id, body.done)
    return todo.to_dict()


@router.delete("/{todo_id}")
def delete_todo(
    todo_id: str,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> dict[str, bool]:
    with surface_errors("Error deleting task. Please try again."):
        todos_repo.delete(store, todo_id)
    return {"ok": True}
