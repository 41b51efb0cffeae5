from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from daytracker.api.deps import get_store, get_today, get_user_id, parse_month, surface_errors
from daytracker.core.hierarchy import Node
from daytracker.core.models import Goal
from daytracker.db.repositories import goals_repo
from daytracker.db.store import Store

router = APIRouter(prefix="/goals", tags=["goals"])


class GoalCreate(BaseModel):
    title: str
    month: str | None = None


class SubgoalCreate(BaseModel):
    title: str


class GoalPatch(BaseModel):
    title: str | None = None
    done: bool | None = None


def _goal_payload(node: Node[Goal]) -> dict[str, Any]:
    payload = node.item.to_dict()
    payload["effective_done"] = node.done
    payload["subgoals_done"] = node.children_done
    payload["subgoals"] = [child.to_dict() for child in node.children]
    return payload


@router.get("")
def list_goals(
    month: str | None = Query(default=None),
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
) -> dict[str, Any]:
    target = parse_month(month, today)
    with surface_errors("Error loading goals. Please try again."):
        forest = goals_repo.list_for_month(store, user_id, target)
    done = sum(1 for node in forest if node.done)
    return {
        "month": target.isoformat(),
        "goals": [_goal_payload(node) for node in forest],
        "completed": done,
        "total": len(forest),
    }


@router.post("", status_code=201)
def create_goal(
    body: GoalCreate,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
) -> dict[str, Any]:
    target = parse_month(body.month, today)
    with surface_errors("Error adding goal. Please try again."):
        return goals_repo.add_goal(store, user_id=user_id, title=body.title, month=target).to_dict()


@router.post("/{goal_id}/subgoals", status_code=201)
def create_subgoal(
    goal_id: str,
    body: SubgoalCreate,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> dict[str, Any]:
    with surface_errors("Error adding sub-goal. Please try again."):
        return goals_repo.add_subgoal(store, user_id=user_id, parent_id=goal_id, title=body.title).to_dict()


@router.patch("/{goal_id}")
def patch_goal(
    goal_id: str,
    body: GoalPatch,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> dict[str, Any]:
    with surface_errors("Error updating goal. Please try again."):
        goal = goals_repo.get_goal(store, goal_id)
        if body.done is not None:
            goals_repo.ensure_toggleable(store, goal_id)
        if body.title is not None:
            goal = goals_repo.rename(store, goal_id, body.title)
        if body.done is not None:
            goal = goals_repo.set_done(store, goal_id, body.done)
    return goal.to_dict()


@router.delete("/{goal_id}")
def delete_goal(
    goal_id: str,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> dict[str, bool]:
    with surface_errors("Error deleting goal. Please try again."):
        goals_repo.delete(store, goal_id)
    return {"ok": True}
