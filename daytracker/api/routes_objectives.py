from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from daytracker.api.deps import get_store, get_today, get_user_id, parse_day, surface_errors
from daytracker.core.completions import day_agenda, toggle_completion
from daytracker.core.models import Objective
from daytracker.core.phases import objective_progress, phase_windows, tasks_by_category
from daytracker.db.repositories import objectives_repo
from daytracker.db.store import Store

router = APIRouter(prefix="/objectives", tags=["objectives"])


class ObjectiveCreate(BaseModel):
    title: str
    start_date: str | None = None


class TaskCreate(BaseModel):
    title: str
    category: str


class SubtaskCreate(BaseModel):
    title: str
    phase_order: int = 1
    duration_days: int = 7


class CompletionSet(BaseModel):
    completed: bool
    date: str | None = None


def objective_payload(objective: Objective, today: date) -> dict[str, Any]:
    progress = objective_progress(objective, today)
    categories = []
    for category, tasks in tasks_by_category(objective).items():
        categories.append(
            {
                "category": category,
                "tasks": [
                    {
                        "id": task.id,
                        "title": task.title,
                        "phases": [
                            {
                                "phase": window.phase,
                                "start_day": window.start_day,
                                "length": window.length,
                                "subtasks": [s.to_dict() for s in window.subtasks],
                            }
                            for window in phase_windows(task)
                        ],
                    }
                    for task in tasks
                ],
            }
        )
    return {
        "id": objective.id,
        "title": objective.title,
        "start_date": objective.start_date.isoformat(),
        "completed_at": objective.completed_at.isoformat() if objective.completed_at else None,
        "calculated_duration": progress.duration_days,
        "days_elapsed": progress.days_elapsed,
        "progress_percent": progress.percent,
        "categories": categories,
    }


@router.get("")
def list_objectives(
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
) -> list[dict[str, Any]]:
    with surface_errors("Error loading objectives."):
        objectives = objectives_repo.fetch_objectives_with_details(store, user_id)
        return [objective_payload(objective, today) for objective in objectives]


@router.post("", status_code=201)
def create_objective(
    body: ObjectiveCreate,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
) -> dict[str, Any]:
    start = parse_day(body.start_date, today, "start_date")
    with surface_errors("Error adding objective."):
        objective = objectives_repo.add_objective(store, user_id=user_id, title=body.title, start_date=start)
    return objective_payload(objective, today)


@router.post("/{objective_id}/tasks", status_code=201)
def create_task(
    objective_id: str,
    body: TaskCreate,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> dict[str, Any]:
    with surface_errors("Error adding task."):
        task = objectives_repo.add_task(store, objective_id=objective_id, title=body.title, category=body.category)
    return {"id": task.id, "objective_id": task.objective_id, "title": task.title, "category": task.category}


@router.post("/tasks/{task_id}/subtasks", status_code=201)
def create_subtask(
    task_id: str,
    body: SubtaskCreate,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> dict[str, Any]:
    with surface_errors("Error adding subtask."):
        subtask = objectives_repo.add_subtask(
            store,
            task_id=task_id,
            title=body.title,
            phase_order=body.phase_order,
            duration_days=body.duration_days,
        )
    return subtask.to_dict()


@router.delete("/{objective_id}")
def delete_objective(
    objective_id: str,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
) -> dict[str, bool]:
    with surface_errors("Error deleting objective."):
        objectives_repo.delete_objective(store, objective_id)
    return {"ok": True}


@router.get("/agenda")
def get_agenda(
    day: str | None = Query(default=None, alias="date"),
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
) -> dict[str, Any]:
    target = parse_day(day, today)
    with surface_errors("Error loading today's subtasks."):
        _objectives, _records, entries = objectives_repo.agenda_for_day(store, user_id, target)
    return {"date": target.isoformat(), "items": [entry.to_dict() for entry in entries]}


@router.put("/agenda/{subtask_id}")
def set_agenda_completion(
    subtask_id: str,
    body: CompletionSet,
    store: Store = Depends(get_store),
    user_id: str = Depends(get_user_id),
    today: date = Depends(get_today),
) -> dict[str, Any]:
    target = parse_day(body.date, today)
    with surface_errors("Error updating subtask."):
        objectives, records, _entries = objectives_repo.agenda_for_day(store, user_id, target)
        objectives_repo.set_subtask_completion(
            store, user_id=user_id, subtask_id=subtask_id, day=target, completed=body.completed
        )
    records = toggle_completion(
        records, subtask_id=subtask_id, user_id=user_id, day=target, completed=body.completed
    )
    entries = day_agenda(objectives, records, target)
    return {"date": target.isoformat(), "items": [entry.to_dict() for entry in entries]}
