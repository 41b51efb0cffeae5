from __future__ import annotations

from datetime import date

from loguru import logger

from daytracker.core.completions import AgendaEntry, day_agenda
from daytracker.core.models import Objective, ObjectiveSubtask, ObjectiveTask, SubtaskCompletion
from daytracker.core.phases import active_subtasks
from daytracker.db.store import (
    OBJECTIVE_SUBTASKS,
    OBJECTIVE_TASKS,
    OBJECTIVES,
    SUBTASK_COMPLETIONS,
    RowNotFound,
    Store,
    eq,
    in_,
)


def _clean(value: str, name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{name} is required")
    return value


def fetch_objectives_with_details(store: Store, user_id: str) -> list[Objective]:
    """Objectives (newest first) with their tasks and subtasks attached."""
    objectives = [
        Objective.from_row(row)
        for row in store.select(OBJECTIVES, [eq("user_id", user_id)], order=[("created_at", False)])
    ]
    if not objectives:
        return []

    by_objective = {obj.id: obj for obj in objectives}
    tasks = [
        ObjectiveTask.from_row(row)
        for row in store.select(OBJECTIVE_TASKS, [in_("objective_id", list(by_objective))], order=[("created_at", True)])
    ]
    by_task = {task.id: task for task in tasks}
    if by_task:
        rows = store.select(
            OBJECTIVE_SUBTASKS,
            [in_("task_id", list(by_task))],
            order=[("phase_order", True), ("created_at", True)],
        )
        for row in rows:
            subtask = ObjectiveSubtask.from_row(row)
            task = by_task.get(subtask.task_id)
            if task is not None:
                task.subtasks.append(subtask)

    for task in tasks:
        objective = by_objective.get(task.objective_id)
        if objective is not None:
            objective.tasks.append(task)
    return objectives


def add_objective(store: Store, *, user_id: str, title: str, start_date: date) -> Objective:
    rows = store.insert(
        OBJECTIVES,
        [{"title": _clean(title, "Title"), "start_date": start_date.isoformat(), "user_id": user_id}],
    )
    if not rows:
        raise RowNotFound("Objective was not stored")
    logger.info("objective created user={} start={}", user_id, start_date.isoformat())
    return Objective.from_row(rows[0])


def add_task(store: Store, *, objective_id: str, title: str, category: str) -> ObjectiveTask:
    if not store.select(OBJECTIVES, [eq("id", objective_id)]):
        raise RowNotFound("Objective not found")
    rows = store.insert(
        OBJECTIVE_TASKS,
        [{"objective_id": objective_id, "title": _clean(title, "Title"), "category": _clean(category, "Category")}],
    )
    if not rows:
        raise RowNotFound("Task was not stored")
    return ObjectiveTask.from_row(rows[0])


def add_subtask(
    store: Store,
    *,
    task_id: str,
    title: str,
    phase_order: int = 1,
    duration_days: int = 7,
) -> ObjectiveSubtask:
    if int(duration_days) < 1:
        raise ValueError("duration_days must be >= 1")
    if not store.select(OBJECTIVE_TASKS, [eq("id", task_id)]):
        raise RowNotFound("Task not found")
    rows = store.insert(
        OBJECTIVE_SUBTASKS,
        [
            {
                "task_id": task_id,
                "title": _clean(title, "Title"),
                "phase_order": int(phase_order),
                "duration_days": int(duration_days),
            }
        ],
    )
    if not rows:
        raise RowNotFound("Subtask was not stored")
    return ObjectiveSubtask.from_row(rows[0])


def delete_objective(store: Store, objective_id: str) -> None:
    # tasks, subtasks and completions cascade
    store.delete(OBJECTIVES, [eq("id", objective_id)])
    logger.info("objective deleted id={}", objective_id)


def completions_for_day(store: Store, user_id: str, day: date, subtask_ids: list[str]) -> list[SubtaskCompletion]:
    if not subtask_ids:
        return []
    rows = store.select(
        SUBTASK_COMPLETIONS,
        [eq("user_id", user_id), eq("completion_date", day.isoformat()), in_("subtask_id", subtask_ids)],
    )
    return [SubtaskCompletion.from_row(row) for row in rows]


def set_subtask_completion(store: Store, *, user_id: str, subtask_id: str, day: date, completed: bool) -> None:
    """Mark or unmark a subtask for one day. Repeating either call is harmless."""
    if not store.select(OBJECTIVE_SUBTASKS, [eq("id", subtask_id)]):
        raise RowNotFound("Subtask not found")
    if completed:
        store.insert(
            SUBTASK_COMPLETIONS,
            [{"subtask_id": subtask_id, "user_id": user_id, "completion_date": day.isoformat()}],
            on_conflict=("subtask_id", "completion_date"),
        )
        return
    store.delete(
        SUBTASK_COMPLETIONS,
        [eq("subtask_id", subtask_id), eq("user_id", user_id), eq("completion_date", day.isoformat())],
    )


def agenda_for_day(store: Store, user_id: str, day: date) -> tuple[list[Objective], list[SubtaskCompletion], list[AgendaEntry]]:
    objectives = fetch_objectives_with_details(store, user_id)
    active_ids = [s.id for objective in objectives for s in active_subtasks(objective, day)]
    records = completions_for_day(store, user_id, day, active_ids)
    return objectives, records, day_agenda(objectives, records, day)
