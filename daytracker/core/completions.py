from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable

from daytracker.core.dates import coerce_date
from daytracker.core.models import Objective, ObjectiveSubtask, SubtaskCompletion
from daytracker.core.phases import iter_active


@dataclass(slots=True, frozen=True)
class AgendaEntry:
    subtask: ObjectiveSubtask
    task_title: str
    task_category: str
    objective_title: str
    completed: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "subtask": self.subtask.to_dict(),
            "task_title": self.task_title,
            "task_category": self.task_category,
            "objective_title": self.objective_title,
            "completed": self.completed,
        }


def completed_subtask_ids(records: Iterable[SubtaskCompletion], day: date | datetime | str) -> set[str]:
    target = coerce_date(day)
    return {r.subtask_id for r in records if r.completion_date == target}


def toggle_completion(
    records: Iterable[SubtaskCompletion],
    *,
    subtask_id: str,
    user_id: str,
    day: date | datetime | str,
    completed: bool,
) -> list[SubtaskCompletion]:
    """Return ``records`` with the (subtask, day) record present or absent."""
    target = coerce_date(day)
    key = (subtask_id, target)
    out = [r for r in records if r.key != key]
    if completed:
        out.append(SubtaskCompletion(subtask_id=subtask_id, user_id=user_id, completion_date=target))
    return out


def day_agenda(
    objectives: Iterable[Objective],
    records: Iterable[SubtaskCompletion],
    day: date | datetime | str,
) -> list[AgendaEntry]:
    target = coerce_date(day)
    done_ids = completed_subtask_ids(records, target)
    entries: list[AgendaEntry] = []
    for objective in objectives:
        for task, subtask in iter_active(objective, target):
            entries.append(
                AgendaEntry(
                    subtask=subtask,
                    task_title=task.title,
                    task_category=task.category,
                    objective_title=objective.title,
                    completed=subtask.id in done_ids,
                )
            )
    return entries
