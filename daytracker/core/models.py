from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Union

from daytracker.core.dates import coerce_date, parse_timestamp


@dataclass(slots=True, frozen=True)
class Root:
    """Top-level item, no parent."""


@dataclass(slots=True, frozen=True)
class ChildOf:
    parent_id: str


ParentRef = Union[Root, ChildOf]

ROOT = Root()


def parent_ref(parent_id: str | None) -> ParentRef:
    if parent_id:
        return ChildOf(str(parent_id))
    return ROOT


def parent_id_of(parent: ParentRef) -> str | None:
    if isinstance(parent, ChildOf):
        return parent.parent_id
    return None


@dataclass(slots=True, frozen=True)
class Recurrence:
    repeat_days: int
    start_date: date
    series_id: str


@dataclass(slots=True)
class Todo:
    id: str
    user_id: str
    title: str
    done: bool
    task_date: date
    parent: ParentRef = ROOT
    category: str | None = None
    recurrence: Recurrence | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Todo":
        recurrence = None
        series_id = row.get("template_id")
        if series_id and int(row.get("repeat_days") or 0) > 0:
            recurrence = Recurrence(
                repeat_days=int(row["repeat_days"]),
                start_date=coerce_date(row.get("repeat_start_date") or row["task_date"]),
                series_id=str(series_id),
            )
        return cls(
            id=str(row["id"]),
            user_id=str(row.get("user_id") or ""),
            title=str(row.get("title") or ""),
            done=bool(row.get("done")),
            task_date=coerce_date(row["task_date"], field="task_date"),
            parent=parent_ref(row.get("parent_id")),
            category=row.get("category") or None,
            recurrence=recurrence,
            created_at=parse_timestamp(row.get("created_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "done": self.done,
            "task_date": self.task_date.isoformat(),
            "parent_id": parent_id_of(self.parent),
            "category": self.category,
            "repeat_days": self.recurrence.repeat_days if self.recurrence else 0,
            "series_id": self.recurrence.series_id if self.recurrence else None,
        }


@dataclass(slots=True)
class Goal:
    id: str
    user_id: str
    title: str
    done: bool
    target_month: date
    parent: ParentRef = ROOT
    completed_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Goal":
        return cls(
            id=str(row["id"]),
            user_id=str(row.get("user_id") or ""),
            title=str(row.get("title") or ""),
            done=bool(row.get("done")),
            target_month=coerce_date(row["target_month"], field="target_month"),
            parent=parent_ref(row.get("parent_id")),
            completed_at=parse_timestamp(row.get("completed_at")),
            created_at=parse_timestamp(row.get("created_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "done": self.done,
            "target_month": self.target_month.isoformat(),
            "parent_id": parent_id_of(self.parent),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass(slots=True)
class ObjectiveSubtask:
    id: str
    task_id: str
    title: str
    phase_order: int
    duration_days: int
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ObjectiveSubtask":
        return cls(
            id=str(row["id"]),
            task_id=str(row["task_id"]),
            title=str(row.get("title") or ""),
            phase_order=int(row.get("phase_order") or 1),
            duration_days=int(row["duration_days"]),
            created_at=parse_timestamp(row.get("created_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "title": self.title,
            "phase_order": self.phase_order,
            "duration_days": self.duration_days,
        }


@dataclass(slots=True)
class ObjectiveTask:
    id: str
    objective_id: str
    title: str
    category: str
    subtasks: list[ObjectiveSubtask] = field(default_factory=list)
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ObjectiveTask":
        return cls(
            id=str(row["id"]),
            objective_id=str(row["objective_id"]),
            title=str(row.get("title") or ""),
            category=str(row.get("category") or ""),
            created_at=parse_timestamp(row.get("created_at")),
        )


@dataclass(slots=True)
class Objective:
    id: str
    user_id: str
    title: str
    start_date: date
    tasks: list[ObjectiveTask] = field(default_factory=list)
    completed_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Objective":
        return cls(
            id=str(row["id"]),
            user_id=str(row.get("user_id") or ""),
            title=str(row.get("title") or ""),
            start_date=coerce_date(row["start_date"], field="start_date"),
            completed_at=parse_timestamp(row.get("completed_at")),
            created_at=parse_timestamp(row.get("created_at")),
        )


@dataclass(slots=True, frozen=True)
class SubtaskCompletion:
    subtask_id: str
    user_id: str
    completion_date: date

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SubtaskCompletion":
        return cls(
            subtask_id=str(row["subtask_id"]),
            user_id=str(row.get("user_id") or ""),
            completion_date=coerce_date(row["completion_date"], field="completion_date"),
        )

    @property
    def key(self) -> tuple[str, date]:
        return self.subtask_id, self.completion_date
