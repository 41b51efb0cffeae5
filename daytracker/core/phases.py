"""
Phase scheduling for objectives.

Subtasks of one task are grouped by ``phase_order``. Phases run one after
another starting on the objective's start date; members of a phase run in
parallel and the phase lasts as long as its longest member. Tasks of an
objective run side by side, so the objective lasts as long as its longest task.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterator

from daytracker.core.dates import ScheduleError, coerce_date, days_between
from daytracker.core.models import Objective, ObjectiveSubtask, ObjectiveTask


@dataclass(slots=True, frozen=True)
class PhaseWindow:
    phase: int
    start_day: int
    length: int
    subtasks: tuple[ObjectiveSubtask, ...]

    @property
    def end_day(self) -> int:
        return self.start_day + self.length

    def contains(self, elapsed: int) -> bool:
        return self.start_day <= elapsed < self.end_day


@dataclass(slots=True, frozen=True)
class ObjectiveProgress:
    duration_days: int
    days_elapsed: int
    percent: float


def _check_duration(subtask: ObjectiveSubtask) -> int:
    duration = subtask.duration_days
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        raise ScheduleError(f"Subtask {subtask.id} has invalid duration_days={duration!r}")
    return duration


def phase_windows(task: ObjectiveTask) -> list[PhaseWindow]:
    groups: dict[int, list[ObjectiveSubtask]] = {}
    for subtask in task.subtasks:
        _check_duration(subtask)
        groups.setdefault(int(subtask.phase_order), []).append(subtask)

    windows: list[PhaseWindow] = []
    start_day = 0
    for phase in sorted(groups):
        members = groups[phase]
        length = max(s.duration_days for s in members)
        windows.append(PhaseWindow(phase=phase, start_day=start_day, length=length, subtasks=tuple(members)))
        start_day += length
    return windows


def task_duration(task: ObjectiveTask) -> int:
    return sum(w.length for w in phase_windows(task))


def objective_duration(objective: Objective) -> int:
    return max((task_duration(task) for task in objective.tasks), default=0)


def elapsed_days(start: date | str, target: date | datetime | str) -> int:
    return days_between(coerce_date(start, field="start_date"), coerce_date(target, field="target_date"))


def iter_active(objective: Objective, target_date: date | datetime | str) -> Iterator[tuple[ObjectiveTask, ObjectiveSubtask]]:
    elapsed = elapsed_days(objective.start_date, target_date)
    if elapsed < 0:
        return
    for task in objective.tasks:
        for window in phase_windows(task):
            if not window.contains(elapsed):
                continue
            day_in_phase = elapsed - window.start_day
            for subtask in window.subtasks:
                if day_in_phase < subtask.duration_days:
                    yield task, subtask


def active_subtasks(objective: Objective, target_date: date | datetime | str) -> list[ObjectiveSubtask]:
    seen: set[str] = set()
    out: list[ObjectiveSubtask] = []
    for _task, subtask in iter_active(objective, target_date):
        if subtask.id in seen:
            continue
        seen.add(subtask.id)
        out.append(subtask)
    return out


def objective_progress(objective: Objective, today: date | datetime | str) -> ObjectiveProgress:
    duration = objective_duration(objective)
    elapsed = max(0, elapsed_days(objective.start_date, today))
    percent = min(100.0, elapsed / duration * 100) if duration > 0 else 0.0
    return ObjectiveProgress(duration_days=duration, days_elapsed=elapsed, percent=round(percent, 1))


def tasks_by_category(objective: Objective) -> dict[str, list[ObjectiveTask]]:
    grouped: dict[str, list[ObjectiveTask]] = {}
    for task in objective.tasks:
        grouped.setdefault(task.category, []).append(task)
    return grouped
