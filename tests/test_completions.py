from datetime import date

from daytracker.core.completions import completed_subtask_ids, day_agenda, toggle_completion
from daytracker.core.models import Objective, ObjectiveSubtask, ObjectiveTask, SubtaskCompletion

DAY = date(2025, 1, 2)


def _objective() -> Objective:
    subtasks = [
        ObjectiveSubtask(id="stretch", task_id="t1", title="Stretch", phase_order=1, duration_days=3),
        ObjectiveSubtask(id="run", task_id="t1", title="Run", phase_order=2, duration_days=3),
    ]
    task = ObjectiveTask(id="t1", objective_id="o1", title="Move", category="Health", subtasks=subtasks)
    return Objective(id="o1", user_id="u1", title="Get fit", start_date=date(2025, 1, 1), tasks=[task])


def test_toggle_on_then_off_restores_state() -> None:
    before = [SubtaskCompletion(subtask_id="other", user_id="u1", completion_date=DAY)]

    on = toggle_completion(before, subtask_id="stretch", user_id="u1", day=DAY, completed=True)
    assert completed_subtask_ids(on, DAY) == {"other", "stretch"}

    off = toggle_completion(on, subtask_id="stretch", user_id="u1", day=DAY, completed=False)
    assert off == before


def test_toggle_on_twice_keeps_one_record() -> None:
    once = toggle_completion([], subtask_id="stretch", user_id="u1", day=DAY, completed=True)
    twice = toggle_completion(once, subtask_id="stretch", user_id="u1", day="2025-01-02", completed=True)
    assert len(twice) == 1


def test_completion_is_per_day() -> None:
    records = [SubtaskCompletion(subtask_id="stretch", user_id="u1", completion_date=date(2025, 1, 1))]
    assert completed_subtask_ids(records, DAY) == set()


def test_day_agenda_lists_active_subtasks_with_state() -> None:
    records = [SubtaskCompletion(subtask_id="stretch", user_id="u1", completion_date=DAY)]
    entries = day_agenda([_objective()], records, DAY)

    assert [(e.subtask.id, e.completed) for e in entries] == [("stretch", True)]
    payload = entries[0].to_dict()
    assert payload["objective_title"] == "Get fit"
    assert payload["task_category"] == "Health"

    later = day_agenda([_objective()], records, date(2025, 1, 4))
    assert [(e.subtask.id, e.completed) for e in later] == [("run", False)]
