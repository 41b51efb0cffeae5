from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from daytracker.db.local_store import LocalStore
from daytracker.db.repositories import goals_repo, objectives_repo, summary_repo, todos_repo
from daytracker.db.session import build_engine
from daytracker.db.store import RowNotFound

TODAY = date(2025, 1, 10)


def _store(tmp_path: Path) -> LocalStore:
    return LocalStore(build_engine(str(tmp_path / "repo.db")), user_id="u1")


def test_recurring_todo_creates_series(tmp_path: Path) -> None:
    store = _store(tmp_path)
    created = todos_repo.add_todo(store, user_id="u1", title=" Run ", today=TODAY, category="Health", repeat_days=3)

    assert [t.task_date for t in created] == [date(2025, 1, 10), date(2025, 1, 11), date(2025, 1, 12)]
    assert {t.recurrence.series_id for t in created} == {created[0].recurrence.series_id}
    assert created[0].title == "Run"
    assert len(todos_repo.list_for_day(store, "u1", date(2025, 1, 11))) == 1


def test_blank_title_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        todos_repo.add_todo(_store(tmp_path), user_id="u1", title="   ", today=TODAY)


def test_subtask_rules(tmp_path: Path) -> None:
    store = _store(tmp_path)
    parent = todos_repo.add_todo(store, user_id="u1", title="Clean", today=TODAY)[0]
    child = todos_repo.add_subtask(store, user_id="u1", parent_id=parent.id, title="Kitchen")

    assert child.task_date == parent.task_date
    with pytest.raises(ValueError):
        todos_repo.add_subtask(store, user_id="u1", parent_id=child.id, title="Sink")
    with pytest.raises(ValueError):
        todos_repo.set_done(store, parent.id, True)
    with pytest.raises(RowNotFound):
        todos_repo.add_subtask(store, user_id="u1", parent_id="missing", title="x")


def test_day_board_counts_parents_through_subtasks(tmp_path: Path) -> None:
    store = _store(tmp_path)
    parent = todos_repo.add_todo(store, user_id="u1", title="Clean", today=TODAY)[0]
    child = todos_repo.add_subtask(store, user_id="u1", parent_id=parent.id, title="Kitchen")

    board = todos_repo.day_board(store, "u1", TODAY)
    assert (board.completed, board.total, board.all_done) == (0, 2, False)

    todos_repo.set_done(store, child.id, True)
    board = todos_repo.day_board(store, "u1", TODAY)
    assert (board.completed, board.total, board.all_done) == (2, 2, True)
    assert [node.item.id for node in board.forest] == [parent.id]


def test_delete_todo_removes_subtasks(tmp_path: Path) -> None:
    store = _store(tmp_path)
    parent = todos_repo.add_todo(store, user_id="u1", title="Clean", today=TODAY)[0]
    todos_repo.add_subtask(store, user_id="u1", parent_id=parent.id, title="Kitchen")

    todos_repo.delete(store, parent.id)
    assert todos_repo.list_for_day(store, "u1", TODAY) == []


def test_goal_done_stamps_completion(tmp_path: Path) -> None:
    store = _store(tmp_path)
    goal = goals_repo.add_goal(store, user_id="u1", title="Save money", month=TODAY)
    assert goal.target_month == date(2025, 1, 1)

    stamp = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)
    done = goals_repo.set_done(store, goal.id, True, now=stamp)
    assert done.done is True
    assert done.completed_at is not None

    undone = goals_repo.set_done(store, goal.id, False)
    assert undone.completed_at is None


def test_subgoal_rules(tmp_path: Path) -> None:
    store = _store(tmp_path)
    goal = goals_repo.add_goal(store, user_id="u1", title="Fitness", month=TODAY)
    sub = goals_repo.add_subgoal(store, user_id="u1", parent_id=goal.id, title="10k")

    forest = goals_repo.list_for_month(store, "u1", date(2025, 1, 20))
    assert [node.item.id for node in forest] == [goal.id]
    assert [child.id for child in forest[0].children] == [sub.id]
    assert forest[0].done is False

    with pytest.raises(ValueError):
        goals_repo.set_done(store, goal.id, True)

    other = goals_repo.add_goal(store, user_id="u1", title="Done already", month=TODAY)
    goals_repo.set_done(store, other.id, True)
    with pytest.raises(ValueError):
        goals_repo.add_subgoal(store, user_id="u1", parent_id=other.id, title="late")


def test_objective_details_and_agenda(tmp_path: Path) -> None:
    store = _store(tmp_path)
    objective = objectives_repo.add_objective(store, user_id="u1", title="Marathon", start_date=date(2025, 1, 1))
    task = objectives_repo.add_task(store, objective_id=objective.id, title="Running", category="Health")
    first = objectives_repo.add_subtask(store, task_id=task.id, title="Base", phase_order=1, duration_days=5)
    second = objectives_repo.add_subtask(store, task_id=task.id, title="Tempo", phase_order=2, duration_days=4)

    objectives = objectives_repo.fetch_objectives_with_details(store, "u1")
    assert [s.id for s in objectives[0].tasks[0].subtasks] == [first.id, second.id]

    _objectives, records, agenda = objectives_repo.agenda_for_day(store, "u1", date(2025, 1, 3))
    assert records == []
    assert [(e.subtask.id, e.completed) for e in agenda] == [(first.id, False)]

    for _ in range(2):
        objectives_repo.set_subtask_completion(
            store, user_id="u1", subtask_id=first.id, day=date(2025, 1, 3), completed=True
        )
    _objectives, records, agenda = objectives_repo.agenda_for_day(store, "u1", date(2025, 1, 3))
    assert len(records) == 1
    assert agenda[0].completed is True

    objectives_repo.set_subtask_completion(
        store, user_id="u1", subtask_id=first.id, day=date(2025, 1, 3), completed=False
    )
    _objectives, records, _agenda = objectives_repo.agenda_for_day(store, "u1", date(2025, 1, 3))
    assert records == []


def test_objective_input_validation(tmp_path: Path) -> None:
    store = _store(tmp_path)
    objective = objectives_repo.add_objective(store, user_id="u1", title="Marathon", start_date=TODAY)
    task = objectives_repo.add_task(store, objective_id=objective.id, title="Running", category="Health")

    with pytest.raises(ValueError):
        objectives_repo.add_task(store, objective_id=objective.id, title="Swim", category=" ")
    with pytest.raises(ValueError):
        objectives_repo.add_subtask(store, task_id=task.id, title="Base", duration_days=0)
    with pytest.raises(RowNotFound):
        objectives_repo.add_task(store, objective_id="missing", title="x", category="y")


def test_monthly_summary_counts_done_roots(tmp_path: Path) -> None:
    store = _store(tmp_path)
    for day in (date(2025, 1, 2), date(2025, 1, 5)):
        todo = todos_repo.add_todo(store, user_id="u1", title="Gym", today=day)[0]
        todos_repo.set_done(store, todo.id, True)
    todos_repo.add_todo(store, user_id="u1", title="Gym", today=date(2025, 1, 6))
    outside = todos_repo.add_todo(store, user_id="u1", title="Gym", today=date(2025, 2, 1))[0]
    todos_repo.set_done(store, outside.id, True)

    summary = summary_repo.monthly_completion(store, "u1", date(2025, 1, 15))
    assert [(s.title, s.count, s.last_completed) for s in summary] == [("Gym", 2, date(2025, 1, 5))]


def test_recurring_overview(tmp_path: Path) -> None:
    store = _store(tmp_path)
    created = todos_repo.add_todo(store, user_id="u1", title="Stretch", today=TODAY, repeat_days=3)
    todos_repo.set_done(store, created[0].id, True)
    todos_repo.add_todo(store, user_id="u1", title="One-off", today=TODAY)

    categories = summary_repo.recurring_overview(store, "u1", TODAY, date(2025, 1, 12))
    assert [c.category for c in categories] == ["Uncategorized"]
    series = categories[0].series[0]
    assert (series.title, series.completed, series.total) == ("Stretch", 1, 3)
    with pytest.raises(ValueError):
        summary_repo.recurring_overview(store, "u1", TODAY, date(2025, 1, 1))


def test_completion_for_unknown_subtask(tmp_path: Path) -> None:
    store = _store(tmp_path)
    with pytest.raises(RowNotFound):
        objectives_repo.set_subtask_completion(
            store, user_id="u1", subtask_id="missing", day=TODAY, completed=True
        )
