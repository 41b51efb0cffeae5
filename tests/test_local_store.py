from pathlib import Path

import pytest

from daytracker.db.local_store import LocalStore
from daytracker.db.session import build_engine
from daytracker.db.store import (
    OBJECTIVE_SUBTASKS,
    OBJECTIVE_TASKS,
    OBJECTIVES,
    SUBTASK_COMPLETIONS,
    TODOS,
    StoreError,
    eq,
    gte,
    in_,
    is_null,
)


def _store(tmp_path: Path) -> LocalStore:
    return LocalStore(build_engine(str(tmp_path / "local.db")), user_id="u1")


def _todo(title: str, day: str = "2025-01-01", parent_id: str | None = None) -> dict:
    return {"title": title, "task_date": day, "user_id": "u1", "parent_id": parent_id}


def test_insert_returns_rows_as_json(tmp_path: Path) -> None:
    store = _store(tmp_path)
    rows = store.insert(TODOS, [_todo("a"), _todo("b", "2025-01-02")])

    assert [row["title"] for row in rows] == ["a", "b"]
    assert rows[1]["task_date"] == "2025-01-02"
    assert rows[0]["done"] is False
    assert len(rows[0]["id"]) == 36


def test_filters_and_order(tmp_path: Path) -> None:
    store = _store(tmp_path)
    parent = store.insert(TODOS, [_todo("b"), _todo("a"), _todo("c", "2025-02-01")])[0]
    store.insert(TODOS, [_todo("child", parent_id=parent["id"])])

    roots = store.select(TODOS, [eq("user_id", "u1"), is_null("parent_id")], order=[("title", True)])
    assert [row["title"] for row in roots] == ["a", "b", "c"]

    later = store.select(TODOS, [gte("task_date", "2025-01-15")])
    assert [row["title"] for row in later] == ["c"]

    picked = store.select(TODOS, [in_("title", ["a", "child"])], order=[("title", False)])
    assert [row["title"] for row in picked] == ["child", "a"]


def test_update_returns_changed_rows(tmp_path: Path) -> None:
    store = _store(tmp_path)
    row = store.insert(TODOS, [_todo("a")])[0]

    updated = store.update(TODOS, {"done": True}, [eq("id", row["id"])])
    assert updated[0]["done"] is True
    assert store.update(TODOS, {"done": True}, [eq("id", "nope")]) == []


def test_deleting_parent_cascades(tmp_path: Path) -> None:
    store = _store(tmp_path)
    parent = store.insert(TODOS, [_todo("parent")])[0]
    store.insert(TODOS, [_todo("child", parent_id=parent["id"])])

    store.delete(TODOS, [eq("id", parent["id"])])
    assert store.select(TODOS) == []


def test_failed_batch_writes_nothing(tmp_path: Path) -> None:
    store = _store(tmp_path)
    rows = [_todo("day 1"), _todo(None, "2025-01-02"), _todo("day 3", "2025-01-03")]

    with pytest.raises(StoreError):
        store.insert(TODOS, rows)
    assert store.select(TODOS) == []


def test_duplicate_completion_is_ignored(tmp_path: Path) -> None:
    store = _store(tmp_path)
    objective = store.insert(OBJECTIVES, [{"title": "o", "start_date": "2025-01-01", "user_id": "u1"}])[0]
    task = store.insert(OBJECTIVE_TASKS, [{"objective_id": objective["id"], "title": "t", "category": "c"}])[0]
    subtask = store.insert(OBJECTIVE_SUBTASKS, [{"task_id": task["id"], "title": "s", "duration_days": 3}])[0]
    record = {"subtask_id": subtask["id"], "user_id": "u1", "completion_date": "2025-01-01"}

    store.insert(SUBTASK_COMPLETIONS, [record], on_conflict=("subtask_id", "completion_date"))
    again = store.insert(SUBTASK_COMPLETIONS, [record], on_conflict=("subtask_id", "completion_date"))

    assert again == []
    assert len(store.select(SUBTASK_COMPLETIONS)) == 1

    store.delete(OBJECTIVES, [eq("id", objective["id"])])
    assert store.select(SUBTASK_COMPLETIONS) == []


def test_unknown_names_raise(tmp_path: Path) -> None:
    store = _store(tmp_path)
    with pytest.raises(StoreError):
        store.select("nope")
    with pytest.raises(StoreError):
        store.select(TODOS, [eq("nope", 1)])
    with pytest.raises(StoreError):
        store.delete(TODOS, [])


def test_update_unknown_column_raises(tmp_path: Path) -> None:
    store = _store(tmp_path)
    row = store.insert(TODOS, [_todo("a")])[0]
    with pytest.raises(StoreError):
        store.update(TODOS, {"nope": 1}, [eq("id", row["id"])])
