from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence

Row = dict[str, Any]

TODOS = "todos"
GOALS = "goals"
OBJECTIVES = "objectives"
OBJECTIVE_TASKS = "objective_tasks"
OBJECTIVE_SUBTASKS = "objective_subtasks"
SUBTASK_COMPLETIONS = "objective_subtask_completions"


class StoreError(Exception):
    """A read or write against the task store failed."""


class RowNotFound(ValueError):
    pass


@dataclass(slots=True, frozen=True)
class Filter:
    column: str
    op: str
    value: Any = None


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def in_(column: str, values: Sequence[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def is_null(column: str) -> Filter:
    return Filter(column, "is", None)


# (column, ascending)
Order = tuple[str, bool]


class Store(Protocol):
    def select(self, table: str, filters: Sequence[Filter] = (), order: Sequence[Order] = ()) -> list[Row]: ...

    def insert(self, table: str, rows: list[Row], *, on_conflict: Sequence[str] | None = None) -> list[Row]: ...

    def update(self, table: str, values: Row, filters: Sequence[Filter]) -> list[Row]: ...

    def delete(self, table: str, filters: Sequence[Filter]) -> None: ...

    def current_user_id(self) -> str: ...


def open_store(access_token: str | None = None) -> Store:
    """Remote store when the hosted backend is configured, local demo store otherwise."""
    from daytracker.config import settings

    if settings.remote_enabled:
        from daytracker.db.rest_store import RestStore

        if not access_token:
            raise PermissionError("Access token required")
        return RestStore(
            base_url=settings.supabase_url,
            anon_key=settings.supabase_anon_key,
            access_token=access_token,
            timeout=settings.request_timeout_sec,
        )

    from daytracker.db.local_store import LocalStore
    from daytracker.db.session import get_engine

    return LocalStore(get_engine(), user_id=settings.demo_user_id)
