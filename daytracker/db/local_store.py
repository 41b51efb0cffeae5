"""
SQLite-backed store for demo mode and tests.

Speaks the same table/filter vocabulary as the hosted PostgREST endpoint and
returns rows the way PostgREST serialises them (dates as ISO strings).
"""
from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any, Sequence

from loguru import logger
from sqlalchemy import Date, DateTime, Engine, Table, delete, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from daytracker.db.models import Base
from daytracker.db.session import get_session
from daytracker.db.store import Filter, Order, Row, StoreError


def _to_python(column, value: Any) -> Any:
    if value is None or not isinstance(value, str):
        return value
    if isinstance(column.type, DateTime):
        raw = value[:-1] + "+00:00" if value.endswith("Z") else value
        return datetime.fromisoformat(raw)
    if isinstance(column.type, Date):
        return date.fromisoformat(value[:10])
    return value


def _to_json(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class LocalStore:
    def __init__(self, engine: Engine, *, user_id: str) -> None:
        self.engine = engine
        self.user_id = user_id

    def current_user_id(self) -> str:
        return self.user_id

    def _table(self, name: str) -> Table:
        table = Base.metadata.tables.get(name)
        if table is None:
            raise StoreError(f"Unknown table: {name}")
        return table

    def _where(self, table: Table, filters: Sequence[Filter]) -> list:
        clauses = []
        for f in filters:
            if f.column not in table.c:
                raise StoreError(f"Unknown column: {table.name}.{f.column}")
            column = table.c[f.column]
            if f.op == "eq":
                clauses.append(column == _to_python(column, f.value))
            elif f.op == "in":
                clauses.append(column.in_([_to_python(column, v) for v in f.value]))
            elif f.op == "gte":
                clauses.append(column >= _to_python(column, f.value))
            elif f.op == "lte":
                clauses.append(column <= _to_python(column, f.value))
            elif f.op == "is":
                clauses.append(column.is_(None))
            else:
                raise StoreError(f"Unsupported filter operator: {f.op}")
        return clauses

    def _prepare(self, table: Table, row: Row) -> Row:
        prepared = {}
        for key, value in row.items():
            if key not in table.c:
                raise StoreError(f"Unknown column: {table.name}.{key}")
            prepared[key] = _to_python(table.c[key], value)
        prepared.setdefault("id", str(uuid.uuid4()))
        if "created_at" in table.c:
            prepared.setdefault("created_at", datetime.now(timezone.utc))
        return prepared

    @staticmethod
    def _rows(result) -> list[Row]:
        return [{key: _to_json(value) for key, value in row._mapping.items()} for row in result]

    def select(self, table: str, filters: Sequence[Filter] = (), order: Sequence[Order] = ()) -> list[Row]:
        t = self._table(table)
        stmt = select(t).where(*self._where(t, filters))
        for column, ascending in order:
            stmt = stmt.order_by(t.c[column].asc() if ascending else t.c[column].desc())
        try:
            with get_session(self.engine) as session:
                return self._rows(session.execute(stmt))
        except SQLAlchemyError as exc:
            logger.error("local select failed table={} err={}", table, exc)
            raise StoreError(f"select {table} failed") from exc

    def insert(self, table: str, rows: list[Row], *, on_conflict: Sequence[str] | None = None) -> list[Row]:
        """Insert all rows in one transaction; with ``on_conflict`` duplicates are skipped."""
        if not rows:
            return []
        t = self._table(table)
        prepared = [self._prepare(t, row) for row in rows]
        stmt = sqlite_insert(t)
        if on_conflict:
            stmt = stmt.on_conflict_do_nothing(index_elements=list(on_conflict))
        ids = [row["id"] for row in prepared]
        try:
            with get_session(self.engine) as session:
                session.execute(stmt, prepared)
                found = self._rows(session.execute(select(t).where(t.c.id.in_(ids))))
        except SQLAlchemyError as exc:
            logger.error("local insert failed table={} rows={} err={}", table, len(rows), exc)
            raise StoreError(f"insert {table} failed") from exc
        by_id = {row["id"]: row for row in found}
        return [by_id[i] for i in ids if i in by_id]

    def update(self, table: str, values: Row, filters: Sequence[Filter]) -> list[Row]:
        t = self._table(table)
        where = self._where(t, filters)
        prepared = {}
        for key, value in values.items():
            if key not in t.c:
                raise StoreError(f"Unknown column: {t.name}.{key}")
            prepared[key] = _to_python(t.c[key], value)
        try:
            with get_session(self.engine) as session:
                session.execute(update(t).where(*where).values(**prepared))
                return self._rows(session.execute(select(t).where(*where)))
        except SQLAlchemyError as exc:
            logger.error("local update failed table={} err={}", table, exc)
            raise StoreError(f"update {table} failed") from exc

    def delete(self, table: str, filters: Sequence[Filter]) -> None:
        t = self._table(table)
        if not filters:
            raise StoreError("delete without filters")
        try:
            with get_session(self.engine) as session:
                session.execute(delete(t).where(*self._where(t, filters)))
        except SQLAlchemyError as exc:
            logger.error("local delete failed table={} err={}", table, exc)
            raise StoreError(f"delete {table} failed") from exc
