from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterator

from fastapi import Depends, Header, HTTPException
from loguru import logger

from daytracker.config import settings
from daytracker.core.dates import ScheduleError, coerce_date, month_start, today_local
from daytracker.core.streak import StreakStore
from daytracker.db.store import RowNotFound, Store, StoreError, open_store


def get_store(authorization: str | None = Header(default=None)) -> Store:
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip() or None
    try:
        return open_store(token)
    except PermissionError as exc:
        raise HTTPException(status_code=401, detail="Not authenticated") from exc


def get_user_id(store: Store = Depends(get_store)) -> str:
    try:
        return store.current_user_id()
    except StoreError as exc:
        logger.warning("user lookup failed err={}", exc)
        raise HTTPException(status_code=401, detail="Not authenticated") from exc


def get_today() -> date:
    return today_local(settings.timezone)


def get_streak_store() -> StreakStore:
    return StreakStore(settings.streak_path)


def parse_day(value: str | None, default: date, name: str = "date") -> date:
    if value is None or not value.strip():
        return default
    try:
        return coerce_date(value, field=name)
    except ScheduleError as exc:
        raise HTTPException(status_code=400, detail=f"{name} must be YYYY-MM-DD") from exc


@contextmanager
def surface_errors(user_message: str) -> Iterator[None]:
    """Map repository failures to HTTP errors; store failures get a generic message."""
    try:
        yield
    except RowNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except StoreError as exc:
        logger.exception("store call failed: {}", user_message)
        raise HTTPException(status_code=502, detail=user_message) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def parse_month(value: str | None, default: date) -> date:
    """First day of the month named by ``YYYY-MM`` or any date inside it."""
    if value is not None and len(value.strip()) == 7:
        value = value.strip() + "-01"
    return month_start(parse_day(value, default, "month"))
