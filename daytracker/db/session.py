from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Iterator

from loguru import logger
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from daytracker.config import settings
from daytracker.db.models import Base


def _resolve_path(sqlite_path: str | None = None) -> Path:
    db_path = Path(sqlite_path or settings.sqlite_path)
    if not db_path.is_absolute():
        db_path = Path.cwd() / db_path
    return db_path.resolve()


def build_database_url(sqlite_path: str | None = None) -> str:
    return f"sqlite+pysqlite:///{_resolve_path(sqlite_path).as_posix()}"


def _set_sqlite_pragma(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(sqlite_path: str | None = None) -> Engine:
    _resolve_path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)
    url = build_database_url(sqlite_path)
    engine = create_engine(url, future=True)
    event.listen(engine, "connect", _set_sqlite_pragma)
    Base.metadata.create_all(engine)
    logger.info("local store ready url={}", url)
    return engine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return build_engine()


@contextmanager
def get_session(engine: Engine) -> Iterator[Session]:
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
