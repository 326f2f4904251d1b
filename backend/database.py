from __future__ import annotations
import logging
import time
from typing import Any, Callable, Literal, Optional, TypeVar

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DisconnectionError, OperationalError
from sqlalchemy.pool import StaticPool

from backend.tables import metadata

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./catalog.db"
    BASE_SIZE: int = 100
    DEFAULT_RATING: float = 4.3
    ITEM_LIST_VARIANTS: Literal["preview", "all"] = "preview"
    DB_STATEMENT_TIMEOUT: float = 10
    DB_RETRY_ATTEMPTS: int = 3
    DB_RETRY_BACKOFF: float = 0.2
    CREATE_TABLES: bool = True
    LOG_LEVEL: str = "INFO"
    PORT: int = 8000

settings = Settings()

_engine: Optional[Engine] = None


def _connect_args(url: str) -> dict[str, Any]:
    """Driver options that bound how long a single statement may run."""
    timeout = settings.DB_STATEMENT_TIMEOUT
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": timeout}
    if url.startswith("mysql"):
        seconds = int(timeout)
        return {"connect_timeout": seconds, "read_timeout": seconds, "write_timeout": seconds}
    if url.startswith("postgresql"):
        return {"connect_timeout": int(timeout), "options": f"-c statement_timeout={int(timeout * 1000)}"}
    return {}


def _build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": _connect_args(url)}
        # in-memory databases live as long as their single connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.execute(f"PRAGMA busy_timeout={int(settings.DB_STATEMENT_TIMEOUT * 1000)}")
            cur.close()

        return engine

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_timeout=int(settings.DB_STATEMENT_TIMEOUT),
        connect_args=_connect_args(url),
    )


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = _build_engine(settings.DATABASE_URL)
    return _engine


def configure(url: str) -> Engine:
    """Replace the process-wide engine, e.g. to point tests at another database."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    settings.DATABASE_URL = url
    _engine = _build_engine(url)
    return _engine


def init_db() -> None:
    metadata.create_all(get_engine())


def table_names() -> list[str]:
    return inspect(get_engine()).get_table_names()


def with_retry(work: Callable[[], T]) -> T:
    """Run ``work``, retrying transient connection failures a bounded number of times."""
    attempts = max(1, settings.DB_RETRY_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        try:
            return work()
        except (OperationalError, DisconnectionError) as e:
            if attempt == attempts:
                raise
            logger.warning("Database call failed (attempt %d/%d): %s", attempt, attempts, e)
            time.sleep(settings.DB_RETRY_BACKOFF * attempt)
    raise AssertionError("unreachable")


def fetch_all(stmt) -> list[dict[str, Any]]:
    def work():
        with get_engine().connect() as conn:
            return [dict(row) for row in conn.execute(stmt).mappings()]
    return with_retry(work)


def fetch_one(stmt) -> Optional[dict[str, Any]]:
    rows = fetch_all(stmt)
    return rows[0] if rows else None


def execute(stmt) -> int:
    """Execute a single write in its own transaction and return the affected row count."""
    def work():
        with get_engine().begin() as conn:
            return conn.execute(stmt).rowcount
    return with_retry(work)


def insert_returning_id(stmt) -> int:
    def work():
        with get_engine().begin() as conn:
            return conn.execute(stmt).inserted_primary_key[0]
    return with_retry(work)


def transaction(work: Callable[[Connection], T]) -> T:
    """Run ``work(conn)`` atomically: every statement commits together or none do."""
    def run():
        with get_engine().begin() as conn:
            return work(conn)
    return with_retry(run)
