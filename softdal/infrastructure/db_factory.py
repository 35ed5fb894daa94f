"""
Database connection factory utilities for softdal.

Builds the connection pool for the configured backend (a psycopg_pool
ConnectionPool for PostgreSQL, a SQLitePool for SQLite) and hands out
`DataAccess` clients wired to it. The PoolManager singleton ensures pools
are closed on application exit.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

import atexit
import threading
from typing import Any, Optional

import psycopg
from psycopg import Connection
from psycopg_pool import ConnectionPool, PoolTimeout
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from softdal.client import DataAccess
from softdal.config import Settings, get_settings
from softdal.infrastructure.pool import ConnectionPool as PoolProtocol
from softdal.infrastructure.sqlite_pool import SQLitePool
from softdal.sql.dialect import dialect_for
from softdal.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings; DATABASE_URL wins when set."""
    settings = settings or get_settings()
    if settings.database_url:
        return settings.database_url
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def make_connection_configurer(statement_timeout_ms: int):
    """
    Return a psycopg_pool `configure` callback applying the statement timeout
    to every new connection. A timeout of 0 leaves the server default.
    """

    def configure(conn: Connection) -> None:
        if statement_timeout_ms > 0:
            conn.execute(f"SET statement_timeout = {int(statement_timeout_ms)}")
        # the pool requires connections to be returned idle
        conn.commit()

    return configure


def open_postgres_pool(settings: Settings) -> ConnectionPool:
    """
    Open a psycopg pool and wait until `min_size` connections are ready.

    Waiting is retried with exponential backoff so a database that is still
    starting (docker compose, CI services) does not fail the first call.

    Raises
    ------
    psycopg_pool.PoolTimeout or psycopg.OperationalError
        If the database is still unreachable after all attempts.
    """
    pool = ConnectionPool(
        conninfo=build_dsn(settings),
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        timeout=settings.pool_timeout_seconds,
        configure=make_connection_configurer(settings.statement_timeout_ms),
        open=False,
    )
    pool.open()
    if settings.pool_min_size == 0:
        return pool

    try:
        for attempt in Retrying(
            stop=stop_after_attempt(settings.connect_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type((PoolTimeout, psycopg.OperationalError)),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    log.warning(
                        "Retrying database connection",
                        extra={"attempt": attempt.retry_state.attempt_number},
                    )
                pool.wait(timeout=settings.pool_timeout_seconds)
    except Exception:
        pool.close()
        raise

    log.info(
        "PostgreSQL pool ready",
        extra={
            "host": settings.db_host,
            "db_name": settings.db_name,
            "min_size": settings.pool_min_size,
            "max_size": settings.pool_max_size,
        },
    )
    return pool


def open_sqlite_pool(settings: Settings) -> SQLitePool:
    pool = SQLitePool(settings.sqlite_path, timeout=settings.pool_timeout_seconds)
    log.info("SQLite pool ready", extra={"path": pool.path})
    return pool


def open_pool(settings: Optional[Settings] = None) -> PoolProtocol:
    """Open a fresh pool for the configured backend (not managed by PoolManager)."""
    settings = settings or get_settings()
    if settings.db_backend == "sqlite":
        return open_sqlite_pool(settings)
    return open_postgres_pool(settings)


class PoolManager:
    """
    Thread-safe singleton owning the process-wide connection pool.

    Handles lifecycle management with automatic cleanup via atexit hook.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._pool = None
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_pool(self, settings: Optional[Settings] = None) -> Any:
        """
        Get or create the managed pool.

        Parameters
        ----------
        settings : Settings, optional
            Used only when the pool does not exist yet; defaults to the
            cached application settings.
        """
        with self._lock:
            if self._pool is None:
                self._pool = open_pool(settings)
            return self._pool

    def close_all(self) -> None:
        """
        Close the managed pool. Called automatically on exit via atexit hook.
        """
        with self._lock:
            pool, self._pool = self._pool, None
        if pool is None:
            return
        try:
            pool.close()
        except Exception as exc:
            log.warning("Error while closing pool: %s", exc)


def get_pool(settings: Optional[Settings] = None) -> Any:
    """Get or create the process-wide pool via PoolManager."""
    return PoolManager().get_pool(settings)


def create_data_access(settings: Optional[Settings] = None, *, pool: Any = None) -> DataAccess:
    """
    Build a DataAccess client for the configured backend.

    Parameters
    ----------
    settings : Settings, optional
        Defaults to the cached application settings.
    pool : ConnectionPool, optional
        Use this pool instead of the process-wide one.
    """
    settings = settings or get_settings()
    if pool is None:
        pool = get_pool(settings)
    return DataAccess(pool, dialect_for(settings.db_backend))


__all__ = [
    "PoolManager",
    "build_dsn",
    "make_connection_configurer",
    "open_postgres_pool",
    "open_sqlite_pool",
    "open_pool",
    "get_pool",
    "create_data_access",
]
