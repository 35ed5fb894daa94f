"""
Pytest configuration for softdal.

Provides fixtures for:
- A recording fake pool (statement shape, borrow/commit/rollback counts)
- An in-memory SQLite pool with the sample schema
- A controllable clock for timestamp assertions
- Settings for PostgreSQL integration tests
"""

from __future__ import annotations

import os
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Deque, Dict, Generator, Iterator, List, Optional, Sequence, Tuple

import pytest

from softdal import DataAccess, Settings
from softdal.infrastructure.sqlite_pool import SQLitePool
from softdal.sql.dialect import SQLITE

SQLITE_SCHEMA = [
    """
    CREATE TABLE polls (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        description TEXT NULL,
        type TEXT NOT NULL DEFAULT 'TOP_10',
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT NULL
    )
    """,
    """
    CREATE TABLE poll_items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        poll_id INTEGER NOT NULL REFERENCES polls (id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        sort_order INTEGER NOT NULL DEFAULT 0,
        vote_count INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT NULL
    )
    """,
]

BASE_TIME = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock; every call returns the current value."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@dataclass
class FakeResponse:
    rows: Optional[List[Dict[str, Any]]] = None
    rowcount: int = 0
    lastrowid: Any = None
    error: Optional[BaseException] = None
    fields: Optional[List[str]] = None


class FakeCursor:
    def __init__(self, conn: "FakeConnection") -> None:
        self._conn = conn
        self._rows: List[Tuple[Any, ...]] = []
        self.description = None
        self.rowcount = -1
        self.lastrowid = None
        self.closed = False

    def execute(self, sql: str, params: Sequence[Any] = ()) -> None:
        self._conn.statements.append((sql, tuple(params)))
        response = self._conn.responses.popleft() if self._conn.responses else FakeResponse()
        if response.error is not None:
            raise response.error

        names = response.fields
        if names is None and response.rows:
            names = list(response.rows[0].keys())
        if response.rows is not None:
            self.description = [(name,) for name in (names or [])]
            self._rows = [tuple(row.get(n) for n in names or []) for row in response.rows]
        self.rowcount = response.rowcount
        self.lastrowid = response.lastrowid

    def fetchall(self) -> List[Tuple[Any, ...]]:
        return list(self._rows)

    def close(self) -> None:
        self.closed = True


@dataclass
class FakeConnection:
    statements: List[Tuple[str, Tuple[Any, ...]]] = field(default_factory=list)
    responses: Deque[FakeResponse] = field(default_factory=deque)

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)


class RecordingPool:
    """
    Fake pool recording every statement run through it.

    Queue driver responses with `respond(...)`; unqueued statements behave
    like a write that touched no rows.
    """

    def __init__(self) -> None:
        self.conn = FakeConnection()
        self.borrows = 0
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    @property
    def statements(self) -> List[Tuple[str, Tuple[Any, ...]]]:
        return self.conn.statements

    def respond(self, **kwargs: Any) -> "RecordingPool":
        self.conn.responses.append(FakeResponse(**kwargs))
        return self

    @contextmanager
    def connection(self) -> Iterator[FakeConnection]:
        self.borrows += 1
        try:
            yield self.conn
        except BaseException:
            self.rollbacks += 1
            raise
        else:
            self.commits += 1

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_pool() -> RecordingPool:
    return RecordingPool()


@pytest.fixture
def fake_dal(recording_pool: RecordingPool, clock: FakeClock) -> DataAccess:
    """DataAccess over the recording pool, `?` placeholders."""
    return DataAccess(recording_pool, SQLITE, clock=clock)


@pytest.fixture
def sqlite_pool() -> Generator[SQLitePool, None, None]:
    pool = SQLitePool()
    try:
        yield pool
    finally:
        pool.close()


@pytest.fixture
def sqlite_dal(sqlite_pool: SQLitePool, clock: FakeClock) -> DataAccess:
    """DataAccess over a fresh in-memory database with polls / poll_items."""
    dal = DataAccess(sqlite_pool, SQLITE, clock=clock)
    for ddl in SQLITE_SCHEMA:
        dal.execute_raw(ddl)
    return dal


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture for PostgreSQL integration tests.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_backend="postgresql",
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "softdal_test"),
        connect_attempts=2,
        log_level="DEBUG",
    )
