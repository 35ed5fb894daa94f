"""
SQLite backend with the same `connection()` contract as psycopg_pool.

SQLite serialises writers anyway, so the "pool" is one shared connection
guarded by a re-entrant lock. The connection runs with isolation_level=None
and transactions are driven explicitly (BEGIN / COMMIT / ROLLBACK) so the
commit-on-success / rollback-on-error behaviour does not depend on the
sqlite3 module's implicit transaction rules. A borrow nested inside another
borrow on the same thread joins the outer transaction.
"""

from __future__ import annotations

import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Iterator

from softdal.utils.logging import get_logger

log = get_logger(__name__)

MEMORY = ":memory:"

# Store temporal values as ISO-8601 text, like the rest of the SQLite ecosystem.
sqlite3.register_adapter(datetime, lambda v: v.isoformat(" "))
sqlite3.register_adapter(date, lambda v: v.isoformat())
sqlite3.register_adapter(Decimal, str)


class SQLitePool:
    """
    Parameters
    ----------
    path : str
        Database file, or ":memory:" for a private in-memory database.
    timeout : float
        Seconds sqlite3 waits on a locked database file.
    busy_timeout_ms : int
        PRAGMA busy_timeout value.
    """

    def __init__(self, path: str = MEMORY, *, timeout: float = 5.0, busy_timeout_ms: int = 4000) -> None:
        if path != MEMORY:
            path = os.path.abspath(path)
            if os.path.isdir(path):
                raise RuntimeError(f"SQLite path '{path}' is a directory, expected a database file")
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

        self.path = path
        self._conn = sqlite3.connect(
            path, isolation_level=None, timeout=timeout, check_same_thread=False
        )
        self._lock = threading.RLock()
        self._depth = 0
        self.closed = False

        self._conn.execute("PRAGMA foreign_keys = ON;")
        self._conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
        if path != MEMORY:
            self._conn.execute("PRAGMA journal_mode = wal;")

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            if self.closed:
                raise RuntimeError("pool is already closed")

            outermost = self._depth == 0
            if outermost:
                self._conn.execute("BEGIN;")
            self._depth += 1
            try:
                yield self._conn
            except BaseException:
                self._depth -= 1
                # sqlite may already have rolled back on its own (e.g. SQLITE_FULL)
                if outermost and self._conn.in_transaction:
                    self._conn.execute("ROLLBACK;")
                raise
            else:
                self._depth -= 1
                if outermost:
                    try:
                        self._conn.execute("COMMIT;")
                    except sqlite3.Error:
                        if self._conn.in_transaction:
                            self._conn.execute("ROLLBACK;")
                        raise

    def close(self) -> None:
        with self._lock:
            if self.closed:
                return
            self.closed = True
            self._conn.close()
            log.debug("SQLite pool closed", extra={"path": self.path})


__all__ = ["SQLitePool", "MEMORY"]
