"""
The connection-pool contract the data-access layer is written against.
"""

from __future__ import annotations

from typing import Any, ContextManager, Protocol, runtime_checkable


@runtime_checkable
class ConnectionPool(Protocol):
    """
    Anything that lends out DB-API connections.

    `connection()` must return a context manager that yields a connection,
    commits when the block exits normally and rolls back when it raises.
    psycopg_pool.ConnectionPool behaves this way out of the box; SQLitePool
    reproduces it for SQLite.
    """

    def connection(self) -> ContextManager[Any]:
        ...

    def close(self) -> None:
        ...


__all__ = ["ConnectionPool"]
