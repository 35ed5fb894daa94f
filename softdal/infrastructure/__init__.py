"""
Infrastructure package for softdal.

Centralizes database connectivity concerns: the pool contract, the SQLite
pool and the backend factory (softdal.infrastructure.db_factory, imported
directly since it depends on the client). Keep this layer focused on I/O and
resource management, decoupled from SQL building.
"""

from softdal.infrastructure.pool import ConnectionPool
from softdal.infrastructure.sqlite_pool import SQLitePool

__all__ = [
    "ConnectionPool",
    "SQLitePool",
]
