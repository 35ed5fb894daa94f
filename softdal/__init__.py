"""
softdal - soft-delete aware data-access layer for relational tables.

Builds parameterized SQL for arbitrary tables and runs it through a pooled
connection, with:

- `deleted_at IS NULL` enforced on every read unless explicitly waived
- managed `created_at` / `updated_at` stamping on writes
- offset pagination with clamped page/limit input
- multi-row batch inserts
- callback-style transactions with rollback on error
- a raw SQL escape hatch

PostgreSQL (psycopg + psycopg_pool) and SQLite (sqlite3) backends share the
same client; the backend only decides the placeholder style and how the new
primary key of an INSERT is reported.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from softdal.client import DataAccess, Transaction
from softdal.config import Settings, get_settings
from softdal.domain.models import (
    InsertResult,
    PaginatedResult,
    PaginationParams,
    PaginationResult,
    RawResult,
    Record,
    UpdateResult,
)
from softdal.errors import (
    DataAccessError,
    EmptyBatchError,
    InvalidQueryError,
    NestedTransactionError,
)
from softdal.infrastructure.db_factory import create_data_access
from softdal.pagination import build_pagination_result, get_pagination_params
from softdal.sql import POSTGRES, SQLITE, Condition, Dialect, FindOptions, OrderSpec
from softdal.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Client
    "DataAccess",
    "Transaction",
    "create_data_access",
    # Configuration
    "Settings",
    "get_settings",
    # Query options
    "Condition",
    "FindOptions",
    "OrderSpec",
    "Dialect",
    "POSTGRES",
    "SQLITE",
    # Pagination
    "get_pagination_params",
    "build_pagination_result",
    # Results
    "Record",
    "InsertResult",
    "UpdateResult",
    "RawResult",
    "PaginatedResult",
    "PaginationParams",
    "PaginationResult",
    # Errors
    "DataAccessError",
    "InvalidQueryError",
    "EmptyBatchError",
    "NestedTransactionError",
    # Logging
    "configure_logging",
    "get_logger",
]
