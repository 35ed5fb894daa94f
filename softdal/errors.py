"""
Exception hierarchy for the data-access layer.

Only caller-logic problems get their own types here. Driver errors
(psycopg.Error, sqlite3.Error) are never wrapped: they reach the caller as
the driver raised them.
"""

from __future__ import annotations


class DataAccessError(Exception):
    """Base class for errors raised by softdal itself."""


class InvalidQueryError(DataAccessError, ValueError):
    """
    A request that cannot be turned into valid SQL.

    Raised before any connection is borrowed (unknown operator, bad order
    direction, batch records with mismatched columns).
    """


class EmptyBatchError(InvalidQueryError):
    """batch_insert() was called with no records."""


class NestedTransactionError(DataAccessError, RuntimeError):
    """execute_transaction() was called while a transaction is already open."""


__all__ = [
    "DataAccessError",
    "InvalidQueryError",
    "EmptyBatchError",
    "NestedTransactionError",
]
