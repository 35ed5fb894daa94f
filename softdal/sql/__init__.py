"""
SQL building package.

Everything in here is side-effect free: value objects, dialect descriptors
and builders that turn a table name plus options into a parameterized
Statement.
"""

from softdal.sql.clauses import (
    Condition,
    FindOptions,
    OrderSpec,
    normalize_conditions,
    normalize_order,
)
from softdal.sql.dialect import DEFAULT_DIALECT, POSTGRES, SQLITE, Dialect, dialect_for
from softdal.sql.statement import Statement

__all__ = [
    "Condition",
    "FindOptions",
    "OrderSpec",
    "normalize_conditions",
    "normalize_order",
    "Dialect",
    "DEFAULT_DIALECT",
    "POSTGRES",
    "SQLITE",
    "dialect_for",
    "Statement",
]
