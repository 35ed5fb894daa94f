"""
INSERT / UPDATE / DELETE statement builders.

`created_at` and `updated_at` belong to this layer: they are removed from
caller data and stamped with the `now` value passed in by the caller of the
builder (one clock reading per operation, shared by every row of a batch).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from softdal.errors import EmptyBatchError, InvalidQueryError
from softdal.sql.clauses import SOFT_DELETE_CONDITION
from softdal.sql.dialect import DEFAULT_DIALECT, Dialect
from softdal.sql.statement import Statement

CREATED_AT = "created_at"
UPDATED_AT = "updated_at"
MANAGED_COLUMNS = frozenset({CREATED_AT, UPDATED_AT})


def strip_managed(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in dict(data or {}).items() if k not in MANAGED_COLUMNS}


def _returning(dialect: Dialect) -> str:
    return " RETURNING id" if dialect.returning_id else ""


def build_insert(
    table: str,
    data: Mapping[str, Any],
    *,
    now: datetime,
    dialect: Dialect = DEFAULT_DIALECT,
) -> Statement:
    row = strip_managed(data)
    columns = list(row.keys()) + [CREATED_AT, UPDATED_AT]
    values = list(row.values()) + [now, now]
    sql = (
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES ({dialect.placeholders(len(values))}){_returning(dialect)}"
    )
    return Statement(sql, tuple(values))


def build_batch_insert(
    table: str,
    records: Sequence[Mapping[str, Any]],
    *,
    now: datetime,
    dialect: Dialect = DEFAULT_DIALECT,
) -> Statement:
    if not records:
        raise EmptyBatchError("No records to insert")

    rows = [strip_managed(r) for r in records]
    data_columns = list(rows[0].keys())
    expected = set(data_columns)
    for index, row in enumerate(rows[1:], start=1):
        if set(row.keys()) != expected:
            raise InvalidQueryError(
                f"Record {index} columns {sorted(row)} differ from first record columns {sorted(expected)}"
            )

    columns = data_columns + [CREATED_AT, UPDATED_AT]
    group = f"({dialect.placeholders(len(columns))})"
    params: List[Any] = []
    for row in rows:
        params.extend(row[c] for c in data_columns)
        params.extend([now, now])

    sql = (
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES {', '.join([group] * len(rows))}{_returning(dialect)}"
    )
    return Statement(sql, tuple(params))


def build_update_by_id(
    table: str,
    id_value: Any,
    data: Mapping[str, Any],
    *,
    now: datetime,
    dialect: Dialect = DEFAULT_DIALECT,
) -> Statement:
    patch = strip_managed(data)
    patch[UPDATED_AT] = now
    ph = dialect.placeholder
    set_clause = ", ".join(f"{column} = {ph}" for column in patch)
    params: Tuple[Any, ...] = tuple(patch.values()) + (id_value,)
    sql = f"UPDATE {table} SET {set_clause} WHERE id = {ph} AND {SOFT_DELETE_CONDITION}"
    return Statement(sql, params)


def build_soft_delete_by_id(
    table: str,
    id_value: Any,
    *,
    now: datetime,
    dialect: Dialect = DEFAULT_DIALECT,
) -> Statement:
    ph = dialect.placeholder
    sql = (
        f"UPDATE {table} SET deleted_at = {ph}, {UPDATED_AT} = {ph} "
        f"WHERE id = {ph} AND {SOFT_DELETE_CONDITION}"
    )
    return Statement(sql, (now, now, id_value))


def build_hard_delete_by_id(
    table: str,
    id_value: Any,
    *,
    dialect: Dialect = DEFAULT_DIALECT,
) -> Statement:
    return Statement(f"DELETE FROM {table} WHERE id = {dialect.placeholder}", (id_value,))


def build_restore_by_id(
    table: str,
    id_value: Any,
    *,
    now: datetime,
    dialect: Dialect = DEFAULT_DIALECT,
) -> Statement:
    # no deleted_at guard: restoring must be able to reach deleted rows
    ph = dialect.placeholder
    sql = f"UPDATE {table} SET deleted_at = NULL, {UPDATED_AT} = {ph} WHERE id = {ph}"
    return Statement(sql, (now, id_value))


__all__ = [
    "CREATED_AT",
    "UPDATED_AT",
    "MANAGED_COLUMNS",
    "strip_managed",
    "build_insert",
    "build_batch_insert",
    "build_update_by_id",
    "build_soft_delete_by_id",
    "build_hard_delete_by_id",
    "build_restore_by_id",
]
