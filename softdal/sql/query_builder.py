"""
SELECT / COUNT statement builders.

Pure functions: table + options in, Statement out. Nothing here touches a
connection, which keeps the generated SQL testable without a database.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from softdal.sql.clauses import (
    SOFT_DELETE_CONDITION,
    Condition,
    OrderSpec,
    render_order_by,
    render_where,
)
from softdal.sql.dialect import DEFAULT_DIALECT, Dialect
from softdal.sql.statement import Statement

COUNT_ALIAS = "total"


def column_list(columns: Optional[Sequence[str]]) -> str:
    if not columns:
        return "*"
    return ", ".join(columns)


def build_select(
    table: str,
    *,
    columns: Optional[Sequence[str]] = None,
    conditions: Sequence[Condition] = (),
    ordering: Sequence[OrderSpec] = (),
    include_soft_deleted: bool = False,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    dialect: Dialect = DEFAULT_DIALECT,
) -> Statement:
    where_sql, params = render_where(
        conditions, include_soft_deleted=include_soft_deleted, dialect=dialect
    )
    sql = f"SELECT {column_list(columns)} FROM {table}{where_sql}{render_order_by(ordering)}"

    if limit is not None:
        sql += f" LIMIT {dialect.placeholder}"
        params.append(int(limit))
        if offset is not None:
            sql += f" OFFSET {dialect.placeholder}"
            params.append(int(offset))

    return Statement(sql, tuple(params))


def build_count(
    table: str,
    *,
    conditions: Sequence[Condition] = (),
    include_soft_deleted: bool = False,
    dialect: Dialect = DEFAULT_DIALECT,
) -> Statement:
    where_sql, params = render_where(
        conditions, include_soft_deleted=include_soft_deleted, dialect=dialect
    )
    return Statement(f"SELECT COUNT(*) AS {COUNT_ALIAS} FROM {table}{where_sql}", tuple(params))


def build_find_by_id(
    table: str,
    id_value: Any,
    *,
    columns: Optional[Sequence[str]] = None,
    include_soft_deleted: bool = False,
    dialect: Dialect = DEFAULT_DIALECT,
) -> Statement:
    """The id is always bound as a parameter, None included."""
    id_clause = f"id = {dialect.placeholder}"
    if not include_soft_deleted:
        id_clause = f"{SOFT_DELETE_CONDITION} AND {id_clause}"
    return Statement(
        f"SELECT {column_list(columns)} FROM {table} WHERE {id_clause} LIMIT 1", (id_value,)
    )


def build_find_by_ids(
    table: str,
    ids: Sequence[Any],
    *,
    columns: Optional[Sequence[str]] = None,
    dialect: Dialect = DEFAULT_DIALECT,
) -> Optional[Statement]:
    """Returns None for an empty id list; callers must not query in that case."""
    if not ids:
        return None
    where_sql, params = render_where([Condition("id", "IN", list(ids))], dialect=dialect)
    return Statement(f"SELECT {column_list(columns)} FROM {table}{where_sql}", tuple(params))


def count_from_rows(rows: List[dict]) -> int:
    if not rows:
        return 0
    return int(rows[0].get(COUNT_ALIAS) or 0)


__all__ = [
    "COUNT_ALIAS",
    "column_list",
    "build_select",
    "build_count",
    "build_find_by_id",
    "build_find_by_ids",
    "count_from_rows",
]
