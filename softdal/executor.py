"""
Statement runner: executes one Statement on a DB-API connection.

Works with any PEP 249 connection whose cursors expose `execute`,
`description`, `fetchall`, `rowcount` and `close` (psycopg and sqlite3 both
do). Rows are converted to plain dicts keyed by column name, whatever row
type the driver hands back.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, List, Optional

from softdal.domain.models import Record
from softdal.sql.statement import Statement
from softdal.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class StatementOutcome:
    rows: List[Record] = field(default_factory=list)
    fields: List[str] = field(default_factory=list)
    rowcount: int = -1
    lastrowid: Optional[Any] = None


def _row_to_dict(row: Any, fields: List[str]) -> Record:
    if isinstance(row, Mapping):
        return dict(row)
    return dict(zip(fields, row))


def run_statement(conn: Any, statement: Statement) -> StatementOutcome:
    """
    Execute `statement` on `conn` and collect its output.

    Driver errors are logged and re-raised untouched; committing or rolling
    back is left to whoever owns the connection.
    """
    cur = conn.cursor()
    start = time.perf_counter()
    try:
        if statement.params:
            cur.execute(statement.sql, list(statement.params))
        else:
            # no parameters: the driver must not scan the text for placeholders
            cur.execute(statement.sql)
        fields: List[str] = []
        rows: List[Record] = []
        if cur.description:
            fields = [col[0] for col in cur.description]
            rows = [_row_to_dict(r, fields) for r in cur.fetchall()]
        outcome = StatementOutcome(
            rows=rows,
            fields=fields,
            rowcount=cur.rowcount if cur.rowcount is not None else -1,
            lastrowid=getattr(cur, "lastrowid", None),
        )
    except Exception as exc:
        log.error(
            "Statement failed: %s",
            exc,
            extra={"sql": statement.sql, "params_count": len(statement.params)},
        )
        raise
    finally:
        cur.close()

    log.debug(
        "Executed statement",
        extra={
            "sql": statement.sql,
            "params_count": len(statement.params),
            "rowcount": outcome.rowcount,
            "duration_ms": round((time.perf_counter() - start) * 1000, 3),
        },
    )
    return outcome


__all__ = ["StatementOutcome", "run_statement"]
