"""
Table-agnostic data-access client.

`DataAccess` is constructed with a connection pool (and the SQL dialect that
pool speaks) instead of reaching for a global handle, so tests can pass a
fake pool and applications can hold several clients side by side.

All table operations are implemented once in `TableOperations`; the two
concrete classes only differ in where statements run:

- `DataAccess` borrows a pooled connection per statement (a paginated
  `find_all` borrows twice: COUNT then SELECT, two independent statements
  that may see different snapshots under concurrent writes);
- `Transaction` runs every statement on the single connection borrowed by
  `DataAccess.execute_transaction`.
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Sequence, Tuple, TypeVar, Union

from softdal.domain.models import (
    InsertResult,
    PaginatedResult,
    RawResult,
    Record,
    UpdateResult,
)
from softdal.errors import DataAccessError, NestedTransactionError
from softdal.executor import StatementOutcome, run_statement
from softdal.infrastructure.pool import ConnectionPool
from softdal.pagination import build_pagination_result, get_pagination_params
from softdal.sql.clauses import Condition, FindOptions, WhereInput, normalize_conditions
from softdal.sql.dialect import DEFAULT_DIALECT, Dialect
from softdal.sql.mutation_builder import (
    build_batch_insert,
    build_hard_delete_by_id,
    build_insert,
    build_restore_by_id,
    build_soft_delete_by_id,
    build_update_by_id,
)
from softdal.sql.query_builder import (
    build_count,
    build_find_by_id,
    build_find_by_ids,
    build_select,
    count_from_rows,
)
from softdal.sql.statement import Statement
from softdal.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")
Clock = Callable[[], datetime]

# ids of the pools with an open execute_transaction, per thread
_open_transactions = threading.local()


def _active_pools() -> set:
    pools = getattr(_open_transactions, "pools", None)
    if pools is None:
        pools = _open_transactions.pools = set()
    return pools


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _pagination_input(pagination: Any) -> Tuple[Any, Any]:
    if isinstance(pagination, Mapping):
        return pagination.get("page"), pagination.get("limit")
    return getattr(pagination, "page", None), getattr(pagination, "limit", None)


class TableOperations:
    """Query, mutation and raw primitives shared by DataAccess and Transaction."""

    def __init__(self, dialect: Dialect = DEFAULT_DIALECT, clock: Clock = utc_now) -> None:
        self._dialect = dialect
        self._clock = clock

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def _execute(self, statement: Statement) -> StatementOutcome:  # pragma: no cover - interface only
        raise NotImplementedError

    # ------------------------------------------------------------------ reads

    def find_by_id(
        self,
        table: str,
        id_value: Any,
        columns: Optional[Sequence[str]] = None,
        *,
        include_soft_deleted: bool = False,
    ) -> Optional[Record]:
        """Return the row with this id, or None when missing or soft-deleted."""
        statement = build_find_by_id(
            table,
            id_value,
            columns=columns,
            include_soft_deleted=include_soft_deleted,
            dialect=self._dialect,
        )
        rows = self._execute(statement).rows
        return rows[0] if rows else None

    def find_all(
        self, table: str, options: Optional[FindOptions] = None, **overrides: Any
    ) -> Union[List[Record], PaginatedResult]:
        """
        Select rows with optional filtering, ordering and pagination.

        Parameters
        ----------
        table : str
            Trusted table name.
        options : FindOptions, optional
            Query options; keyword arguments build or override them
            (`where=`, `order_by=`, `columns=`, `pagination=`,
            `include_soft_deleted=`).

        Returns
        -------
        list of dict, or PaginatedResult when `pagination` is given.
        """
        if options is None:
            options = FindOptions(**overrides)
        elif overrides:
            options = dataclasses.replace(options, **overrides)

        if options.pagination is None:
            statement = build_select(
                table,
                columns=options.columns,
                conditions=options.conditions,
                ordering=options.ordering,
                include_soft_deleted=options.include_soft_deleted,
                dialect=self._dialect,
            )
            return self._execute(statement).rows

        params = get_pagination_params(*_pagination_input(options.pagination))
        count_statement = build_count(
            table,
            conditions=options.conditions,
            include_soft_deleted=options.include_soft_deleted,
            dialect=self._dialect,
        )
        total = count_from_rows(self._execute(count_statement).rows)

        statement = build_select(
            table,
            columns=options.columns,
            conditions=options.conditions,
            ordering=options.ordering,
            include_soft_deleted=options.include_soft_deleted,
            limit=params.limit,
            offset=params.offset,
            dialect=self._dialect,
        )
        rows = self._execute(statement).rows
        return PaginatedResult(
            data=rows,
            pagination=build_pagination_result(params.page, params.limit, total),
        )

    def find_by_ids(
        self, table: str, ids: Sequence[Any], columns: Optional[Sequence[str]] = None
    ) -> List[Record]:
        statement = build_find_by_ids(table, list(ids or []), columns=columns, dialect=self._dialect)
        if statement is None:
            return []
        return self._execute(statement).rows

    def find_by_search(
        self,
        table: str,
        column: str,
        term: str,
        *,
        exact_match: bool = False,
        options: Optional[FindOptions] = None,
        **overrides: Any,
    ) -> Union[List[Record], PaginatedResult]:
        """
        Substring search (`LIKE '%term%'`) on one column, or equality with
        `exact_match=True`. Accepts every find_all option; extra `where`
        conditions are ANDed after the search condition.
        """
        if options is None:
            options = FindOptions(**overrides)
        elif overrides:
            options = dataclasses.replace(options, **overrides)

        search = (
            Condition(column, "=", term) if exact_match else Condition(column, "LIKE", f"%{term}%")
        )
        options = dataclasses.replace(options, where=[search, *options.conditions])
        return self.find_all(table, options)

    def count(
        self, table: str, where: WhereInput = None, include_soft_deleted: bool = False
    ) -> int:
        statement = build_count(
            table,
            conditions=normalize_conditions(where),
            include_soft_deleted=include_soft_deleted,
            dialect=self._dialect,
        )
        return count_from_rows(self._execute(statement).rows)

    def exists(self, table: str, where: WhereInput, include_soft_deleted: bool = False) -> bool:
        return self.count(table, where, include_soft_deleted) > 0

    # -------------------------------------------------------------- mutations

    def _insert_result(self, outcome: StatementOutcome, row_count: int) -> InsertResult:
        if self._dialect.returning_id and outcome.rows:
            return InsertResult(insert_id=outcome.rows[0].get("id"), affected_rows=len(outcome.rows))

        insert_id = outcome.lastrowid
        # lastrowid points at the last row of a multi-row INSERT
        if isinstance(insert_id, int) and row_count > 1:
            insert_id = insert_id - row_count + 1
        return InsertResult(insert_id=insert_id, affected_rows=max(outcome.rowcount, 0))

    @staticmethod
    def _update_result(outcome: StatementOutcome) -> UpdateResult:
        affected = max(outcome.rowcount, 0)
        return UpdateResult(affected_rows=affected, changed_rows=affected)

    def insert(self, table: str, data: Mapping[str, Any]) -> InsertResult:
        statement = build_insert(table, data, now=self._clock(), dialect=self._dialect)
        return self._insert_result(self._execute(statement), 1)

    def batch_insert(self, table: str, records: Sequence[Mapping[str, Any]]) -> InsertResult:
        """
        Insert all records with one multi-row INSERT.

        Raises EmptyBatchError for an empty list and InvalidQueryError for
        records whose columns differ, both before a connection is borrowed.
        """
        records = list(records or [])
        statement = build_batch_insert(table, records, now=self._clock(), dialect=self._dialect)
        return self._insert_result(self._execute(statement), len(records))

    def update_by_id(self, table: str, id_value: Any, data: Mapping[str, Any]) -> UpdateResult:
        statement = build_update_by_id(table, id_value, data, now=self._clock(), dialect=self._dialect)
        return self._update_result(self._execute(statement))

    def soft_delete_by_id(self, table: str, id_value: Any) -> UpdateResult:
        statement = build_soft_delete_by_id(table, id_value, now=self._clock(), dialect=self._dialect)
        return self._update_result(self._execute(statement))

    def hard_delete_by_id(self, table: str, id_value: Any) -> UpdateResult:
        statement = build_hard_delete_by_id(table, id_value, dialect=self._dialect)
        return self._update_result(self._execute(statement))

    def restore_by_id(self, table: str, id_value: Any) -> UpdateResult:
        statement = build_restore_by_id(table, id_value, now=self._clock(), dialect=self._dialect)
        return self._update_result(self._execute(statement))

    # -------------------------------------------------------------------- raw

    def execute_raw(self, sql: str, params: Optional[Sequence[Any]] = None) -> RawResult:
        """
        Run caller-written SQL as is.

        No soft-delete filter and no validation: the caller owns
        parameterization and must use the backend's placeholder style.
        """
        outcome = self._execute(Statement(sql, tuple(params or ())))
        return RawResult(rows=outcome.rows, fields=outcome.fields, affected_rows=outcome.rowcount)


class Transaction(TableOperations):
    """
    Handle passed to `execute_transaction` callbacks.

    Every statement runs on the transaction's connection; the handle stops
    working once the transaction has committed or rolled back.
    """

    def __init__(self, conn: Any, dialect: Dialect = DEFAULT_DIALECT, clock: Clock = utc_now) -> None:
        super().__init__(dialect, clock)
        self._conn = conn
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def _finish(self) -> None:
        self._active = False
        self._conn = None

    def _execute(self, statement: Statement) -> StatementOutcome:
        if not self._active:
            raise DataAccessError("Transaction is no longer active")
        return run_statement(self._conn, statement)


class DataAccess(TableOperations):
    """
    Data-access client bound to one connection pool.

    Parameters
    ----------
    pool : ConnectionPool
        Pool lending DB-API connections (see softdal.infrastructure.pool).
    dialect : Dialect
        Placeholder style and insert-id strategy of the pool's backend.
    clock : callable
        Source of "now" for created_at / updated_at / deleted_at stamps.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        dialect: Dialect = DEFAULT_DIALECT,
        *,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(dialect, clock)
        self._pool = pool

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    def in_transaction(self) -> bool:
        """True while any client on this pool runs a transaction on this thread."""
        return id(self._pool) in _active_pools()

    def _execute(self, statement: Statement) -> StatementOutcome:
        with self._pool.connection() as conn:
            return run_statement(conn, statement)

    def execute_transaction(self, operations: Callable[[Transaction], T]) -> T:
        """
        Run `operations` inside one transaction.

        Commits and returns the callback's result on success. On any
        exception the transaction is rolled back and the same exception
        object is re-raised. A nested call on the same thread and pool, from
        this client or another one sharing the pool, is rejected with
        NestedTransactionError before any connection is borrowed.
        """
        if self.in_transaction():
            raise NestedTransactionError("Nested transactions are not supported")

        pools = _active_pools()
        pools.add(id(self._pool))
        try:
            with self._pool.connection() as conn:
                tx = Transaction(conn, self._dialect, self._clock)
                try:
                    result = operations(tx)
                except Exception as exc:
                    log.warning(
                        "Transaction failed, rolling back: %s",
                        exc,
                        extra={"error_type": type(exc).__name__},
                    )
                    raise
                finally:
                    tx._finish()
        finally:
            pools.discard(id(self._pool))

        log.debug("Transaction committed")
        return result

    def close(self) -> None:
        self._pool.close()


__all__ = ["TableOperations", "Transaction", "DataAccess", "utc_now"]
