from __future__ import annotations

from datetime import datetime, timezone

import pytest

from softdal.errors import EmptyBatchError, InvalidQueryError
from softdal.sql.clauses import Condition, OrderSpec
from softdal.sql.dialect import POSTGRES
from softdal.sql.mutation_builder import (
    build_batch_insert,
    build_hard_delete_by_id,
    build_insert,
    build_restore_by_id,
    build_soft_delete_by_id,
    build_update_by_id,
    strip_managed,
)
from softdal.sql.query_builder import (
    build_count,
    build_find_by_id,
    build_find_by_ids,
    build_select,
    count_from_rows,
)

NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


class TestQueryBuilder:
    def test_find_by_id_statement(self) -> None:
        statement = build_find_by_id("polls", 42)
        assert statement.sql == "SELECT * FROM polls WHERE deleted_at IS NULL AND id = ? LIMIT 1"
        assert statement.params == (42,)

    def test_find_by_id_with_columns_and_soft_deleted(self) -> None:
        statement = build_find_by_id("polls", 7, columns=["id", "title"], include_soft_deleted=True)
        assert statement.sql == "SELECT id, title FROM polls WHERE id = ? LIMIT 1"
        assert statement.params == (7,)

    def test_find_by_id_binds_none_instead_of_is_null(self) -> None:
        statement = build_find_by_id("polls", None)
        assert statement.sql == "SELECT * FROM polls WHERE deleted_at IS NULL AND id = ? LIMIT 1"
        assert statement.params == (None,)

    def test_select_with_filters_ordering_and_paging(self) -> None:
        statement = build_select(
            "polls",
            conditions=[Condition("title", "LIKE", "%Top%"), Condition("id", "IN", [1, 2])],
            ordering=[OrderSpec("created_at", "DESC")],
            limit=10,
            offset=20,
        )
        assert statement.sql == (
            "SELECT * FROM polls WHERE deleted_at IS NULL AND title LIKE ? AND id IN (?, ?)"
            " ORDER BY created_at DESC LIMIT ? OFFSET ?"
        )
        assert statement.params == ("%Top%", 1, 2, 10, 20)

    def test_postgres_placeholders(self) -> None:
        statement = build_select(
            "news", conditions=[Condition("is_hot", "=", True)], limit=5, offset=0, dialect=POSTGRES
        )
        assert statement.sql == (
            "SELECT * FROM news WHERE deleted_at IS NULL AND is_hot = %s LIMIT %s OFFSET %s"
        )
        assert "?" not in statement.sql

    def test_count_shares_where_clause(self) -> None:
        statement = build_count("polls", conditions=[Condition("type", "=", "TOP_10")])
        assert statement.sql == (
            "SELECT COUNT(*) AS total FROM polls WHERE deleted_at IS NULL AND type = ?"
        )
        assert statement.params == ("TOP_10",)

    def test_find_by_ids_skips_empty_lists(self) -> None:
        assert build_find_by_ids("polls", []) is None
        statement = build_find_by_ids("polls", [3, 1])
        assert statement.sql == "SELECT * FROM polls WHERE deleted_at IS NULL AND id IN (?, ?)"
        assert statement.params == (3, 1)

    def test_count_from_rows(self) -> None:
        assert count_from_rows([]) == 0
        assert count_from_rows([{"total": "12"}]) == 12
        assert count_from_rows([{"total": None}]) == 0


class TestMutationBuilder:
    def test_strip_managed_drops_timestamps(self) -> None:
        assert strip_managed({"title": "x", "created_at": 1, "updated_at": 2}) == {"title": "x"}

    def test_insert_stamps_timestamps(self) -> None:
        statement = build_insert(
            "polls", {"title": "Top 10", "created_at": "ignored"}, now=NOW
        )
        assert statement.sql == (
            "INSERT INTO polls (title, created_at, updated_at) VALUES (?, ?, ?)"
        )
        assert statement.params == ("Top 10", NOW, NOW)

    def test_insert_returns_id_on_postgres(self) -> None:
        statement = build_insert("polls", {"title": "x"}, now=NOW, dialect=POSTGRES)
        assert statement.sql.endswith("VALUES (%s, %s, %s) RETURNING id")

    def test_batch_insert_single_statement(self) -> None:
        statement = build_batch_insert(
            "poll_items",
            [{"name": "a", "poll_id": 1}, {"poll_id": 1, "name": "b"}],
            now=NOW,
        )
        assert statement.sql == (
            "INSERT INTO poll_items (name, poll_id, created_at, updated_at) "
            "VALUES (?, ?, ?, ?), (?, ?, ?, ?)"
        )
        assert statement.params == ("a", 1, NOW, NOW, "b", 1, NOW, NOW)

    def test_batch_insert_rejects_empty_and_mismatched_records(self) -> None:
        with pytest.raises(EmptyBatchError):
            build_batch_insert("poll_items", [], now=NOW)
        with pytest.raises(InvalidQueryError):
            build_batch_insert("poll_items", [{"name": "a"}, {"title": "b"}], now=NOW)

    def test_update_by_id_guards_soft_deleted_rows(self) -> None:
        statement = build_update_by_id(
            "polls", 9, {"title": "New", "updated_at": "ignored"}, now=NOW
        )
        assert statement.sql == (
            "UPDATE polls SET title = ?, updated_at = ? WHERE id = ? AND deleted_at IS NULL"
        )
        assert statement.params == ("New", NOW, 9)

    def test_soft_delete_restore_and_hard_delete(self) -> None:
        soft = build_soft_delete_by_id("polls", 3, now=NOW)
        assert soft.sql == (
            "UPDATE polls SET deleted_at = ?, updated_at = ? WHERE id = ? AND deleted_at IS NULL"
        )
        assert soft.params == (NOW, NOW, 3)

        restore = build_restore_by_id("polls", 3, now=NOW)
        assert restore.sql == "UPDATE polls SET deleted_at = NULL, updated_at = ? WHERE id = ?"
        assert restore.params == (NOW, 3)

        hard = build_hard_delete_by_id("polls", 3, dialect=POSTGRES)
        assert hard.sql == "DELETE FROM polls WHERE id = %s"
        assert hard.params == (3,)
