from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from softdal import main as cli
from softdal.config import Settings

runner = CliRunner()


@pytest.fixture
def cli_dal(monkeypatch, sqlite_dal):
    settings = Settings(_env_file=None, db_backend="sqlite", sqlite_path=":memory:")
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli, "create_data_access", lambda s: sqlite_dal)
    return sqlite_dal


def _seed(dal, clock, titles):
    for title in titles:
        dal.insert("polls", {"title": title})
        clock.advance(1)


def test_info_shows_backend(cli_dal) -> None:
    result = runner.invoke(cli.app, ["info"])
    assert result.exit_code == 0
    assert "sqlite" in result.stdout


def test_ping(cli_dal) -> None:
    result = runner.invoke(cli.app, ["ping"])
    assert result.exit_code == 0
    assert result.stdout.startswith("ok")


def test_find_json_output_is_paginated(cli_dal, clock) -> None:
    _seed(cli_dal, clock, ["Alpha", "Beta", "Gamma"])

    result = runner.invoke(cli.app, ["find", "polls", "--limit", "2", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [row["title"] for row in payload["data"]] == ["Gamma", "Beta"]
    assert payload["pagination"]["totalPages"] == 2
    assert payload["pagination"]["hasNext"] is True


def test_find_search_renders_table(cli_dal, clock) -> None:
    _seed(cli_dal, clock, ["Rock Top 10", "Jazz Top 10"])

    result = runner.invoke(cli.app, ["find", "polls", "-c", "title", "-t", "Rock"])

    assert result.exit_code == 0
    assert "Rock" in result.stdout
    assert "Jazz" not in result.stdout


def test_find_requires_search_column_and_term_together(cli_dal) -> None:
    result = runner.invoke(cli.app, ["find", "polls", "--term", "Rock"])
    assert result.exit_code != 0


def test_count_respects_soft_delete(cli_dal, clock) -> None:
    _seed(cli_dal, clock, ["Alpha", "Beta"])
    first = cli_dal.find_all("polls", order_by=["id"])[0]
    cli_dal.soft_delete_by_id("polls", first["id"])

    live = runner.invoke(cli.app, ["count", "polls"])
    everything = runner.invoke(cli.app, ["count", "polls", "--include-deleted"])

    assert live.stdout.strip() == "1"
    assert everything.stdout.strip() == "2"


def test_raw_write_reports_affected_rows(cli_dal, clock) -> None:
    _seed(cli_dal, clock, ["Alpha", "Beta"])

    result = runner.invoke(cli.app, ["raw", "UPDATE polls SET is_active = ? WHERE title = ?", "0", "Beta"])

    assert result.exit_code == 0
    assert "1 row(s) affected" in result.stdout


@pytest.mark.parametrize(
    ("args", "message"),
    [
        (["count", "missing_table"], "Count failed"),
        (["find", "missing_table"], "Query failed"),
        (["find", "missing_table", "-c", "title", "-t", "Rock"], "Query failed"),
        (["raw", "SELEC nonsense"], "Statement failed"),
    ],
)
def test_database_errors_exit_cleanly(cli_dal, args, message) -> None:
    result = runner.invoke(cli.app, args)

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert message in result.output
    assert "Traceback" not in result.output

