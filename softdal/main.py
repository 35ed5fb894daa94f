from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional

import typer

from softdal.client import DataAccess
from softdal.config import Settings, get_settings
from softdal.infrastructure.db_factory import create_data_access
from softdal.reporter import print_rows, print_settings
from softdal.utils.logging import configure_logging, get_logger

log = get_logger(__name__)

app = typer.Typer(help="softdal: soft-delete aware data-access CLI.")


def _describe_target(settings: Settings) -> str:
    if settings.db_backend == "sqlite":
        return f"sqlite:///{settings.sqlite_path}"
    if settings.database_url:
        return "DATABASE_URL (set)"
    return (
        f"postgresql://{settings.db_user}:***"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def _open() -> DataAccess:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return create_data_access(settings)


def _fail(message: str) -> None:
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


@contextmanager
def _reporting_errors(action: str) -> Iterator[None]:
    """Turn library and driver errors into a one-line message and exit code 1."""
    try:
        yield
    except Exception as exc:
        log.error("%s failed: %s", action, exc, extra={"error_type": type(exc).__name__})
        _fail(f"{action} failed: {exc}")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    print_settings(
        [
            ("backend", settings.db_backend),
            ("target", _describe_target(settings)),
            ("pool", f"min={settings.pool_min_size} max={settings.pool_max_size}"),
            ("pool_timeout_seconds", settings.pool_timeout_seconds),
            ("statement_timeout_ms", settings.statement_timeout_ms),
            ("connect_attempts", settings.connect_attempts),
            ("app_env", settings.app_env),
            ("log_level", settings.log_level),
            ("log_json", settings.log_json),
        ]
    )


@app.command()
def ping() -> None:
    """
    Run SELECT 1 against the configured database.
    """
    try:
        result = _open().execute_raw("SELECT 1 AS ok")
    except Exception as exc:
        log.error("Ping failed: %s", exc)
        _fail(f"Database unreachable: {exc}")
    else:
        typer.echo(f"ok ({len(result.rows)} row)")


@app.command()
def find(
    table: str = typer.Argument(..., help="Table to read."),
    page: int = typer.Option(1, "--page", "-p", help="1-based page number."),
    limit: int = typer.Option(10, "--limit", "-l", help="Rows per page (max 100)."),
    search_column: Optional[str] = typer.Option(
        None, "--search-column", "-c", help="Column to search (requires --term)."
    ),
    term: Optional[str] = typer.Option(None, "--term", "-t", help="Search term."),
    exact: bool = typer.Option(False, "--exact", help="Match the term exactly instead of LIKE."),
    include_deleted: bool = typer.Option(
        False, "--include-deleted", help="Include soft-deleted rows."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """
    List one page of rows, newest first.
    """
    if (search_column is None) != (term is None):
        raise typer.BadParameter("--search-column and --term must be given together")

    pagination = {"page": page, "limit": limit}
    with _reporting_errors("Query"):
        dal = _open()
        if search_column is not None:
            result = dal.find_by_search(
                table,
                search_column,
                term,
                exact_match=exact,
                pagination=pagination,
                include_soft_deleted=include_deleted,
            )
        else:
            result = dal.find_all(
                table, pagination=pagination, include_soft_deleted=include_deleted
            )

    if as_json:
        typer.echo(json.dumps(result.model_dump(by_alias=True), indent=2, default=str))
        return
    print_rows(result.data, title=table, pagination=result.pagination)


@app.command()
def count(
    table: str = typer.Argument(..., help="Table to count."),
    include_deleted: bool = typer.Option(
        False, "--include-deleted", help="Include soft-deleted rows."
    ),
) -> None:
    """
    Count rows (live rows only unless --include-deleted).
    """
    with _reporting_errors("Count"):
        total = _open().count(table, include_soft_deleted=include_deleted)
    typer.echo(str(total))


@app.command()
def raw(
    sql: str = typer.Argument(..., help="SQL using the backend's placeholder style."),
    params: Optional[List[str]] = typer.Argument(None, help="Positional parameters."),
) -> None:
    """
    Execute SQL as is (no soft-delete filter) and print the result.
    """
    with _reporting_errors("Statement"):
        result = _open().execute_raw(sql, params or [])
    if result.fields:
        print_rows(result.rows, fields=result.fields)
    else:
        typer.echo(f"{result.affected_rows} row(s) affected")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
