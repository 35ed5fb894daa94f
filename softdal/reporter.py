from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from softdal.domain.models import PaginationResult, Record

MAX_CELL_WIDTH = 60


def format_cell(value: Any) -> str:
    """
    Render one column value for a table cell.

    NULL shows as a dim marker so it cannot be confused with an empty string.
    """
    if value is None:
        return "[dim]NULL[/dim]"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat(sep=" ", timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<{len(bytes(value))} bytes>"

    text = str(value)
    if len(text) > MAX_CELL_WIDTH:
        text = text[: MAX_CELL_WIDTH - 1] + "…"
    return escape(text)


def _field_names(rows: Sequence[Record], fields: Optional[Sequence[str]]) -> List[str]:
    if fields:
        return list(fields)
    names: List[str] = []
    for row in rows:
        for key in row:
            if key not in names:
                names.append(key)
    return names


def build_rows_table(
    rows: Sequence[Record],
    *,
    fields: Optional[Sequence[str]] = None,
    title: Optional[str] = None,
    pagination: Optional[PaginationResult] = None,
) -> Table:
    """
    Build a rich table for a list of records.

    Column order follows `fields` when given (cursor order), otherwise the
    order keys first appear in the rows. Soft-deleted rows are dimmed.
    """
    caption = None
    if pagination is not None:
        caption = (
            f"Page {pagination.page}/{max(pagination.total_pages, 1)} │ "
            f"{pagination.total:,} total │ limit {pagination.limit}"
        )

    table = Table(title=title, box=box.ROUNDED, caption=caption)
    names = _field_names(rows, fields)
    for name in names:
        justify = "right" if name == "id" or name.endswith("_id") else "left"
        table.add_column(name, justify=justify, style="cyan" if name == "id" else None)

    for row in rows:
        style = "dim" if row.get("deleted_at") is not None else None
        table.add_row(*(format_cell(row.get(name)) for name in names), style=style)

    return table


def print_rows(
    rows: Sequence[Record],
    *,
    fields: Optional[Sequence[str]] = None,
    title: Optional[str] = None,
    pagination: Optional[PaginationResult] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Render query results as a rich table.
    """
    console = console or Console()

    if not rows and not fields:
        console.print("[yellow]No rows.[/yellow]")
        if pagination is not None:
            console.print(f"[dim]{pagination.total:,} total[/dim]")
        return

    console.print(build_rows_table(rows, fields=fields, title=title, pagination=pagination))


def print_settings(values: Sequence[tuple], console: Optional[Console] = None) -> None:
    """Render (name, value) pairs as a two-column table."""
    console = console or Console()
    table = Table(title="softdal configuration", box=box.ROUNDED)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    for name, value in values:
        table.add_row(str(name), format_cell(value))
    console.print(table)


__all__ = ["format_cell", "build_rows_table", "print_rows", "print_settings"]
