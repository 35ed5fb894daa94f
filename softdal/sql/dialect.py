"""
SQL dialect descriptors.

The builders only need two facts about the backend: which positional
placeholder token the driver expects, and whether INSERT can report the new
primary key through `RETURNING id` (PostgreSQL) or must rely on the cursor's
`lastrowid` (SQLite, MySQL).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Dialect:
    name: str
    placeholder: str = "?"
    returning_id: bool = False

    def placeholders(self, count: int) -> str:
        """Comma-joined run of `count` placeholders, e.g. "?, ?, ?"."""
        return ", ".join([self.placeholder] * count)


SQLITE = Dialect(name="sqlite", placeholder="?", returning_id=False)
POSTGRES = Dialect(name="postgresql", placeholder="%s", returning_id=True)

DEFAULT_DIALECT = SQLITE

_BY_NAME = {
    "sqlite": SQLITE,
    "postgres": POSTGRES,
    "postgresql": POSTGRES,
}


def dialect_for(backend: str) -> Dialect:
    """Resolve a backend name from settings to its Dialect."""
    key = (backend or "").strip().lower()
    try:
        return _BY_NAME[key]
    except KeyError:
        raise ValueError(f"Unsupported database backend: {backend!r}") from None


__all__ = ["Dialect", "SQLITE", "POSTGRES", "DEFAULT_DIALECT", "dialect_for"]
