from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Tuple


@dataclass(frozen=True)
class Statement:
    """
    SQL text plus its positional parameters.

    Values never appear in `sql`; they travel in `params` in placeholder order.
    """

    sql: str
    params: Tuple[Any, ...] = field(default_factory=tuple)


__all__ = ["Statement"]
