"""
Offset pagination helpers.

`get_pagination_params` accepts whatever a request handler pulled out of a
query string (strings, numbers, None, garbage) and always returns usable
values; it never raises. The 100-row cap bounds the worst-case result set
regardless of caller input.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from softdal.domain.models import PaginationParams, PaginationResult

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _parse_int(value: Any) -> Optional[int]:
    """Integer value of `value`, or None when it is missing or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, (str, bytes)):
        text = value.decode("utf-8", "replace") if isinstance(value, bytes) else value
        text = text.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if math.isfinite(number) else None
    return None


def get_pagination_params(page_input: Any = None, limit_input: Any = None) -> PaginationParams:
    """
    Normalise raw page/limit input.

    Parameters
    ----------
    page_input : Any
        Page number as supplied by the caller. Missing or non-numeric -> 1;
        values below 1 are clamped to 1.
    limit_input : Any
        Page size as supplied by the caller. Missing or non-numeric -> 10;
        clamped to [1, 100].

    Returns
    -------
    PaginationParams
        page, limit and offset = (page - 1) * limit.
    """
    page = _parse_int(page_input)
    limit = _parse_int(limit_input)

    page = DEFAULT_PAGE if page is None else max(1, page)
    limit = DEFAULT_LIMIT if limit is None else min(MAX_LIMIT, max(1, limit))

    return PaginationParams(page=page, limit=limit, offset=(page - 1) * limit)


def build_pagination_result(page: int, limit: int, total: int) -> PaginationResult:
    total = max(0, int(total))
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return PaginationResult(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


__all__ = [
    "DEFAULT_PAGE",
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "get_pagination_params",
    "build_pagination_result",
]
