"""
Result and pagination models returned by the data-access layer.

Rows themselves stay plain dicts (`Record`): tables are arbitrary and the
layer never maps them to classes. The envelopes around them are frozen
pydantic models so callers get attribute access, validation of the numbers
they carry, and `model_dump(by_alias=True)` for camelCase JSON responses
(`totalPages`, `hasNext`, `insertId`, ...).
"""
from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Record = Dict[str, Any]


class _ResultModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        arbitrary_types_allowed=False,
    )


class PaginationParams(_ResultModel):
    """
    Normalised page request: always page >= 1, 1 <= limit <= 100.
    """

    page: int = Field(1, ge=1, description="1-based page number.")
    limit: int = Field(10, ge=1, le=100, description="Rows per page.")
    offset: int = Field(0, ge=0, description="(page - 1) * limit.")


class PaginationResult(_ResultModel):
    """
    Page metadata; total_pages = ceil(total / limit).
    """

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0, description="Rows matching the WHERE clause.")
    total_pages: int = Field(..., ge=0)
    has_next: bool
    has_prev: bool


class PaginatedResult(_ResultModel):
    data: List[Record] = Field(default_factory=list)
    pagination: PaginationResult


class InsertResult(_ResultModel):
    insert_id: Any = Field(None, description="Primary key of the (first) inserted row.")
    affected_rows: int = Field(0, ge=0)


class UpdateResult(_ResultModel):
    affected_rows: int = Field(0, ge=0)
    changed_rows: int = Field(0, ge=0)


class RawResult(_ResultModel):
    rows: List[Record] = Field(default_factory=list)
    fields: List[str] = Field(default_factory=list, description="Column names, in cursor order.")
    affected_rows: int = Field(0, description="Driver rowcount; -1 when the driver cannot tell.")


__all__ = [
    "Record",
    "PaginationParams",
    "PaginationResult",
    "PaginatedResult",
    "InsertResult",
    "UpdateResult",
    "RawResult",
]
