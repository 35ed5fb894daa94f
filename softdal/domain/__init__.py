"""
Domain package for softdal.

Exports the result envelopes and pagination models shared by the builders,
the data-access client and the CLI.
"""

from softdal.domain.models import (
    InsertResult,
    PaginatedResult,
    PaginationParams,
    PaginationResult,
    RawResult,
    Record,
    UpdateResult,
)

__all__ = [
    "InsertResult",
    "PaginatedResult",
    "PaginationParams",
    "PaginationResult",
    "RawResult",
    "Record",
    "UpdateResult",
]
