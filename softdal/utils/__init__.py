"""
Utilities package for softdal.

Exports shared helpers for logging and other cross-cutting concerns.
Keep this package lightweight and free of SQL-building logic.
"""

from softdal.utils.logging import JsonFormatter, configure_logging, get_logger

__all__ = [
    "JsonFormatter",
    "configure_logging",
    "get_logger",
]
