"""SQLAlchemy adapter package for settlepy."""

from __future__ import annotations

from .engine import (
    StartupError,
    configured_engine,
    is_started,
    row_store,
    shutdown,
    startup,
)
from .mappings import TABLES, create_all_tables, metadata
from .row_store import SqlAlchemyRowStore

__all__ = [
    "TABLES",
    "SqlAlchemyRowStore",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "metadata",
    "row_store",
    "shutdown",
    "startup",
]
