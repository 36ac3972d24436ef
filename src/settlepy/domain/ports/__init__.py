"""Domain ports."""

from __future__ import annotations

from .persistence import FilterOp, Row, RowFilter, RowStore, eq, gte, lte, neq
from .snapshots import SnapshotStorage

__all__ = [
    "FilterOp",
    "Row",
    "RowFilter",
    "RowStore",
    "SnapshotStorage",
    "eq",
    "gte",
    "lte",
    "neq",
]
