"""Backup snapshot storage adapters."""

from __future__ import annotations

from .schema import LatestPointer, SnapshotDocument, SnapshotMetadata, TableDump
from .storage import LATEST_POINTER, JsonSnapshotStorage, snapshot_filename

__all__ = [
    "LATEST_POINTER",
    "JsonSnapshotStorage",
    "LatestPointer",
    "SnapshotDocument",
    "SnapshotMetadata",
    "TableDump",
    "snapshot_filename",
]
