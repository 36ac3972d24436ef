"""JSON file storage for backup snapshots."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .schema import LatestPointer, SnapshotDocument

if TYPE_CHECKING:
    from pathlib import Path

    from settlepy.domain.backup import Snapshot

log = logging.getLogger(__name__)

LATEST_POINTER = "latest_backup.json"
_UNSAFE = re.compile(r"[^\w.-]+")


def snapshot_filename(snapshot: Snapshot) -> str:
    safe_name = _UNSAFE.sub("_", snapshot.name).strip("_") or "backup"
    return f"{safe_name}_{snapshot.timestamp:%Y-%m-%d_%H-%M-%S}.json"


class JsonSnapshotStorage:
    """One JSON document per snapshot plus a ``latest_backup.json`` pointer."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def save(self, snapshot: Snapshot) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        document = SnapshotDocument.from_snapshot(snapshot)
        path = self.directory / snapshot_filename(snapshot)
        path.write_text(document.model_dump_json(by_alias=True, indent=2), encoding="utf-8")

        pointer = LatestPointer(
            latest_backup_file=path.name,
            backup_path=str(path),
            metadata=document.metadata,
        )
        (self.directory / LATEST_POINTER).write_text(
            pointer.model_dump_json(by_alias=True, indent=2), encoding="utf-8"
        )
        return str(path)

    def _read(self, path: Path) -> SnapshotDocument | None:
        try:
            return SnapshotDocument.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            log.warning("Ignoring unreadable backup %s: %s", path.name, exc.errors()[:1])
            return None

    def list(self) -> list[Snapshot]:
        if not self.directory.is_dir():
            return []
        snapshots: list[Snapshot] = []
        for path in sorted(self.directory.glob("*.json")):
            if path.name == LATEST_POINTER:
                continue
            document = self._read(path)
            if document is not None:
                snapshots.append(document.to_snapshot())
        snapshots.sort(key=lambda snapshot: snapshot.timestamp, reverse=True)
        return snapshots

    def load(self, name: str) -> Snapshot | None:
        matches = [snapshot for snapshot in self.list() if snapshot.name == name]
        return matches[0] if matches else None

    def latest(self) -> LatestPointer | None:
        path = self.directory / LATEST_POINTER
        if not path.is_file():
            return None
        return LatestPointer.model_validate_json(path.read_text(encoding="utf-8"))
