"""Full-table snapshots with per-table checksums, and checked restore."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from settlepy.domain.errors import BackupNotFoundError
from settlepy.domain.model import Table

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from settlepy.domain.ports import Row, RowStore, SnapshotStorage

log = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0"
BACKUP_TABLES: tuple[Table, ...] = tuple(Table)
DEFAULT_RESTORE_CHUNK = 100


def table_checksum(rows: Iterable[Mapping[str, object]]) -> str:
    """SHA-256 over the sorted key-sorted JSON rows; row order does not matter."""

    serialized = sorted(
        json.dumps(row, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)
        for row in rows
    )
    digest = hashlib.sha256()
    for line in serialized:
        digest.update(line.encode("utf-8"))
        digest.update(b"\n")
    return digest.hexdigest()


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Point-in-time dump of the backed-up tables."""

    name: str
    timestamp: datetime
    tables: Mapping[str, list[Row]]
    checksums: Mapping[str, str]
    version: str = SNAPSHOT_VERSION

    @property
    def table_count(self) -> int:
        return len(self.tables)

    @property
    def total_records(self) -> int:
        return sum(len(rows) for rows in self.tables.values())


class CheckStatus(StrEnum):
    PASS = "PASS"
    FAIL = "FAIL"


@dataclass(frozen=True, slots=True)
class TableCheck:
    table: str
    status: CheckStatus
    rows: int
    expected: str | None
    actual: str

    @property
    def passed(self) -> bool:
        return self.status is CheckStatus.PASS


class RestoreStatus(StrEnum):
    RESTORED = "restored"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class RestoreResult:
    name: str
    status: RestoreStatus
    checks: tuple[TableCheck, ...] = ()
    restored: Mapping[str, int] = field(default_factory=dict[str, int])

    @property
    def success(self) -> bool:
        return self.status is RestoreStatus.RESTORED


def check_snapshot(snapshot: Snapshot) -> tuple[TableCheck, ...]:
    checks: list[TableCheck] = []
    for table, rows in snapshot.tables.items():
        expected = snapshot.checksums.get(table)
        actual = table_checksum(rows)
        status = CheckStatus.PASS if expected == actual else CheckStatus.FAIL
        if status is CheckStatus.FAIL:
            log.warning("Checksum mismatch for %s in backup %s", table, snapshot.name)
        checks.append(
            TableCheck(table=table, status=status, rows=len(rows), expected=expected, actual=actual)
        )
    return tuple(checks)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class BackupManager:
    store: RowStore
    storage: SnapshotStorage
    tables: Sequence[Table] = BACKUP_TABLES
    chunk_size: int = DEFAULT_RESTORE_CHUNK
    now_provider: Callable[[], datetime] = field(default=_utcnow)

    def backup(self, name: str) -> Snapshot:
        dumped: dict[str, list[Row]] = {}
        checksums: dict[str, str] = {}
        for table in self.tables:
            rows = self.store.select(table)
            dumped[str(table)] = rows
            checksums[str(table)] = table_checksum(rows)
            log.debug("Backed up %s rows from %s", len(rows), table)

        snapshot = Snapshot(
            name=name, timestamp=self.now_provider(), tables=dumped, checksums=checksums
        )
        key = self.storage.save(snapshot)
        log.info(
            "Backup %s written to %s: tables=%s, records=%s",
            name,
            key,
            snapshot.table_count,
            snapshot.total_records,
        )
        return snapshot

    def _require(self, name: str) -> Snapshot:
        snapshot = self.storage.load(name)
        if snapshot is None:
            raise BackupNotFoundError(f"No backup named '{name}'")
        return snapshot

    def validate(self, name: str) -> tuple[TableCheck, ...]:
        """Recompute every table checksum of ``name`` without touching live data."""

        return check_snapshot(self._require(name))

    def restore(self, name: str) -> RestoreResult:
        snapshot = self._require(name)
        checks = check_snapshot(snapshot)
        if not all(check.passed for check in checks):
            log.error("Backup %s failed validation; restore aborted", name)
            return RestoreResult(name=name, status=RestoreStatus.ABORTED, checks=checks)

        ordered = [table for table in Table if str(table) in snapshot.tables]
        for table in reversed(ordered):
            removed = self.store.delete(table)
            log.debug("Cleared %s rows from %s", removed, table)

        restored: dict[str, int] = {}
        for table in ordered:
            rows = snapshot.tables[str(table)]
            count = 0
            for start in range(0, len(rows), self.chunk_size):
                count += self.store.insert(table, rows[start : start + self.chunk_size])
            restored[str(table)] = count
        log.info("Restored backup %s: %s records", name, sum(restored.values()))
        return RestoreResult(
            name=name, status=RestoreStatus.RESTORED, checks=checks, restored=restored
        )

    def list(self) -> list[Snapshot]:
        return sorted(self.storage.list(), key=lambda snap: snap.timestamp, reverse=True)
