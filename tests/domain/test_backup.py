from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from settlepy.domain.backup import (
    BackupManager,
    CheckStatus,
    RestoreStatus,
    Snapshot,
    table_checksum,
)
from settlepy.domain.errors import BackupNotFoundError
from settlepy.domain.model import Table

if TYPE_CHECKING:
    from settlepy.adapters.sqlalchemy import SqlAlchemyRowStore


class FakeSnapshotStorage:
    def __init__(self) -> None:
        self.saved: list[Snapshot] = []

    def save(self, snapshot: Snapshot) -> str:
        self.saved.append(snapshot)
        return f"memory://{snapshot.name}/{len(self.saved)}"

    def load(self, name: str) -> Snapshot | None:
        matches = [snapshot for snapshot in self.list() if snapshot.name == name]
        return matches[0] if matches else None

    def list(self) -> list[Snapshot]:
        return sorted(self.saved, key=lambda snapshot: snapshot.timestamp, reverse=True)


def _clock() -> datetime:
    return datetime(2024, 4, 1, 12, 0, tzinfo=UTC)


def _contacts(store: SqlAlchemyRowStore) -> None:
    store.insert(
        Table.CONTACTS,
        [
            {"id": "c-1", "member_id": "OY", "date": "2024-03-02", "amount": 1000.0},
            {"id": "c-2", "member_id": "LE", "date": "2024-03-03", "amount": 2000.0},
        ],
    )


def test_checksum_ignores_row_and_key_order() -> None:
    rows = [{"id": "a", "amount": 1.0}, {"amount": 2.0, "id": "b"}]

    assert table_checksum(rows) == table_checksum(list(reversed(rows)))
    assert table_checksum(rows) != table_checksum(rows[:1])


def test_backup_then_validate_passes(seeded_store: SqlAlchemyRowStore) -> None:
    _contacts(seeded_store)
    manager = BackupManager(seeded_store, FakeSnapshotStorage(), now_provider=_clock)

    snapshot = manager.backup("before-import")
    checks = manager.validate("before-import")

    assert snapshot.table_count == len(Table)
    assert snapshot.tables["contacts"][0]["id"] in {"c-1", "c-2"}
    assert all(check.status is CheckStatus.PASS for check in checks)
    assert {check.table: check.rows for check in checks}["contacts"] == 2


def test_restore_brings_back_deleted_rows(seeded_store: SqlAlchemyRowStore) -> None:
    _contacts(seeded_store)
    manager = BackupManager(seeded_store, FakeSnapshotStorage(), chunk_size=1)
    manager.backup("daily")
    seeded_store.delete(Table.CONTACTS)
    seeded_store.insert(
        Table.CONTACTS,
        [{"id": "c-9", "member_id": "KY", "date": "2024-03-09", "amount": 400.0}],
    )

    result = manager.restore("daily")

    assert result.success
    assert result.restored["contacts"] == 2
    ids = sorted(row["id"] for row in seeded_store.select(Table.CONTACTS))
    assert ids == ["c-1", "c-2"]
    assert all(check.passed for check in manager.validate("daily"))


def test_tampered_backup_fails_and_is_not_restored(seeded_store: SqlAlchemyRowStore) -> None:
    _contacts(seeded_store)
    storage = FakeSnapshotStorage()
    manager = BackupManager(seeded_store, storage)
    original = manager.backup("daily")
    tables = dict(original.tables)
    tables["contacts"] = [{**tables["contacts"][0], "amount": 999_999.0}]
    storage.saved = [replace(original, tables=tables)]
    seeded_store.delete(Table.CONTACTS)

    checks = manager.validate("daily")
    result = manager.restore("daily")

    failed = [check.table for check in checks if not check.passed]
    assert failed == ["contacts"]
    assert result.status is RestoreStatus.ABORTED
    assert not result.restored
    assert seeded_store.select(Table.CONTACTS) == []


def test_missing_backup_raises(seeded_store: SqlAlchemyRowStore) -> None:
    manager = BackupManager(seeded_store, FakeSnapshotStorage())

    with pytest.raises(BackupNotFoundError, match="nightly"):
        manager.validate("nightly")
    with pytest.raises(BackupNotFoundError):
        manager.restore("nightly")


def test_list_is_newest_first(seeded_store: SqlAlchemyRowStore) -> None:
    ticks = iter([_clock(), _clock() + timedelta(hours=1)])
    manager = BackupManager(
        seeded_store, FakeSnapshotStorage(), now_provider=lambda: next(ticks)
    )
    manager.backup("first")
    manager.backup("second")

    assert [snapshot.name for snapshot in manager.list()] == ["second", "first"]
