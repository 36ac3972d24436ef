"""Pydantic models describing the on-disk backup documents."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from settlepy.domain.backup import SNAPSHOT_VERSION, Snapshot


class SnapshotBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SnapshotMetadata(SnapshotBaseModel):
    name: str
    timestamp: datetime
    tables: list[str]
    total_records: int = Field(alias="totalRecords")
    checksums: dict[str, str]
    version: str = SNAPSHOT_VERSION

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class TableDump(SnapshotBaseModel):
    table: str
    data: list[dict[str, Any]]
    record_count: int = Field(alias="recordCount")
    checksum: str


class SnapshotDocument(SnapshotBaseModel):
    metadata: SnapshotMetadata
    tables: list[TableDump]

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> SnapshotDocument:
        return cls(
            metadata=SnapshotMetadata(
                name=snapshot.name,
                timestamp=snapshot.timestamp,
                tables=list(snapshot.tables),
                total_records=snapshot.total_records,
                checksums=dict(snapshot.checksums),
                version=snapshot.version,
            ),
            tables=[
                TableDump(
                    table=table,
                    data=rows,
                    record_count=len(rows),
                    checksum=snapshot.checksums.get(table, ""),
                )
                for table, rows in snapshot.tables.items()
            ],
        )

    def to_snapshot(self) -> Snapshot:
        return Snapshot(
            name=self.metadata.name,
            timestamp=self.metadata.timestamp,
            tables={dump.table: dump.data for dump in self.tables},
            checksums=dict(self.metadata.checksums),
            version=self.metadata.version,
        )


class LatestPointer(SnapshotBaseModel):
    latest_backup_file: str = Field(alias="latestBackupFile")
    backup_path: str = Field(alias="backupPath")
    metadata: SnapshotMetadata
