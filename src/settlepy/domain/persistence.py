"""Chunked, failure-isolated writes of canonical records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from settlepy.domain.errors import PersistenceError
from settlepy.domain.model import ReferenceKind, Table

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from settlepy.domain.model import CanonicalRecord
    from settlepy.domain.ports import Row, RowStore
    from settlepy.domain.references import ReferenceSnapshot

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 100


@dataclass(frozen=True, slots=True)
class LabelRelation:
    """A foreign relation expressed by a human label in the source row."""

    label_field: str
    id_field: str
    kind: ReferenceKind


PROJECT_BY_TITLE = LabelRelation(
    label_field="project_title", id_field="project_id", kind=ReferenceKind.PROJECT
)

LABEL_RELATIONS: Mapping[Table, tuple[LabelRelation, ...]] = MappingProxyType(
    {
        Table.CONTACTS: (PROJECT_BY_TITLE,),
        Table.TEAM_TASKS: (PROJECT_BY_TITLE,),
    }
)


@dataclass(frozen=True, slots=True)
class RecordError:
    index: int
    data: Row
    error: str


@dataclass(frozen=True, slots=True)
class BatchInsertResult:
    inserted_count: int = 0
    errors: tuple[RecordError, ...] = ()

    @property
    def success(self) -> bool:
        return not self.errors

    def merge(self, other: BatchInsertResult) -> BatchInsertResult:
        return BatchInsertResult(
            inserted_count=self.inserted_count + other.inserted_count,
            errors=(*self.errors, *other.errors),
        )


@dataclass(slots=True)
class BatchWriter:
    """Insert rows chunk by chunk; a failing chunk is retried row by row.

    Label relations are resolved per row right before its chunk is written;
    a label that does not resolve is stored as ``None``.
    """

    store: RowStore
    references: ReferenceSnapshot | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    relations: Mapping[Table, tuple[LabelRelation, ...]] = field(
        default_factory=lambda: LABEL_RELATIONS
    )

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be positive")

    def write_records(self, records: Sequence[CanonicalRecord]) -> BatchInsertResult:
        """Write records, routing each to its table; indexes refer to ``records``."""

        by_table: dict[Table, list[tuple[int, Row]]] = {}
        for index, record in enumerate(records):
            by_table.setdefault(record.table, []).append((index, record.to_row()))

        result = BatchInsertResult()
        for table, indexed in by_table.items():
            result = result.merge(self._write_indexed(table, indexed))
        return result

    def write(self, table: Table, rows: Sequence[Mapping[str, object]]) -> BatchInsertResult:
        return self._write_indexed(table, [(index, dict(row)) for index, row in enumerate(rows)])

    def _write_indexed(self, table: Table, indexed: list[tuple[int, Row]]) -> BatchInsertResult:
        inserted = 0
        errors: list[RecordError] = []
        for start in range(0, len(indexed), self.chunk_size):
            chunk = [
                (index, self._resolve_relations(table, row))
                for index, row in indexed[start : start + self.chunk_size]
            ]
            try:
                inserted += self.store.insert(table, [row for _, row in chunk])
                continue
            except PersistenceError as exc:
                log.warning(
                    "Chunk %s-%s of %s failed, retrying per record: %s",
                    start,
                    start + len(chunk) - 1,
                    table,
                    exc,
                )
            for index, row in chunk:
                try:
                    inserted += self.store.insert(table, [row])
                except PersistenceError as exc:
                    log.warning("Record %s of %s rejected: %s", index, table, exc)
                    errors.append(RecordError(index=index, data=row, error=str(exc)))
        log.info("Inserted %s rows into %s (%s errors)", inserted, table, len(errors))
        return BatchInsertResult(inserted_count=inserted, errors=tuple(errors))

    def _resolve_relations(self, table: Table, row: Row) -> Row:
        relations = self.relations.get(table, ())
        if not relations:
            return row
        resolved = dict(row)
        for relation in relations:
            label = resolved.pop(relation.label_field, None)
            target: str | None = None
            if self.references is not None and isinstance(label, str):
                target = self.references.resolve(relation.kind, label)
                if target is None:
                    log.debug("%s label %r not found; storing null", relation.kind, label)
            resolved[relation.id_field] = target
        return resolved
