"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from settlepy.adapters.snapshots import JsonSnapshotStorage
from settlepy.adapters.sqlalchemy import is_started, row_store, startup
from settlepy.adapters.tabular import UnsupportedSourceError, iter_source_files, read_source
from settlepy.config import get_etl_config, get_storage_config
from settlepy.domain.backup import BackupManager
from settlepy.domain.errors import PersistenceError, SettlepyError
from settlepy.domain.ingest_pipeline import default_rules, detect_table_kind, run_ingest_pipeline
from settlepy.domain.model import LEDGER_TABLES, Table, TableKind, new_id
from settlepy.domain.persistence import BatchWriter
from settlepy.domain.references import load_reference_snapshot, normalize_key
from settlepy.domain.seed import placeholder_reference, seed_reference_data
from settlepy.domain.settlement import (
    generate_settlement as generate_period_settlement,
    member_names,
    member_totals,
    unpaid_summary as build_unpaid_summary,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from pathlib import Path

    from settlepy.config import EtlConfig
    from settlepy.domain.backup import RestoreResult, Snapshot, TableCheck
    from settlepy.domain.diagnostics import Issue
    from settlepy.domain.ingest_pipeline import SourceTable, ValidationResult
    from settlepy.domain.model import ReferenceKind
    from settlepy.domain.persistence import BatchInsertResult
    from settlepy.domain.ports import RowStore, SnapshotStorage
    from settlepy.domain.settlement import GenerationResult, MemberTotal, UnpaidSummary


log = getLogger(__name__)

# Projects first so contacts and team tasks can resolve project titles.
KIND_ORDER: tuple[TableKind, ...] = (
    TableKind.PROJECTS,
    TableKind.CONTACTS,
    TableKind.FEEDS,
    TableKind.TEAM_TASKS,
    TableKind.MILEAGE,
    TableKind.FUNDS,
)

CLEARABLE_TABLES: tuple[Table, ...] = tuple(reversed(LEDGER_TABLES))


@dataclass(frozen=True, slots=True)
class ImportOutcome:
    """Validation and (unless dry) persistence result of one source table."""

    source: str
    kind: TableKind
    validation: ValidationResult
    insert: BatchInsertResult | None = None
    created_references: tuple[tuple[ReferenceKind, str], ...] = ()

    @property
    def dry_run(self) -> bool:
        return self.insert is None

    @property
    def success(self) -> bool:
        return self.validation.success and (self.insert is None or self.insert.success)


@dataclass(frozen=True, slots=True)
class SourceFailure:
    source: str
    error: str


@dataclass(frozen=True, slots=True)
class MigrationResult:
    imports: tuple[ImportOutcome, ...] = ()
    failures: tuple[SourceFailure, ...] = ()
    skipped: tuple[str, ...] = ()
    seeded: Mapping[Table, int] = field(default_factory=dict[Table, int])
    cleared: Mapping[Table, int] = field(default_factory=dict[Table, int])

    @property
    def success(self) -> bool:
        return not self.failures and all(outcome.success for outcome in self.imports)


@dataclass(frozen=True, slots=True)
class SettlementReport:
    result: GenerationResult
    totals: tuple[MemberTotal, ...] = ()


def _store(store: RowStore | None) -> RowStore:
    if store is not None:
        return store
    if not is_started():
        startup()
    return row_store()


def _snapshots(storage: SnapshotStorage | None) -> SnapshotStorage:
    return storage or JsonSnapshotStorage(get_storage_config().backup_dir())


def create_missing_references(
    store: RowStore, issues: Iterable[Issue]
) -> tuple[tuple[ReferenceKind, str], ...]:
    """Insert a placeholder member/channel/category for every unresolved token."""

    wanted: dict[tuple[ReferenceKind, str], str] = {}
    for issue in issues:
        if issue.reference is None or not isinstance(issue.value, str):
            continue
        key = (issue.reference, normalize_key(issue.value))
        if key[1] and key not in wanted:
            wanted[key] = issue.value.strip()

    rows_by_table: dict[Table, list[dict[str, object]]] = {}
    created: list[tuple[ReferenceKind, str]] = []
    for (kind, _), token in wanted.items():
        try:
            table, row = placeholder_reference(kind, token, new_id())
        except ValueError:
            log.warning("Cannot create a %s reference for '%s'", kind, token)
            continue
        rows_by_table.setdefault(table, []).append(row)
        created.append((kind, token))

    for table, rows in rows_by_table.items():
        store.insert(table, rows)
        log.info("Created %s missing %s rows", len(rows), table)
    return tuple(created)


def ingest_table(
    source: SourceTable,
    kind: TableKind,
    *,
    store: RowStore | None = None,
    etl: EtlConfig | None = None,
    dry_run: bool = False,
) -> ImportOutcome:
    """Validate one source table and, unless ``dry_run``, write its accepted rows."""

    effective_store = _store(store)
    config = etl or get_etl_config()
    rules = default_rules(kind, amount_range=config.amount_range)
    references = load_reference_snapshot(effective_store, fuzzy=config.fuzzy_references)
    result = run_ingest_pipeline(source, kind=kind, references=references, rules=rules)

    created: tuple[tuple[ReferenceKind, str], ...] = ()
    if config.create_missing_references and not dry_run and result.mapping_errors():
        created = create_missing_references(effective_store, result.mapping_errors())
        if created:
            references = load_reference_snapshot(
                effective_store, fuzzy=config.fuzzy_references
            )
            result = run_ingest_pipeline(source, kind=kind, references=references, rules=rules)

    if dry_run:
        log.info("Dry run for %s: nothing written", source.name)
        return ImportOutcome(source.name, kind, result, created_references=created)

    writer = BatchWriter(effective_store, references=references, chunk_size=config.batch_size)
    inserted = writer.write_records(result.data)
    return ImportOutcome(source.name, kind, result, inserted, created)


def import_file(
    path: Path,
    kind: TableKind,
    *,
    sheet: str | None = None,
    store: RowStore | None = None,
    etl: EtlConfig | None = None,
    dry_run: bool = False,
) -> list[ImportOutcome]:
    """Import every table of ``path`` (one per CSV file or workbook sheet) as ``kind``."""

    effective_store = _store(store)
    return [
        ingest_table(table, kind, store=effective_store, etl=etl, dry_run=dry_run)
        for table in read_source(path, sheet=sheet)
    ]


def _discover_tables(
    paths: Sequence[Path],
) -> tuple[list[tuple[TableKind, SourceTable]], list[str], list[SourceFailure]]:
    found: list[tuple[TableKind, SourceTable]] = []
    skipped: list[str] = []
    failures: list[SourceFailure] = []
    for path in paths:
        try:
            tables = read_source(path)
        except (OSError, UnicodeDecodeError, UnsupportedSourceError) as exc:
            log.error("Cannot read %s: %s", path.name, exc)
            failures.append(SourceFailure(path.name, str(exc)))
            continue
        for table in tables:
            kind = detect_table_kind(table.name) or detect_table_kind(path.stem)
            if kind is None:
                log.warning("Unknown table kind, skipping %s", table.name)
                skipped.append(table.name)
                continue
            found.append((kind, table))
    found.sort(key=lambda entry: KIND_ORDER.index(entry[0]))
    return found, skipped, failures


def migrate(
    input_dir: Path,
    *,
    seed: bool = False,
    clear: bool = False,
    dry_run: bool = False,
    store: RowStore | None = None,
    etl: EtlConfig | None = None,
) -> MigrationResult:
    """Import every recognised CSV/Excel source of ``input_dir``."""

    if not input_dir.is_dir():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")

    effective_store = _store(store)
    effective_store.ping()
    cleared: Mapping[Table, int] = {}
    seeded: Mapping[Table, int] = {}
    if dry_run and (clear or seed):
        log.info("Dry run: skipping clear/seed")
    else:
        if clear:
            cleared = clear_data(confirm=True, store=effective_store)
        if seed:
            seeded = seed_reference_data(effective_store)

    paths = list(iter_source_files(input_dir))
    log.info("Found %s source files in %s", len(paths), input_dir)
    tables, skipped, failures = _discover_tables(paths)

    imports: list[ImportOutcome] = []
    for kind, table in tables:
        try:
            imports.append(
                ingest_table(table, kind, store=effective_store, etl=etl, dry_run=dry_run)
            )
        except PersistenceError as exc:
            log.error("Import of %s failed: %s", table.name, exc)
            failures.append(SourceFailure(table.name, str(exc)))

    result = MigrationResult(
        imports=tuple(imports),
        failures=tuple(failures),
        skipped=tuple(skipped),
        seeded=seeded,
        cleared=cleared,
    )
    log.info(
        "Migration finished: imported=%s, succeeded=%s, failed=%s, skipped=%s",
        len(imports),
        sum(1 for outcome in imports if outcome.success),
        len(failures),
        len(skipped),
    )
    return result


def seed(*, store: RowStore | None = None) -> Mapping[Table, int]:
    return seed_reference_data(_store(store))


def clear_data(*, confirm: bool, store: RowStore | None = None) -> dict[Table, int]:
    """Delete every ledger and settlement row; reference tables are kept."""

    if not confirm:
        raise ValueError("Refusing to clear data without confirmation")
    effective_store = _store(store)
    removed = {table: effective_store.delete(table) for table in CLEARABLE_TABLES}
    log.warning("Cleared data: %s", {str(k): v for k, v in removed.items()})
    return removed


def check_connection(*, store: RowStore | None = None) -> bool:
    try:
        _store(store).ping()
    except SettlepyError:
        log.exception("Row store connection failed")
        return False
    log.info("Row store connection OK")
    return True


def generate_settlement(
    month: str, *, force: bool = False, store: RowStore | None = None
) -> SettlementReport:
    effective_store = _store(store)
    result = generate_period_settlement(effective_store, month, force=force)
    totals = member_totals(result.items, member_names(effective_store))
    return SettlementReport(result=result, totals=tuple(totals))


def unpaid_summary(*, store: RowStore | None = None) -> UnpaidSummary:
    return build_unpaid_summary(_store(store))


def _backup_manager(
    store: RowStore | None, storage: SnapshotStorage | None, etl: EtlConfig | None
) -> BackupManager:
    config = etl or get_etl_config()
    return BackupManager(_store(store), _snapshots(storage), chunk_size=config.batch_size)


def backup(
    name: str,
    *,
    store: RowStore | None = None,
    storage: SnapshotStorage | None = None,
    etl: EtlConfig | None = None,
) -> Snapshot:
    return _backup_manager(store, storage, etl).backup(name)


def validate_backup(
    name: str,
    *,
    store: RowStore | None = None,
    storage: SnapshotStorage | None = None,
    etl: EtlConfig | None = None,
) -> tuple[TableCheck, ...]:
    return _backup_manager(store, storage, etl).validate(name)


def rollback(
    name: str,
    *,
    store: RowStore | None = None,
    storage: SnapshotStorage | None = None,
    etl: EtlConfig | None = None,
) -> RestoreResult:
    return _backup_manager(store, storage, etl).restore(name)


def list_backups(
    *,
    store: RowStore | None = None,
    storage: SnapshotStorage | None = None,
    etl: EtlConfig | None = None,
) -> list[Snapshot]:
    return _backup_manager(store, storage, etl).list()
