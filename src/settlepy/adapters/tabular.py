"""Readers turning CSV files and Excel workbooks into :class:`SourceTable` values."""

from __future__ import annotations

import csv
import logging
from datetime import date, datetime
from typing import TYPE_CHECKING
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from settlepy.domain.ingest_pipeline import SourceTable

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence
    from pathlib import Path

log = logging.getLogger(__name__)

CSV_SUFFIXES = frozenset({".csv"})
EXCEL_SUFFIXES = frozenset({".xlsx", ".xlsm"})
SUPPORTED_SUFFIXES = CSV_SUFFIXES | EXCEL_SUFFIXES


class UnsupportedSourceError(ValueError):
    """The file type cannot be read as a tabular source."""


def cell_text(value: object) -> str | None:
    """Render a cell as stripped text; blanks become ``None``."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    return text or None


def _build_table(name: str, records: Iterable[Sequence[object]]) -> SourceTable:
    iterator = iter(records)
    header_cells = next(iterator, None)
    if header_cells is None:
        return SourceTable(name=name, headers=())

    headers = tuple(cell_text(cell) or "" for cell in header_cells)
    rows: list[dict[str, str | None]] = []
    for record in iterator:
        cells = [cell_text(cell) for cell in record]
        if all(cell is None for cell in cells):
            continue
        row: dict[str, str | None] = {}
        for index, header in enumerate(headers):
            if not header:
                continue
            row[header] = cells[index] if index < len(cells) else None
        rows.append(row)
    return SourceTable(name=name, headers=tuple(h for h in headers if h), rows=tuple(rows))


def read_csv(path: Path) -> SourceTable:
    """Read a UTF-8 CSV file (BOM tolerated); the first row is the header."""

    with path.open(encoding="utf-8-sig", newline="") as handle:
        table = _build_table(path.stem, list(csv.reader(handle)))
    log.debug("Read %s rows from %s", len(table.rows), path)
    return table


def read_workbook(path: Path, *, sheet: str | None = None) -> list[SourceTable]:
    """Read every sheet (or only ``sheet``) of an Excel workbook."""

    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile) as exc:
        raise UnsupportedSourceError(f"Cannot open workbook {path.name}: {exc}") from exc
    try:
        names = workbook.sheetnames
        if sheet is not None:
            if sheet not in names:
                raise UnsupportedSourceError(f"Sheet '{sheet}' not found in {path.name}")
            names = [sheet]
        tables = [
            _build_table(name, workbook[name].iter_rows(values_only=True)) for name in names
        ]
    finally:
        workbook.close()
    for table in tables:
        log.debug("Read %s rows from %s[%s]", len(table.rows), path.name, table.name)
    return tables


def read_source(path: Path, *, sheet: str | None = None) -> list[SourceTable]:
    """Read ``path`` into one table per CSV file or workbook sheet."""

    if not path.is_file():
        raise FileNotFoundError(f"Source file not found: {path}")
    suffix = path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        return [read_csv(path)]
    if suffix in EXCEL_SUFFIXES:
        return read_workbook(path, sheet=sheet)
    raise UnsupportedSourceError(f"Unsupported source type: {path.name}")


def iter_source_files(directory: Path) -> Iterator[Path]:
    """Yield readable source files of ``directory`` in name order."""

    for path in sorted(directory.iterdir()):
        if path.is_file() and path.suffix.lower() in SUPPORTED_SUFFIXES:
            yield path
