from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import pytest
from openpyxl import Workbook

from settlepy.adapters.tabular import (
    UnsupportedSourceError,
    cell_text,
    iter_source_files,
    read_source,
)

if TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        ("  ", None),
        (" 크몽 ", "크몽"),
        (1100000.0, "1100000"),
        (12.5, "12.5"),
        (True, "true"),
        (datetime(2024, 3, 15, 13, 0), "2024-03-15"),
    ],
)
def test_cell_text(value: object, expected: str | None) -> None:
    assert cell_text(value) == expected


def test_csv_with_bom_and_blank_rows(tmp_path: Path) -> None:
    path = tmp_path / "contacts.csv"
    path.write_text(
        "\ufeff날짜,멤버,금액\n2024-03-02,오유택,1000\n,,\n2024-03-03,LE\n",
        encoding="utf-8",
    )

    (table,) = read_source(path)

    assert table.name == "contacts"
    assert table.headers == ("날짜", "멤버", "금액")
    assert table.rows == (
        {"날짜": "2024-03-02", "멤버": "오유택", "금액": "1000"},
        {"날짜": "2024-03-03", "멤버": "LE", "금액": None},
    )


def test_workbook_reads_every_sheet(tmp_path: Path) -> None:
    workbook = Workbook()
    projects = workbook.active
    assert projects is not None
    projects.title = "projects"
    projects.append(["프로젝트명", "입금액_T", "정산일"])
    projects.append(["모카 로고", 1100000, datetime(2024, 3, 15)])
    feeds = workbook.create_sheet("feeds")
    feeds.append(["날짜", "멤버"])
    feeds.append([datetime(2024, 3, 4), "KY"])
    path = tmp_path / "ledger.xlsx"
    workbook.save(path)

    tables = read_source(path)

    assert [table.name for table in tables] == ["projects", "feeds"]
    assert tables[0].rows == (
        {"프로젝트명": "모카 로고", "입금액_T": "1100000", "정산일": "2024-03-15"},
    )
    (only,) = read_source(path, sheet="feeds")
    assert only.rows == ({"날짜": "2024-03-04", "멤버": "KY"},)
    with pytest.raises(UnsupportedSourceError, match="missing"):
        read_source(path, sheet="missing")


def test_unreadable_sources(tmp_path: Path) -> None:
    notes = tmp_path / "notes.txt"
    notes.write_text("hello", encoding="utf-8")
    fake = tmp_path / "fake.xlsx"
    fake.write_text("not a workbook", encoding="utf-8")

    with pytest.raises(UnsupportedSourceError, match="notes.txt"):
        read_source(notes)
    with pytest.raises(UnsupportedSourceError, match="fake.xlsx"):
        read_source(fake)
    with pytest.raises(FileNotFoundError):
        read_source(tmp_path / "absent.csv")


def test_iter_source_files_filters_by_suffix(tmp_path: Path) -> None:
    for name in ("b.csv", "a.XLSX", "c.txt"):
        (tmp_path / name).write_text("", encoding="utf-8")
    (tmp_path / "dir.csv").mkdir()

    assert [path.name for path in iter_source_files(tmp_path)] == ["a.XLSX", "b.csv"]


def test_empty_csv_has_no_headers(tmp_path: Path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    (table,) = read_source(path)

    assert table.headers == ()
    assert table.rows == ()
