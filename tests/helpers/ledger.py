"""Builders for source tables and ledger rows used across tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from settlepy.domain.ingest_pipeline import SourceTable
from settlepy.domain.model import (
    DesignerAllocation,
    ProjectRecord,
    ProjectStatus,
    Table,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from settlepy.domain.ports import RowStore

PROJECT_HEADERS: tuple[str, ...] = (
    "클라이언트명",
    "채널",
    "카테고리",
    "프로젝트명",
    "입금액_T",
    "정산일",
    "상태",
    "오유택_지분",
    "오유택_인센티브",
    "이예천_지분",
)


def source_table(
    name: str, rows: Sequence[Mapping[str, str | None]], headers: Sequence[str] | None = None
) -> SourceTable:
    """Build a table whose headers default to the keys of the first row."""

    resolved = tuple(headers) if headers is not None else tuple(rows[0]) if rows else ()
    return SourceTable(name=name, headers=resolved, rows=tuple(dict(row) for row in rows))


def project_row(**overrides: str | None) -> dict[str, str | None]:
    row: dict[str, str | None] = {
        "클라이언트명": "카페 모카",
        "채널": "크몽",
        "카테고리": "로고",
        "프로젝트명": "모카 로고",
        "입금액_T": "1,100,000",
        "정산일": "2024-03-15",
        "상태": "완료",
        "오유택_지분": "100",
        "오유택_인센티브": None,
        "이예천_지분": None,
    }
    row.update(overrides)
    return row


def insert_project(
    store: RowStore,
    *,
    title: str = "모카 로고",
    gross_t: float = 1_100_000,
    settle_date: str = "2024-03-15",
    channel_id: str = "kmong",
    designers: Sequence[DesignerAllocation] = (DesignerAllocation("OY", 100.0),),
    status: ProjectStatus = ProjectStatus.COMPLETED,
) -> ProjectRecord:
    record = ProjectRecord(
        client_name="카페 모카",
        channel_id=channel_id,
        category_id="logo",
        title=title,
        gross_t=gross_t,
        net_b=round(gross_t / 1.1, 2),
        settle_date=settle_date,
        designers=list(designers),
        status=status,
    )
    row = record.to_row()
    store.insert(Table.PROJECTS, [row])
    return record
