"""Canonical ledger records produced by ingestion.

Fields stay ``None`` when the source cell was blank or failed to map; the
validation engine decides whether that blocks the row. ``to_row`` renders the
JSON-native dict handed to the row store.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import ClassVar
from uuid import uuid4

from settlepy.domain.model.enums import (
    EventType,
    FeedType,
    ProjectStatus,
    Table,
    TableKind,
)


def new_id() -> str:
    return str(uuid4())


@dataclass(frozen=True, slots=True)
class DesignerAllocation:
    """One member's share of a project's payout pool."""

    member_id: str
    percent: float
    bonus_pct: float = 0.0

    def to_row(self) -> dict[str, object]:
        return {"member_id": self.member_id, "percent": self.percent, "bonus_pct": self.bonus_pct}

    @classmethod
    def from_row(cls, row: dict[str, object]) -> DesignerAllocation:
        return cls(
            member_id=str(row["member_id"]),
            percent=float(str(row.get("percent") or 0)),
            bonus_pct=float(str(row.get("bonus_pct") or 0)),
        )


@dataclass(kw_only=True, slots=True)
class LedgerRecord:
    id: str = field(default_factory=new_id)

    KIND: ClassVar[TableKind]
    TABLE: ClassVar[Table]

    @property
    def table(self) -> Table:
        return self.TABLE

    def to_row(self) -> dict[str, object]:
        row = asdict(self)
        for key, value in row.items():
            if isinstance(value, StrEnum):
                row[key] = str(value)
        return row


@dataclass(kw_only=True, slots=True)
class ProjectRecord(LedgerRecord):
    KIND: ClassVar[TableKind] = TableKind.PROJECTS
    TABLE: ClassVar[Table] = Table.PROJECTS

    client_name: str | None = None
    channel_id: str | None = None
    category_id: str | None = None
    title: str | None = None
    qty: float = 1.0
    list_price_net: float = 0.0
    discount_net: float = 0.0
    gross_t: float | None = None
    net_b: float = 0.0
    settle_date: str | None = None
    work_date: str | None = None
    invoice_requested: bool = False
    designers: list[DesignerAllocation] = field(default_factory=list)
    notes: str = ""
    status: ProjectStatus = ProjectStatus.PENDING


@dataclass(kw_only=True, slots=True)
class ContactRecord(LedgerRecord):
    KIND: ClassVar[TableKind] = TableKind.CONTACTS
    TABLE: ClassVar[Table] = Table.CONTACTS

    member_id: str | None = None
    date: str | None = None
    event_type: EventType = EventType.INCOMING
    amount: float | None = None
    project_title: str | None = None
    notes: str = ""


@dataclass(kw_only=True, slots=True)
class FeedRecord(LedgerRecord):
    KIND: ClassVar[TableKind] = TableKind.FEEDS
    TABLE: ClassVar[Table] = Table.FEED_LOGS

    member_id: str | None = None
    date: str | None = None
    fee_type: FeedType = FeedType.BELOW3
    amount: float | None = None
    notes: str = ""


@dataclass(kw_only=True, slots=True)
class TeamTaskRecord(LedgerRecord):
    KIND: ClassVar[TableKind] = TableKind.TEAM_TASKS
    TABLE: ClassVar[Table] = Table.TEAM_TASKS

    member_id: str | None = None
    project_title: str | None = None
    date: str | None = None
    notes: str = ""
    amount: float | None = None


@dataclass(kw_only=True, slots=True)
class MileageRecord(LedgerRecord):
    KIND: ClassVar[TableKind] = TableKind.MILEAGE
    TABLE: ClassVar[Table] = Table.MILEAGE

    member_id: str | None = None
    date: str | None = None
    reason: str = ""
    points: float = 0.0
    amount: float | None = None
    consumed_now: bool = False
    notes: str = ""


@dataclass(kw_only=True, slots=True)
class FundRecord(LedgerRecord):
    """Company fixed cost, or a personal subsidy when ``personal`` is set."""

    KIND: ClassVar[TableKind] = TableKind.FUNDS
    TABLE: ClassVar[Table] = Table.FUNDS_COMPANY

    date: str | None = None
    item: str | None = None
    amount: float | None = None
    memo: str = ""
    personal: bool = False
    member_id: str | None = None

    @property
    def table(self) -> Table:
        return Table.FUNDS_PERSONAL if self.personal else Table.FUNDS_COMPANY

    def to_row(self) -> dict[str, object]:
        row: dict[str, object] = {
            "id": self.id,
            "date": self.date,
            "item": self.item,
            "amount": self.amount,
            "memo": self.memo,
        }
        if self.personal:
            row["member_id"] = self.member_id
        return row


type CanonicalRecord = (
    ProjectRecord | ContactRecord | FeedRecord | TeamTaskRecord | MileageRecord | FundRecord
)
