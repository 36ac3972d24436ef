"""Settlement aggregates."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING

from settlepy.domain.model.enums import SettlementStatus, SourceType
from settlepy.domain.model.records import new_id

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True)
class Settlement:
    """One settlement per calendar period (``YYYY-MM``)."""

    period: str
    created_at: str
    status: SettlementStatus = SettlementStatus.DRAFT
    notes: str = ""
    id: str = field(default_factory=new_id)

    @property
    def locked(self) -> bool:
        return self.status is SettlementStatus.LOCKED

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> Settlement:
        return cls(
            id=str(row["id"]),
            period=str(row["period"]),
            created_at=str(row.get("created_at") or ""),
            status=SettlementStatus(str(row.get("status") or SettlementStatus.DRAFT)),
            notes=str(row.get("notes") or ""),
        )

    def to_row(self) -> dict[str, object]:
        row = asdict(self)
        row["status"] = str(self.status)
        return row


@dataclass(frozen=True, slots=True)
class SettlementItem:
    """Payout for one (source, designer) pair."""

    settlement_id: str
    member_id: str
    source_type: SourceType
    source_id: str
    gross: float
    net: float
    base: int
    bonus: int
    before_withholding: int
    withholding_tax: int
    after_withholding: int
    paid: bool = False
    id: str = field(default_factory=new_id)

    def amounts(self) -> tuple[object, ...]:
        """Identity-free view used to compare recomputations."""

        return (
            self.member_id,
            str(self.source_type),
            self.source_id,
            self.gross,
            self.net,
            self.base,
            self.bonus,
            self.before_withholding,
            self.withholding_tax,
            self.after_withholding,
        )

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> SettlementItem:
        return cls(
            id=str(row["id"]),
            settlement_id=str(row["settlement_id"]),
            member_id=str(row["member_id"]),
            source_type=SourceType(str(row["source_type"])),
            source_id=str(row["source_id"]),
            gross=float(str(row.get("gross") or 0)),
            net=float(str(row.get("net") or 0)),
            base=int(float(str(row.get("base") or 0))),
            bonus=int(float(str(row.get("bonus") or 0))),
            before_withholding=int(float(str(row.get("before_withholding") or 0))),
            withholding_tax=int(float(str(row.get("withholding_tax") or 0))),
            after_withholding=int(float(str(row.get("after_withholding") or 0))),
            paid=bool(row.get("paid", False)),
        )

    def to_row(self) -> dict[str, object]:
        row = asdict(self)
        row["source_type"] = str(self.source_type)
        return row
