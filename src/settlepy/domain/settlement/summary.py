"""Per-member settlement totals and the unpaid-items report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from settlepy.domain.model import Member, SettlementItem, Table
from settlepy.domain.ports import eq

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from settlepy.domain.ports import RowStore


@dataclass(slots=True)
class MemberTotal:
    member_id: str
    name: str
    items: int = 0
    before_withholding: int = 0
    withholding_tax: int = 0
    after_withholding: int = 0

    def add(self, item: SettlementItem) -> None:
        self.items += 1
        self.before_withholding += item.before_withholding
        self.withholding_tax += item.withholding_tax
        self.after_withholding += item.after_withholding


def member_totals(
    items: Iterable[SettlementItem], names: Mapping[str, str] | None = None
) -> list[MemberTotal]:
    """Sum items per member, largest payout first."""

    lookup = names or {}
    totals: dict[str, MemberTotal] = {}
    for item in items:
        total = totals.get(item.member_id)
        if total is None:
            total = MemberTotal(item.member_id, lookup.get(item.member_id, "Unknown"))
            totals[item.member_id] = total
        total.add(item)
    return sorted(totals.values(), key=lambda t: (-t.after_withholding, t.member_id))


def grand_total(totals: Iterable[MemberTotal]) -> MemberTotal:
    combined = MemberTotal(member_id="*", name="Total")
    for total in totals:
        combined.items += total.items
        combined.before_withholding += total.before_withholding
        combined.withholding_tax += total.withholding_tax
        combined.after_withholding += total.after_withholding
    return combined


@dataclass(frozen=True, slots=True)
class UnpaidSummary:
    by_member: tuple[MemberTotal, ...] = ()
    by_source_type: Mapping[str, int] = field(default_factory=dict[str, int])

    @property
    def total(self) -> MemberTotal:
        return grand_total(self.by_member)


def member_names(store: RowStore) -> dict[str, str]:
    return {
        member.id: member.name
        for member in (Member.from_row(row) for row in store.select(Table.MEMBERS))
    }


def unpaid_summary(store: RowStore) -> UnpaidSummary:
    """Read-only view of settlement items not yet paid out."""

    items = [
        SettlementItem.from_row(row)
        for row in store.select(Table.SETTLEMENT_ITEMS, eq("paid", False))
    ]
    by_source: dict[str, int] = {}
    for item in items:
        key = str(item.source_type)
        by_source[key] = by_source.get(key, 0) + item.after_withholding
    return UnpaidSummary(
        by_member=tuple(member_totals(items, member_names(store))),
        by_source_type=dict(sorted(by_source.items())),
    )
