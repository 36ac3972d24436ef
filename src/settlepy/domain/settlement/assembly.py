"""Monthly settlement assembly.

Sources of one period are read table by table (no cross-table transaction),
exploded into one item per (source, designer) pair and written as a unit.
"""

from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from settlepy.domain.errors import PersistenceError
from settlepy.domain.model import (
    Channel,
    DesignerAllocation,
    ProjectStatus,
    Settlement,
    SettlementItem,
    SettlementStatus,
    SourceType,
    Table,
)
from settlepy.domain.ports import eq, gte, lte

from .calculator import FeeProfile, Payout, flat_payout, project_payout

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from settlepy.domain.ports import Row, RowFilter, RowStore

log = logging.getLogger(__name__)

_PERIOD = re.compile(r"^(\d{4})-(\d{2})$")

_SOURCE_ORDER: dict[SourceType, int] = {source: index for index, source in enumerate(SourceType)}


class GenerationOutcome(StrEnum):
    CREATED = "created"
    RECOMPUTED = "recomputed"
    EXISTS = "exists"
    LOCKED = "locked"
    NO_SOURCES = "no_sources"


@dataclass(frozen=True, slots=True)
class Period:
    year: int
    month: int

    @classmethod
    def parse(cls, value: str) -> Period:
        found = _PERIOD.match(value.strip())
        if not found:
            raise ValueError(f"Invalid period '{value}', expected YYYY-MM")
        year, month = int(found.group(1)), int(found.group(2))
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid period '{value}', expected YYYY-MM with month 01-12")
        return cls(year=year, month=month)

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def first_day(self) -> str:
        return f"{self.label}-01"

    @property
    def last_day(self) -> str:
        return f"{self.label}-{calendar.monthrange(self.year, self.month)[1]:02d}"


@dataclass(frozen=True, slots=True)
class SettlementSource:
    """One payable (source row, member) pair."""

    source_type: SourceType
    source_id: str
    member_id: str
    amount: float = 0.0
    allocation: DesignerAllocation | None = None
    gross_t: float = 0.0
    discount_net: float = 0.0
    channel_id: str | None = None

    @property
    def sort_key(self) -> tuple[int, str, str]:
        return (_SOURCE_ORDER[self.source_type], self.source_id, self.member_id)


@dataclass(frozen=True, slots=True)
class GenerationResult:
    outcome: GenerationOutcome
    period: str
    settlement: Settlement | None = None
    items: tuple[SettlementItem, ...] = ()
    source_count: int = 0

    @property
    def written(self) -> bool:
        return self.outcome in {GenerationOutcome.CREATED, GenerationOutcome.RECOMPUTED}


def _number(value: object) -> float:
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    return float(str(value))


def _allocations(value: object) -> list[DesignerAllocation]:
    if not isinstance(value, list):
        return []
    return [DesignerAllocation.from_row(entry) for entry in value if isinstance(entry, dict)]


def _flat_sources(
    store: RowStore,
    table: Table,
    source_type: SourceType,
    period: Period,
    *extra: RowFilter,
) -> list[SettlementSource]:
    rows = store.select(
        table,
        gte("date", period.first_day),
        lte("date", period.last_day),
        *extra,
        order_by=("date", "id"),
    )
    sources: list[SettlementSource] = []
    for row in rows:
        member_id = row.get("member_id")
        if not member_id:
            log.warning("Skipping %s %s without member", source_type, row.get("id"))
            continue
        sources.append(
            SettlementSource(
                source_type=source_type,
                source_id=str(row["id"]),
                member_id=str(member_id),
                amount=_number(row.get("amount")),
            )
        )
    return sources


def collect_sources(store: RowStore, period: Period) -> list[SettlementSource]:
    """Gather every qualifying source of ``period`` in a deterministic order."""

    sources: list[SettlementSource] = []
    projects = store.select(
        Table.PROJECTS,
        eq("status", str(ProjectStatus.COMPLETED)),
        gte("settle_date", period.first_day),
        lte("settle_date", period.last_day),
        order_by=("settle_date", "id"),
    )
    for project in projects:
        for allocation in _allocations(project.get("designers")):
            sources.append(
                SettlementSource(
                    source_type=SourceType.PROJECT,
                    source_id=str(project["id"]),
                    member_id=allocation.member_id,
                    allocation=allocation,
                    gross_t=_number(project.get("gross_t")),
                    discount_net=_number(project.get("discount_net")),
                    channel_id=_optional_str(project.get("channel_id")),
                )
            )

    sources.extend(_flat_sources(store, Table.CONTACTS, SourceType.CONTACT, period))
    sources.extend(_flat_sources(store, Table.FEED_LOGS, SourceType.FEED, period))
    sources.extend(_flat_sources(store, Table.TEAM_TASKS, SourceType.TEAM_TASK, period))
    sources.extend(
        _flat_sources(
            store, Table.MILEAGE, SourceType.MILEAGE, period, eq("consumed_now", True)
        )
    )
    sources.sort(key=lambda source: source.sort_key)
    return sources


def _optional_str(value: object) -> str | None:
    return str(value) if value else None


def compute_payout(source: SettlementSource, fees: Mapping[str, FeeProfile]) -> Payout:
    if source.source_type is SourceType.PROJECT and source.allocation is not None:
        return project_payout(
            gross_t=source.gross_t,
            discount_net=source.discount_net,
            percent=source.allocation.percent,
            bonus_pct=source.allocation.bonus_pct,
            fees=fees.get(source.channel_id or "", FeeProfile()),
        )
    return flat_payout(source.amount)


def build_items(
    settlement_id: str,
    sources: list[SettlementSource],
    fees: Mapping[str, FeeProfile],
) -> list[SettlementItem]:
    items: list[SettlementItem] = []
    for source in sources:
        payout = compute_payout(source, fees)
        items.append(
            SettlementItem(
                settlement_id=settlement_id,
                member_id=source.member_id,
                source_type=source.source_type,
                source_id=source.source_id,
                gross=float(payout.gross),
                net=float(round(payout.net, 2)),
                base=payout.base,
                bonus=payout.bonus,
                before_withholding=payout.before_withholding,
                withholding_tax=payout.withholding_tax,
                after_withholding=payout.after_withholding,
            )
        )
    return items


def load_fee_profiles(store: RowStore) -> dict[str, FeeProfile]:
    return {
        str(row["id"]): FeeProfile.from_channel(Channel.from_row(row))
        for row in store.select(Table.CHANNELS)
    }


def load_items(store: RowStore, settlement_id: str) -> tuple[SettlementItem, ...]:
    rows: list[Row] = store.select(
        Table.SETTLEMENT_ITEMS,
        eq("settlement_id", settlement_id),
        order_by=("source_type", "source_id", "member_id"),
    )
    return tuple(SettlementItem.from_row(row) for row in rows)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class SettlementGenerator:
    """Create or (with ``force``) rebuild the settlement of one period."""

    store: RowStore
    now_provider: Callable[[], datetime] = field(default=_utcnow)

    def find(self, period: Period) -> Settlement | None:
        rows = self.store.select(Table.SETTLEMENTS, eq("period", period.label), limit=1)
        return Settlement.from_row(rows[0]) if rows else None

    def generate(self, period: Period, *, force: bool = False) -> GenerationResult:
        existing = self.find(period)
        if existing is not None:
            if existing.locked:
                log.warning("Settlement %s is locked and cannot be modified", period.label)
                return GenerationResult(GenerationOutcome.LOCKED, period.label, existing)
            if not force:
                log.info("Settlement %s already exists; use force to rebuild", period.label)
                return GenerationResult(
                    GenerationOutcome.EXISTS,
                    period.label,
                    existing,
                    load_items(self.store, existing.id),
                )

        sources = collect_sources(self.store, period)
        log.info("Found %s settlement sources for %s", len(sources), period.label)
        if not sources:
            if existing is not None:
                self.store.delete(Table.SETTLEMENT_ITEMS, eq("settlement_id", existing.id))
            return GenerationResult(GenerationOutcome.NO_SOURCES, period.label, existing)

        settlement = existing
        if settlement is None:
            settlement = Settlement(
                period=period.label,
                created_at=self.now_provider().isoformat(),
                status=SettlementStatus.DRAFT,
                notes=f"Generated settlement for {period.label}",
            )
            self.store.insert(Table.SETTLEMENTS, [settlement.to_row()])

        items = build_items(settlement.id, sources, load_fee_profiles(self.store))
        try:
            self.store.replace(
                Table.SETTLEMENT_ITEMS,
                [eq("settlement_id", settlement.id)],
                [item.to_row() for item in items],
            )
        except PersistenceError:
            if existing is None:
                log.warning("Removing settlement %s after failed item write", period.label)
                self.store.delete(Table.SETTLEMENTS, eq("id", settlement.id))
            raise
        outcome = GenerationOutcome.CREATED if existing is None else GenerationOutcome.RECOMPUTED
        log.info("%s settlement %s with %s items", outcome, period.label, len(items))
        return GenerationResult(outcome, period.label, settlement, tuple(items), len(sources))


def generate_settlement(
    store: RowStore, period: str, *, force: bool = False
) -> GenerationResult:
    return SettlementGenerator(store).generate(Period.parse(period), force=force)
