from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from settlepy.domain.errors import PersistenceError
from settlepy.domain.model import (
    DesignerAllocation,
    ProjectStatus,
    SettlementStatus,
    SourceType,
    Table,
)
from settlepy.domain.ports import eq
from settlepy.domain.settlement import (
    GenerationOutcome,
    Period,
    SettlementGenerator,
    collect_sources,
    generate_settlement,
    member_totals,
)

from tests.helpers.ledger import insert_project

if TYPE_CHECKING:
    from settlepy.adapters.sqlalchemy import SqlAlchemyRowStore


def _fixed_now() -> datetime:
    return datetime(2024, 4, 1, 9, 0, tzinfo=UTC)


def _ledger(store: SqlAlchemyRowStore) -> None:
    insert_project(
        store,
        title="모카 로고",
        designers=(DesignerAllocation("OY", 60.0, 10.0), DesignerAllocation("LE", 40.0)),
    )
    insert_project(store, title="다른 달", settle_date="2024-04-02")
    insert_project(store, title="진행중", status=ProjectStatus.IN_PROGRESS)
    store.insert(
        Table.CONTACTS,
        [
            {"id": "c-1", "member_id": "OY", "date": "2024-03-02", "amount": 1000.0},
            {"id": "c-2", "member_id": "KY", "date": "2024-02-28", "amount": 1000.0},
        ],
    )
    store.insert(
        Table.FEED_LOGS,
        [{"id": "f-1", "member_id": "KY", "date": "2024-03-31", "amount": 400.0}],
    )
    store.insert(
        Table.TEAM_TASKS,
        [{"id": "t-1", "member_id": "LE", "date": "2024-03-10", "amount": 50_000.0}],
    )
    store.insert(
        Table.MILEAGE,
        [
            {
                "id": "m-1",
                "member_id": "OY",
                "date": "2024-03-05",
                "amount": 3000.0,
                "consumed_now": True,
            },
            {
                "id": "m-2",
                "member_id": "OY",
                "date": "2024-03-06",
                "amount": 9000.0,
                "consumed_now": False,
            },
        ],
    )


def test_period_parse() -> None:
    period = Period.parse("2024-02")

    assert period.label == "2024-02"
    assert period.first_day == "2024-02-01"
    assert period.last_day == "2024-02-29"


@pytest.mark.parametrize("value", ["2024-13", "2024-3", "March", ""])
def test_period_parse_rejects_invalid(value: str) -> None:
    with pytest.raises(ValueError, match="YYYY-MM"):
        Period.parse(value)


def test_collect_sources_filters_period_and_status(seeded_store: SqlAlchemyRowStore) -> None:
    _ledger(seeded_store)

    sources = collect_sources(seeded_store, Period.parse("2024-03"))

    kinds = [(source.source_type, source.member_id) for source in sources]
    assert kinds.count((SourceType.PROJECT, "OY")) == 1
    assert kinds.count((SourceType.PROJECT, "LE")) == 1
    assert (SourceType.CONTACT, "OY") in kinds
    assert (SourceType.CONTACT, "KY") not in kinds
    assert (SourceType.FEED, "KY") in kinds
    assert (SourceType.TEAM_TASK, "LE") in kinds
    assert [s.source_id for s in sources if s.source_type is SourceType.MILEAGE] == ["m-1"]
    assert len(sources) == 6


def test_generate_creates_draft_with_items(seeded_store: SqlAlchemyRowStore) -> None:
    _ledger(seeded_store)
    generator = SettlementGenerator(seeded_store, now_provider=_fixed_now)

    result = generator.generate(Period.parse("2024-03"))

    assert result.outcome is GenerationOutcome.CREATED
    assert result.settlement is not None
    assert result.settlement.status is SettlementStatus.DRAFT
    assert result.source_count == 6
    assert len(result.items) == 6
    for item in result.items:
        assert item.before_withholding - item.withholding_tax == item.after_withholding
    stored = seeded_store.select(
        Table.SETTLEMENT_ITEMS, eq("settlement_id", result.settlement.id)
    )
    assert len(stored) == 6

    totals = {total.member_id: total for total in member_totals(result.items)}
    # 60% of the 660,000 kmong pool plus a 10% bonus
    assert totals["OY"].before_withholding == 396_000 + 39_600 + 1000 + 3000


def test_generate_without_force_reports_existing(seeded_store: SqlAlchemyRowStore) -> None:
    _ledger(seeded_store)
    first = generate_settlement(seeded_store, "2024-03")

    second = generate_settlement(seeded_store, "2024-03")

    assert second.outcome is GenerationOutcome.EXISTS
    assert second.settlement is not None
    assert first.settlement is not None
    assert second.settlement.id == first.settlement.id
    assert len(second.items) == len(first.items)


def test_forced_recompute_is_idempotent(seeded_store: SqlAlchemyRowStore) -> None:
    _ledger(seeded_store)
    first = generate_settlement(seeded_store, "2024-03")

    again = generate_settlement(seeded_store, "2024-03", force=True)

    assert again.outcome is GenerationOutcome.RECOMPUTED
    assert sorted(item.amounts() for item in again.items) == sorted(
        item.amounts() for item in first.items
    )
    assert len(seeded_store.select(Table.SETTLEMENT_ITEMS)) == len(first.items)
    assert len(seeded_store.select(Table.SETTLEMENTS)) == 1


def test_locked_settlement_is_never_modified(seeded_store: SqlAlchemyRowStore) -> None:
    _ledger(seeded_store)
    first = generate_settlement(seeded_store, "2024-03")
    assert first.settlement is not None
    seeded_store.upsert(
        Table.SETTLEMENTS, [{"id": first.settlement.id, "status": str(SettlementStatus.LOCKED)}]
    )
    seeded_store.insert(
        Table.CONTACTS,
        [{"id": "c-late", "member_id": "LE", "date": "2024-03-20", "amount": 1000.0}],
    )

    result = generate_settlement(seeded_store, "2024-03", force=True)

    assert result.outcome is GenerationOutcome.LOCKED
    assert not result.written
    assert len(seeded_store.select(Table.SETTLEMENT_ITEMS)) == len(first.items)


def test_period_without_sources(seeded_store: SqlAlchemyRowStore) -> None:
    result = generate_settlement(seeded_store, "2030-01")

    assert result.outcome is GenerationOutcome.NO_SOURCES
    assert result.settlement is None
    assert not seeded_store.select(Table.SETTLEMENTS)


def test_failed_item_write_leaves_no_settlement(
    seeded_store: SqlAlchemyRowStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    _ledger(seeded_store)

    def reject(*args: object, **kwargs: object) -> int:
        raise PersistenceError("settlement_items: disk full")

    monkeypatch.setattr(seeded_store, "replace", reject)
    with pytest.raises(PersistenceError):
        generate_settlement(seeded_store, "2024-03")

    assert seeded_store.select(Table.SETTLEMENTS) == []
    monkeypatch.undo()
    retry = generate_settlement(seeded_store, "2024-03")
    assert retry.outcome is GenerationOutcome.CREATED
    assert len(seeded_store.select(Table.SETTLEMENTS)) == 1
