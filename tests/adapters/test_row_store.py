from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from settlepy.adapters.sqlalchemy import SqlAlchemyRowStore
from settlepy.domain.errors import PersistenceError
from settlepy.domain.model import Table
from settlepy.domain.ports import RowStore, eq, gte, lte, neq

if TYPE_CHECKING:
    from pathlib import Path


def _feeds(store: SqlAlchemyRowStore) -> None:
    store.insert(
        Table.FEED_LOGS,
        [
            {"id": "f-1", "member_id": "OY", "date": "2024-02-28", "amount": 400.0},
            {"id": "f-2", "member_id": "OY", "date": "2024-03-01", "amount": 1000.0},
            {"id": "f-3", "member_id": "LE", "date": "2024-03-31", "amount": 400.0},
            {"id": "f-4", "member_id": "KY", "date": "2024-04-01", "amount": 400.0},
        ],
    )


def test_store_satisfies_port(row_store: SqlAlchemyRowStore) -> None:
    assert isinstance(row_store, RowStore)


def test_select_applies_filters_and_order(seeded_store: SqlAlchemyRowStore) -> None:
    _feeds(seeded_store)

    march = seeded_store.select(
        Table.FEED_LOGS,
        gte("date", "2024-03-01"),
        lte("date", "2024-03-31"),
        order_by=("date",),
    )
    not_oy = seeded_store.select(Table.FEED_LOGS, neq("member_id", "OY"))

    assert [row["id"] for row in march] == ["f-2", "f-3"]
    assert march[0]["fee_type"] == "BELOW3"
    assert sorted(row["id"] for row in not_oy) == ["f-3", "f-4"]
    assert len(seeded_store.select(Table.FEED_LOGS, limit=1)) == 1


def test_eq_none_matches_null(seeded_store: SqlAlchemyRowStore) -> None:
    seeded_store.insert(
        Table.CONTACTS,
        [
            {"id": "c-1", "member_id": "OY", "date": "2024-03-02", "project_id": None},
        ],
    )

    assert len(seeded_store.select(Table.CONTACTS, eq("project_id", None))) == 1
    assert seeded_store.select(Table.CONTACTS, neq("project_id", None)) == []


def test_upsert_updates_then_inserts(seeded_store: SqlAlchemyRowStore) -> None:
    _feeds(seeded_store)

    count = seeded_store.upsert(
        Table.FEED_LOGS,
        [
            {"id": "f-1", "amount": 1000.0},
            {"id": "f-9", "member_id": "PJ", "date": "2024-03-05", "amount": 400.0},
        ],
    )

    assert count == 2
    (updated,) = seeded_store.select(Table.FEED_LOGS, eq("id", "f-1"))
    assert updated["amount"] == 1000.0
    assert updated["member_id"] == "OY"
    assert len(seeded_store.select(Table.FEED_LOGS)) == 5


def test_replace_swaps_matching_rows(seeded_store: SqlAlchemyRowStore) -> None:
    _feeds(seeded_store)

    seeded_store.replace(
        Table.FEED_LOGS,
        [eq("member_id", "OY")],
        [{"id": "f-10", "member_id": "OY", "date": "2024-03-10", "amount": 400.0}],
    )

    oy = seeded_store.select(Table.FEED_LOGS, eq("member_id", "OY"))
    assert [row["id"] for row in oy] == ["f-10"]
    assert len(seeded_store.select(Table.FEED_LOGS)) == 3


def test_failed_replace_keeps_old_rows(seeded_store: SqlAlchemyRowStore) -> None:
    _feeds(seeded_store)

    with pytest.raises(PersistenceError):
        seeded_store.replace(
            Table.FEED_LOGS,
            [eq("member_id", "OY")],
            [{"id": "f-3", "member_id": "OY", "date": "2024-03-10", "amount": 400.0}],
        )

    assert len(seeded_store.select(Table.FEED_LOGS, eq("member_id", "OY"))) == 2


def test_unknown_columns_are_rejected(row_store: SqlAlchemyRowStore) -> None:
    with pytest.raises(PersistenceError, match="colour"):
        row_store.insert(Table.MEMBERS, [{"id": "X", "code": "X", "name": "X", "colour": "red"}])
    with pytest.raises(PersistenceError, match="colour"):
        row_store.select(Table.MEMBERS, eq("colour", "red"))


def test_constraint_violation_is_persistence_error(seeded_store: SqlAlchemyRowStore) -> None:
    with pytest.raises(PersistenceError):
        seeded_store.insert(Table.FEED_LOGS, [{"id": "f-1", "member_id": None, "date": "x"}])

    assert seeded_store.select(Table.FEED_LOGS) == []


def test_insert_mixed_key_sets(row_store: SqlAlchemyRowStore) -> None:
    inserted = row_store.insert(
        Table.MEMBERS,
        [
            {"id": "A", "code": "A", "name": "에이"},
            {"id": "B", "code": "B", "name": "비", "active": False},
        ],
    )

    assert inserted == 2
    rows = {row["id"]: row for row in row_store.select(Table.MEMBERS)}
    assert rows["A"]["active"] is True
    assert rows["B"]["active"] is False


def test_delete_with_and_without_filters(seeded_store: SqlAlchemyRowStore) -> None:
    _feeds(seeded_store)

    assert seeded_store.delete(Table.FEED_LOGS, eq("member_id", "OY")) == 2
    assert seeded_store.delete(Table.FEED_LOGS) == 2


def test_ping(row_store: SqlAlchemyRowStore) -> None:
    row_store.ping()


def test_ping_on_missing_database_fails(tmp_path: Path) -> None:
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path}/missing/ledger.db")
    store = SqlAlchemyRowStore(engine)

    with pytest.raises(PersistenceError):
        store.ping()
    engine.dispose()
