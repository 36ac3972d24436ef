from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from settlepy.adapters.sqlalchemy import (
    SqlAlchemyRowStore,
    create_all_tables,
    shutdown,
    startup,
)
from settlepy.domain.references import ReferenceSnapshot, load_reference_snapshot
from settlepy.domain.seed import seed_reference_data

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def row_store(sqlite_engine: Engine) -> SqlAlchemyRowStore:
    return SqlAlchemyRowStore(sqlite_engine)


@pytest.fixture
def seeded_store(row_store: SqlAlchemyRowStore) -> SqlAlchemyRowStore:
    seed_reference_data(row_store)
    return row_store


@pytest.fixture
def references(seeded_store: SqlAlchemyRowStore) -> ReferenceSnapshot:
    return load_reference_snapshot(seeded_store)


@pytest.fixture
def started_adapter(sqlite_engine: Engine) -> Iterator[Engine]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield sqlite_engine
    finally:
        shutdown()
