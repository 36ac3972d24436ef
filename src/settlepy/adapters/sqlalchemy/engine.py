"""Process-wide SQLAlchemy engine lifecycle for the row store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import create_engine

from settlepy.config import get_database_config

from .mappings import create_all_tables
from .row_store import SqlAlchemyRowStore

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the row store is requested before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _store: SqlAlchemyRowStore | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._store = None
        self._engine = value

    @property
    def store(self) -> SqlAlchemyRowStore:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call settlepy.adapters.sqlalchemy."
                "engine.startup() before requesting the row store."
            )
        if self._store is None:
            self._store = SqlAlchemyRowStore(self._engine)
        return self._store


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine and create missing tables."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    create_all_tables(resolved_engine)
    _STATE.engine = resolved_engine
    log.debug("Row store started on %s", resolved_engine.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def row_store() -> SqlAlchemyRowStore:
    return _STATE.store


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
