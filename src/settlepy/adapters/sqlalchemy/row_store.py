"""SQLAlchemy Core implementation of the :class:`RowStore` port."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select, text, update
from sqlalchemy.exc import SQLAlchemyError

from settlepy.domain.errors import PersistenceError

from .mappings import TABLES

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping, Sequence

    from sqlalchemy import ColumnElement, Connection
    from sqlalchemy import Table as CoreTable
    from sqlalchemy.engine import Engine

    from settlepy.domain.model import Table
    from settlepy.domain.ports import Row, RowFilter

log = logging.getLogger(__name__)


def _describe(exc: SQLAlchemyError) -> str:
    original = getattr(exc, "orig", None)
    message = str(original) if original is not None else str(exc)
    return message.splitlines()[0] if message else type(exc).__name__


class SqlAlchemyRowStore:
    """Row store over an engine; each call runs in its own transaction."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _transaction(self) -> Iterator[Connection]:
        try:
            with self._engine.begin() as connection:
                yield connection
        except SQLAlchemyError as exc:
            raise PersistenceError(_describe(exc)) from exc

    def _table(self, table: Table) -> CoreTable:
        try:
            return TABLES[table]
        except KeyError as exc:
            raise PersistenceError(f"Unknown table: {table}") from exc

    def _column(self, core: CoreTable, name: str) -> ColumnElement[object]:
        if name not in core.c:
            raise PersistenceError(f"Unknown column {core.name}.{name}")
        return core.c[name]

    def _where(self, core: CoreTable, filters: Iterable[RowFilter]) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = []
        for row_filter in filters:
            column = self._column(core, row_filter.column)
            value = row_filter.value
            if row_filter.op == "eq":
                clauses.append(column.is_(None) if value is None else column == value)
            elif row_filter.op == "neq":
                clauses.append(column.is_not(None) if value is None else column != value)
            elif row_filter.op == "gte":
                clauses.append(column >= value)
            elif row_filter.op == "lte":
                clauses.append(column <= value)
            else:
                raise PersistenceError(f"Unsupported filter operator: {row_filter.op}")
        return clauses

    def _checked_rows(self, core: CoreTable, rows: Iterable[Mapping[str, object]]) -> list[Row]:
        checked: list[Row] = []
        for row in rows:
            unknown = sorted(set(row) - set(core.c.keys()))
            if unknown:
                raise PersistenceError(f"Unknown columns for {core.name}: {', '.join(unknown)}")
            checked.append(dict(row))
        return checked

    def _insert(self, connection: Connection, core: CoreTable, rows: list[Row]) -> None:
        # executemany compiles against one key set, so group rows by their keys
        groups: dict[tuple[str, ...], list[Row]] = {}
        for row in rows:
            groups.setdefault(tuple(sorted(row)), []).append(row)
        for group in groups.values():
            connection.execute(insert(core), group)

    def select(
        self,
        table: Table,
        *filters: RowFilter,
        order_by: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        core = self._table(table)
        stmt = select(core).where(*self._where(core, filters))
        for name in order_by or ():
            stmt = stmt.order_by(self._column(core, name))
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            with self._engine.connect() as connection:
                return [dict(row) for row in connection.execute(stmt).mappings()]
        except SQLAlchemyError as exc:
            raise PersistenceError(_describe(exc)) from exc

    def insert(self, table: Table, rows: Iterable[Mapping[str, object]]) -> int:
        core = self._table(table)
        checked = self._checked_rows(core, rows)
        if not checked:
            return 0
        with self._transaction() as connection:
            self._insert(connection, core, checked)
        return len(checked)

    def upsert(
        self, table: Table, rows: Iterable[Mapping[str, object]], *, key: str = "id"
    ) -> int:
        core = self._table(table)
        key_column = self._column(core, key)
        checked = self._checked_rows(core, rows)
        with self._transaction() as connection:
            for row in checked:
                if key not in row:
                    raise PersistenceError(f"Upsert row for {core.name} lacks key '{key}'")
                values = {name: value for name, value in row.items() if name != key}
                updated = 0
                if values:
                    result = connection.execute(
                        update(core).where(key_column == row[key]).values(**values)
                    )
                    updated = result.rowcount
                else:
                    exists = connection.execute(
                        select(key_column).where(key_column == row[key])
                    ).first()
                    updated = 1 if exists is not None else 0
                if not updated:
                    connection.execute(insert(core), [row])
        return len(checked)

    def delete(self, table: Table, *filters: RowFilter) -> int:
        core = self._table(table)
        with self._transaction() as connection:
            result = connection.execute(delete(core).where(*self._where(core, filters)))
            removed = result.rowcount
        return removed

    def replace(
        self,
        table: Table,
        filters: Sequence[RowFilter],
        rows: Iterable[Mapping[str, object]],
    ) -> int:
        core = self._table(table)
        checked = self._checked_rows(core, rows)
        with self._transaction() as connection:
            result = connection.execute(delete(core).where(*self._where(core, filters)))
            removed = result.rowcount
            if checked:
                self._insert(connection, core, checked)
        log.debug("Replaced %s rows of %s with %s", removed, core.name, len(checked))
        return len(checked)

    def ping(self) -> None:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise PersistenceError(_describe(exc)) from exc
