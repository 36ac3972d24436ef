"""Ports for the tabular row store backing the ledger."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from settlepy.domain.model import Table

type Row = dict[str, object]
type FilterOp = Literal["eq", "neq", "gte", "lte"]


@dataclass(frozen=True, slots=True)
class RowFilter:
    """Column predicate understood by every row store."""

    column: str
    op: FilterOp
    value: object

    def matches(self, row: Mapping[str, object]) -> bool:
        candidate = row.get(self.column)
        if self.op == "eq":
            return candidate == self.value
        if self.op == "neq":
            return candidate != self.value
        if candidate is None or self.value is None:
            return False
        if self.op == "gte":
            return candidate >= self.value  # type: ignore[operator]
        return candidate <= self.value  # type: ignore[operator]


def eq(column: str, value: object) -> RowFilter:
    return RowFilter(column, "eq", value)


def neq(column: str, value: object) -> RowFilter:
    return RowFilter(column, "neq", value)


def gte(column: str, value: object) -> RowFilter:
    return RowFilter(column, "gte", value)


def lte(column: str, value: object) -> RowFilter:
    return RowFilter(column, "lte", value)


@runtime_checkable
class RowStore(Protocol):
    """Select/insert/upsert/delete-by-predicate access to named tables.

    Each call is its own transaction. ``delete`` without filters clears the
    table. ``replace`` deletes the rows matching ``filters`` and inserts
    ``rows`` atomically.
    """

    def select(
        self,
        table: Table,
        *filters: RowFilter,
        order_by: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[Row]: ...

    def insert(self, table: Table, rows: Iterable[Mapping[str, object]]) -> int: ...

    def upsert(
        self, table: Table, rows: Iterable[Mapping[str, object]], *, key: str = "id"
    ) -> int: ...

    def delete(self, table: Table, *filters: RowFilter) -> int: ...

    def replace(
        self,
        table: Table,
        filters: Sequence[RowFilter],
        rows: Iterable[Mapping[str, object]],
    ) -> int: ...

    def ping(self) -> None: ...
