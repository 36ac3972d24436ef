"""Row-level diagnostics produced by normalization and validation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from settlepy.domain.model import ReferenceKind


class IssueKind(StrEnum):
    MISSING_FIELD = "missing_field"
    MAPPING = "mapping"
    FORMAT = "format"
    ALLOCATION = "allocation"
    ENUM = "enum"
    RANGE = "range"


NON_BLOCKING_KINDS: frozenset[IssueKind] = frozenset({IssueKind.RANGE})


@dataclass(frozen=True, slots=True)
class Issue:
    """One problem found on one source row.

    ``row`` is 1-based and counts data rows only (the header is not row 1).
    Mapping issues carry the ``reference`` kind the token failed to resolve as.
    """

    row: int
    field: str
    value: object
    message: str
    kind: IssueKind
    reference: ReferenceKind | None = None

    @property
    def blocking(self) -> bool:
        return self.kind not in NON_BLOCKING_KINDS

    def describe(self) -> str:
        return f"row {self.row}: {self.field} = {self.value!r} - {self.message}"
