"""Shared context structures for the ingest pipeline (batch + run state)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from settlepy.domain.model import TableKind
    from settlepy.domain.references import ReferenceSnapshot

    from .columns import ColumnPlan
    from .transforms import TransformOutcome
    from .validation import ValidationResult, ValidationRules


@dataclass(frozen=True, slots=True)
class SourceTable:
    """Raw rows of one file or sheet, keyed by header.

    Raw rows live only for one ingestion pass.
    """

    name: str
    headers: tuple[str, ...]
    rows: tuple[Mapping[str, str | None], ...] = ()


@dataclass(frozen=True, slots=True)
class PipelineContext:
    """Read-only inputs shared across pipeline phases."""

    references: ReferenceSnapshot
    rules: ValidationRules | None = None


@dataclass(slots=True)
class IngestBatch:
    """State one source table accumulates while passing through the phases."""

    kind: TableKind
    source: SourceTable
    plan: ColumnPlan | None = None
    outcomes: list[TransformOutcome] = field(default_factory=list["TransformOutcome"])
    result: ValidationResult | None = None

    def require_result(self) -> ValidationResult:
        if self.result is None:
            raise RuntimeError(f"Batch '{self.source.name}' has not been validated")
        return self.result
