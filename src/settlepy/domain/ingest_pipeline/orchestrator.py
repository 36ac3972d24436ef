"""Phase-based orchestrator for the ledger ingest pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from .columns import plan_columns
from .transforms import transform_row
from .validation import default_rules, validate_outcomes

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .context import IngestBatch, PipelineContext

log = logging.getLogger(__name__)


class PipelinePhase(Protocol):
    """Contract implemented by each ingestion phase."""

    name: str

    def run(self, batch: IngestBatch, *, context: PipelineContext) -> None: ...


@dataclass(slots=True)
class IngestionPipeline:
    """Compose and execute the ordered pipeline phases."""

    phases: Sequence[PipelinePhase] = field(default_factory=tuple)

    def with_phase(self, phase: PipelinePhase) -> IngestionPipeline:
        """Return a new pipeline appending ``phase`` at the end."""

        return IngestionPipeline(phases=(*self.phases, phase))

    def extend(self, phases: Iterable[PipelinePhase]) -> IngestionPipeline:
        """Return a new pipeline with the provided ``phases`` concatenated."""

        return IngestionPipeline(phases=(*self.phases, *tuple(phases)))

    def run(self, batch: IngestBatch, *, context: PipelineContext) -> IngestBatch:
        """Execute the configured phases in-order against ``batch``."""

        for phase in self.phases:
            log.debug("Running phase %s on %s", phase.name, batch.source.name)
            phase.run(batch, context=context)
        return batch


@dataclass(slots=True)
class ColumnMappingPhase:
    name: str = "column-mapping"

    def run(self, batch: IngestBatch, *, context: PipelineContext) -> None:
        _ = context
        batch.plan = plan_columns(batch.kind, batch.source.headers)
        if batch.plan.unmapped:
            log.debug("%s: no column for %s", batch.source.name, ", ".join(batch.plan.unmapped))


@dataclass(slots=True)
class NormalizationPhase:
    name: str = "normalization"

    def run(self, batch: IngestBatch, *, context: PipelineContext) -> None:
        plan = batch.plan or plan_columns(batch.kind, batch.source.headers)
        batch.plan = plan
        batch.outcomes = [
            transform_row(raw, row=index, plan=plan, references=context.references)
            for index, raw in enumerate(batch.source.rows, start=1)
        ]


@dataclass(slots=True)
class ValidationPhase:
    name: str = "validation"

    def run(self, batch: IngestBatch, *, context: PipelineContext) -> None:
        rules = context.rules or default_rules(batch.kind)
        batch.result = validate_outcomes(batch.kind, batch.outcomes, rules)
