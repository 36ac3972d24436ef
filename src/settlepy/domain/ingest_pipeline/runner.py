"""Entry point for running the ingest pipeline over one source table."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .context import IngestBatch, PipelineContext
from .orchestrator import (
    ColumnMappingPhase,
    IngestionPipeline,
    NormalizationPhase,
    ValidationPhase,
)

if TYPE_CHECKING:
    from settlepy.domain.model import TableKind
    from settlepy.domain.references import ReferenceSnapshot

    from .context import SourceTable
    from .validation import ValidationResult, ValidationRules

log = logging.getLogger(__name__)


def default_pipeline() -> IngestionPipeline:
    return IngestionPipeline(
        phases=(ColumnMappingPhase(), NormalizationPhase(), ValidationPhase())
    )


def run_ingest_pipeline(
    source: SourceTable,
    *,
    kind: TableKind,
    references: ReferenceSnapshot,
    rules: ValidationRules | None = None,
    pipeline: IngestionPipeline | None = None,
) -> ValidationResult:
    """Map, normalize and validate ``source`` as ``kind`` rows."""

    batch = IngestBatch(kind=kind, source=source)
    context = PipelineContext(references=references, rules=rules)
    (pipeline or default_pipeline()).run(batch, context=context)
    result = batch.require_result()
    log.info(
        "Ingested %s as %s: total=%s, accepted=%s, errors=%s, warnings=%s",
        source.name,
        kind,
        result.summary.total,
        result.summary.success,
        len(result.errors),
        len(result.warnings),
    )
    return result
