"""Ingest pipeline: column mapping, normalization and validation."""

from __future__ import annotations

from .columns import (
    COLUMN_LABELS,
    DESIGNER_PATTERNS,
    ColumnPlan,
    DesignerPattern,
    detect_table_kind,
    plan_columns,
)
from .context import IngestBatch, PipelineContext, SourceTable
from .normalization import normalize_amount, normalize_boolean, normalize_date
from .orchestrator import (
    ColumnMappingPhase,
    IngestionPipeline,
    NormalizationPhase,
    PipelinePhase,
    ValidationPhase,
)
from .runner import default_pipeline, run_ingest_pipeline
from .transforms import TransformOutcome, transform_row
from .validation import (
    ValidationResult,
    ValidationRules,
    ValidationSummary,
    default_rules,
    validate_outcomes,
)

__all__ = [
    "COLUMN_LABELS",
    "DESIGNER_PATTERNS",
    "ColumnMappingPhase",
    "ColumnPlan",
    "DesignerPattern",
    "IngestBatch",
    "IngestionPipeline",
    "NormalizationPhase",
    "PipelineContext",
    "PipelinePhase",
    "SourceTable",
    "TransformOutcome",
    "ValidationPhase",
    "ValidationResult",
    "ValidationRules",
    "ValidationSummary",
    "default_pipeline",
    "default_rules",
    "detect_table_kind",
    "normalize_amount",
    "normalize_boolean",
    "normalize_date",
    "plan_columns",
    "run_ingest_pipeline",
    "transform_row",
    "validate_outcomes",
]
