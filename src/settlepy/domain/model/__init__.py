"""Public domain model surface."""

from __future__ import annotations

from settlepy.domain.model.enums import (
    LEDGER_TABLES,
    REFERENCE_TABLES,
    EventType,
    FeeBase,
    FeedType,
    ProjectStatus,
    ReferenceKind,
    SettlementStatus,
    SourceType,
    Table,
    TableKind,
)
from settlepy.domain.model.records import (
    CanonicalRecord,
    ContactRecord,
    DesignerAllocation,
    FeedRecord,
    FundRecord,
    LedgerRecord,
    MileageRecord,
    ProjectRecord,
    TeamTaskRecord,
    new_id,
)
from settlepy.domain.model.reference import Category, Channel, Member
from settlepy.domain.model.settlement import Settlement, SettlementItem

__all__ = [
    "LEDGER_TABLES",
    "REFERENCE_TABLES",
    "CanonicalRecord",
    "Category",
    "Channel",
    "ContactRecord",
    "DesignerAllocation",
    "EventType",
    "FeeBase",
    "FeedRecord",
    "FeedType",
    "FundRecord",
    "LedgerRecord",
    "Member",
    "MileageRecord",
    "ProjectRecord",
    "ProjectStatus",
    "ReferenceKind",
    "Settlement",
    "SettlementItem",
    "SettlementStatus",
    "SourceType",
    "Table",
    "TableKind",
    "TeamTaskRecord",
    "new_id",
]
