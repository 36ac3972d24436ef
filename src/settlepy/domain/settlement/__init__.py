"""Settlement calculation and assembly."""

from __future__ import annotations

from .assembly import (
    GenerationOutcome,
    GenerationResult,
    Period,
    SettlementGenerator,
    SettlementSource,
    collect_sources,
    generate_settlement,
    load_items,
)
from .calculator import (
    WITHHOLDING_RATE,
    FeeProfile,
    Payout,
    flat_payout,
    project_payout,
    round_won,
    withholding_tax,
)
from .summary import (
    MemberTotal,
    UnpaidSummary,
    grand_total,
    member_names,
    member_totals,
    unpaid_summary,
)

__all__ = [
    "WITHHOLDING_RATE",
    "FeeProfile",
    "GenerationOutcome",
    "GenerationResult",
    "MemberTotal",
    "Payout",
    "Period",
    "SettlementGenerator",
    "SettlementSource",
    "UnpaidSummary",
    "collect_sources",
    "flat_payout",
    "generate_settlement",
    "grand_total",
    "load_items",
    "member_names",
    "member_totals",
    "project_payout",
    "round_won",
    "unpaid_summary",
    "withholding_tax",
]
