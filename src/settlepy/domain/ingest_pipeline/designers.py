"""Dynamic designer column detection for project sheets.

Pass one scans every header against the pattern families and collects
candidates; pass two resolves the embedded member tokens and merges them into
one partial allocation per member.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from settlepy.domain.diagnostics import Issue, IssueKind
from settlepy.domain.errors import MappingError
from settlepy.domain.model import DesignerAllocation, ReferenceKind

from .columns import DESIGNER_PATTERNS
from .normalization import normalize_amount

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from settlepy.domain.references import ReferenceSnapshot

    from .columns import DesignerPattern

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DesignerCandidate:
    header: str
    token: str
    attribute: str
    value: float


@dataclass(slots=True)
class _Partial:
    percent: float | None = None
    bonus_pct: float | None = None
    headers: list[str] = field(default_factory=list[str])


def scan_designer_columns(
    raw: Mapping[str, str | None],
    patterns: Sequence[DesignerPattern] = DESIGNER_PATTERNS,
) -> list[DesignerCandidate]:
    """Collect every non-blank cell whose header fits a pattern family."""

    candidates: list[DesignerCandidate] = []
    for header, cell in raw.items():
        if cell is None or not str(cell).strip():
            continue
        for family in patterns:
            token = family.match(header)
            if token is None:
                continue
            candidates.append(
                DesignerCandidate(
                    header=header,
                    token=token,
                    attribute=family.attribute,
                    value=normalize_amount(cell),
                )
            )
            break
    return candidates


def extract_designers(
    raw: Mapping[str, str | None],
    references: ReferenceSnapshot,
    *,
    row: int,
    patterns: Sequence[DesignerPattern] = DESIGNER_PATTERNS,
) -> tuple[list[DesignerAllocation], list[Issue]]:
    """Return the allocations with ``percent > 0`` plus any row issues."""

    issues: list[Issue] = []
    partials: dict[str, _Partial] = {}

    for candidate in scan_designer_columns(raw, patterns):
        try:
            member_id = references.require(ReferenceKind.MEMBER, candidate.token)
        except MappingError as exc:
            issues.append(
                Issue(
                    row=row,
                    field=candidate.header,
                    value=candidate.token,
                    message=str(exc),
                    kind=IssueKind.MAPPING,
                    reference=ReferenceKind.MEMBER,
                )
            )
            continue

        partial = partials.setdefault(member_id, _Partial())
        if getattr(partial, candidate.attribute) is not None:
            issues.append(
                Issue(
                    row=row,
                    field=candidate.header,
                    value=candidate.token,
                    message=(
                        f"member '{member_id}' appears more than once "
                        f"({', '.join([*partial.headers, candidate.header])})"
                    ),
                    kind=IssueKind.ALLOCATION,
                )
            )
            continue
        setattr(partial, candidate.attribute, candidate.value)
        partial.headers.append(candidate.header)

    allocations = [
        DesignerAllocation(
            member_id=member_id,
            percent=partial.percent,
            bonus_pct=partial.bonus_pct or 0.0,
        )
        for member_id, partial in partials.items()
        if partial.percent is not None and partial.percent > 0
    ]
    skipped = [member_id for member_id, partial in partials.items() if not partial.percent]
    if skipped:
        log.debug("Row %s: ignoring designers without a share: %s", row, skipped)
    return allocations, issues
