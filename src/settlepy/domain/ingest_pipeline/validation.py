"""Row-independent validation of transformed records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from settlepy.domain.diagnostics import Issue, IssueKind
from settlepy.domain.model import (
    EventType,
    FeedType,
    ProjectRecord,
    ProjectStatus,
    TableKind,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from settlepy.domain.model import CanonicalRecord

    from .transforms import TransformOutcome

log = logging.getLogger(__name__)

ADVISORY_AMOUNT_RANGE: tuple[float, float] = (0.0, 100_000_000.0)
BONUS_RANGE: tuple[float, float] = (0.0, 20.0)
PERCENT_TOTAL = 100.0
_PERCENT_TOLERANCE = 1e-6

REQUIRED_FIELDS: Mapping[TableKind, tuple[str, ...]] = MappingProxyType(
    {
        TableKind.PROJECTS: (
            "client_name",
            "channel_id",
            "category_id",
            "title",
            "gross_t",
            "settle_date",
        ),
        TableKind.CONTACTS: ("member_id", "date"),
        TableKind.FEEDS: ("member_id", "date"),
        TableKind.TEAM_TASKS: ("member_id", "date", "amount"),
        TableKind.MILEAGE: ("member_id", "date"),
        TableKind.FUNDS: ("date", "item", "amount"),
    }
)

_ENUM_FIELDS: Mapping[TableKind, Mapping[str, frozenset[str]]] = MappingProxyType(
    {
        TableKind.PROJECTS: {"status": frozenset(str(s) for s in ProjectStatus)},
        TableKind.CONTACTS: {"event_type": frozenset(str(e) for e in EventType)},
        TableKind.FEEDS: {"fee_type": frozenset(str(f) for f in FeedType)},
    }
)


@dataclass(frozen=True, slots=True)
class ValidationRules:
    """Rule set applied to every record of one table kind."""

    required_fields: tuple[str, ...]
    amount_field: str | None = "amount"
    amount_range: tuple[float, float] | None = ADVISORY_AMOUNT_RANGE
    enum_whitelists: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    check_allocations: bool = False
    bonus_range: tuple[float, float] = BONUS_RANGE


def default_rules(
    kind: TableKind, *, amount_range: tuple[float, float] | None = ADVISORY_AMOUNT_RANGE
) -> ValidationRules:
    return ValidationRules(
        required_fields=REQUIRED_FIELDS[kind],
        amount_field="gross_t" if kind is TableKind.PROJECTS else "amount",
        amount_range=amount_range,
        enum_whitelists=MappingProxyType(dict(_ENUM_FIELDS.get(kind, {}))),
        check_allocations=kind is TableKind.PROJECTS,
    )


@dataclass(frozen=True, slots=True)
class ValidationSummary:
    total: int = 0
    success: int = 0
    error: int = 0
    warning: int = 0
    skipped: int = 0


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Accepted records plus every blocking error and advisory warning."""

    kind: TableKind
    data: tuple[CanonicalRecord, ...] = ()
    accepted_rows: tuple[int, ...] = ()
    errors: tuple[Issue, ...] = ()
    warnings: tuple[Issue, ...] = ()
    summary: ValidationSummary = field(default_factory=ValidationSummary)

    @property
    def success(self) -> bool:
        return not self.errors

    def mapping_errors(self) -> tuple[Issue, ...]:
        return tuple(issue for issue in self.errors if issue.kind is IssueKind.MAPPING)


def _is_missing(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def check_record(
    record: CanonicalRecord,
    rules: ValidationRules,
    *,
    row: int,
    known_fields: Iterable[str] = (),
) -> list[Issue]:
    """Apply ``rules`` to one record.

    ``known_fields`` are fields that already carry an issue from
    normalization; they are not reported again as missing.
    """

    already = set(known_fields)
    issues: list[Issue] = []

    for name in rules.required_fields:
        if name in already:
            continue
        value = getattr(record, name, None)
        if _is_missing(value):
            issues.append(
                Issue(
                    row=row,
                    field=name,
                    value=value,
                    message=f"required field is missing: {name}",
                    kind=IssueKind.MISSING_FIELD,
                )
            )

    for name, allowed in rules.enum_whitelists.items():
        value = getattr(record, name, None)
        if value is not None and str(value) not in allowed:
            issues.append(
                Issue(
                    row=row,
                    field=name,
                    value=str(value),
                    message=f"value not allowed (expected one of {', '.join(sorted(allowed))})",
                    kind=IssueKind.ENUM,
                )
            )

    if rules.check_allocations and isinstance(record, ProjectRecord):
        issues.extend(_check_allocations(record, rules, row=row))

    if rules.amount_field and rules.amount_range is not None:
        amount = getattr(record, rules.amount_field, None)
        low, high = rules.amount_range
        if isinstance(amount, (int, float)) and not low <= amount <= high:
            issues.append(
                Issue(
                    row=row,
                    field=rules.amount_field,
                    value=amount,
                    message=f"amount outside expected range {low:,.0f}..{high:,.0f}",
                    kind=IssueKind.RANGE,
                )
            )
    return issues


def _check_allocations(record: ProjectRecord, rules: ValidationRules, *, row: int) -> list[Issue]:
    issues: list[Issue] = []
    seen: set[str] = set()
    for allocation in record.designers:
        if allocation.member_id in seen:
            issues.append(
                Issue(
                    row=row,
                    field="designers",
                    value=allocation.member_id,
                    message=f"member '{allocation.member_id}' is allocated more than once",
                    kind=IssueKind.ALLOCATION,
                )
            )
        seen.add(allocation.member_id)
        low, high = rules.bonus_range
        if not low <= allocation.bonus_pct <= high:
            issues.append(
                Issue(
                    row=row,
                    field="designers",
                    value=allocation.bonus_pct,
                    message=(
                        f"bonus_pct for '{allocation.member_id}' outside {low:g}..{high:g}"
                    ),
                    kind=IssueKind.ALLOCATION,
                )
            )

    total = sum(allocation.percent for allocation in record.designers)
    if abs(total - PERCENT_TOTAL) > _PERCENT_TOLERANCE:
        issues.append(
            Issue(
                row=row,
                field="designers",
                value=total,
                message=f"designer shares sum to {total:g}, expected {PERCENT_TOTAL:g}",
                kind=IssueKind.ALLOCATION,
            )
        )
    return issues


def validate_outcomes(
    kind: TableKind, outcomes: Sequence[TransformOutcome], rules: ValidationRules
) -> ValidationResult:
    """Validate every row on its own; a row is accepted when it has no blocking issue."""

    accepted: list[CanonicalRecord] = []
    accepted_rows: list[int] = []
    errors: list[Issue] = []
    warnings: list[Issue] = []
    error_rows = 0
    warning_rows = 0

    for outcome in outcomes:
        issues = [
            *outcome.issues,
            *check_record(
                outcome.record,
                rules,
                row=outcome.row,
                known_fields=(issue.field for issue in outcome.issues),
            ),
        ]
        row_errors = [issue for issue in issues if issue.blocking]
        row_warnings = [issue for issue in issues if not issue.blocking]
        errors.extend(row_errors)
        warnings.extend(row_warnings)
        if row_warnings:
            warning_rows += 1
        if row_errors:
            error_rows += 1
            log.debug("Row %s rejected: %s", outcome.row, [i.message for i in row_errors])
            continue
        accepted.append(outcome.record)
        accepted_rows.append(outcome.row)

    total = len(outcomes)
    return ValidationResult(
        kind=kind,
        data=tuple(accepted),
        accepted_rows=tuple(accepted_rows),
        errors=tuple(errors),
        warnings=tuple(warnings),
        summary=ValidationSummary(
            total=total,
            success=len(accepted),
            error=error_rows,
            warning=warning_rows,
            skipped=total - len(accepted),
        ),
    )
