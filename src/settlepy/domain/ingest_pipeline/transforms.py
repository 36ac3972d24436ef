"""Raw row to canonical record transforms, one per table kind.

Transforms never raise for bad data. Unresolved references and unparseable
dates leave the field empty and add an :class:`Issue` for the row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from settlepy.domain.diagnostics import Issue, IssueKind
from settlepy.domain.errors import FormatError, MappingError
from settlepy.domain.model import (
    ContactRecord,
    EventType,
    FeedRecord,
    FeedType,
    FundRecord,
    MileageRecord,
    ProjectRecord,
    ProjectStatus,
    ReferenceKind,
    TableKind,
    TeamTaskRecord,
)

from . import tokens
from .designers import extract_designers
from .normalization import (
    clean_text,
    normalize_amount,
    normalize_boolean,
    normalize_choice,
    normalize_date,
    optional_amount,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from settlepy.domain.model import CanonicalRecord
    from settlepy.domain.references import ReferenceSnapshot

    from .columns import ColumnPlan

log = logging.getLogger(__name__)

VAT_DIVISOR = 1.1

PERSONAL_FUND_TOKENS: frozenset[str] = frozenset({"개인", "개인보조금", "personal"})

type RawRow = Mapping[str, str | None]


@dataclass(slots=True)
class RowTransform:
    """Per-row helper that turns leaf errors into issues."""

    row: int
    references: ReferenceSnapshot
    issues: list[Issue] = field(default_factory=list[Issue])

    def reference(self, kind: ReferenceKind, field_name: str, token: str | None) -> str | None:
        if token is None or not token.strip():
            return None
        try:
            return self.references.require(kind, token)
        except MappingError as exc:
            self.issues.append(
                Issue(
                    row=self.row,
                    field=field_name,
                    value=exc.token,
                    message=str(exc),
                    kind=IssueKind.MAPPING,
                    reference=kind,
                )
            )
            return None

    def date(self, field_name: str, value: str | None) -> str | None:
        try:
            return normalize_date(value)
        except FormatError as exc:
            self.issues.append(
                Issue(
                    row=self.row,
                    field=field_name,
                    value=value,
                    message=str(exc),
                    kind=IssueKind.FORMAT,
                )
            )
            return None

    def choice[TChoice](
        self,
        field_name: str,
        value: str | None,
        table: Mapping[str, TChoice],
        default: TChoice,
    ) -> TChoice:
        choice, recognised = normalize_choice(value, table, default)
        if not recognised:
            log.debug("Row %s: %s token %r falls back to %s", self.row, field_name, value, default)
        return choice


@dataclass(frozen=True, slots=True)
class TransformOutcome:
    row: int
    record: CanonicalRecord
    issues: tuple[Issue, ...] = ()


def _text_or_none(value: str | None) -> str | None:
    text = clean_text(value)
    return text or None


def transform_project(
    raw: RawRow, plan: ColumnPlan, helper: RowTransform
) -> ProjectRecord:
    cells = plan.extract(raw)
    designers, designer_issues = extract_designers(raw, helper.references, row=helper.row)
    helper.issues.extend(designer_issues)

    discount_net = normalize_amount(cells["discount_net"])
    gross_t = optional_amount(cells["gross_t"])
    net_b = optional_amount(cells["net_b"])
    if net_b is None:
        net_b = round(gross_t / VAT_DIVISOR - discount_net, 2) if gross_t is not None else 0.0

    return ProjectRecord(
        client_name=_text_or_none(cells["client_name"]),
        channel_id=helper.reference(ReferenceKind.CHANNEL, "channel_id", cells["channel"]),
        category_id=helper.reference(ReferenceKind.CATEGORY, "category_id", cells["category"]),
        title=_text_or_none(cells["title"]),
        qty=normalize_amount(cells["qty"]) or 1.0,
        list_price_net=normalize_amount(cells["list_price_net"]),
        discount_net=discount_net,
        gross_t=gross_t,
        net_b=net_b,
        settle_date=helper.date("settle_date", cells["settle_date"]),
        work_date=helper.date("work_date", cells["work_date"]),
        invoice_requested=normalize_boolean(cells["invoice_requested"], tokens.INVOICE_REQUESTED),
        designers=designers,
        notes=clean_text(cells["notes"]),
        status=helper.choice(
            "status", cells["status"], tokens.PROJECT_STATUSES, ProjectStatus.PENDING
        ),
    )


def transform_contact(raw: RawRow, plan: ColumnPlan, helper: RowTransform) -> ContactRecord:
    cells = plan.extract(raw)
    event_type = helper.choice(
        "event_type", cells["event_type"], tokens.EVENT_TYPES, EventType.INCOMING
    )
    amount = optional_amount(cells["amount"])
    return ContactRecord(
        member_id=helper.reference(ReferenceKind.MEMBER, "member_id", cells["member"]),
        date=helper.date("date", cells["date"]),
        event_type=event_type,
        amount=tokens.CONTACT_AMOUNTS[event_type] if amount is None else amount,
        project_title=_text_or_none(cells["project"]),
        notes=clean_text(cells["notes"]),
    )


def transform_feed(raw: RawRow, plan: ColumnPlan, helper: RowTransform) -> FeedRecord:
    cells = plan.extract(raw)
    fee_type = helper.choice("fee_type", cells["fee_type"], tokens.FEED_TYPES, FeedType.BELOW3)
    amount = optional_amount(cells["amount"])
    return FeedRecord(
        member_id=helper.reference(ReferenceKind.MEMBER, "member_id", cells["member"]),
        date=helper.date("date", cells["date"]),
        fee_type=fee_type,
        amount=tokens.FEED_AMOUNTS[fee_type] if amount is None else amount,
        notes=clean_text(cells["notes"]),
    )


def transform_team_task(raw: RawRow, plan: ColumnPlan, helper: RowTransform) -> TeamTaskRecord:
    cells = plan.extract(raw)
    return TeamTaskRecord(
        member_id=helper.reference(ReferenceKind.MEMBER, "member_id", cells["member"]),
        project_title=_text_or_none(cells["project"]),
        date=helper.date("date", cells["date"]),
        notes=clean_text(cells["notes"]),
        amount=optional_amount(cells["amount"]),
    )


def transform_mileage(raw: RawRow, plan: ColumnPlan, helper: RowTransform) -> MileageRecord:
    cells = plan.extract(raw)
    return MileageRecord(
        member_id=helper.reference(ReferenceKind.MEMBER, "member_id", cells["member"]),
        date=helper.date("date", cells["date"]),
        reason=clean_text(cells["reason"]),
        points=normalize_amount(cells["points"]),
        amount=normalize_amount(cells["amount"]),
        consumed_now=normalize_boolean(cells["consumed_now"], tokens.CONSUMED_NOW),
        notes=clean_text(cells["notes"]),
    )


def transform_fund(raw: RawRow, plan: ColumnPlan, helper: RowTransform) -> FundRecord:
    cells = plan.extract(raw)
    member_token = _text_or_none(cells["member"])
    fund_type = clean_text(cells["type"]).casefold()
    personal = member_token is not None or fund_type in PERSONAL_FUND_TOKENS
    member_id = helper.reference(ReferenceKind.MEMBER, "member_id", member_token)
    if personal and member_token is None:
        helper.issues.append(
            Issue(
                row=helper.row,
                field="member_id",
                value=None,
                message="personal fund rows need a member",
                kind=IssueKind.MISSING_FIELD,
            )
        )
    return FundRecord(
        date=helper.date("date", cells["date"]),
        item=_text_or_none(cells["item"]),
        amount=optional_amount(cells["amount"]),
        memo=clean_text(cells["memo"]),
        personal=personal,
        member_id=member_id,
    )


type Transform = Callable[[RawRow, ColumnPlan, RowTransform], CanonicalRecord]

TRANSFORMS: Mapping[TableKind, Transform] = {
    TableKind.PROJECTS: transform_project,
    TableKind.CONTACTS: transform_contact,
    TableKind.FEEDS: transform_feed,
    TableKind.TEAM_TASKS: transform_team_task,
    TableKind.MILEAGE: transform_mileage,
    TableKind.FUNDS: transform_fund,
}


def transform_row(
    raw: RawRow,
    *,
    row: int,
    plan: ColumnPlan,
    references: ReferenceSnapshot,
) -> TransformOutcome:
    helper = RowTransform(row=row, references=references)
    record = TRANSFORMS[plan.kind](raw, plan, helper)
    return TransformOutcome(row=row, record=record, issues=tuple(helper.issues))
