from __future__ import annotations

import pytest

from settlepy.domain.ingest_pipeline import DESIGNER_PATTERNS, detect_table_kind, plan_columns
from settlepy.domain.ingest_pipeline.columns import is_designer_column
from settlepy.domain.model import TableKind

from tests.helpers.ledger import PROJECT_HEADERS


def test_plan_columns_maps_labels_to_fields() -> None:
    plan = plan_columns(TableKind.PROJECTS, PROJECT_HEADERS)

    assert plan.fields["client_name"] == "클라이언트명"
    assert plan.fields["channel"] == "채널"
    assert plan.fields["gross_t"] == "입금액_T"
    assert plan.fields["settle_date"] == "정산일"
    assert "net_b" in plan.unmapped


def test_plan_columns_never_maps_designer_columns_to_fields() -> None:
    plan = plan_columns(TableKind.PROJECTS, PROJECT_HEADERS)

    assert not any(is_designer_column(header) for header in plan.fields.values())


def test_plan_columns_accepts_canonical_field_names() -> None:
    plan = plan_columns(TableKind.FEEDS, ["date", "member", "fee_type", "amount"])

    assert plan.fields == {
        "date": "date",
        "member": "member",
        "fee_type": "fee_type",
        "amount": "amount",
    }


def test_plan_columns_fuzzy_fallback() -> None:
    plan = plan_columns(TableKind.CONTACTS, ["작성 날짜", "담당 멤버", "금액(원)"])

    assert plan.fields["date"] == "작성 날짜"
    assert plan.fields["member"] == "담당 멤버"
    assert plan.fields["amount"] == "금액(원)"


def test_short_headers_do_not_match_inside_field_names() -> None:
    plan = plan_columns(TableKind.CONTACTS, ("No", "날짜", "멤버", "금액"))

    assert "notes" not in plan.fields
    assert "notes" in plan.unmapped
    assert plan.fields["amount"] == "금액"


def test_extract_returns_every_field_stripped() -> None:
    plan = plan_columns(TableKind.FEEDS, ["날짜", "멤버"])

    cells = plan.extract({"날짜": " 2024-03-01 ", "멤버": "오유택"})

    assert cells["date"] == "2024-03-01"
    assert cells["member"] == "오유택"
    assert cells["amount"] is None


@pytest.mark.parametrize(
    ("header", "family", "token"),
    [
        ("오유택_지분", "share", "오유택"),
        ("오유택지분", "share", "오유택"),
        ("OY_share", "share", "OY"),
        ("Kim Yeonji_percent", "share", "Kim Yeonji"),
        ("이예천_인센티브", "bonus", "이예천"),
        ("LE_bonus_pct", "bonus", "LE"),
        ("LE_bonus", "bonus", "LE"),
    ],
)
def test_designer_patterns_extract_member_token(header: str, family: str, token: str) -> None:
    matches = {pattern.name: pattern.match(header) for pattern in DESIGNER_PATTERNS}

    assert matches[family] == token


def test_designer_patterns_ignore_plain_headers() -> None:
    assert not is_designer_column("프로젝트명")
    assert not is_designer_column("_지분")


@pytest.mark.parametrize(
    ("name", "kind"),
    [
        ("2024_프로젝트", TableKind.PROJECTS),
        ("contacts", TableKind.CONTACTS),
        ("피드로그", TableKind.FEEDS),
        ("팀업무", TableKind.TEAM_TASKS),
        ("Mileage-2024", TableKind.MILEAGE),
        ("공금", TableKind.FUNDS),
        ("notes", None),
    ],
)
def test_detect_table_kind(name: str, kind: TableKind | None) -> None:
    assert detect_table_kind(name) is kind
