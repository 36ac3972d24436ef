"""Baseline reference data (members, channels, categories)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from settlepy.domain.model import Category, Channel, FeeBase, Member, ReferenceKind, Table

if TYPE_CHECKING:
    from collections.abc import Mapping

    from settlepy.domain.ports import RowStore

log = logging.getLogger(__name__)

SEED_MEMBERS: Final[tuple[Member, ...]] = (
    Member(id="OY", code="OY", name="오유택"),
    Member(id="LE", code="LE", name="이예천"),
    Member(id="KY", code="KY", name="김연지"),
    Member(id="KH", code="KH", name="김하늘"),
    Member(id="IJ", code="IJ", name="이정수"),
    Member(id="PJ", code="PJ", name="박지윤"),
)

SEED_CHANNELS: Final[tuple[Channel, ...]] = (
    Channel(
        id="kmong",
        name="크몽",
        ad_rate=0.10,
        program_rate=0.03,
        market_fee_rate=0.21,
        fee_base=FeeBase.NET,
    ),
    Channel(id="direct", name="계좌입금", market_fee_rate=0.0, fee_base=FeeBase.NET),
)

SEED_CATEGORIES: Final[tuple[Category, ...]] = (
    Category(id="card_news", code="CN", name="카드뉴스"),
    Category(id="poster", code="PT", name="포스터"),
    Category(id="banner", code="BN", name="현수막/배너"),
    Category(id="menu", code="MN", name="메뉴판"),
    Category(id="blog_skin", code="BS", name="블로그스킨"),
    Category(id="web_design", code="WD", name="웹디자인"),
    Category(id="logo", code="LG", name="로고"),
    Category(id="branding", code="BR", name="브랜딩"),
    Category(id="package", code="PK", name="패키지디자인"),
    Category(id="ui_ux", code="UX", name="UI/UX"),
    Category(id="app_design", code="AD", name="앱디자인"),
    Category(id="editorial", code="ED", name="편집디자인"),
    Category(id="print", code="PR", name="인쇄물"),
    Category(id="others", code="OT", name="기타"),
)


def seed_reference_data(store: RowStore) -> Mapping[Table, int]:
    """Upsert the baseline reference rows; safe to run repeatedly."""

    counts = {
        Table.MEMBERS: store.upsert(Table.MEMBERS, [m.to_row() for m in SEED_MEMBERS]),
        Table.CHANNELS: store.upsert(Table.CHANNELS, [c.to_row() for c in SEED_CHANNELS]),
        Table.CATEGORIES: store.upsert(
            Table.CATEGORIES, [c.to_row() for c in SEED_CATEGORIES]
        ),
    }
    log.info("Seeded reference data: %s", {str(k): v for k, v in counts.items()})
    return counts


def placeholder_reference(
    kind: ReferenceKind, token: str, ref_id: str
) -> tuple[Table, dict[str, object]]:
    """Row created for a token that did not resolve during ingestion."""

    if kind is ReferenceKind.MEMBER:
        return Table.MEMBERS, Member(id=ref_id, code=ref_id, name=token).to_row()
    if kind is ReferenceKind.CHANNEL:
        return Table.CHANNELS, Channel(id=ref_id, name=token).to_row()
    if kind is ReferenceKind.CATEGORY:
        return Table.CATEGORIES, Category(id=ref_id, name=token).to_row()
    raise ValueError(f"Cannot create a {kind} reference")
