from __future__ import annotations

import pytest

from settlepy.domain.errors import MappingError
from settlepy.domain.model import Category, Channel, Member, ReferenceKind
from settlepy.domain.references import ReferenceSnapshot, normalize_key


def _snapshot(*, fuzzy: bool = True) -> ReferenceSnapshot:
    return ReferenceSnapshot.build(
        members=[
            Member(id="OY", code="OY", name="오유택"),
            Member(id="LE", code="LE", name="이예천"),
        ],
        channels=[Channel(id="kmong", name="크몽", market_fee_rate=0.21)],
        categories=[
            Category(id="logo", code="LG", name="로고"),
            Category(id="banner", code="BN", name="현수막/배너"),
        ],
        projects=[("p-1", "모카 로고")],
        fuzzy=fuzzy,
    )


def test_normalize_key_collapses_whitespace_and_case() -> None:
    assert normalize_key("  Oh   Yutaek ") == "oh yutaek"


def test_resolve_by_id_code_name_and_alias() -> None:
    snapshot = _snapshot()

    assert snapshot.resolve(ReferenceKind.MEMBER, "OY") == "OY"
    assert snapshot.resolve(ReferenceKind.MEMBER, "오유택") == "OY"
    assert snapshot.resolve(ReferenceKind.MEMBER, "oh yutaek") == "OY"
    assert snapshot.resolve(ReferenceKind.CHANNEL, "KMONG") == "kmong"
    assert snapshot.resolve(ReferenceKind.CATEGORY, "lg") == "logo"
    assert snapshot.resolve(ReferenceKind.PROJECT, "모카 로고") == "p-1"


def test_aliases_for_unknown_ids_are_ignored() -> None:
    snapshot = _snapshot()

    # "계좌입금" aliases the direct channel, which this snapshot does not hold
    assert snapshot.resolve(ReferenceKind.CHANNEL, "계좌입금") is None


def test_fuzzy_containment_resolves_unique_match() -> None:
    snapshot = _snapshot()

    assert snapshot.resolve(ReferenceKind.CATEGORY, "대형배너") == "banner"


def test_fuzzy_containment_ignores_ids_and_codes() -> None:
    snapshot = _snapshot()

    # "le" is a member code, "lg" a category code
    assert snapshot.resolve(ReferenceKind.MEMBER, "Alex") is None
    assert snapshot.resolve(ReferenceKind.CATEGORY, "Flgx") is None
    assert snapshot.resolve(ReferenceKind.MEMBER, "오유택님") == "OY"
    assert snapshot.resolve(ReferenceKind.CATEGORY, "대형배너") == "banner"


def test_fuzzy_can_be_disabled() -> None:
    snapshot = _snapshot(fuzzy=False)

    assert snapshot.resolve(ReferenceKind.CATEGORY, "대형배너") is None


def test_ambiguous_fuzzy_match_is_unresolved() -> None:
    snapshot = ReferenceSnapshot.build(
        categories=[
            Category(id="card_news", name="카드뉴스"),
            Category(id="card_event", name="카드이벤트"),
        ],
        aliases={},
    )

    assert snapshot.resolve(ReferenceKind.CATEGORY, "카드") is None


def test_require_names_the_stripped_token() -> None:
    snapshot = _snapshot()

    with pytest.raises(MappingError) as excinfo:
        snapshot.require(ReferenceKind.CHANNEL, " 숨고비교 ")

    assert excinfo.value.token == "숨고비교"
    assert excinfo.value.kind is ReferenceKind.CHANNEL
    assert "숨고비교" in str(excinfo.value)


def test_blank_tokens_do_not_resolve() -> None:
    snapshot = _snapshot()

    assert snapshot.resolve(ReferenceKind.MEMBER, None) is None
    assert snapshot.resolve(ReferenceKind.MEMBER, "   ") is None


def test_snapshots_are_independent() -> None:
    first = _snapshot()
    second = ReferenceSnapshot.build(members=[Member(id="KY", code="KY", name="김연지")])

    assert first.resolve(ReferenceKind.MEMBER, "김연지") is None
    assert second.resolve(ReferenceKind.MEMBER, "김연지") == "KY"
    assert first.member_name("OY") == "오유택"
    assert first.channel("kmong") is not None
