from __future__ import annotations

from decimal import Decimal

import pytest

from settlepy.domain.model import Channel, FeeBase
from settlepy.domain.settlement import (
    FeeProfile,
    flat_payout,
    project_payout,
    round_won,
    withholding_tax,
)


def test_worked_example_with_market_fee() -> None:
    fees = FeeProfile.from_channel(Channel(id="kmong", name="크몽", market_fee_rate=0.21))

    payout = project_payout(gross_t=1_100_000, discount_net=0, percent=100, fees=fees)

    assert payout.net == Decimal(1_000_000)
    assert payout.ad_fee == Decimal(100_000)
    assert payout.program_fee == Decimal(30_000)
    assert payout.channel_fee == Decimal(210_000)
    assert payout.pool == Decimal(660_000)
    assert payout.before_withholding == 660_000
    assert payout.withholding_tax == 21_780
    assert payout.after_withholding == 638_220


def test_share_and_bonus_split_the_pool() -> None:
    payout = project_payout(gross_t=1_100_000, percent=50, bonus_pct=10)

    # pool = 1,000,000 - 100,000 - 30,000 = 870,000
    assert payout.base == 435_000
    assert payout.bonus == 43_500
    assert payout.before_withholding == 478_500


def test_gross_fee_base_charges_fees_on_gross() -> None:
    fees = FeeProfile(market_fee_rate=Decimal("0.1"), fee_base=FeeBase.GROSS)

    payout = project_payout(gross_t=1_100_000, fees=fees)

    assert payout.channel_fee == Decimal(110_000)
    assert payout.ad_fee == Decimal(110_000)
    assert payout.pool == Decimal(1_000_000) - Decimal(110_000) * 2 - Decimal(33_000)


def test_discount_reduces_net() -> None:
    payout = project_payout(gross_t=1_100_000, discount_net=100_000)

    assert payout.net == Decimal(900_000)


def test_missing_channel_uses_default_rates() -> None:
    profile = FeeProfile.from_channel(None)

    assert profile.ad_rate == Decimal("0.1")
    assert profile.program_rate == Decimal("0.03")
    assert profile.market_fee_rate == Decimal(0)


@pytest.mark.parametrize("amount", [400, 1000, 2000, 12_345, 99_999])
def test_flat_payout_withholding_identity(amount: int) -> None:
    payout = flat_payout(amount)

    assert payout.before_withholding == amount
    assert payout.withholding_tax == round_won(Decimal(amount) * Decimal("0.033"))
    assert payout.before_withholding - payout.withholding_tax == payout.after_withholding


def test_withholding_rounds_half_up() -> None:
    # 15 * 0.033 = 0.495, 500 * 0.033 = 16.5
    assert withholding_tax(15) == 0
    assert withholding_tax(500) == 17
