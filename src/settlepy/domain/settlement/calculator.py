"""Payout calculation for one (source, designer) pair.

Project sources run through the fee cascade::

    net_B       = gross_T / 1.1 - discount_net
    channel_fee = fee_base * market_fee_rate
    ad_fee      = fee_base * ad_rate          (0.10 by default)
    program_fee = fee_base * program_rate     (0.03 by default)
    pool        = net_B - ad_fee - program_fee - channel_fee
    base        = pool * percent / 100
    bonus       = base * bonus_pct / 100

``fee_base`` is ``net_B`` for "B" channels and ``gross_T`` for "T" channels.
Every other source pays its amount as-is. Both then withhold 3.3%, rounded
half-up to whole won, so ``before - tax == after`` holds exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from settlepy.domain.model import FeeBase
from settlepy.domain.model.reference import DEFAULT_AD_RATE, DEFAULT_PROGRAM_RATE

if TYPE_CHECKING:
    from settlepy.domain.model import Channel

VAT_DIVISOR = Decimal("1.1")
WITHHOLDING_RATE = Decimal("0.033")
_HUNDRED = Decimal(100)
_WON = Decimal(1)


def to_decimal(value: float | int | str | Decimal | None) -> Decimal:
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_won(value: Decimal) -> int:
    return int(value.quantize(_WON, rounding=ROUND_HALF_UP))


def withholding_tax(before_withholding: int) -> int:
    return round_won(Decimal(before_withholding) * WITHHOLDING_RATE)


@dataclass(frozen=True, slots=True)
class FeeProfile:
    ad_rate: Decimal = Decimal(str(DEFAULT_AD_RATE))
    program_rate: Decimal = Decimal(str(DEFAULT_PROGRAM_RATE))
    market_fee_rate: Decimal = Decimal(0)
    fee_base: FeeBase = FeeBase.NET

    @classmethod
    def from_channel(cls, channel: Channel | None) -> FeeProfile:
        if channel is None:
            return cls()
        return cls(
            ad_rate=to_decimal(channel.ad_rate),
            program_rate=to_decimal(channel.program_rate),
            market_fee_rate=to_decimal(channel.market_fee_rate),
            fee_base=channel.fee_base,
        )


@dataclass(frozen=True, slots=True)
class Payout:
    gross: Decimal
    net: Decimal
    ad_fee: Decimal
    program_fee: Decimal
    channel_fee: Decimal
    pool: Decimal
    base: int
    bonus: int
    before_withholding: int
    withholding_tax: int
    after_withholding: int


def project_payout(
    *,
    gross_t: float | Decimal,
    discount_net: float | Decimal = 0,
    percent: float | Decimal = 100,
    bonus_pct: float | Decimal = 0,
    fees: FeeProfile | None = None,
) -> Payout:
    profile = fees or FeeProfile()
    gross = to_decimal(gross_t)
    net = gross / VAT_DIVISOR - to_decimal(discount_net)
    fee_base = gross if profile.fee_base is FeeBase.GROSS else net

    channel_fee = fee_base * profile.market_fee_rate
    ad_fee = fee_base * profile.ad_rate
    program_fee = fee_base * profile.program_rate
    pool = net - ad_fee - program_fee - channel_fee

    base = round_won(pool * to_decimal(percent) / _HUNDRED)
    bonus = round_won(Decimal(base) * to_decimal(bonus_pct) / _HUNDRED)
    before = base + bonus
    tax = withholding_tax(before)
    return Payout(
        gross=gross,
        net=net,
        ad_fee=ad_fee,
        program_fee=program_fee,
        channel_fee=channel_fee,
        pool=pool,
        base=base,
        bonus=bonus,
        before_withholding=before,
        withholding_tax=tax,
        after_withholding=before - tax,
    )


def flat_payout(amount: float | Decimal) -> Payout:
    """Contacts, feeds, team tasks and mileage skip the fee cascade."""

    value = to_decimal(amount)
    before = round_won(value)
    tax = withholding_tax(before)
    zero = Decimal(0)
    return Payout(
        gross=value,
        net=value,
        ad_fee=zero,
        program_fee=zero,
        channel_fee=zero,
        pool=value,
        base=before,
        bonus=0,
        before_withholding=before,
        withholding_tax=tax,
        after_withholding=before - tax,
    )
