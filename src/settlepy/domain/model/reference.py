"""Reference entities: members, channels and categories."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from settlepy.domain.model.enums import FeeBase

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_AD_RATE = 0.10
DEFAULT_PROGRAM_RATE = 0.03


@dataclass(frozen=True, slots=True)
class Member:
    """Designer or staff identity."""

    id: str
    code: str
    name: str
    active: bool = True

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> Member:
        return cls(
            id=str(row["id"]),
            code=str(row.get("code") or row["id"]),
            name=str(row.get("name") or ""),
            active=bool(row.get("active", True)),
        )

    def to_row(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class Channel:
    """Sales channel fee profile."""

    id: str
    name: str
    ad_rate: float = DEFAULT_AD_RATE
    program_rate: float = DEFAULT_PROGRAM_RATE
    market_fee_rate: float = 0.0
    fee_base: FeeBase = FeeBase.NET

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> Channel:
        return cls(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            ad_rate=_rate(row.get("ad_rate"), DEFAULT_AD_RATE),
            program_rate=_rate(row.get("program_rate"), DEFAULT_PROGRAM_RATE),
            market_fee_rate=_rate(row.get("market_fee_rate"), 0.0),
            fee_base=FeeBase(str(row.get("fee_base") or FeeBase.NET)),
        )

    def to_row(self) -> dict[str, object]:
        row = asdict(self)
        row["fee_base"] = str(self.fee_base)
        return row


@dataclass(frozen=True, slots=True)
class Category:
    """Project classification."""

    id: str
    name: str
    code: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> Category:
        code = row.get("code")
        return cls(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            code=str(code) if code else None,
        )

    def to_row(self) -> dict[str, object]:
        return asdict(self)


def _rate(value: object, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value)
    return float(str(value))
