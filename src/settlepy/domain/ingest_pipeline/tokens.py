"""Token tables for boolean and enum-like source cells.

Keys are compared after :func:`settlepy.domain.references.normalize_key`, so
they are written casefolded here.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from settlepy.domain.model import EventType, FeedType, ProjectStatus

if TYPE_CHECKING:
    from collections.abc import Mapping

INVOICE_REQUESTED: Final[Mapping[str, bool]] = MappingProxyType(
    {
        "y": True,
        "yes": True,
        "네": True,
        "예": True,
        "요청": True,
        "1": True,
        "true": True,
        "n": False,
        "no": False,
        "아니오": False,
        "아니요": False,
        "미요청": False,
        "0": False,
        "false": False,
    }
)

CONSUMED_NOW: Final[Mapping[str, bool]] = MappingProxyType(
    {
        "y": True,
        "yes": True,
        "네": True,
        "예": True,
        "사용": True,
        "현금화": True,
        "1": True,
        "true": True,
        "n": False,
        "no": False,
        "아니오": False,
        "아니요": False,
        "미사용": False,
        "0": False,
        "false": False,
    }
)

EVENT_TYPES: Final[Mapping[str, EventType]] = MappingProxyType(
    {
        "인바운드": EventType.INCOMING,
        "인커밍": EventType.INCOMING,
        "incoming": EventType.INCOMING,
        "상담": EventType.CHAT,
        "채팅": EventType.CHAT,
        "chat": EventType.CHAT,
        "가이드": EventType.GUIDE,
        "guide": EventType.GUIDE,
    }
)

FEED_TYPES: Final[Mapping[str, FeedType]] = MappingProxyType(
    {
        "3개미만": FeedType.BELOW3,
        "피드3개미만": FeedType.BELOW3,
        "below3": FeedType.BELOW3,
        "3개이상": FeedType.GTE3,
        "피드3개이상": FeedType.GTE3,
        "gte3": FeedType.GTE3,
    }
)

PROJECT_STATUSES: Final[Mapping[str, ProjectStatus]] = MappingProxyType(
    {
        "진행중": ProjectStatus.IN_PROGRESS,
        "in_progress": ProjectStatus.IN_PROGRESS,
        "완료": ProjectStatus.COMPLETED,
        "completed": ProjectStatus.COMPLETED,
        "대기": ProjectStatus.PENDING,
        "pending": ProjectStatus.PENDING,
        "취소": ProjectStatus.CANCELLED,
        "cancelled": ProjectStatus.CANCELLED,
        "보류": ProjectStatus.ON_HOLD,
        "on_hold": ProjectStatus.ON_HOLD,
    }
)

# Unit amounts used when a contact or feed row leaves the amount blank.
CONTACT_AMOUNTS: Final[Mapping[EventType, float]] = MappingProxyType(
    {
        EventType.INCOMING: 1000.0,
        EventType.CHAT: 1000.0,
        EventType.GUIDE: 2000.0,
    }
)

FEED_AMOUNTS: Final[Mapping[FeedType, float]] = MappingProxyType(
    {
        FeedType.BELOW3: 400.0,
        FeedType.GTE3: 1000.0,
    }
)
