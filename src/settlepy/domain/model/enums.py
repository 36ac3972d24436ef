"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ReferenceKind(StrEnum):
    MEMBER = "member"
    CHANNEL = "channel"
    CATEGORY = "category"
    PROJECT = "project"


class TableKind(StrEnum):
    """Kinds of source sheets accepted by ingestion."""

    PROJECTS = "projects"
    CONTACTS = "contacts"
    FEEDS = "feeds"
    TEAM_TASKS = "team_tasks"
    MILEAGE = "mileage"
    FUNDS = "funds"


class Table(StrEnum):
    """Physical tables of the row store, in dependency order."""

    MEMBERS = "members"
    CHANNELS = "channels"
    CATEGORIES = "categories"
    PROJECTS = "projects"
    CONTACTS = "contacts"
    FEED_LOGS = "feed_logs"
    TEAM_TASKS = "team_tasks"
    MILEAGE = "mileage"
    FUNDS_COMPANY = "funds_company"
    FUNDS_PERSONAL = "funds_personal"
    SETTLEMENTS = "settlements"
    SETTLEMENT_ITEMS = "settlement_items"


REFERENCE_TABLES: tuple[Table, ...] = (Table.MEMBERS, Table.CHANNELS, Table.CATEGORIES)
LEDGER_TABLES: tuple[Table, ...] = tuple(t for t in Table if t not in REFERENCE_TABLES)


class SourceType(StrEnum):
    PROJECT = "PROJECT"
    CONTACT = "CONTACT"
    FEED = "FEED"
    TEAM_TASK = "TEAM_TASK"
    MILEAGE = "MILEAGE"


class SettlementStatus(StrEnum):
    DRAFT = "DRAFT"
    LOCKED = "LOCKED"


class EventType(StrEnum):
    INCOMING = "INCOMING"
    CHAT = "CHAT"
    GUIDE = "GUIDE"


class FeedType(StrEnum):
    BELOW3 = "BELOW3"
    GTE3 = "GTE3"


class ProjectStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"


class FeeBase(StrEnum):
    NET = "B"
    GROSS = "T"
