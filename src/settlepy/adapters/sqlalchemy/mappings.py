"""SQLAlchemy Core table metadata for the ledger row store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)

from settlepy.domain.model import Table as LedgerTable

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

ISODate = String(10)

# Reference tables -----------------------------------------------------------

members_table = Table(
    "members",
    metadata,
    Column("id", String, primary_key=True),
    Column("code", String, nullable=False),
    Column("name", String, nullable=False),
    Column("active", Boolean, nullable=False, default=True),
)

channels_table = Table(
    "channels",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("ad_rate", Float, nullable=False, default=0.10),
    Column("program_rate", Float, nullable=False, default=0.03),
    Column("market_fee_rate", Float, nullable=False, default=0.0),
    Column("fee_base", String(1), nullable=False, default="B"),
)

categories_table = Table(
    "categories",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("code", String, nullable=True),
)

# Ledger tables --------------------------------------------------------------

projects_table = Table(
    "projects",
    metadata,
    Column("id", String, primary_key=True),
    Column("client_name", String, nullable=False),
    Column("channel_id", String, ForeignKey("channels.id"), nullable=False),
    Column("category_id", String, ForeignKey("categories.id"), nullable=False),
    Column("title", String, nullable=False),
    Column("qty", Float, nullable=False, default=1.0),
    Column("list_price_net", Float, nullable=False, default=0.0),
    Column("discount_net", Float, nullable=False, default=0.0),
    Column("gross_t", Float, nullable=False),
    Column("net_b", Float, nullable=False, default=0.0),
    Column("settle_date", ISODate, nullable=False),
    Column("work_date", ISODate, nullable=True),
    Column("invoice_requested", Boolean, nullable=False, default=False),
    Column("designers", JSON, nullable=False, default=list),
    Column("notes", Text, nullable=False, default=""),
    Column("status", String, nullable=False, default="pending"),
)

contacts_table = Table(
    "contacts",
    metadata,
    Column("id", String, primary_key=True),
    Column("member_id", String, ForeignKey("members.id"), nullable=False),
    Column("date", ISODate, nullable=False),
    Column("event_type", String, nullable=False, default="INCOMING"),
    Column("amount", Float, nullable=False, default=0.0),
    Column("project_id", String, ForeignKey("projects.id"), nullable=True),
    Column("notes", Text, nullable=False, default=""),
)

feed_logs_table = Table(
    "feed_logs",
    metadata,
    Column("id", String, primary_key=True),
    Column("member_id", String, ForeignKey("members.id"), nullable=False),
    Column("date", ISODate, nullable=False),
    Column("fee_type", String, nullable=False, default="BELOW3"),
    Column("amount", Float, nullable=False, default=0.0),
    Column("notes", Text, nullable=False, default=""),
)

team_tasks_table = Table(
    "team_tasks",
    metadata,
    Column("id", String, primary_key=True),
    Column("member_id", String, ForeignKey("members.id"), nullable=False),
    Column("project_id", String, ForeignKey("projects.id"), nullable=True),
    Column("date", ISODate, nullable=False),
    Column("notes", Text, nullable=False, default=""),
    Column("amount", Float, nullable=False),
)

mileage_table = Table(
    "mileage",
    metadata,
    Column("id", String, primary_key=True),
    Column("member_id", String, ForeignKey("members.id"), nullable=False),
    Column("date", ISODate, nullable=False),
    Column("reason", Text, nullable=False, default=""),
    Column("points", Float, nullable=False, default=0.0),
    Column("amount", Float, nullable=False, default=0.0),
    Column("consumed_now", Boolean, nullable=False, default=False),
    Column("notes", Text, nullable=False, default=""),
)

funds_company_table = Table(
    "funds_company",
    metadata,
    Column("id", String, primary_key=True),
    Column("date", ISODate, nullable=False),
    Column("item", String, nullable=False),
    Column("amount", Float, nullable=False),
    Column("memo", Text, nullable=False, default=""),
)

funds_personal_table = Table(
    "funds_personal",
    metadata,
    Column("id", String, primary_key=True),
    Column("member_id", String, ForeignKey("members.id"), nullable=False),
    Column("date", ISODate, nullable=False),
    Column("item", String, nullable=False),
    Column("amount", Float, nullable=False),
    Column("memo", Text, nullable=False, default=""),
)

# Settlement tables ----------------------------------------------------------

settlements_table = Table(
    "settlements",
    metadata,
    Column("id", String, primary_key=True),
    Column("period", String(7), nullable=False, unique=True),
    Column("status", String, nullable=False, default="DRAFT"),
    Column("created_at", String, nullable=False),
    Column("notes", Text, nullable=False, default=""),
)

settlement_items_table = Table(
    "settlement_items",
    metadata,
    Column("id", String, primary_key=True),
    Column(
        "settlement_id",
        String,
        ForeignKey("settlements.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("member_id", String, ForeignKey("members.id"), nullable=False),
    Column("source_type", String, nullable=False),
    Column("source_id", String, nullable=False),
    Column("gross", Float, nullable=False, default=0.0),
    Column("net", Float, nullable=False, default=0.0),
    Column("base", Integer, nullable=False, default=0),
    Column("bonus", Integer, nullable=False, default=0),
    Column("before_withholding", Integer, nullable=False),
    Column("withholding_tax", Integer, nullable=False),
    Column("after_withholding", Integer, nullable=False),
    Column("paid", Boolean, nullable=False, default=False),
    UniqueConstraint("settlement_id", "source_type", "source_id", "member_id"),
)

TABLES: dict[LedgerTable, Table] = {
    LedgerTable.MEMBERS: members_table,
    LedgerTable.CHANNELS: channels_table,
    LedgerTable.CATEGORIES: categories_table,
    LedgerTable.PROJECTS: projects_table,
    LedgerTable.CONTACTS: contacts_table,
    LedgerTable.FEED_LOGS: feed_logs_table,
    LedgerTable.TEAM_TASKS: team_tasks_table,
    LedgerTable.MILEAGE: mileage_table,
    LedgerTable.FUNDS_COMPANY: funds_company_table,
    LedgerTable.FUNDS_PERSONAL: funds_personal_table,
    LedgerTable.SETTLEMENTS: settlements_table,
    LedgerTable.SETTLEMENT_ITEMS: settlement_items_table,
}


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the ledger metadata."""

    log.info("Creating all tables")
    metadata.create_all(engine)
