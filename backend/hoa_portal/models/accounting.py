"""General ledger models: accounts, journal entries and generated statements."""

import uuid
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import (
    Boolean, Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, Text, Uuid,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hoa_portal.core.database import Base, JSONType
from hoa_portal.models.enums import GLAccountType, JournalEntryStatus, StatementType


class GLAccount(Base):
    """Chart-of-accounts entry for an association."""

    __tablename__ = "gl_accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    association_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("associations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    account_type: Mapped[GLAccountType] = mapped_column(
        SQLEnum(GLAccountType),
        nullable=False,
    )
    # Free-form grouping, e.g. "operating", "investing", "financing", "utilities"
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Money (INTEGER CENTS), positive in the account's normal direction
    balance_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        UniqueConstraint("association_id", "code", name="uq_gl_account_code"),
    )


class JournalEntry(Base):
    """Double-entry journal entry."""

    __tablename__ = "journal_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    association_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("associations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    entry_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[JournalEntryStatus] = mapped_column(
        SQLEnum(JournalEntryStatus),
        default=JournalEntryStatus.DRAFT,
        nullable=False,
    )
    posted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    lines: Mapped[list["JournalEntryLine"]] = relationship(
        "JournalEntryLine",
        back_populates="entry",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="JournalEntryLine.position",
    )


class JournalEntryLine(Base):
    __tablename__ = "journal_entry_lines"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    entry_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    gl_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("gl_accounts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    debit_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    credit_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    entry: Mapped["JournalEntry"] = relationship("JournalEntry", back_populates="lines")


class FinancialStatement(Base):
    """A generated income statement, balance sheet or cash flow statement."""

    __tablename__ = "financial_statements"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    association_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("associations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    statement_type: Mapped[StatementType] = mapped_column(
        SQLEnum(StatementType),
        nullable=False,
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    generated_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
