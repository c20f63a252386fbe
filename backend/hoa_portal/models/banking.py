"""Bank account, transaction, statement and reconciliation models."""

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean, Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, Text, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from hoa_portal.core.database import Base
from hoa_portal.models.enums import BankStatementStatus, ReconciliationStatus


class BankAccount(Base):
    """An operating or reserve bank account held by an association."""

    __tablename__ = "bank_accounts"

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
    gl_account_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("gl_accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    institution: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # Last four digits only
    account_number_last4: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)
    account_type: Mapped[str] = mapped_column(String(50), default="operating", nullable=False)
    current_balance_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class BankTransaction(Base):
    """A deposit (positive) or withdrawal (negative) on a bank account."""

    __tablename__ = "bank_transactions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    bank_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("bank_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    is_cleared: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reconciliation_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("bank_reconciliations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class BankStatement(Base):
    """An uploaded bank statement document."""

    __tablename__ = "bank_statements"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    bank_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("bank_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    statement_date: Mapped[date] = mapped_column(Date, nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    object_path: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[BankStatementStatus] = mapped_column(
        SQLEnum(BankStatementStatus),
        default=BankStatementStatus.PENDING_UPLOAD,
        nullable=False,
    )
    uploaded_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    uploaded_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class BankReconciliation(Base):
    """Reconciliation of a bank account against a statement."""

    __tablename__ = "bank_reconciliations"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    bank_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("bank_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    statement_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("bank_statements.id", ondelete="SET NULL"),
        nullable=True,
    )
    statement_date: Mapped[date] = mapped_column(Date, nullable=False)
    beginning_balance_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    statement_balance_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    reconciled_balance_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    difference_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[ReconciliationStatus] = mapped_column(
        SQLEnum(ReconciliationStatus),
        default=ReconciliationStatus.IN_PROGRESS,
        nullable=False,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reconciled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    reconciled_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
