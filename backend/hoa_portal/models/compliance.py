"""Compliance issue (covenant violation) model."""

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from hoa_portal.core.database import Base
from hoa_portal.models.enums import ComplianceStatus


class ComplianceIssue(Base):
    """A covenant or rules violation recorded against a property."""

    __tablename__ = "compliance_issues"

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
    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    resident_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("residents.id", ondelete="SET NULL"),
        nullable=True,
    )

    violation_type: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    fine_amount_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    status: Mapped[ComplianceStatus] = mapped_column(
        SQLEnum(ComplianceStatus),
        default=ComplianceStatus.OPEN,
        nullable=False,
        index=True,
    )
    resolved_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
