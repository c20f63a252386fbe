"""Lead model (prospective management clients)."""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, Enum as SQLEnum, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from hoa_portal.core.database import Base, JSONType
from hoa_portal.models.enums import LeadStatus


class Lead(Base):
    """A sales lead, usually an association shopping for management."""

    __tablename__ = "leads"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    company: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    street_address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    lead_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    property_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    unit_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    current_management: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    interest_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    timeline: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    services_needed: Mapped[Optional[list[str]]] = mapped_column(JSONType, nullable=True)
    budget_range: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[LeadStatus] = mapped_column(
        SQLEnum(LeadStatus),
        default=LeadStatus.NEW,
        nullable=False,
        index=True,
    )

    # AI extraction metadata
    ai_confidence: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    ai_generated_fields: Mapped[Optional[list[str]]] = mapped_column(JSONType, nullable=True)
    ai_processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    lead_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.company or self.email or "Unnamed lead"
