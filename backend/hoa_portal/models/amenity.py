"""Amenity and amenity booking models."""

import uuid
from datetime import datetime, time
from typing import Optional

from sqlalchemy import (
    Boolean, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, String, Text, Time, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from hoa_portal.core.database import Base
from hoa_portal.models.enums import BookingStatus


class Amenity(Base):
    """A bookable shared facility (pool, clubhouse, tennis court)."""

    __tablename__ = "amenities"

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
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    booking_fee_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    requires_approval: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    open_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    close_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class AmenityBooking(Base):
    """A reservation of an amenity for a time window."""

    __tablename__ = "amenity_bookings"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    amenity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("amenities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    resident_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("residents.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    booked_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    guest_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    fee_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        SQLEnum(BookingStatus),
        default=BookingStatus.CONFIRMED,
        nullable=False,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        Index("ix_amenity_bookings_window", "amenity_id", "start_time", "end_time"),
    )
