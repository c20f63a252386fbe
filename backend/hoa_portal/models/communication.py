"""Recipient groups, messages and per-recipient communication logs."""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from hoa_portal.core.database import Base, JSONType
from hoa_portal.models.enums import MessageStatus, RecipientGroupType


class RecipientGroup(Base):
    """A named audience inside an association.

    ``criteria`` narrows the association's residents. Supported keys:
    ``resident_type`` (str or list), ``property_ids`` (list) and ``is_primary``.
    """

    __tablename__ = "recipient_groups"

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
    group_type: Mapped[RecipientGroupType] = mapped_column(
        SQLEnum(RecipientGroupType),
        default=RecipientGroupType.CUSTOM,
        nullable=False,
    )
    criteria: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class Message(Base):
    """An outbound message to one or more recipient groups."""

    __tablename__ = "messages"

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
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    channel: Mapped[str] = mapped_column(String(20), default="email", nullable=False)
    group_ids: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    recipient_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[MessageStatus] = mapped_column(
        SQLEnum(MessageStatus),
        default=MessageStatus.QUEUED,
        nullable=False,
    )
    sent_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class CommunicationLog(Base):
    """Rendered message for a single recipient and its delivery status."""

    __tablename__ = "communication_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    message_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("messages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    resident_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("residents.id", ondelete="SET NULL"),
        nullable=True,
    )
    recipient_email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[MessageStatus] = mapped_column(
        SQLEnum(MessageStatus),
        default=MessageStatus.QUEUED,
        nullable=False,
    )
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
