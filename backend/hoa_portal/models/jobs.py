"""Jobs outbox model for deferred side effects with unique_scope de-duplication."""

import uuid
from datetime import datetime
from typing import Optional, Any

from sqlalchemy import String, DateTime, Text, Integer, Enum as SQLEnum, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from hoa_portal.core.database import Base, JSONType
from hoa_portal.models.enums import JobStatus


class JobsOutbox(Base):
    """Deferred job queue with idempotency via unique_scope.

    Work that must not block a request (vendor pattern learning, message
    delivery) is written here in the same transaction as the change that
    caused it. unique_scope de-duplicates, e.g. "send_message:log:{id}".
    """

    __tablename__ = "jobs_outbox"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Job type ("update_vendor_pattern", "send_message")
    type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)

    status: Mapped[JobStatus] = mapped_column(
        SQLEnum(JobStatus),
        default=JobStatus.PENDING,
        nullable=False,
        index=True,
    )

    unique_scope: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)

    # Retry tracking
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    max_attempts: Mapped[int] = mapped_column(Integer, default=3)
    last_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    run_after: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_jobs_outbox_pending", "status", "run_after"),
    )
