"""Jobs outbox service for deferred side effects.

Follow-up work is never fired and forgotten from a request; it is written to
jobs_outbox in the request's transaction and picked up by the job runner.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.models.jobs import JobsOutbox
from hoa_portal.models.enums import JobStatus

UPDATE_VENDOR_PATTERN = "update_vendor_pattern"
SEND_MESSAGE = "send_message"


def _insert_for(dialect_name: str):
    if dialect_name == "sqlite":
        return sqlite.insert
    return postgresql.insert


class JobsService:
    """Service for managing deferred jobs via outbox pattern."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def enqueue(
        self,
        job_type: str,
        payload: dict[str, Any],
        unique_scope: str,
        run_after: Optional[datetime] = None,
    ) -> Optional[uuid.UUID]:
        """Enqueue a job with unique_scope de-duplication.

        Returns the new job ID, or None if a job with the same unique_scope
        already exists.
        """
        job_id = uuid.uuid4()
        insert = _insert_for(self.db.get_bind().dialect.name)

        stmt = insert(JobsOutbox).values(
            id=job_id,
            type=job_type,
            payload=payload,
            status=JobStatus.PENDING,
            unique_scope=unique_scope,
            attempts=0,
            max_attempts=3,
            run_after=run_after or datetime.utcnow(),
            created_at=datetime.utcnow(),
        ).on_conflict_do_nothing(index_elements=["unique_scope"])

        result = await self.db.execute(stmt)

        # rowcount is 0 when the scope already exists
        if result.rowcount == 0:
            return None

        return job_id

    async def enqueue_vendor_pattern_update(
        self,
        processing_id: uuid.UUID,
        association_id: uuid.UUID,
    ) -> Optional[uuid.UUID]:
        """Learn GL coding from a completed invoice extraction."""
        return await self.enqueue(
            job_type=UPDATE_VENDOR_PATTERN,
            payload={
                "processing_id": str(processing_id),
                "association_id": str(association_id),
            },
            unique_scope=f"{UPDATE_VENDOR_PATTERN}:processing:{processing_id}",
        )

    async def enqueue_send_message(self, log_id: uuid.UUID) -> Optional[uuid.UUID]:
        """Deliver one rendered message to one recipient."""
        return await self.enqueue(
            job_type=SEND_MESSAGE,
            payload={"communication_log_id": str(log_id)},
            unique_scope=f"{SEND_MESSAGE}:log:{log_id}",
        )

    async def claim_pending_jobs(
        self,
        job_type: Optional[str] = None,
        limit: int = 10,
    ) -> list[JobsOutbox]:
        """Claim pending jobs for processing.

        Marks the claimed jobs PROCESSING and bumps their attempt counter.
        """
        query = (
            select(JobsOutbox)
            .where(
                JobsOutbox.status == JobStatus.PENDING,
                JobsOutbox.run_after <= datetime.utcnow(),
            )
        )

        if job_type:
            query = query.where(JobsOutbox.type == job_type)

        query = query.order_by(JobsOutbox.run_after).limit(limit)

        result = await self.db.execute(query)
        jobs = list(result.scalars().all())

        if not jobs:
            return []

        job_ids = [j.id for j in jobs]
        await self.db.execute(
            update(JobsOutbox)
            .where(JobsOutbox.id.in_(job_ids))
            .values(
                status=JobStatus.PROCESSING,
                started_at=datetime.utcnow(),
                attempts=JobsOutbox.attempts + 1,
            )
        )

        return jobs

    async def complete_job(self, job_id: uuid.UUID) -> None:
        """Mark job as completed."""
        await self.db.execute(
            update(JobsOutbox)
            .where(JobsOutbox.id == job_id)
            .values(
                status=JobStatus.COMPLETED,
                completed_at=datetime.utcnow(),
            )
        )

    async def fail_job(
        self,
        job_id: uuid.UUID,
        error: str,
        dead_letter: bool = False,
    ) -> None:
        """Mark job as failed.

        If dead_letter=True or max attempts reached, moves to DEAD_LETTER.
        Otherwise, resets to PENDING for retry.
        """
        result = await self.db.execute(
            select(JobsOutbox).where(JobsOutbox.id == job_id)
        )
        job = result.scalar_one_or_none()

        if not job:
            return

        if dead_letter or job.attempts >= job.max_attempts:
            new_status = JobStatus.DEAD_LETTER
        else:
            new_status = JobStatus.PENDING

        await self.db.execute(
            update(JobsOutbox)
            .where(JobsOutbox.id == job_id)
            .values(
                status=new_status,
                last_error=error,
            )
        )
