"""
Job runner for the outbox.

Handlers receive (db, payload). A handler exception fails the job, which
goes back to pending until max_attempts and then to the dead letter state.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Awaitable, Callable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.models.communication import CommunicationLog, Message
from hoa_portal.models.enums import AIProcessingStatus, MessageStatus
from hoa_portal.models.invoice import AIProcessingRecord, VendorPattern
from hoa_portal.services.invoice_processor import dollars_to_cents, normalize_vendor
from hoa_portal.services.jobs import SEND_MESSAGE, UPDATE_VENDOR_PATTERN, JobsService

logger = logging.getLogger(__name__)

JobHandler = Callable[[AsyncSession, dict[str, Any]], Awaitable[None]]


class JobPayloadError(Exception):
    """The job's payload does not point at something processable."""


async def update_vendor_pattern(db: AsyncSession, payload: dict[str, Any]) -> None:
    """Fold a completed invoice extraction into the vendor's coding pattern."""
    record = await db.get(AIProcessingRecord, uuid.UUID(payload["processing_id"]))
    if record is None or record.status != AIProcessingStatus.COMPLETED or not record.result:
        raise JobPayloadError(f"No completed processing record {payload['processing_id']}")

    vendor_name = (record.result.get("vendor_name") or "").strip()
    key = normalize_vendor(vendor_name)
    if not key:
        logger.info(f"[JOBS] Record {record.id} has no vendor name; nothing to learn")
        return

    items = record.result.get("line_items") or []
    coded = next((i for i in items if i.get("suggested_gl_account")), None)
    amount_cents = dollars_to_cents(record.result.get("total_amount") or 0)

    result = await db.execute(
        select(VendorPattern).where(
            VendorPattern.association_id == record.association_id,
            VendorPattern.vendor_key == key,
        )
    )
    pattern = result.scalar_one_or_none()
    if pattern is None:
        pattern = VendorPattern(
            association_id=record.association_id,
            vendor_key=key,
            vendor_name=vendor_name,
            invoice_count=0,
            average_amount_cents=0,
        )
        db.add(pattern)

    total = pattern.average_amount_cents * pattern.invoice_count + amount_cents
    pattern.invoice_count += 1
    pattern.average_amount_cents = round(total / pattern.invoice_count)
    pattern.vendor_name = vendor_name
    if coded:
        pattern.gl_account_code = coded["suggested_gl_account"]
        pattern.category = coded.get("suggested_category") or pattern.category
    await db.flush()


async def send_message(db: AsyncSession, payload: dict[str, Any]) -> None:
    """Record delivery of one rendered message.

    No mail provider is wired in; delivery is the state change on the log row.
    """
    log = await db.get(CommunicationLog, uuid.UUID(payload["communication_log_id"]))
    if log is None:
        raise JobPayloadError(f"No communication log {payload['communication_log_id']}")
    if log.status == MessageStatus.SENT:
        return

    log.status = MessageStatus.SENT
    log.sent_at = datetime.utcnow()
    log.error = None
    await db.flush()

    pending = await db.scalar(
        select(func.count(CommunicationLog.id)).where(
            CommunicationLog.message_id == log.message_id,
            CommunicationLog.status != MessageStatus.SENT,
        )
    )
    if not pending:
        message = await db.get(Message, log.message_id)
        if message is not None:
            message.status = MessageStatus.SENT


HANDLERS: dict[str, JobHandler] = {
    UPDATE_VENDOR_PATTERN: update_vendor_pattern,
    SEND_MESSAGE: send_message,
}


async def process_pending_jobs(db: AsyncSession, limit: int = 10) -> dict[str, int]:
    """Run up to ``limit`` due jobs. Returns completed/failed counts."""
    jobs_service = JobsService(db)
    jobs = await jobs_service.claim_pending_jobs(limit=limit)
    # plain values: a rollback below expires the ORM objects
    claimed = [(job.id, job.type, dict(job.payload or {})) for job in jobs]
    await db.commit()

    counts = {"completed": 0, "failed": 0}
    for job_id, job_type, payload in claimed:
        handler = HANDLERS.get(job_type)
        if handler is None:
            await jobs_service.fail_job(job_id, f"No handler for job type {job_type}", dead_letter=True)
            await db.commit()
            counts["failed"] += 1
            continue

        try:
            await handler(db, payload)
            await jobs_service.complete_job(job_id)
            await db.commit()
            counts["completed"] += 1
        except JobPayloadError as e:
            await db.rollback()
            logger.warning(f"[JOBS] {job_type} {job_id} dead-lettered: {e}")
            await jobs_service.fail_job(job_id, str(e), dead_letter=True)
            await db.commit()
            counts["failed"] += 1
        except Exception as e:
            await db.rollback()
            logger.exception(f"[JOBS] {job_type} {job_id} failed")
            await jobs_service.fail_job(job_id, str(e))
            await db.commit()
            counts["failed"] += 1

    if claimed:
        logger.info(f"[JOBS] Processed {len(claimed)} jobs: {counts}")
    return counts
