"""Jobs outbox and job runner tests."""
import uuid

from sqlalchemy import select

from hoa_portal.models.enums import AIProcessingStatus, JobStatus
from hoa_portal.models.invoice import AIProcessingRecord, VendorPattern
from hoa_portal.models.jobs import JobsOutbox
from hoa_portal.services.job_runner import process_pending_jobs
from hoa_portal.services.jobs import JobsService


async def _jobs(session_factory) -> list[JobsOutbox]:
    async with session_factory() as session:
        return list((await session.execute(select(JobsOutbox))).scalars().all())


async def test_enqueue_dedupes_on_unique_scope(db, seed):
    jobs = JobsService(db)

    first = await jobs.enqueue("send_message", {"communication_log_id": "x"}, unique_scope="send_message:log:x")
    second = await jobs.enqueue("send_message", {"communication_log_id": "x"}, unique_scope="send_message:log:x")
    await db.commit()

    assert isinstance(first, uuid.UUID)
    assert second is None


async def test_unknown_job_type_is_dead_lettered(db, seed, session_factory):
    await JobsService(db).enqueue("reindex_search", {}, unique_scope="reindex_search:all")
    await db.commit()

    counts = await process_pending_jobs(db)

    assert counts == {"completed": 0, "failed": 1}
    [job] = await _jobs(session_factory)
    assert job.status == JobStatus.DEAD_LETTER
    assert job.last_error == "No handler for job type reindex_search"


async def test_missing_payload_target_is_dead_lettered(db, seed, session_factory):
    await JobsService(db).enqueue_send_message(uuid.uuid4())
    await db.commit()

    counts = await process_pending_jobs(db)

    assert counts == {"completed": 0, "failed": 1}
    [job] = await _jobs(session_factory)
    assert job.status == JobStatus.DEAD_LETTER
    assert job.attempts == 1


async def test_vendor_pattern_averages_across_invoices(db, seed, session_factory):
    jobs = JobsService(db)
    for total, code in ((400.0, ""), (500.0, "6300")):
        record = AIProcessingRecord(
            association_id=seed.association.id,
            source_url="https://storage.test/inv.png",
            status=AIProcessingStatus.COMPLETED,
            result={
                "vendor_name": "  Green Thumb   Landscaping ",
                "total_amount": total,
                "line_items": [{"description": "Mowing", "suggested_gl_account": code, "suggested_category": "Landscaping"}],
            },
        )
        db.add(record)
        await db.flush()
        await jobs.enqueue_vendor_pattern_update(record.id, seed.association.id)
    await db.commit()

    counts = await process_pending_jobs(db)

    assert counts == {"completed": 2, "failed": 0}
    async with session_factory() as session:
        pattern = (await session.execute(select(VendorPattern))).scalar_one()
    assert pattern.vendor_key == "green thumb landscaping"
    assert pattern.invoice_count == 2
    assert pattern.average_amount_cents == 45000
    assert pattern.gl_account_code == "6300"
    assert pattern.category == "Landscaping"


async def test_process_limit(db, seed, session_factory):
    jobs = JobsService(db)
    for n in range(3):
        await jobs.enqueue("noop", {}, unique_scope=f"noop:{n}")
    await db.commit()

    counts = await process_pending_jobs(db, limit=2)

    assert counts == {"completed": 0, "failed": 2}
    statuses = sorted(j.status.value for j in await _jobs(session_factory))
    assert statuses == ["dead_letter", "dead_letter", "pending"]
