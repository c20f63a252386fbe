"""AI processing tests against a scripted chat-completions transport."""
import io
import json
import uuid

import httpx
import pytest
from reportlab.pdfgen import canvas
from sqlalchemy import select

from hoa_portal.main import app
from hoa_portal.models.accounting import GLAccount
from hoa_portal.models.enums import AIProcessingStatus, GLAccountType, JobStatus
from hoa_portal.models.invoice import AIProcessingRecord, VendorPattern
from hoa_portal.models.jobs import JobsOutbox
from hoa_portal.models.lead import Lead
from hoa_portal.services.llm import LLMClient, get_llm_client, parse_json_object

INVOICE_TEXT = "GREEN THUMB LANDSCAPING\nInvoice GT-1042\nMowing 300.00\nShrubs 150.00\nTotal 450.00"

INVOICE_STRUCTURE = {
    "vendor_name": "Green Thumb Landscaping",
    "invoice_number": "GT-1042",
    "invoice_date": "2026-01-15",
    "due_date": "2026-02-14",
    "total_amount": 450.0,
    "line_items": [
        {"description": "Monthly mowing", "quantity": 1, "unit_price": 300, "amount": 300.0},
        {"description": "Shrub trimming", "quantity": 1, "unit_price": 150, "amount": 150.0},
    ],
}


class ScriptedLLM:
    """Answers chat-completions requests from a fixed list of replies, in order."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/chat/completions")
        self.requests.append(json.loads(request.content))
        reply = self.replies.pop(0)
        if isinstance(reply, httpx.Response):
            return reply
        content = reply if isinstance(reply, str) else json.dumps(reply)
        return httpx.Response(200, json={
            "choices": [{"message": {"role": "assistant", "content": content}}],
            "usage": {"prompt_tokens": 10, "completion_tokens": 20},
        })

    def client(self) -> LLMClient:
        return LLMClient(api_key="test", transport=httpx.MockTransport(self.handler))


@pytest.fixture
def use_llm(client):
    def install(*replies) -> ScriptedLLM:
        scripted = ScriptedLLM(*replies)
        app.dependency_overrides[get_llm_client] = scripted.client
        return scripted
    return install


def test_parse_json_object():
    assert parse_json_object('{"a": 1}') == {"a": 1}
    assert parse_json_object('Sure!\n```json\n{"a": {"b": 2}}\n```') == {"a": {"b": 2}}

    with pytest.raises(ValueError):
        parse_json_object("no json here")
    with pytest.raises(ValueError):
        parse_json_object("[1, 2]")


async def test_process_invoice_scores_and_queues_pattern_learning(client, seed, use_llm, session_factory):
    scripted = use_llm(
        INVOICE_TEXT,
        INVOICE_STRUCTURE,
        {"classified_items": [
            {"suggested_gl_account": "6300", "suggested_category": "Landscaping", "confidence": 0.9},
            {"suggested_gl_account": "6300", "suggested_category": "Landscaping", "confidence": 0.9},
        ]},
    )

    response = await client.post(
        "/v1/ai/process-invoice",
        json={"image_url": "https://storage.test/inv.png", "association_id": str(seed.association.id)},
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["confidence"] == pytest.approx(0.95)
    assert body["invoice_data"]["vendor_name"] == "Green Thumb Landscaping"
    assert [i["suggested_gl_account"] for i in body["invoice_data"]["line_items"]] == ["6300", "6300"]
    assert scripted.requests[0]["messages"][0]["content"][1]["image_url"]["url"] == "https://storage.test/inv.png"
    assert scripted.requests[1]["response_format"] == {"type": "json_object"}

    processed = await client.post("/v1/ai/jobs/process")
    assert processed.json() == {"completed": 1, "failed": 0}

    async with session_factory() as session:
        record = await session.get(AIProcessingRecord, uuid.UUID(body["processing_id"]))
        pattern = (await session.execute(select(VendorPattern))).scalar_one()
    assert record.status == AIProcessingStatus.COMPLETED
    assert pattern.vendor_key == "green thumb landscaping"
    assert pattern.gl_account_code == "6300"
    assert pattern.invoice_count == 1
    assert pattern.average_amount_cents == 45000


async def test_classification_failure_falls_back_and_uses_vendor_pattern(client, seed, db, use_llm):
    db.add(VendorPattern(
        association_id=seed.association.id,
        vendor_key="green thumb landscaping",
        vendor_name="Green Thumb Landscaping",
        gl_account_code="6310",
        category="Grounds",
        invoice_count=4,
        average_amount_cents=42000,
    ))
    await db.commit()
    use_llm(INVOICE_TEXT, INVOICE_STRUCTURE, "I could not classify these.")

    response = await client.post(
        "/v1/ai/process-invoice",
        json={"image_url": "https://storage.test/inv.png", "association_id": str(seed.association.id)},
    )

    items = response.json()["invoice_data"]["line_items"]
    assert [i["suggested_gl_account"] for i in items] == ["6310", "6310"]
    assert [i["suggested_category"] for i in items] == ["Grounds", "Grounds"]
    assert [i["confidence"] for i in items] == [0.5, 0.5]
    assert response.json()["confidence"] == pytest.approx(0.75)


async def test_process_invoice_failure_marks_record_failed(client, seed, use_llm, session_factory):
    use_llm(httpx.Response(500, json={"error": {"message": "upstream exploded"}}))

    response = await client.post(
        "/v1/ai/process-invoice",
        json={"image_url": "https://storage.test/inv.png", "association_id": str(seed.association.id)},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to process invoice", "details": "upstream exploded"}

    async with session_factory() as session:
        record = (await session.execute(select(AIProcessingRecord))).scalar_one()
        jobs = (await session.execute(select(JobsOutbox))).scalars().all()
    assert record.status == AIProcessingStatus.FAILED
    assert record.error_message == "upstream exploded"
    assert jobs == []


async def test_process_lead_updates_the_lead(client, seed, db, use_llm, session_factory):
    lead = Lead(org_id=seed.org.id, email="board@cedarpoint.test", notes="Inquiry from website")
    db.add(lead)
    await db.commit()

    extracted = {
        "company_name": "Cedar Point Condominiums",
        "contact_name": "Dana Lopez Ortiz",
        "phone": "512-555-0100",
        "unit_count": "about 120 units",
        "services_needed": ["management", "accounting"],
        "confidence_scores": {"company_name": 0.95, "contact_name": 0.9},
        "processing_notes": "Switching from self-management",
    }
    use_llm(f"Here is the lead:\n```json\n{json.dumps(extracted)}\n```")

    response = await client.post("/v1/ai/process-lead", json={"lead_id": str(lead.id)})

    assert response.status_code == 200, response.text
    assert response.json()["processing_notes"] == "Switching from self-management"

    async with session_factory() as session:
        stored = await session.get(Lead, lead.id)
    assert stored.company == "Cedar Point Condominiums"
    assert (stored.first_name, stored.last_name) == ("Dana", "Lopez Ortiz")
    assert stored.unit_count == 120
    assert stored.email == "board@cedarpoint.test"
    assert stored.ai_generated_fields == ["company_name", "contact_name"]


async def test_process_lead_unparseable_reply(client, seed, use_llm):
    use_llm("Sorry, I can't help with that.")

    response = await client.post("/v1/ai/process-lead", json={"content": "We manage 40 townhomes"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to parse AI response"}


async def test_process_lead_requires_some_input(client, seed, use_llm):
    use_llm()

    response = await client.post("/v1/ai/process-lead", json={})

    assert response.status_code == 400


async def test_extract_homeowner_request(client, seed, use_llm):
    use_llm({"title": "Broken pool gate latch", "priority": "high", "action_items": ["Repair latch"]})

    response = await client.post(
        "/v1/ai/extract",
        json={
            "content": "The pool gate latch is broken and kids can get in.",
            "content_type": "homeowner-request",
            "metadata": {"subject": "Pool gate"},
        },
    )

    body = response.json()
    assert body["success"] is True
    assert body["content_type"] == "homeowner-request"
    assert body["confidence"] == {"title": 0.95, "priority": 0.8, "action_items": 0.9}


async def test_extract_unsupported_content_type(client, seed, use_llm):
    use_llm()

    response = await client.post("/v1/ai/extract", json={"content": "hello", "content_type": "memo"})

    assert response.status_code == 400
    assert response.json() == {"error": "Unsupported content type: memo"}


async def test_extract_reports_llm_errors_in_body(client, seed, use_llm):
    use_llm(httpx.Response(429, json={"error": {"message": "Rate limit reached"}}))

    response = await client.post("/v1/ai/extract", json={"content": "Invoice #12", "content_type": "invoice"})

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["error"] == "Error calling OpenAI API: Rate limit reached"


async def test_job_queue_survives_repeat_processing(client, seed, use_llm, session_factory):
    use_llm(INVOICE_TEXT, INVOICE_STRUCTURE, {"classified_items": []})
    await client.post(
        "/v1/ai/process-invoice",
        json={"image_url": "https://storage.test/inv.png", "association_id": str(seed.association.id)},
    )

    assert (await client.post("/v1/ai/jobs/process")).json() == {"completed": 1, "failed": 0}
    assert (await client.post("/v1/ai/jobs/process")).json() == {"completed": 0, "failed": 0}

    async with session_factory() as session:
        job = (await session.execute(select(JobsOutbox))).scalar_one()
    assert job.status == JobStatus.COMPLETED


async def test_malformed_structure_reply_marks_record_failed(client, seed, use_llm, session_factory):
    use_llm(INVOICE_TEXT, {"vendor_name": "X Co", "total_amount": 10, "line_items": 5})

    response = await client.post(
        "/v1/ai/process-invoice",
        json={"image_url": "https://storage.test/inv.png", "association_id": str(seed.association.id)},
    )

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to process invoice"

    async with session_factory() as session:
        record = (await session.execute(select(AIProcessingRecord))).scalar_one()
    assert record.status == AIProcessingStatus.FAILED
    assert record.error_message == "line_items in structure response is not a list"


async def test_bulk_counts_come_from_each_item(client, seed, use_llm, session_factory):
    classified = {"classified_items": [
        {"suggested_gl_account": "6300", "suggested_category": "Landscaping", "confidence": 0.9},
        {"suggested_gl_account": "6300", "suggested_category": "Landscaping", "confidence": 0.9},
    ]}
    use_llm(
        INVOICE_TEXT, INVOICE_STRUCTURE, classified,
        httpx.Response(500, json={"error": {"message": "upstream exploded"}}),
        INVOICE_TEXT, {"vendor_name": "X Co", "line_items": "none"},
        INVOICE_TEXT, INVOICE_STRUCTURE, classified,
    )
    association_id = str(seed.association.id)

    response = await client.post(
        "/v1/ai/process-invoices/bulk",
        json={"items": [
            {"image_url": f"https://storage.test/{n}.png", "association_id": association_id}
            for n in range(4)
        ]},
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert (body["processed"], body["succeeded"], body["failed"]) == (4, 2, 2)
    assert [r["success"] for r in body["results"]] == [True, False, False, True]
    assert body["results"][1]["error"] == "upstream exploded"
    assert body["results"][0]["processing_id"] is not None

    async with session_factory() as session:
        records = (await session.execute(select(AIProcessingRecord))).scalars().all()
    assert sorted(r.status.value for r in records) == ["completed", "completed", "failed", "failed"]


def _report_pdf(*rows: str) -> bytes:
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer)
    y = 750
    for row in rows:
        pdf.drawString(72, y, row)
        y -= 18
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


async def _upload_report(client, seed, content: bytes, content_type: str = "application/pdf"):
    return await client.post(
        "/v1/ai/financial-reports/extract",
        data={"association_id": str(seed.association.id)},
        files={"file": ("report.pdf", content, content_type)},
    )


async def test_financial_report_lines_match_gl_accounts(client, seed, db, use_llm):
    assessments = GLAccount(association_id=seed.association.id, code="4000", name="Assessment Income", account_type=GLAccountType.REVENUE)
    landscaping = GLAccount(association_id=seed.association.id, code="6300", name="Landscaping", account_type=GLAccountType.EXPENSE)
    db.add_all([assessments, landscaping])
    await db.commit()
    scripted = use_llm({
        "report_type": "income_statement",
        "period_start": "2026-01-01",
        "period_end": "2026-01-31",
        "lines": [
            {"account_code": "4000", "account_name": "Owner assessments", "amount": "$12,000.00"},
            {"account_code": "", "account_name": " LANDSCAPING ", "amount": 2500},
            {"account_code": "7100", "account_name": "Holiday decorations", "amount": 310.5},
            {"account_code": "", "account_name": "", "amount": 99},
            {"account_code": "", "account_name": "Total expenses", "amount": "n/a"},
        ],
    })

    response = await _upload_report(
        client, seed,
        _report_pdf("Maple Ridge HOA Income Statement", "4000 Owner assessments 12,000.00", "Landscaping 2,500.00"),
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["report_type"] == "income_statement"
    assert body["page_count"] == 1
    assert body["unmatched_count"] == 1
    assert [(line["account_name"], line["amount"]) for line in body["lines"]] == [
        ("Owner assessments", 12000.0),
        ("LANDSCAPING", 2500.0),
        ("Holiday decorations", 310.5),
    ]
    assert [line["gl_account_id"] for line in body["lines"]] == [str(assessments.id), str(landscaping.id), None]
    assert "Owner assessments" in scripted.requests[0]["messages"][1]["content"]


async def test_financial_report_upload_checks(client, seed, use_llm):
    use_llm()

    empty = await _upload_report(client, seed, b"")
    wrong_type = await _upload_report(client, seed, b"a,b\n1,2", content_type="text/csv")
    blank = await _upload_report(client, seed, _report_pdf())

    assert empty.status_code == 400
    assert empty.json() == {"error": "Uploaded file is empty"}
    assert wrong_type.json() == {"error": "File must be a PDF"}
    assert blank.json() == {"error": "PDF contains no extractable text"}


async def test_financial_report_with_malformed_lines(client, seed, use_llm):
    use_llm({"report_type": "balance_sheet", "lines": 42})

    response = await _upload_report(client, seed, _report_pdf("Reserve Fund 150,000.00"))

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to extract financial report",
        "details": "lines in report response is not a list",
    }
