"""
AI invoice processing.

Pipeline per invoice image:
1. Record a processing row (status=processing)
2. Vision call: read all text off the image
3. Structure call: vendor, numbers, dates, totals, line items as JSON
4. Load association context (active GL accounts, learned vendor patterns)
5. Classification call: GL account, category and confidence per line item
6. Weighted overall confidence
7. Persist results, optionally fill the target invoice, enqueue pattern learning
"""

import json
import logging
import time
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.errors import ServiceError
from hoa_portal.core.security import AuthenticatedUser
from hoa_portal.models.accounting import GLAccount
from hoa_portal.models.enums import AIProcessingStatus
from hoa_portal.models.invoice import AIProcessingRecord, Invoice, InvoiceLineItem, VendorPattern
from hoa_portal.schemas.ai import (
    BulkItemResult,
    BulkProcessResponse,
    ExtractedInvoice,
    ExtractedLineItem,
    ProcessInvoiceRequest,
    ProcessInvoiceResponse,
)
from hoa_portal.services.audit import AuditService
from hoa_portal.services.jobs import JobsService
from hoa_portal.services.llm import LLMClient, LLMError

logger = logging.getLogger(__name__)

CONFIDENCE_WEIGHTS = {
    "vendor_clarity": 0.15,
    "invoice_details": 0.15,
    "amount_consistency": 0.20,
    "line_item_confidence": 0.50,
}

FALLBACK_CATEGORY = "Unknown"
FALLBACK_CONFIDENCE = 0.5

OCR_PROMPT = (
    "Extract all text from this invoice image. Preserve formatting and structure. "
    "Include all vendor information, dates, amounts, line items, and any other visible text. "
    "Be thorough and accurate; the output feeds automated processing."
)

STRUCTURE_PROMPT = """You parse vendor invoices for a homeowners association management company.
Extract structured data from the invoice text.

Typical expense types: utilities (water, electric, gas, internet, cable), maintenance
(plumbing, electrical, HVAC, general repairs), landscaping (lawn care, trees, irrigation),
professional services (legal, accounting, management), insurance, supplies, security,
trash and recycling.

Return a JSON object with exactly this shape:
{
  "vendor_name": "string",
  "vendor_address": "string",
  "invoice_number": "string",
  "invoice_date": "YYYY-MM-DD",
  "due_date": "YYYY-MM-DD",
  "total_amount": number,
  "line_items": [
    {"description": "string", "quantity": number, "unit_price": number, "amount": number}
  ]
}"""

CLASSIFY_PROMPT = """You are an HOA/condominium accountant. Assign each line item the most
appropriate GL account from the list below.

Available GL accounts:
{gl_accounts}

Known vendor codings for this association:
{vendor_patterns}

Account ranges:
- 6100-6199: Utilities (electric, water, gas, internet, cable)
- 6200-6299: Maintenance and repairs (plumbing, HVAC, electrical, general)
- 6300-6399: Landscaping and grounds (lawn, trees, irrigation)
- 6400-6499: Professional services (legal, accounting, management)
- 6500-6599: Insurance (property, liability, D&O)
- 6600-6699: Administrative (office, bank fees, postage)
- 7000-7999: Capital improvements and reserves

For every item give the GL account code from the list, an expense category and a
confidence between 0.1 and 1.0. Return JSON:
{{"classified_items": [{{"description": "...", "amount": 0, "suggested_gl_account": "code",
"suggested_category": "category", "confidence": 0.95}}]}}"""


def normalize_vendor(name: str) -> str:
    return " ".join((name or "").lower().split())


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace("$", "").replace(",", "").strip())
    except ValueError:
        return default


def _as_str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def dollars_to_cents(amount: float) -> int:
    try:
        return int((Decimal(str(amount)) * 100).quantize(Decimal("1")))
    except (InvalidOperation, ValueError):
        return 0


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def coerce_invoice(data: dict[str, Any]) -> ExtractedInvoice:
    """Build an ExtractedInvoice from loosely-typed model output."""
    raw_items = data.get("line_items") or []
    if not isinstance(raw_items, list):
        raise ValueError("line_items in structure response is not a list")
    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        quantity = raw.get("quantity")
        unit_price = raw.get("unit_price")
        items.append(ExtractedLineItem(
            description=_as_str(raw.get("description")),
            quantity=_as_float(quantity) if quantity is not None else None,
            unit_price=_as_float(unit_price) if unit_price is not None else None,
            amount=_as_float(raw.get("amount")),
        ))
    return ExtractedInvoice(
        vendor_name=_as_str(data.get("vendor_name")),
        vendor_address=_as_str(data.get("vendor_address")) or None,
        invoice_number=_as_str(data.get("invoice_number")),
        invoice_date=_as_str(data.get("invoice_date")),
        due_date=_as_str(data.get("due_date")) or None,
        total_amount=_as_float(data.get("total_amount")),
        line_items=items,
    )


def calculate_overall_confidence(
    invoice: ExtractedInvoice,
    line_items: list[ExtractedLineItem],
) -> tuple[float, dict[str, float]]:
    """Weighted confidence in [0, 1] plus the per-component contributions."""
    breakdown = {key: 0.0 for key in CONFIDENCE_WEIGHTS}

    if invoice.vendor_name and len(invoice.vendor_name) > 3:
        breakdown["vendor_clarity"] = CONFIDENCE_WEIGHTS["vendor_clarity"]

    present = sum(bool(x) for x in (invoice.invoice_number, invoice.invoice_date, invoice.total_amount > 0))
    breakdown["invoice_details"] = CONFIDENCE_WEIGHTS["invoice_details"] * present / 3

    total = invoice.total_amount or 0.0
    if total > 0:
        items_total = sum(item.amount or 0.0 for item in line_items)
        consistency = 1 - min(abs(items_total - total) / total, 1)
        breakdown["amount_consistency"] = CONFIDENCE_WEIGHTS["amount_consistency"] * consistency

    if line_items:
        average = sum(item.confidence or 0.0 for item in line_items) / len(line_items)
        breakdown["line_item_confidence"] = CONFIDENCE_WEIGHTS["line_item_confidence"] * average

    score = min(max(sum(breakdown.values()), 0.0), 1.0)
    return round(score, 4), {k: round(v, 4) for k, v in breakdown.items()}


class InvoiceProcessor:
    """Runs the invoice pipeline against the LLM and persists its outcome."""

    def __init__(self, db: AsyncSession, llm: LLMClient):
        self.db = db
        self.llm = llm

    async def process(
        self,
        request: ProcessInvoiceRequest,
        current_user: AuthenticatedUser,
    ) -> ProcessInvoiceResponse:
        """Process one invoice image.

        Raises ServiceError(500, "Failed to process invoice") after marking the
        processing record failed.
        """
        invoice: Optional[Invoice] = None
        if request.invoice_id:
            invoice = await self._get_invoice(request.invoice_id, request.association_id)

        record = AIProcessingRecord(
            association_id=request.association_id,
            invoice_id=request.invoice_id,
            document_type="invoice",
            source_url=request.image_url,
            status=AIProcessingStatus.PROCESSING,
            created_by=current_user.db_user_id,
        )
        self.db.add(record)
        await self.db.commit()

        started = time.monotonic()
        logger.info(f"[INVOICE-AI] Processing {record.id} for association {request.association_id}")

        try:
            raw_text = await self._extract_text(request.image_url)
            parsed = await self._parse_structure(raw_text)
            gl_accounts, patterns = await self._load_context(request.association_id)
            classified = await self._classify(parsed.line_items, gl_accounts, patterns)
            classified = self._apply_vendor_pattern(parsed.vendor_name, classified, patterns)
            parsed.line_items = classified
            confidence, breakdown = calculate_overall_confidence(parsed, classified)
        except Exception as e:
            await self._mark_failed(record, str(e), started)
            raise ServiceError(
                "Failed to process invoice",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                details=str(e),
            ) from e

        elapsed_ms = int((time.monotonic() - started) * 1000)
        record.status = AIProcessingStatus.COMPLETED
        record.extracted_text = raw_text
        record.result = parsed.model_dump()
        record.overall_confidence = confidence
        record.confidence_scores = {
            "overall": confidence,
            "breakdown": breakdown,
            "line_items": [
                {"description": item.description, "confidence": item.confidence}
                for item in classified
            ],
        }
        record.processing_time_ms = elapsed_ms
        record.model_version = self.llm.model
        record.completed_at = datetime.utcnow()

        if invoice is not None:
            self._apply_to_invoice(invoice, parsed, confidence, request.image_url)

        await JobsService(self.db).enqueue_vendor_pattern_update(record.id, request.association_id)
        await AuditService(self.db).log_invoice_processed(
            current_user, record.id, confidence, request.invoice_id
        )
        await self.db.commit()

        logger.info(f"[INVOICE-AI] Completed {record.id}: confidence={confidence} in {elapsed_ms}ms")

        return ProcessInvoiceResponse(
            processing_id=record.id,
            invoice_id=request.invoice_id,
            invoice_data=parsed,
            confidence=confidence,
            confidence_breakdown=breakdown,
            processing_time_ms=elapsed_ms,
            model_version=self.llm.model,
        )

    async def process_bulk(
        self,
        items: list[ProcessInvoiceRequest],
        current_user: AuthenticatedUser,
    ) -> BulkProcessResponse:
        """Process invoices one after another; counts come from each item's outcome."""
        results: list[BulkItemResult] = []
        for item in items:
            try:
                outcome = await self.process(item, current_user)
            except ServiceError as e:
                results.append(BulkItemResult(
                    image_url=item.image_url,
                    success=False,
                    error=str(e.details or e.message),
                ))
                continue
            results.append(BulkItemResult(
                image_url=item.image_url,
                success=True,
                processing_id=outcome.processing_id,
                confidence=outcome.confidence,
            ))

        succeeded = sum(1 for r in results if r.success)
        return BulkProcessResponse(
            processed=len(results),
            succeeded=succeeded,
            failed=len(results) - succeeded,
            results=results,
        )

    async def _get_invoice(self, invoice_id: UUID, association_id: UUID) -> Invoice:
        result = await self.db.execute(
            select(Invoice).where(
                Invoice.id == invoice_id,
                Invoice.association_id == association_id,
            )
        )
        invoice = result.scalar_one_or_none()
        if not invoice:
            raise ServiceError("Invoice not found", status_code=status.HTTP_404_NOT_FOUND)
        return invoice

    async def _extract_text(self, image_url: str) -> str:
        text = await self.llm.read_image_text(image_url, OCR_PROMPT, max_tokens=2000)
        if not text.strip():
            raise ValueError("No text could be read from the invoice image")
        return text

    async def _parse_structure(self, raw_text: str) -> ExtractedInvoice:
        data = await self.llm.chat_json(
            [
                {"role": "system", "content": STRUCTURE_PROMPT},
                {"role": "user", "content": f"Parse this invoice text:\n\n{raw_text}"},
            ]
        )
        return coerce_invoice(data)

    async def _load_context(self, association_id: UUID) -> tuple[list[GLAccount], list[VendorPattern]]:
        accounts = await self.db.execute(
            select(GLAccount)
            .where(GLAccount.association_id == association_id, GLAccount.is_active.is_(True))
            .order_by(GLAccount.code)
        )
        patterns = await self.db.execute(
            select(VendorPattern).where(VendorPattern.association_id == association_id)
        )
        return list(accounts.scalars().all()), list(patterns.scalars().all())

    async def _classify(
        self,
        items: list[ExtractedLineItem],
        gl_accounts: list[GLAccount],
        patterns: list[VendorPattern],
    ) -> list[ExtractedLineItem]:
        if not items:
            return []

        accounts_text = "\n".join(
            f"{a.code}: {a.name} ({a.category or 'General'})" for a in gl_accounts
        ) or "(none configured)"
        patterns_text = "\n".join(
            f"{p.vendor_name}: {p.gl_account_code} ({p.category or 'General'})"
            for p in patterns if p.gl_account_code
        ) or "(none yet)"
        payload = [
            {"description": i.description, "quantity": i.quantity, "unit_price": i.unit_price, "amount": i.amount}
            for i in items
        ]

        try:
            data = await self.llm.chat_json(
                [
                    {
                        "role": "system",
                        "content": CLASSIFY_PROMPT.format(
                            gl_accounts=accounts_text, vendor_patterns=patterns_text
                        ),
                    },
                    {"role": "user", "content": f"Classify these line items:\n{json.dumps(payload, indent=2)}"},
                ]
            )
            classified_raw = data.get("classified_items")
            if not isinstance(classified_raw, list):
                raise ValueError("classified_items missing from classification response")
        except (LLMError, ValueError) as e:
            logger.warning(f"[INVOICE-AI] Classification failed, using fallback: {e}")
            return [
                item.model_copy(update={
                    "suggested_gl_account": "",
                    "suggested_category": FALLBACK_CATEGORY,
                    "confidence": FALLBACK_CONFIDENCE,
                })
                for item in items
            ]

        classified = []
        for index, item in enumerate(items):
            raw = classified_raw[index] if index < len(classified_raw) and isinstance(classified_raw[index], dict) else {}
            confidence = min(max(_as_float(raw.get("confidence"), FALLBACK_CONFIDENCE), 0.0), 1.0)
            classified.append(item.model_copy(update={
                "suggested_gl_account": _as_str(raw.get("suggested_gl_account")),
                "suggested_category": _as_str(raw.get("suggested_category")) or FALLBACK_CATEGORY,
                "confidence": confidence,
            }))
        return classified

    @staticmethod
    def _apply_vendor_pattern(
        vendor_name: str,
        items: list[ExtractedLineItem],
        patterns: list[VendorPattern],
    ) -> list[ExtractedLineItem]:
        key = normalize_vendor(vendor_name)
        pattern = next((p for p in patterns if p.vendor_key == key and p.gl_account_code), None)
        if not pattern:
            return items
        return [
            item if item.suggested_gl_account else item.model_copy(update={
                "suggested_gl_account": pattern.gl_account_code,
                "suggested_category": pattern.category or item.suggested_category,
            })
            for item in items
        ]

    def _apply_to_invoice(
        self,
        invoice: Invoice,
        parsed: ExtractedInvoice,
        confidence: float,
        image_url: str,
    ) -> None:
        invoice.vendor_name = parsed.vendor_name or invoice.vendor_name
        invoice.invoice_number = parsed.invoice_number or invoice.invoice_number
        invoice.invoice_date = parse_iso_date(parsed.invoice_date) or invoice.invoice_date
        invoice.due_date = parse_iso_date(parsed.due_date) or invoice.due_date
        if parsed.total_amount > 0:
            invoice.amount_cents = dollars_to_cents(parsed.total_amount)
        invoice.ai_confidence = confidence
        invoice.source_document_url = image_url
        invoice.line_items = [
            InvoiceLineItem(
                position=index,
                description=item.description or "Line item",
                quantity=item.quantity,
                amount_cents=dollars_to_cents(item.amount),
                gl_account_code=item.suggested_gl_account or None,
                category=item.suggested_category,
                ai_confidence=item.confidence,
            )
            for index, item in enumerate(parsed.line_items)
        ]

    async def _mark_failed(self, record: AIProcessingRecord, error: str, started: float) -> None:
        logger.error(f"[INVOICE-AI] Processing {record.id} failed: {error}")
        record.status = AIProcessingStatus.FAILED
        record.error_message = error
        record.processing_time_ms = int((time.monotonic() - started) * 1000)
        record.model_version = self.llm.model
        record.completed_at = datetime.utcnow()
        await self.db.commit()
