"""
Generic document extraction (invoice emails, homeowner requests, leads) and
financial report PDF extraction.
"""

import logging
from typing import Any, Optional
from uuid import UUID

import fitz  # PyMuPDF
from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.errors import ServiceError
from hoa_portal.models.accounting import GLAccount
from hoa_portal.schemas.ai import (
    ExtractRequest,
    ExtractResponse,
    FinancialReportExtraction,
    FinancialReportLine,
)
from hoa_portal.services.llm import LLMClient, LLMError, parse_json_object

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 15000

EXTRACTOR_SYSTEM_PROMPT = (
    "You are an assistant that extracts structured data from documents, emails and messages."
)

CONTENT_PROMPTS = {
    "invoice": """Extract the following from this invoice email or document.
Leave a field blank when it cannot be found. Return a JSON object with the keys:
- invoice_number: invoice or reference number
- amount: total amount due as a number without currency symbols
- invoice_date: invoice date, YYYY-MM-DD
- due_date: payment due date, YYYY-MM-DD
- vendor: company or person who sent the invoice
- description: short description of what the invoice is for
- association_id: any reference to an HOA or association
- line_items: array of items with description and amount
- payment_terms: payment terms or instructions
- vendor_contact: vendor contact information""",
    "homeowner-request": """Extract the following from this homeowner request.
Leave a field blank when it cannot be found. Return a JSON object with the keys:
- title: concise summary of the request, at most 100 characters
- description: detailed description of the issue or request
- type: maintenance, compliance, billing, general or amenity
- priority: low, medium, high or urgent
- property_info: property, unit number or location mentioned
- resident_info: details about the resident or homeowner
- association_info: HOA or community name mentioned
- action_items: list of actions requested
- suggested_response: short suggested reply""",
    "lead": """Extract the following from this prospective client inquiry.
Leave a field blank when it cannot be found. Return a JSON object with the keys:
- name: full name of the person writing
- first_name
- last_name
- email
- phone
- company: company or organization name
- association_name: name of the HOA they represent
- association_type: condo, single-family homes, etc.
- number_of_units: units or homes in the association
- current_management: current management company
- location: city, state or address
- requirements: services they are looking for
- source: how they heard about us""",
}

FINANCIAL_REPORT_PROMPT = """You read HOA financial reports (income statements,
balance sheets, budget comparisons). From the report text return JSON:
{
  "report_type": "income_statement|balance_sheet|budget_comparison|other",
  "period_start": "YYYY-MM-DD or empty",
  "period_end": "YYYY-MM-DD or empty",
  "lines": [{"account_code": "code if printed, else empty", "account_name": "name", "amount": 0.0}]
}
Only include account lines that carry an amount; skip subtotals and headings."""


def field_confidence(value: Any) -> float:
    if isinstance(value, str):
        if not value:
            return 0.0
        if len(value) < 3:
            return 0.5
        if len(value) < 10:
            return 0.8
        return 0.95
    if isinstance(value, list):
        return 0.9 if value else 0.4
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return 0.9
    return 0.7


def calculate_field_confidence(data: dict[str, Any]) -> dict[str, float]:
    return {key: field_confidence(value) for key, value in data.items()}


def build_prompt(content_type: str, metadata: Optional[dict[str, Any]]) -> str:
    try:
        prompt = CONTENT_PROMPTS[content_type]
    except KeyError:
        raise ServiceError(
            f"Unsupported content type: {content_type}",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    metadata = metadata or {}
    return (
        f"{prompt}\n\n"
        f"Email Subject: {metadata.get('subject', '')}\n"
        f"From: {metadata.get('from', '')}\n"
    )


def extract_pdf_text(pdf_bytes: bytes) -> tuple[str, int]:
    """Return (text, page_count) for a PDF held in memory."""
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise ServiceError("Could not read PDF", status_code=status.HTTP_400_BAD_REQUEST, details=str(e))

    with doc:
        pages = [page.get_text() for page in doc]
    return "\n".join(pages), len(pages)


def match_gl_accounts(
    lines: list[FinancialReportLine],
    accounts: list[GLAccount],
) -> list[FinancialReportLine]:
    """Link report lines to GL accounts by code, then by case-insensitive name."""
    by_code = {a.code: a for a in accounts}
    by_name = {a.name.strip().lower(): a for a in accounts}
    matched = []
    for line in lines:
        account = by_code.get(line.account_code or "") or by_name.get(line.account_name.strip().lower())
        if account:
            line = line.model_copy(update={"gl_account_id": account.id, "matched": True})
        matched.append(line)
    return matched


class DocumentExtractor:
    def __init__(self, llm: LLMClient, db: Optional[AsyncSession] = None):
        self.llm = llm
        self.db = db

    async def extract(self, request: ExtractRequest) -> ExtractResponse:
        """Extract fields from free-form content.

        LLM and parse failures come back as ``success=False`` rather than
        an error status.
        """
        prompt = build_prompt(request.content_type, request.metadata)
        logger.info(f"[EXTRACT] {request.content_type} content, length {len(request.content)}")

        try:
            reply = await self.llm.chat(
                [
                    {"role": "system", "content": EXTRACTOR_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": f"{prompt}\n\nContent:\n{request.content[:MAX_CONTENT_CHARS]}",
                    },
                ],
                temperature=0.1,
                max_tokens=1000,
            )
        except LLMError as e:
            return ExtractResponse(success=False, error=f"Error calling OpenAI API: {e.message}")

        try:
            data = parse_json_object(reply)
        except ValueError as e:
            logger.warning(f"[EXTRACT] Unparseable reply: {e}")
            return ExtractResponse(success=False, error=f"Failed to parse AI response: {e}")

        return ExtractResponse(
            success=True,
            content_type=request.content_type,
            extracted_data=data,
            confidence=calculate_field_confidence(data),
        )

    async def extract_financial_report(
        self,
        pdf_bytes: bytes,
        association_id: UUID,
    ) -> FinancialReportExtraction:
        text, page_count = extract_pdf_text(pdf_bytes)
        if not text.strip():
            raise ServiceError("PDF contains no extractable text", status_code=status.HTTP_400_BAD_REQUEST)

        try:
            data = await self.llm.chat_json(
                [
                    {"role": "system", "content": FINANCIAL_REPORT_PROMPT},
                    {"role": "user", "content": text[:MAX_CONTENT_CHARS]},
                ],
                temperature=0.1,
                max_tokens=2000,
            )
        except (LLMError, ValueError) as e:
            raise ServiceError(
                "Failed to extract financial report",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                details=str(e),
            ) from e

        raw_lines = data.get("lines") or []
        if not isinstance(raw_lines, list):
            raise ServiceError(
                "Failed to extract financial report",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                details="lines in report response is not a list",
            )

        lines = []
        for raw in raw_lines:
            if not isinstance(raw, dict) or not raw.get("account_name"):
                continue
            try:
                amount = float(str(raw.get("amount", 0)).replace("$", "").replace(",", ""))
            except ValueError:
                continue
            lines.append(FinancialReportLine(
                account_code=str(raw.get("account_code") or "").strip() or None,
                account_name=str(raw["account_name"]).strip(),
                amount=amount,
            ))

        if self.db is not None:
            result = await self.db.execute(
                select(GLAccount).where(GLAccount.association_id == association_id)
            )
            lines = match_gl_accounts(lines, list(result.scalars().all()))

        logger.info(f"[EXTRACT] Financial report: {len(lines)} lines from {page_count} pages")
        return FinancialReportExtraction(
            report_type=str(data.get("report_type") or "other"),
            period_start=data.get("period_start") or None,
            period_end=data.get("period_end") or None,
            lines=lines,
            page_count=page_count,
            unmatched_count=sum(1 for line in lines if not line.matched),
        )
