"""AI lead extraction: turn an inquiry email or free text into lead fields."""

import logging
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.errors import ServiceError
from hoa_portal.core.security import AuthenticatedUser
from hoa_portal.models.enums import AuditAction
from hoa_portal.models.lead import Lead
from hoa_portal.schemas.ai import EmailData, ProcessLeadRequest, ProcessLeadResponse
from hoa_portal.services.audit import AuditService
from hoa_portal.services.llm import LLMClient, LLMError, parse_json_object

logger = logging.getLogger(__name__)

LEAD_SYSTEM_PROMPT = """You process inbound leads for an HOA management company.
Extract structured lead information from the content and return valid JSON in
exactly this shape:
{
  "company_name": "company or association name",
  "contact_name": "primary contact person",
  "email": "email address",
  "phone": "phone number",
  "address": "property or business street address",
  "city": "city",
  "state": "state",
  "zip": "zip code",
  "source": "website|referral|email|phone|other",
  "lead_type": "new_hoa|management_transfer|consulting|maintenance|other",
  "property_type": "single_family|townhome|condo|mixed|commercial",
  "unit_count": "estimated number of units",
  "current_management": "current management company if mentioned",
  "interest_level": "high|medium|low",
  "timeline": "immediate|3_months|6_months|1_year|unknown",
  "services_needed": ["management", "accounting", "maintenance", "consulting"],
  "budget_range": "estimated budget range",
  "notes": "key points and requirements",
  "confidence_scores": {"company_name": 0.95, "contact_name": 0.9, "email": 0.95},
  "processing_notes": "anything notable about the extraction"
}"""

# extracted key -> Lead attribute
FIELD_MAP = {
    "company_name": "company",
    "email": "email",
    "phone": "phone",
    "address": "street_address",
    "city": "city",
    "state": "state",
    "zip": "zip_code",
    "source": "source",
    "lead_type": "lead_type",
    "property_type": "property_type",
    "current_management": "current_management",
    "interest_level": "interest_level",
    "timeline": "timeline",
    "budget_range": "budget_range",
    "notes": "notes",
}


def _parse_unit_count(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    digits = "".join(ch for ch in str(value) if ch.isdigit())
    return int(digits) if digits else None


def _split_name(name: str) -> tuple[Optional[str], Optional[str]]:
    parts = name.split()
    if not parts:
        return None, None
    if len(parts) == 1:
        return parts[0], None
    return parts[0], " ".join(parts[1:])


def build_user_prompt(content: str, email: Optional[EmailData], lead: Optional[Lead]) -> str:
    sections = ["Extract structured lead data from this content:", ""]
    if email:
        sections += [
            f"Email From: {email.from_ or 'Not specified'}",
            f"Email Subject: {email.subject or 'Not specified'}",
            "Email Content:",
        ]
    sections.append(content)
    if lead:
        sections += [
            "",
            "Current lead data:",
            f"- Company: {lead.company or 'Not specified'}",
            f"- Contact: {' '.join(p for p in (lead.first_name, lead.last_name) if p) or 'Not specified'}",
            f"- Email: {lead.email or 'Not specified'}",
            f"- Phone: {lead.phone or 'Not specified'}",
            f"- Status: {lead.status.value}",
        ]
    return "\n".join(sections)


def apply_extraction(lead: Lead, extracted: dict[str, Any]) -> None:
    """Replace each lead field with its extracted value when one is present."""
    for key, attr in FIELD_MAP.items():
        value = extracted.get(key)
        if value:
            setattr(lead, attr, str(value).strip())

    contact = extracted.get("contact_name")
    if contact:
        first, last = _split_name(str(contact))
        lead.first_name = first or lead.first_name
        lead.last_name = last or lead.last_name

    unit_count = _parse_unit_count(extracted.get("unit_count"))
    if unit_count:
        lead.unit_count = unit_count

    services = extracted.get("services_needed")
    if isinstance(services, list) and services:
        lead.services_needed = [str(s) for s in services]

    scores = extracted.get("confidence_scores")
    scores = scores if isinstance(scores, dict) else {}
    lead.ai_confidence = scores
    lead.ai_generated_fields = list(scores.keys())
    lead.ai_processed_at = datetime.utcnow()


class LeadProcessor:
    def __init__(self, db: AsyncSession, llm: LLMClient):
        self.db = db
        self.llm = llm

    async def process(
        self,
        request: ProcessLeadRequest,
        current_user: AuthenticatedUser,
    ) -> ProcessLeadResponse:
        lead = None
        if request.lead_id:
            lead = await self._get_lead(request.lead_id, current_user.org_id)

        email = request.email_data
        content = (
            request.content
            or (email.body if email else None)
            or (email.html if email else None)
            or (lead.notes if lead else None)
            or ""
        )

        try:
            reply = await self.llm.chat(
                [
                    {"role": "system", "content": LEAD_SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(content, email, lead)},
                ],
                temperature=0.3,
                max_tokens=1500,
            )
        except LLMError as e:
            raise ServiceError(e.message, status_code=e.status_code) from e

        try:
            extracted = parse_json_object(reply)
        except ValueError as e:
            logger.warning(f"[LEAD-AI] Unparseable reply: {e}")
            raise ServiceError(
                "Failed to parse AI response",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            ) from e

        if lead is not None:
            apply_extraction(lead, extracted)
            await AuditService(self.db).log_for_user(
                current_user,
                AuditAction.LEAD_AI_PROCESSED,
                "lead",
                lead.id,
                details={"fields": lead.ai_generated_fields},
            )
            await self.db.commit()
            logger.info(f"[LEAD-AI] Updated lead {lead.id}")

        notes = extracted.get("processing_notes")
        return ProcessLeadResponse(
            success=True,
            extracted_data=extracted,
            processing_notes=str(notes) if notes else None,
            lead_id=request.lead_id,
        )

    async def _get_lead(self, lead_id: UUID, org_id: Optional[UUID]) -> Lead:
        result = await self.db.execute(
            select(Lead).where(Lead.id == lead_id, Lead.org_id == org_id)
        )
        lead = result.scalar_one_or_none()
        if not lead:
            raise ServiceError("Lead not found", status_code=status.HTTP_404_NOT_FOUND)
        return lead
