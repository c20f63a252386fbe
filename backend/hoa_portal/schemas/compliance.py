"""Compliance issue schemas."""

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import Field

from hoa_portal.schemas.base import BaseSchema, IDMixin, TimestampMixin
from hoa_portal.models.enums import ComplianceStatus


class ComplianceIssueCreate(BaseSchema):
    property_id: UUID
    resident_id: Optional[UUID] = None
    violation_type: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None
    due_date: Optional[date] = None
    fine_amount_cents: int = Field(0, ge=0)


class ComplianceIssueUpdate(BaseSchema):
    violation_type: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None
    due_date: Optional[date] = None
    fine_amount_cents: Optional[int] = Field(None, ge=0)


class ComplianceStatusUpdate(BaseSchema):
    status: ComplianceStatus
    notes: Optional[str] = None


class ComplianceIssueResponse(BaseSchema, IDMixin, TimestampMixin):
    association_id: UUID
    property_id: UUID
    resident_id: Optional[UUID] = None
    violation_type: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    fine_amount_cents: int
    status: ComplianceStatus
    resolved_date: Optional[date] = None
    resolution_notes: Optional[str] = None
