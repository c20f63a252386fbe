"""Lead schemas."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import EmailStr, Field, model_validator

from hoa_portal.schemas.base import BaseSchema, IDMixin, TimestampMixin
from hoa_portal.models.enums import LeadStatus


class LeadCreate(BaseSchema):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    street_address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, max_length=20)
    source: Optional[str] = Field(None, max_length=100)
    lead_type: Optional[str] = Field(None, max_length=50)
    property_type: Optional[str] = Field(None, max_length=50)
    unit_count: Optional[int] = Field(None, ge=0)
    current_management: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def require_identity(self) -> "LeadCreate":
        if not any((self.first_name, self.last_name, self.email, self.company, self.notes)):
            raise ValueError("A lead needs a name, email, company or notes")
        return self


class LeadUpdate(BaseSchema):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    street_address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, max_length=20)
    source: Optional[str] = Field(None, max_length=100)
    lead_type: Optional[str] = Field(None, max_length=50)
    property_type: Optional[str] = Field(None, max_length=50)
    unit_count: Optional[int] = Field(None, ge=0)
    current_management: Optional[str] = Field(None, max_length=255)
    interest_level: Optional[str] = Field(None, max_length=20)
    timeline: Optional[str] = Field(None, max_length=100)
    services_needed: Optional[list[str]] = None
    budget_range: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    status: Optional[LeadStatus] = None


class LeadResponse(BaseSchema, IDMixin, TimestampMixin):
    org_id: UUID
    display_name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    source: Optional[str] = None
    lead_type: Optional[str] = None
    property_type: Optional[str] = None
    unit_count: Optional[int] = None
    current_management: Optional[str] = None
    interest_level: Optional[str] = None
    timeline: Optional[str] = None
    services_needed: Optional[list[str]] = None
    budget_range: Optional[str] = None
    notes: Optional[str] = None
    status: LeadStatus
    ai_confidence: Optional[dict[str, Any]] = None
    ai_generated_fields: Optional[list[str]] = None
    ai_processed_at: Optional[datetime] = None
