"""Invoice schemas."""

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import Field

from hoa_portal.schemas.base import BaseSchema, IDMixin, TimestampMixin
from hoa_portal.models.enums import InvoiceStatus


class LineItemInput(BaseSchema):
    description: str = Field(..., min_length=1)
    quantity: Optional[float] = None
    amount_cents: int
    gl_account_code: Optional[str] = Field(None, max_length=20)
    category: Optional[str] = Field(None, max_length=100)


class LineItemResponse(BaseSchema, IDMixin):
    position: int
    description: str
    quantity: Optional[float] = None
    amount_cents: int
    gl_account_code: Optional[str] = None
    category: Optional[str] = None
    ai_confidence: Optional[float] = None


class InvoiceCreate(BaseSchema):
    """Create an invoice."""

    association_id: UUID
    vendor_id: Optional[UUID] = None
    vendor_name: Optional[str] = Field(None, max_length=255)
    invoice_number: Optional[str] = Field(None, max_length=100)
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    amount_cents: int = Field(0, ge=0)
    description: Optional[str] = None
    source_document_url: Optional[str] = None
    line_items: list[LineItemInput] = []


class InvoiceUpdate(BaseSchema):
    vendor_id: Optional[UUID] = None
    vendor_name: Optional[str] = Field(None, max_length=255)
    invoice_number: Optional[str] = Field(None, max_length=100)
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_date: Optional[date] = None
    amount_cents: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    status: Optional[InvoiceStatus] = None
    source_document_url: Optional[str] = None


class InvoiceResponse(BaseSchema, IDMixin, TimestampMixin):
    """Invoice response."""

    association_id: UUID
    vendor_id: Optional[UUID] = None
    vendor_name: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_date: Optional[date] = None
    amount_cents: int
    description: Optional[str] = None
    status: InvoiceStatus
    source_document_url: Optional[str] = None
    ai_confidence: Optional[float] = None
    line_items: list[LineItemResponse] = []
