"""Schemas for the AI processing endpoints."""

from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from hoa_portal.schemas.base import BaseSchema


class ProcessInvoiceRequest(BaseSchema):
    """Queue and process one invoice image."""

    image_url: str = Field(..., min_length=1)
    association_id: UUID
    invoice_id: Optional[UUID] = None


class ExtractedLineItem(BaseModel):
    description: str = ""
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    amount: float = 0.0
    suggested_gl_account: str = ""
    suggested_category: str = "Unknown"
    confidence: float = 0.5


class ExtractedInvoice(BaseModel):
    """Structured invoice as read by the model."""

    vendor_name: str = ""
    vendor_address: Optional[str] = None
    invoice_number: str = ""
    invoice_date: str = ""
    due_date: Optional[str] = None
    total_amount: float = 0.0
    line_items: list[ExtractedLineItem] = []


class ProcessInvoiceResponse(BaseModel):
    success: bool = True
    processing_id: UUID
    invoice_id: Optional[UUID] = None
    invoice_data: ExtractedInvoice
    confidence: float
    confidence_breakdown: dict[str, float]
    processing_time_ms: int
    model_version: str


class BulkProcessRequest(BaseSchema):
    items: list[ProcessInvoiceRequest] = Field(..., min_length=1, max_length=50)


class BulkItemResult(BaseModel):
    image_url: str
    success: bool
    processing_id: Optional[UUID] = None
    confidence: Optional[float] = None
    error: Optional[str] = None


class BulkProcessResponse(BaseModel):
    processed: int
    succeeded: int
    failed: int
    results: list[BulkItemResult]


class EmailData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[str] = Field(None, alias="from")
    subject: Optional[str] = None
    body: Optional[str] = None
    html: Optional[str] = None


class ProcessLeadRequest(BaseSchema):
    """Extract lead details from free text or an email."""

    lead_id: Optional[UUID] = None
    content: Optional[str] = None
    email_data: Optional[EmailData] = None

    @model_validator(mode="after")
    def require_input(self) -> "ProcessLeadRequest":
        if not self.lead_id and not self.content and not self.email_data:
            raise ValueError("lead_id, content or email_data is required")
        return self


class ProcessLeadResponse(BaseModel):
    success: bool
    extracted_data: dict[str, Any]
    processing_notes: Optional[str] = None
    lead_id: Optional[UUID] = None


class ExtractRequest(BaseSchema):
    content: str = Field(..., min_length=1)
    content_type: str
    metadata: Optional[dict[str, Any]] = None


class ExtractResponse(BaseModel):
    success: bool
    content_type: Optional[Literal["invoice", "homeowner-request", "lead"]] = None
    extracted_data: dict[str, Any] = {}
    confidence: dict[str, float] = {}
    error: Optional[str] = None


class FinancialReportLine(BaseModel):
    account_code: Optional[str] = None
    account_name: str
    amount: float
    gl_account_id: Optional[UUID] = None
    matched: bool = False


class FinancialReportExtraction(BaseModel):
    report_type: str
    period_start: Optional[str] = None
    period_end: Optional[str] = None
    lines: list[FinancialReportLine]
    page_count: int
    unmatched_count: int
