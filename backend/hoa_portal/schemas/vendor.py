"""Vendor, contract and work order schemas."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, model_validator

from hoa_portal.schemas.base import BaseSchema, IDMixin, TimestampMixin
from hoa_portal.models.enums import ContractStatus, WorkOrderPriority, WorkOrderStatus


class VendorCreate(BaseSchema):
    """Create a new vendor."""

    name: str = Field(..., min_length=2, max_length=255)
    service_type: Optional[str] = Field(None, max_length=100)
    contact_name: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    is_preferred: bool = False
    rating: Optional[float] = Field(None, ge=0, le=5)
    insurance_expires_on: Optional[date] = None
    notes: Optional[str] = None


class VendorUpdate(BaseSchema):
    """Update vendor."""

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    service_type: Optional[str] = Field(None, max_length=100)
    contact_name: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    is_active: Optional[bool] = None
    is_preferred: Optional[bool] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    insurance_expires_on: Optional[date] = None
    notes: Optional[str] = None


class VendorResponse(BaseSchema, IDMixin, TimestampMixin):
    """Vendor response."""

    org_id: UUID
    name: str
    service_type: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool
    is_preferred: bool
    rating: Optional[float] = None
    insurance_expires_on: Optional[date] = None
    notes: Optional[str] = None


class ContractCreate(BaseSchema):
    association_id: UUID
    title: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    value_cents: int = Field(0, ge=0)
    status: ContractStatus = ContractStatus.DRAFT

    @model_validator(mode="after")
    def validate_dates(self) -> "ContractCreate":
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class ContractUpdate(BaseSchema):
    title: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    end_date: Optional[date] = None
    status: Optional[ContractStatus] = None


class AmendmentCreate(BaseSchema):
    effective_date: date
    description: str = Field(..., min_length=1)
    value_change_cents: int = 0


class AmendmentResponse(BaseSchema, IDMixin):
    contract_id: UUID
    effective_date: date
    description: str
    value_change_cents: int
    created_at: datetime


class ContractResponse(BaseSchema, IDMixin, TimestampMixin):
    vendor_id: UUID
    association_id: UUID
    title: str
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    original_value_cents: int
    current_value_cents: int
    status: ContractStatus
    amendments: list[AmendmentResponse] = []


class WorkOrderCreate(BaseSchema):
    """Create a work order."""

    association_id: UUID
    property_id: Optional[UUID] = None
    vendor_id: Optional[UUID] = None
    title: str = Field(..., min_length=3, max_length=255)
    description: Optional[str] = None
    priority: WorkOrderPriority = WorkOrderPriority.MEDIUM
    estimated_cost_cents: Optional[int] = Field(None, ge=0)
    due_date: Optional[date] = None


class WorkOrderUpdate(BaseSchema):
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = None
    priority: Optional[WorkOrderPriority] = None
    estimated_cost_cents: Optional[int] = Field(None, ge=0)
    due_date: Optional[date] = None


class WorkOrderAssign(BaseSchema):
    vendor_id: UUID


class WorkOrderStatusUpdate(BaseSchema):
    status: WorkOrderStatus
    actual_cost_cents: Optional[int] = Field(None, ge=0)


class WorkOrderResponse(BaseSchema, IDMixin, TimestampMixin):
    association_id: UUID
    property_id: Optional[UUID] = None
    vendor_id: Optional[UUID] = None
    title: str
    description: Optional[str] = None
    priority: WorkOrderPriority
    status: WorkOrderStatus
    estimated_cost_cents: Optional[int] = None
    actual_cost_cents: Optional[int] = None
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
