"""Association, property and resident schemas."""

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, model_validator

from hoa_portal.schemas.base import BaseSchema, IDMixin, TimestampMixin
from hoa_portal.models.enums import PropertyStatus, PropertyType, ResidentType


class AssociationCreate(BaseSchema):
    """Create a new association."""

    name: str = Field(..., min_length=2, max_length=255)
    code: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=255)
    total_units: Optional[int] = Field(None, ge=0)
    founded_year: Optional[int] = Field(None, ge=1800, le=2100)
    fiscal_year_start_month: int = Field(1, ge=1, le=12)


class AssociationUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    code: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=255)
    total_units: Optional[int] = Field(None, ge=0)
    founded_year: Optional[int] = Field(None, ge=1800, le=2100)
    fiscal_year_start_month: Optional[int] = Field(None, ge=1, le=12)


class AssociationResponse(BaseSchema, IDMixin, TimestampMixin):
    """Association response."""

    org_id: UUID
    name: str
    code: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    total_units: Optional[int] = None
    founded_year: Optional[int] = None
    fiscal_year_start_month: int
    is_archived: bool


class PropertyCreate(BaseSchema):
    """Create a property inside an association."""

    address: str = Field(..., min_length=3, max_length=255)
    unit_number: Optional[str] = Field(None, max_length=50)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, max_length=20)
    property_type: PropertyType = PropertyType.SINGLE_FAMILY
    status: PropertyStatus = PropertyStatus.OCCUPIED
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    square_feet: Optional[int] = Field(None, gt=0)
    year_built: Optional[int] = Field(None, ge=1800, le=2100)


class PropertyUpdate(BaseSchema):
    address: Optional[str] = Field(None, min_length=3, max_length=255)
    unit_number: Optional[str] = Field(None, max_length=50)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, max_length=20)
    property_type: Optional[PropertyType] = None
    status: Optional[PropertyStatus] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    square_feet: Optional[int] = Field(None, gt=0)
    year_built: Optional[int] = Field(None, ge=1800, le=2100)


class PropertyResponse(BaseSchema, IDMixin, TimestampMixin):
    association_id: UUID
    address: str
    unit_number: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    property_type: PropertyType
    status: PropertyStatus
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    square_feet: Optional[int] = None
    year_built: Optional[int] = None
    is_archived: bool


class ResidentCreate(BaseSchema):
    """Create a resident of a property."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    resident_type: ResidentType = ResidentType.OWNER
    is_primary: bool = False
    move_in_date: Optional[date] = None
    move_out_date: Optional[date] = None
    emergency_contact: Optional[str] = None
    user_id: Optional[UUID] = None

    @model_validator(mode="after")
    def validate_dates(self) -> "ResidentCreate":
        if self.move_in_date and self.move_out_date and self.move_out_date < self.move_in_date:
            raise ValueError("move_out_date must be on or after move_in_date")
        return self


class ResidentUpdate(BaseSchema):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    resident_type: Optional[ResidentType] = None
    is_primary: Optional[bool] = None
    move_in_date: Optional[date] = None
    move_out_date: Optional[date] = None
    emergency_contact: Optional[str] = None
    user_id: Optional[UUID] = None


class ResidentResponse(BaseSchema, IDMixin, TimestampMixin):
    property_id: UUID
    user_id: Optional[UUID] = None
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    resident_type: ResidentType
    is_primary: bool
    move_in_date: Optional[date] = None
    move_out_date: Optional[date] = None
