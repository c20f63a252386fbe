"""Amenity and booking schemas."""

from datetime import datetime, time
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from hoa_portal.schemas.base import BaseSchema, IDMixin, TimestampMixin, to_naive_utc
from hoa_portal.models.enums import BookingStatus


class AmenityCreate(BaseSchema):
    association_id: UUID
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    capacity: Optional[int] = Field(None, gt=0)
    booking_fee_cents: int = Field(0, ge=0)
    requires_approval: bool = False
    open_time: Optional[time] = None
    close_time: Optional[time] = None

    @model_validator(mode="after")
    def validate_hours(self) -> "AmenityCreate":
        if (self.open_time is None) != (self.close_time is None):
            raise ValueError("open_time and close_time must be set together")
        if self.open_time and self.close_time and self.close_time <= self.open_time:
            raise ValueError("close_time must be after open_time")
        return self


class AmenityUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    capacity: Optional[int] = Field(None, gt=0)
    booking_fee_cents: Optional[int] = Field(None, ge=0)
    requires_approval: Optional[bool] = None
    open_time: Optional[time] = None
    close_time: Optional[time] = None
    is_active: Optional[bool] = None


class AmenityResponse(BaseSchema, IDMixin, TimestampMixin):
    association_id: UUID
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    capacity: Optional[int] = None
    booking_fee_cents: int
    requires_approval: bool
    open_time: Optional[time] = None
    close_time: Optional[time] = None
    is_active: bool


class BookingWindow(BaseSchema):
    """A requested time window. End must be after start."""

    start_time: datetime
    end_time: datetime

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def validate_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class BookingCreate(BookingWindow):
    resident_id: Optional[UUID] = None
    title: Optional[str] = Field(None, max_length=255)
    guest_count: int = Field(1, ge=1)
    notes: Optional[str] = None


class BookingResponse(BaseSchema, IDMixin, TimestampMixin):
    amenity_id: UUID
    resident_id: Optional[UUID] = None
    title: Optional[str] = None
    start_time: datetime
    end_time: datetime
    guest_count: int
    fee_cents: int
    status: BookingStatus
    notes: Optional[str] = None


class ConflictCheckResponse(BaseSchema):
    has_conflict: bool
    conflicts: list[BookingResponse]
