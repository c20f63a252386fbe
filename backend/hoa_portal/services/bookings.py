"""Amenity booking rules: windows, capacity, opening hours and overlap."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.errors import ServiceError
from hoa_portal.core.security import AuthenticatedUser
from hoa_portal.models.amenity import Amenity, AmenityBooking
from hoa_portal.models.enums import AuditAction, BookingStatus
from hoa_portal.schemas.amenity import BookingCreate, BookingResponse
from hoa_portal.services.audit import AuditService

logger = logging.getLogger(__name__)


def windows_overlap(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime,
) -> bool:
    """Half-open overlap: windows that only touch at an endpoint do not conflict."""
    return start_a < end_b and start_b < end_a


def check_amenity_rules(amenity: Amenity, start: datetime, end: datetime, guest_count: int) -> None:
    if not amenity.is_active:
        raise ServiceError("Amenity is not available for booking", status_code=status.HTTP_400_BAD_REQUEST)

    if amenity.capacity is not None and guest_count > amenity.capacity:
        raise ServiceError(
            f"Guest count exceeds capacity of {amenity.capacity}",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    if amenity.open_time and amenity.close_time:
        inside = (
            start.date() == end.date()
            and start.time() >= amenity.open_time
            and end.time() <= amenity.close_time
        )
        if not inside:
            raise ServiceError(
                f"Bookings must fall within opening hours "
                f"({amenity.open_time:%H:%M}-{amenity.close_time:%H:%M})",
                status_code=status.HTTP_400_BAD_REQUEST,
            )


class BookingService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_conflicts(
        self,
        amenity_id: UUID,
        start: datetime,
        end: datetime,
        exclude_id: Optional[UUID] = None,
    ) -> list[AmenityBooking]:
        query = select(AmenityBooking).where(
            AmenityBooking.amenity_id == amenity_id,
            AmenityBooking.status != BookingStatus.CANCELLED,
            AmenityBooking.start_time < end,
            AmenityBooking.end_time > start,
        )
        if exclude_id is not None:
            query = query.where(AmenityBooking.id != exclude_id)
        result = await self.db.execute(query.order_by(AmenityBooking.start_time))
        return list(result.scalars().all())

    def _conflict_error(self, conflicts: list[AmenityBooking]) -> ServiceError:
        return ServiceError(
            "Booking conflicts with an existing booking",
            status_code=status.HTTP_409_CONFLICT,
            details=[BookingResponse.model_validate(b).model_dump(mode="json") for b in conflicts],
        )

    async def create_booking(
        self,
        amenity: Amenity,
        data: BookingCreate,
        current_user: AuthenticatedUser,
    ) -> AmenityBooking:
        check_amenity_rules(amenity, data.start_time, data.end_time, data.guest_count)

        conflicts = await self.find_conflicts(amenity.id, data.start_time, data.end_time)
        if conflicts:
            raise self._conflict_error(conflicts)

        booking = AmenityBooking(
            amenity_id=amenity.id,
            resident_id=data.resident_id,
            booked_by=current_user.db_user_id,
            title=data.title,
            start_time=data.start_time,
            end_time=data.end_time,
            guest_count=data.guest_count,
            fee_cents=amenity.booking_fee_cents,
            status=BookingStatus.PENDING if amenity.requires_approval else BookingStatus.CONFIRMED,
            notes=data.notes,
        )
        self.db.add(booking)
        await self.db.flush()
        await AuditService(self.db).log_for_user(
            current_user,
            AuditAction.BOOKING_CREATED,
            "amenity_booking",
            booking.id,
            details={"amenity_id": str(amenity.id), "status": booking.status.value},
        )
        logger.info(f"[BOOKINGS] {booking.status.value} booking {booking.id} for amenity {amenity.id}")
        return booking

    async def approve(self, booking: AmenityBooking) -> AmenityBooking:
        if booking.status != BookingStatus.PENDING:
            raise ServiceError(
                f"Only pending bookings can be approved (booking is {booking.status.value})",
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        booking.status = BookingStatus.CONFIRMED
        return booking

    async def cancel(self, booking: AmenityBooking) -> AmenityBooking:
        if booking.status == BookingStatus.CANCELLED:
            raise ServiceError("Booking is already cancelled", status_code=status.HTTP_400_BAD_REQUEST)
        booking.status = BookingStatus.CANCELLED
        return booking
