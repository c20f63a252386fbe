"""Amenities router - shared facilities and their bookings."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_member, AuthenticatedUser
from hoa_portal.models.amenity import Amenity, AmenityBooking
from hoa_portal.models.association import Association
from hoa_portal.models.enums import BookingStatus
from hoa_portal.routers.common import apply_updates, get_association_or_404, get_resident_or_404
from hoa_portal.schemas.amenity import (
    AmenityCreate,
    AmenityUpdate,
    AmenityResponse,
    BookingCreate,
    BookingResponse,
    BookingWindow,
    ConflictCheckResponse,
)
from hoa_portal.schemas.base import to_naive_utc
from hoa_portal.services.bookings import BookingService

router = APIRouter(prefix="/amenities", tags=["amenities"])


async def _get_amenity(db: AsyncSession, amenity_id: UUID, org_id: UUID) -> Amenity:
    result = await db.execute(
        select(Amenity)
        .join(Association, Amenity.association_id == Association.id)
        .where(Amenity.id == amenity_id, Association.org_id == org_id)
    )
    amenity = result.scalar_one_or_none()
    if not amenity:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Amenity not found")
    return amenity


async def _get_booking(db: AsyncSession, booking_id: UUID, org_id: UUID) -> AmenityBooking:
    result = await db.execute(
        select(AmenityBooking)
        .join(Amenity, AmenityBooking.amenity_id == Amenity.id)
        .join(Association, Amenity.association_id == Association.id)
        .where(AmenityBooking.id == booking_id, Association.org_id == org_id)
    )
    booking = result.scalar_one_or_none()
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking


@router.post("", response_model=AmenityResponse, status_code=status.HTTP_201_CREATED)
async def create_amenity(
    data: AmenityCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_association_or_404(db, data.association_id, current_user.org_id)

    amenity = Amenity(**data.model_dump())
    db.add(amenity)
    await db.commit()
    await db.refresh(amenity)

    return AmenityResponse.model_validate(amenity)


@router.get("", response_model=List[AmenityResponse])
async def list_amenities(
    association_id: UUID,
    include_inactive: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_association_or_404(db, association_id, current_user.org_id)

    query = select(Amenity).where(Amenity.association_id == association_id)
    if not include_inactive:
        query = query.where(Amenity.is_active == True)  # noqa: E712

    result = await db.execute(query.order_by(Amenity.name))
    return [AmenityResponse.model_validate(a) for a in result.scalars().all()]


@router.get("/{amenity_id}", response_model=AmenityResponse)
async def get_amenity(
    amenity_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    amenity = await _get_amenity(db, amenity_id, current_user.org_id)
    return AmenityResponse.model_validate(amenity)


@router.patch("/{amenity_id}", response_model=AmenityResponse)
async def update_amenity(
    amenity_id: UUID,
    data: AmenityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    amenity = await _get_amenity(db, amenity_id, current_user.org_id)
    apply_updates(amenity, data)

    if (amenity.open_time is None) != (amenity.close_time is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="open_time and close_time must be set together",
        )
    if amenity.open_time and amenity.close_time and amenity.close_time <= amenity.open_time:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="close_time must be after open_time",
        )

    await db.commit()
    await db.refresh(amenity)

    return AmenityResponse.model_validate(amenity)


@router.delete("/{amenity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_amenity(
    amenity_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    amenity = await _get_amenity(db, amenity_id, current_user.org_id)
    amenity.is_active = False
    await db.commit()


# Bookings

@router.post(
    "/{amenity_id}/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    amenity_id: UUID,
    data: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Book an amenity. Overlapping bookings answer 409 with the conflicts."""
    amenity = await _get_amenity(db, amenity_id, current_user.org_id)
    if data.resident_id:
        await get_resident_or_404(db, data.resident_id, current_user.org_id)

    booking = await BookingService(db).create_booking(amenity, data, current_user)
    await db.commit()

    return BookingResponse.model_validate(booking)


@router.get("/{amenity_id}/bookings", response_model=List[BookingResponse])
async def list_bookings(
    amenity_id: UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    include_cancelled: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await _get_amenity(db, amenity_id, current_user.org_id)

    query = select(AmenityBooking).where(AmenityBooking.amenity_id == amenity_id)
    if not include_cancelled:
        query = query.where(AmenityBooking.status != BookingStatus.CANCELLED)
    if start:
        query = query.where(AmenityBooking.end_time > to_naive_utc(start))
    if end:
        query = query.where(AmenityBooking.start_time < to_naive_utc(end))

    result = await db.execute(query.order_by(AmenityBooking.start_time))
    return [BookingResponse.model_validate(b) for b in result.scalars().all()]


@router.post("/{amenity_id}/conflict-check", response_model=ConflictCheckResponse)
async def check_conflicts(
    amenity_id: UUID,
    window: BookingWindow,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """List non-cancelled bookings overlapping a window."""
    amenity = await _get_amenity(db, amenity_id, current_user.org_id)
    conflicts = await BookingService(db).find_conflicts(amenity.id, window.start_time, window.end_time)

    return ConflictCheckResponse(
        has_conflict=bool(conflicts),
        conflicts=[BookingResponse.model_validate(b) for b in conflicts],
    )


@router.post("/bookings/{booking_id}/approve", response_model=BookingResponse)
async def approve_booking(
    booking_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    booking = await _get_booking(db, booking_id, current_user.org_id)
    await BookingService(db).approve(booking)
    await db.commit()
    await db.refresh(booking)

    return BookingResponse.model_validate(booking)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    booking = await _get_booking(db, booking_id, current_user.org_id)
    await BookingService(db).cancel(booking)
    await db.commit()
    await db.refresh(booking)

    return BookingResponse.model_validate(booking)
