"""Properties router - property detail and residents."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_member, AuthenticatedUser
from hoa_portal.models.association import Resident
from hoa_portal.models.user import User
from hoa_portal.routers.common import (
    apply_updates,
    get_property_or_404,
    get_resident_or_404,
)
from hoa_portal.schemas.association import (
    PropertyUpdate,
    PropertyResponse,
    ResidentCreate,
    ResidentUpdate,
    ResidentResponse,
)

router = APIRouter(prefix="/properties", tags=["properties"])


async def _check_user(db: AsyncSession, user_id) -> None:
    if user_id and not await db.get(User, user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Linked user not found")


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    prop = await get_property_or_404(db, property_id, current_user.org_id)
    return PropertyResponse.model_validate(prop)


@router.patch("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: UUID,
    data: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    prop = await get_property_or_404(db, property_id, current_user.org_id)
    apply_updates(prop, data)

    await db.commit()
    await db.refresh(prop)

    return PropertyResponse.model_validate(prop)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_property(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Archive a property (soft delete)."""
    prop = await get_property_or_404(db, property_id, current_user.org_id)
    prop.is_archived = True
    await db.commit()


@router.post(
    "/{property_id}/residents",
    response_model=ResidentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_resident(
    property_id: UUID,
    data: ResidentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    prop = await get_property_or_404(db, property_id, current_user.org_id)
    await _check_user(db, data.user_id)

    resident = Resident(property_id=prop.id, **data.model_dump())
    db.add(resident)
    await db.commit()
    await db.refresh(resident)

    return ResidentResponse.model_validate(resident)


@router.get("/{property_id}/residents", response_model=List[ResidentResponse])
async def list_residents(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_property_or_404(db, property_id, current_user.org_id)

    result = await db.execute(
        select(Resident)
        .where(Resident.property_id == property_id)
        .order_by(Resident.is_primary.desc(), Resident.last_name, Resident.first_name)
    )
    return [ResidentResponse.model_validate(r) for r in result.scalars().all()]


@router.get("/residents/{resident_id}", response_model=ResidentResponse)
async def get_resident(
    resident_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    resident = await get_resident_or_404(db, resident_id, current_user.org_id)
    return ResidentResponse.model_validate(resident)


@router.patch("/residents/{resident_id}", response_model=ResidentResponse)
async def update_resident(
    resident_id: UUID,
    data: ResidentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    resident = await get_resident_or_404(db, resident_id, current_user.org_id)
    await _check_user(db, data.user_id)
    apply_updates(resident, data)

    if resident.move_in_date and resident.move_out_date and resident.move_out_date < resident.move_in_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="move_out_date must be on or after move_in_date",
        )

    await db.commit()
    await db.refresh(resident)

    return ResidentResponse.model_validate(resident)


@router.delete("/residents/{resident_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resident(
    resident_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    resident = await get_resident_or_404(db, resident_id, current_user.org_id)
    await db.delete(resident)
    await db.commit()
