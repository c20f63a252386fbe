"""Associations router."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_admin, require_org_member, AuthenticatedUser
from hoa_portal.models.association import Association, Property
from hoa_portal.models.enums import AuditAction, PropertyStatus, PropertyType
from hoa_portal.routers.common import apply_updates, get_association_or_404
from hoa_portal.schemas.association import (
    AssociationCreate,
    AssociationUpdate,
    AssociationResponse,
    PropertyCreate,
    PropertyResponse,
)
from hoa_portal.services.audit import AuditService
from hoa_portal.services.recipients import RecipientService

router = APIRouter(prefix="/associations", tags=["associations"])


@router.post("", response_model=AssociationResponse, status_code=status.HTTP_201_CREATED)
async def create_association(
    data: AssociationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Create an association and its "All Owners" / "All Residents" groups."""
    association = Association(org_id=current_user.org_id, **data.model_dump())
    db.add(association)
    await db.flush()

    await RecipientService(db).seed_system_groups(association.id)
    await AuditService(db).log_for_user(
        current_user,
        AuditAction.ASSOCIATION_CREATED,
        "association",
        association.id,
        details={"name": association.name},
    )

    await db.commit()
    await db.refresh(association)

    return AssociationResponse.model_validate(association)


@router.get("", response_model=List[AssociationResponse])
async def list_associations(
    include_archived: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """List associations for the organization."""
    query = select(Association).where(Association.org_id == current_user.org_id)
    if not include_archived:
        query = query.where(Association.is_archived.is_(False))

    result = await db.execute(query.order_by(Association.name))
    return [AssociationResponse.model_validate(a) for a in result.scalars().all()]


@router.get("/{association_id}", response_model=AssociationResponse)
async def get_association(
    association_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    association = await get_association_or_404(db, association_id, current_user.org_id)
    return AssociationResponse.model_validate(association)


@router.patch("/{association_id}", response_model=AssociationResponse)
async def update_association(
    association_id: UUID,
    data: AssociationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    association = await get_association_or_404(db, association_id, current_user.org_id)
    apply_updates(association, data)

    await db.commit()
    await db.refresh(association)

    return AssociationResponse.model_validate(association)


@router.delete("/{association_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_association(
    association_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_admin),
):
    """Archive an association (soft delete)."""
    association = await get_association_or_404(db, association_id, current_user.org_id)
    association.is_archived = True
    await db.commit()


@router.post(
    "/{association_id}/properties",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_property(
    association_id: UUID,
    data: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Create a property inside an association."""
    association = await get_association_or_404(db, association_id, current_user.org_id)

    prop = Property(association_id=association.id, **data.model_dump())
    db.add(prop)
    await db.commit()
    await db.refresh(prop)

    return PropertyResponse.model_validate(prop)


@router.get("/{association_id}/properties", response_model=List[PropertyResponse])
async def list_properties(
    association_id: UUID,
    property_type: Optional[PropertyType] = None,
    property_status: Optional[PropertyStatus] = None,
    include_archived: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_association_or_404(db, association_id, current_user.org_id)

    query = select(Property).where(Property.association_id == association_id)
    if property_type:
        query = query.where(Property.property_type == property_type)
    if property_status:
        query = query.where(Property.status == property_status)
    if not include_archived:
        query = query.where(Property.is_archived.is_(False))

    result = await db.execute(query.order_by(Property.address, Property.unit_number))
    return [PropertyResponse.model_validate(p) for p in result.scalars().all()]
