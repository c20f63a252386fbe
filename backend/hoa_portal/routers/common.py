"""Org-scoped lookups shared by the routers.

Association-scoped records are always reached through an association owned
by the caller's organization; a record in another organization is reported
as not found.
"""

from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.models.association import Association, Property, Resident
from hoa_portal.models.vendor import Vendor


async def get_association_or_404(
    db: AsyncSession,
    association_id: UUID,
    org_id: UUID,
) -> Association:
    result = await db.execute(
        select(Association).where(
            Association.id == association_id,
            Association.org_id == org_id,
        )
    )
    association = result.scalar_one_or_none()
    if not association:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Association not found")
    return association


async def get_property_or_404(db: AsyncSession, property_id: UUID, org_id: UUID) -> Property:
    result = await db.execute(
        select(Property)
        .join(Association, Property.association_id == Association.id)
        .where(Property.id == property_id, Association.org_id == org_id)
    )
    prop = result.scalar_one_or_none()
    if not prop:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    return prop


async def get_resident_or_404(db: AsyncSession, resident_id: UUID, org_id: UUID) -> Resident:
    result = await db.execute(
        select(Resident)
        .join(Property, Resident.property_id == Property.id)
        .join(Association, Property.association_id == Association.id)
        .where(Resident.id == resident_id, Association.org_id == org_id)
    )
    resident = result.scalar_one_or_none()
    if not resident:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resident not found")
    return resident


async def get_vendor_or_404(db: AsyncSession, vendor_id: UUID, org_id: UUID) -> Vendor:
    result = await db.execute(
        select(Vendor).where(Vendor.id == vendor_id, Vendor.org_id == org_id)
    )
    vendor = result.scalar_one_or_none()
    if not vendor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor not found")
    return vendor


def apply_updates(obj, data) -> None:
    """Copy the fields a PATCH body actually set onto an ORM object."""
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(obj, field, value)
