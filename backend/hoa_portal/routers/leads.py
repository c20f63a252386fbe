"""Leads router."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_member, AuthenticatedUser
from hoa_portal.models.enums import LeadStatus
from hoa_portal.models.lead import Lead
from hoa_portal.routers.common import apply_updates
from hoa_portal.schemas.lead import LeadCreate, LeadUpdate, LeadResponse

router = APIRouter(prefix="/leads", tags=["leads"])


async def _get_lead(db: AsyncSession, lead_id: UUID, org_id: UUID) -> Lead:
    result = await db.execute(
        select(Lead).where(Lead.id == lead_id, Lead.org_id == org_id)
    )
    lead = result.scalar_one_or_none()
    if not lead:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")
    return lead


@router.post("", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(
    data: LeadCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    lead = Lead(org_id=current_user.org_id, **data.model_dump())
    db.add(lead)
    await db.commit()
    await db.refresh(lead)

    return LeadResponse.model_validate(lead)


@router.get("", response_model=List[LeadResponse])
async def list_leads(
    lead_status: Optional[LeadStatus] = None,
    source: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """List the organization's leads, newest first."""
    query = select(Lead).where(Lead.org_id == current_user.org_id)
    if lead_status:
        query = query.where(Lead.status == lead_status)
    if source:
        query = query.where(Lead.source == source)

    result = await db.execute(query.order_by(Lead.created_at.desc()))
    return [LeadResponse.model_validate(lead) for lead in result.scalars().all()]


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    lead = await _get_lead(db, lead_id, current_user.org_id)
    return LeadResponse.model_validate(lead)


@router.patch("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: UUID,
    data: LeadUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    lead = await _get_lead(db, lead_id, current_user.org_id)
    apply_updates(lead, data)

    await db.commit()
    await db.refresh(lead)

    return LeadResponse.model_validate(lead)


@router.delete("/{lead_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lead(
    lead_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    lead = await _get_lead(db, lead_id, current_user.org_id)
    await db.delete(lead)
    await db.commit()
