"""Compliance router - covenant violations recorded against properties."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_member, AuthenticatedUser
from hoa_portal.models.association import Association
from hoa_portal.models.compliance import ComplianceIssue
from hoa_portal.models.enums import ComplianceStatus
from hoa_portal.routers.common import (
    apply_updates,
    get_association_or_404,
    get_property_or_404,
    get_resident_or_404,
)
from hoa_portal.schemas.compliance import (
    ComplianceIssueCreate,
    ComplianceIssueUpdate,
    ComplianceStatusUpdate,
    ComplianceIssueResponse,
)
from hoa_portal.services.audit import AuditService
from hoa_portal.services.compliance import transition_issue

router = APIRouter(prefix="/compliance", tags=["compliance"])


async def _get_issue(db: AsyncSession, issue_id: UUID, org_id: UUID) -> ComplianceIssue:
    result = await db.execute(
        select(ComplianceIssue)
        .join(Association, ComplianceIssue.association_id == Association.id)
        .where(ComplianceIssue.id == issue_id, Association.org_id == org_id)
    )
    issue = result.scalar_one_or_none()
    if not issue:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Compliance issue not found")
    return issue


@router.post("/issues", response_model=ComplianceIssueResponse, status_code=status.HTTP_201_CREATED)
async def create_issue(
    data: ComplianceIssueCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Record a violation. The association is taken from the property."""
    prop = await get_property_or_404(db, data.property_id, current_user.org_id)
    if data.resident_id:
        resident = await get_resident_or_404(db, data.resident_id, current_user.org_id)
        if resident.property_id != prop.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Resident does not live at this property",
            )

    issue = ComplianceIssue(association_id=prop.association_id, **data.model_dump())
    db.add(issue)
    await db.commit()
    await db.refresh(issue)

    return ComplianceIssueResponse.model_validate(issue)


@router.get("/issues", response_model=List[ComplianceIssueResponse])
async def list_issues(
    association_id: UUID,
    property_id: Optional[UUID] = None,
    issue_status: Optional[ComplianceStatus] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_association_or_404(db, association_id, current_user.org_id)

    query = select(ComplianceIssue).where(ComplianceIssue.association_id == association_id)
    if property_id:
        query = query.where(ComplianceIssue.property_id == property_id)
    if issue_status:
        query = query.where(ComplianceIssue.status == issue_status)

    result = await db.execute(query.order_by(ComplianceIssue.created_at.desc()))
    return [ComplianceIssueResponse.model_validate(i) for i in result.scalars().all()]


@router.get("/issues/{issue_id}", response_model=ComplianceIssueResponse)
async def get_issue(
    issue_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    issue = await _get_issue(db, issue_id, current_user.org_id)
    return ComplianceIssueResponse.model_validate(issue)


@router.patch("/issues/{issue_id}", response_model=ComplianceIssueResponse)
async def update_issue(
    issue_id: UUID,
    data: ComplianceIssueUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    issue = await _get_issue(db, issue_id, current_user.org_id)
    if issue.status == ComplianceStatus.RESOLVED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Resolved issues cannot be edited",
        )
    apply_updates(issue, data)

    await db.commit()
    await db.refresh(issue)

    return ComplianceIssueResponse.model_validate(issue)


@router.post("/issues/{issue_id}/status", response_model=ComplianceIssueResponse)
async def change_issue_status(
    issue_id: UUID,
    data: ComplianceStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Move an issue through open, in_progress, escalated and resolved."""
    issue = await _get_issue(db, issue_id, current_user.org_id)
    old_status = transition_issue(issue, data.status, data.notes)

    await AuditService(db).log_compliance_status_changed(
        current_user, issue.id, old_status.value, data.status.value
    )
    await db.commit()
    await db.refresh(issue)

    return ComplianceIssueResponse.model_validate(issue)
