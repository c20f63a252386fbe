"""Community polls router.

Board members and staff create and close polls; any member of the managing
organization or resident of the association can vote and see results.
"""

from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import (
    get_current_user,
    require_org_member,
    require_resident,
    AuthenticatedUser,
)
from hoa_portal.models.association import Association, Property, Resident
from hoa_portal.models.enums import AuditAction
from hoa_portal.models.poll import CommunityPoll
from hoa_portal.routers.common import get_association_or_404
from hoa_portal.schemas.poll import (
    PollCreate,
    PollResponseOut,
    PollResults,
    VoteRequest,
    VoteResponse,
)
from hoa_portal.services.audit import AuditService
from hoa_portal.services.polls import PollService

router = APIRouter(prefix="/polls", tags=["polls"])


async def _is_resident_of(db: AsyncSession, user_id: UUID, association_id: UUID) -> bool:
    result = await db.execute(
        select(Resident.id)
        .join(Property, Resident.property_id == Property.id)
        .where(
            Resident.user_id == user_id,
            Property.association_id == association_id,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def _get_poll(db: AsyncSession, poll_id: UUID, current_user: AuthenticatedUser) -> CommunityPoll:
    """Load a poll visible to the caller as org member or resident."""
    result = await db.execute(
        select(CommunityPoll, Association.org_id)
        .join(Association, CommunityPoll.association_id == Association.id)
        .where(CommunityPoll.id == poll_id)
    )
    row = result.first()
    if row:
        poll, org_id = row
        if current_user.org_id == org_id:
            return poll
        if current_user.db_user_id and await _is_resident_of(db, current_user.db_user_id, poll.association_id):
            return poll
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Poll not found")


@router.post("", response_model=PollResponseOut, status_code=status.HTTP_201_CREATED)
async def create_poll(
    data: PollCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_association_or_404(db, data.association_id, current_user.org_id)
    if not current_user.db_user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account required")

    poll = CommunityPoll(
        association_id=data.association_id,
        title=data.title,
        description=data.description,
        options=data.options,
        closes_at=data.closes_at,
        created_by=current_user.db_user_id,
    )
    db.add(poll)
    await db.commit()
    await db.refresh(poll)

    return PollResponseOut.model_validate(poll)


@router.get("", response_model=List[PollResponseOut])
async def list_polls(
    association_id: UUID,
    open_only: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Polls of an association, newest first."""
    association = await db.get(Association, association_id)
    allowed = association is not None and (
        current_user.org_id == association.org_id
        or (
            current_user.db_user_id is not None
            and await _is_resident_of(db, current_user.db_user_id, association_id)
        )
    )
    if not allowed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Association not found")

    result = await db.execute(
        select(CommunityPoll)
        .where(CommunityPoll.association_id == association_id)
        .order_by(CommunityPoll.created_at.desc())
    )
    polls = result.scalars().all()
    if open_only:
        now = datetime.utcnow()
        polls = [p for p in polls if p.is_open(now)]
    return [PollResponseOut.model_validate(p) for p in polls]


@router.get("/{poll_id}", response_model=PollResponseOut)
async def get_poll(
    poll_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    poll = await _get_poll(db, poll_id, current_user)
    return PollResponseOut.model_validate(poll)


@router.post("/{poll_id}/vote", response_model=VoteResponse)
async def vote(
    poll_id: UUID,
    data: VoteRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_resident),
):
    """Cast a vote. Voting again replaces the earlier choice."""
    poll = await _get_poll(db, poll_id, current_user)
    response = await PollService(db).vote(poll, current_user.db_user_id, data.selected_option)
    await db.commit()

    return response


@router.get("/{poll_id}/results", response_model=PollResults)
async def poll_results(
    poll_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    poll = await _get_poll(db, poll_id, current_user)
    return await PollService(db).results(poll, current_user.db_user_id)


@router.post("/{poll_id}/close", response_model=PollResponseOut)
async def close_poll(
    poll_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    poll = await _get_poll(db, poll_id, current_user)
    await get_association_or_404(db, poll.association_id, current_user.org_id)
    if poll.is_closed:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Poll is already closed")

    poll.is_closed = True
    await AuditService(db).log_for_user(
        current_user,
        AuditAction.POLL_CLOSED,
        "community_poll",
        poll.id,
    )
    await db.commit()
    await db.refresh(poll)

    return PollResponseOut.model_validate(poll)
