"""Communications router - recipient groups, selection, previews and messages."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_member, AuthenticatedUser
from hoa_portal.models.association import Association, Property
from hoa_portal.models.communication import Message, RecipientGroup
from hoa_portal.models.enums import RecipientGroupType
from hoa_portal.routers.common import apply_updates, get_association_or_404, get_resident_or_404
from hoa_portal.schemas.communication import (
    MessageCreate,
    MessagePreview,
    MessagePreviewRequest,
    MessageResponse,
    RecipientGroupCreate,
    RecipientGroupResponse,
    RecipientGroupUpdate,
    ResolveRequest,
    ResolveResponse,
    SelectionRequest,
    SelectionResponse,
)
from hoa_portal.services.messaging import MessageService
from hoa_portal.services.recipients import RecipientService

router = APIRouter(prefix="/communications", tags=["communications"])


async def _get_group(db: AsyncSession, group_id: UUID, org_id: UUID) -> RecipientGroup:
    result = await db.execute(
        select(RecipientGroup)
        .join(Association, RecipientGroup.association_id == Association.id)
        .where(RecipientGroup.id == group_id, Association.org_id == org_id)
    )
    group = result.scalar_one_or_none()
    if not group:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipient group not found")
    return group


# Recipient groups

@router.post("/groups", response_model=RecipientGroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    data: RecipientGroupCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_association_or_404(db, data.association_id, current_user.org_id)

    group = RecipientGroup(**data.model_dump(), group_type=RecipientGroupType.CUSTOM)
    db.add(group)
    await db.commit()
    await db.refresh(group)

    return RecipientGroupResponse.model_validate(group)


@router.get("/groups", response_model=List[RecipientGroupResponse])
async def list_groups(
    association_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    query = (
        select(RecipientGroup)
        .join(Association, RecipientGroup.association_id == Association.id)
        .where(Association.org_id == current_user.org_id)
    )
    if association_id:
        query = query.where(RecipientGroup.association_id == association_id)

    result = await db.execute(query.order_by(RecipientGroup.group_type, RecipientGroup.name))
    return [RecipientGroupResponse.model_validate(g) for g in result.scalars().all()]


@router.patch("/groups/{group_id}", response_model=RecipientGroupResponse)
async def update_group(
    group_id: UUID,
    data: RecipientGroupUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    group = await _get_group(db, group_id, current_user.org_id)
    if group.group_type == RecipientGroupType.SYSTEM:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="System groups cannot be edited")
    apply_updates(group, data)

    await db.commit()
    await db.refresh(group)

    return RecipientGroupResponse.model_validate(group)


@router.delete("/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(
    group_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    group = await _get_group(db, group_id, current_user.org_id)
    if group.group_type == RecipientGroupType.SYSTEM:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="System groups cannot be deleted")
    await db.delete(group)
    await db.commit()


# Selection and resolution

@router.post("/selection", response_model=SelectionResponse)
async def apply_selection(
    data: SelectionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Apply selection edits in order and return the resulting selection."""
    selection = await RecipientService(db).load_selection(
        current_user.org_id,
        data.selected_group_ids,
        data.association_ids,
    )
    for action in data.actions:
        selection.apply(action)

    return SelectionResponse(
        selected_group_ids=list(selection.selected),
        selected_groups=selection.selected_groups(),
        common_groups=selection.common_groups(),
    )


@router.post("/resolve", response_model=ResolveResponse)
async def resolve_recipients(
    data: ResolveRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    resolved = await RecipientService(db).resolve(data.group_ids, current_user.org_id)
    recipients = [recipient for recipient, _, _ in resolved]
    return ResolveResponse(count=len(recipients), recipients=recipients)


# Messages

@router.post("/preview", response_model=MessagePreview)
async def preview_message(
    data: MessagePreviewRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Render merge tags, optionally for one resident."""
    association = await get_association_or_404(db, data.association_id, current_user.org_id)

    resident = prop = None
    if data.resident_id:
        resident = await get_resident_or_404(db, data.resident_id, current_user.org_id)
        prop = await db.get(Property, resident.property_id)

    return await MessageService(db).preview(association, data.subject, data.body, resident, prop)


@router.post("/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    data: MessageCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Queue a message to every resident of the selected groups."""
    association = await get_association_or_404(db, data.association_id, current_user.org_id)

    message = await MessageService(db).send(association, data, current_user)
    await db.commit()

    return MessageResponse.model_validate(message)


@router.get("/messages", response_model=List[MessageResponse])
async def list_messages(
    association_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_association_or_404(db, association_id, current_user.org_id)

    result = await db.execute(
        select(Message)
        .where(Message.association_id == association_id)
        .order_by(Message.created_at.desc())
    )
    return [MessageResponse.model_validate(m) for m in result.scalars().all()]
