"""Workflows router - association checklists and reusable templates."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_member, AuthenticatedUser
from hoa_portal.models.enums import WorkflowStatus
from hoa_portal.models.workflow import Workflow
from hoa_portal.routers.common import apply_updates, get_association_or_404
from hoa_portal.schemas.workflow import (
    WorkflowCreate,
    WorkflowUpdate,
    WorkflowStatusUpdate,
    WorkflowInstantiate,
    WorkflowResponse,
)

router = APIRouter(prefix="/workflows", tags=["workflows"])

# Archiving is allowed from every state.
WORKFLOW_TRANSITIONS = {
    WorkflowStatus.DRAFT: {WorkflowStatus.ACTIVE},
    WorkflowStatus.ACTIVE: {WorkflowStatus.PAUSED, WorkflowStatus.COMPLETED},
    WorkflowStatus.PAUSED: {WorkflowStatus.ACTIVE, WorkflowStatus.COMPLETED},
    WorkflowStatus.COMPLETED: set(),
    WorkflowStatus.ARCHIVED: set(),
}


def can_transition(current: WorkflowStatus, new: WorkflowStatus) -> bool:
    if new == WorkflowStatus.ARCHIVED:
        return current != WorkflowStatus.ARCHIVED
    return new in WORKFLOW_TRANSITIONS[current]


async def _get_workflow(db: AsyncSession, workflow_id: UUID, org_id: UUID) -> Workflow:
    result = await db.execute(
        select(Workflow).where(Workflow.id == workflow_id, Workflow.org_id == org_id)
    )
    workflow = result.scalar_one_or_none()
    if not workflow:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workflow not found")
    return workflow


@router.post("", response_model=WorkflowResponse, status_code=status.HTTP_201_CREATED)
async def create_workflow(
    data: WorkflowCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Create a workflow. Templates carry no association."""
    if data.is_template and data.association_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Templates cannot belong to an association",
        )
    if not data.is_template and not data.association_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="association_id is required for a workflow",
        )
    if data.association_id:
        await get_association_or_404(db, data.association_id, current_user.org_id)

    workflow = Workflow(org_id=current_user.org_id, **data.model_dump())
    db.add(workflow)
    await db.commit()
    await db.refresh(workflow)

    return WorkflowResponse.model_validate(workflow)


@router.get("", response_model=List[WorkflowResponse])
async def list_workflows(
    association_id: Optional[UUID] = None,
    workflow_status: Optional[WorkflowStatus] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    query = select(Workflow).where(
        Workflow.org_id == current_user.org_id,
        Workflow.is_template == False,  # noqa: E712
    )
    if association_id:
        query = query.where(Workflow.association_id == association_id)
    if workflow_status:
        query = query.where(Workflow.status == workflow_status)

    result = await db.execute(query.order_by(Workflow.created_at.desc()))
    return [WorkflowResponse.model_validate(w) for w in result.scalars().all()]


@router.get("/templates", response_model=List[WorkflowResponse])
async def list_templates(
    workflow_type: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    query = select(Workflow).where(
        Workflow.org_id == current_user.org_id,
        Workflow.is_template == True,  # noqa: E712
    )
    if workflow_type:
        query = query.where(Workflow.workflow_type == workflow_type)

    result = await db.execute(query.order_by(Workflow.name))
    return [WorkflowResponse.model_validate(w) for w in result.scalars().all()]


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    workflow = await _get_workflow(db, workflow_id, current_user.org_id)
    return WorkflowResponse.model_validate(workflow)


@router.patch("/{workflow_id}", response_model=WorkflowResponse)
async def update_workflow(
    workflow_id: UUID,
    data: WorkflowUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    workflow = await _get_workflow(db, workflow_id, current_user.org_id)
    if workflow.status in (WorkflowStatus.COMPLETED, WorkflowStatus.ARCHIVED):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot edit a {workflow.status.value} workflow",
        )
    apply_updates(workflow, data)

    await db.commit()
    await db.refresh(workflow)

    return WorkflowResponse.model_validate(workflow)


@router.post("/{workflow_id}/status", response_model=WorkflowResponse)
async def change_workflow_status(
    workflow_id: UUID,
    data: WorkflowStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    workflow = await _get_workflow(db, workflow_id, current_user.org_id)
    if not can_transition(workflow.status, data.status):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot change workflow from {workflow.status.value} to {data.status.value}",
        )

    workflow.status = data.status
    await db.commit()
    await db.refresh(workflow)

    return WorkflowResponse.model_validate(workflow)


@router.post(
    "/{workflow_id}/instantiate",
    response_model=WorkflowResponse,
    status_code=status.HTTP_201_CREATED,
)
async def instantiate_template(
    workflow_id: UUID,
    data: WorkflowInstantiate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Copy a template into an association as a new draft workflow."""
    template = await _get_workflow(db, workflow_id, current_user.org_id)
    if not template.is_template:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Workflow is not a template")
    await get_association_or_404(db, data.association_id, current_user.org_id)

    workflow = Workflow(
        org_id=current_user.org_id,
        association_id=data.association_id,
        template_id=template.id,
        name=data.name or template.name,
        workflow_type=template.workflow_type,
        description=template.description,
        steps=[dict(step) for step in template.steps],
        is_template=False,
        status=WorkflowStatus.DRAFT,
    )
    db.add(workflow)
    await db.commit()
    await db.refresh(workflow)

    return WorkflowResponse.model_validate(workflow)


@router.delete("/{workflow_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_workflow(
    workflow_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    workflow = await _get_workflow(db, workflow_id, current_user.org_id)
    workflow.status = WorkflowStatus.ARCHIVED
    await db.commit()
