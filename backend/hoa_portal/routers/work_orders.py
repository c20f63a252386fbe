"""Work orders router."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_member, AuthenticatedUser
from hoa_portal.models.association import Association
from hoa_portal.models.enums import AuditAction, WorkOrderPriority, WorkOrderStatus
from hoa_portal.models.vendor import WorkOrder
from hoa_portal.routers.common import (
    apply_updates,
    get_association_or_404,
    get_property_or_404,
    get_vendor_or_404,
)
from hoa_portal.schemas.vendor import (
    WorkOrderCreate,
    WorkOrderUpdate,
    WorkOrderAssign,
    WorkOrderStatusUpdate,
    WorkOrderResponse,
)
from hoa_portal.services.audit import AuditService

router = APIRouter(prefix="/work-orders", tags=["work-orders"])

# Cancelling is allowed from every state that has not finished.
WORK_ORDER_TRANSITIONS = {
    WorkOrderStatus.OPEN: {WorkOrderStatus.ASSIGNED, WorkOrderStatus.CANCELLED},
    WorkOrderStatus.ASSIGNED: {WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.CANCELLED},
    WorkOrderStatus.IN_PROGRESS: {WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED},
    WorkOrderStatus.COMPLETED: set(),
    WorkOrderStatus.CANCELLED: set(),
}

CLOSED_STATUSES = {WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED}


async def _get_work_order(db: AsyncSession, work_order_id: UUID, org_id: UUID) -> WorkOrder:
    result = await db.execute(
        select(WorkOrder)
        .join(Association, WorkOrder.association_id == Association.id)
        .where(WorkOrder.id == work_order_id, Association.org_id == org_id)
    )
    work_order = result.scalar_one_or_none()
    if not work_order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Work order not found")
    return work_order


@router.post("", response_model=WorkOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_work_order(
    data: WorkOrderCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Create a work order. Giving a vendor up front creates it assigned."""
    await get_association_or_404(db, data.association_id, current_user.org_id)
    if data.property_id:
        prop = await get_property_or_404(db, data.property_id, current_user.org_id)
        if prop.association_id != data.association_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Property does not belong to this association",
            )
    if data.vendor_id:
        await get_vendor_or_404(db, data.vendor_id, current_user.org_id)

    work_order = WorkOrder(
        **data.model_dump(),
        status=WorkOrderStatus.ASSIGNED if data.vendor_id else WorkOrderStatus.OPEN,
    )
    db.add(work_order)
    await db.commit()
    await db.refresh(work_order)

    return WorkOrderResponse.model_validate(work_order)


@router.get("", response_model=List[WorkOrderResponse])
async def list_work_orders(
    association_id: Optional[UUID] = None,
    vendor_id: Optional[UUID] = None,
    work_order_status: Optional[WorkOrderStatus] = None,
    priority: Optional[WorkOrderPriority] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    query = (
        select(WorkOrder)
        .join(Association, WorkOrder.association_id == Association.id)
        .where(Association.org_id == current_user.org_id)
    )
    if association_id:
        query = query.where(WorkOrder.association_id == association_id)
    if vendor_id:
        query = query.where(WorkOrder.vendor_id == vendor_id)
    if work_order_status:
        query = query.where(WorkOrder.status == work_order_status)
    if priority:
        query = query.where(WorkOrder.priority == priority)

    result = await db.execute(query.order_by(WorkOrder.created_at.desc()))
    return [WorkOrderResponse.model_validate(w) for w in result.scalars().all()]


@router.get("/{work_order_id}", response_model=WorkOrderResponse)
async def get_work_order(
    work_order_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    work_order = await _get_work_order(db, work_order_id, current_user.org_id)
    return WorkOrderResponse.model_validate(work_order)


@router.patch("/{work_order_id}", response_model=WorkOrderResponse)
async def update_work_order(
    work_order_id: UUID,
    data: WorkOrderUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    work_order = await _get_work_order(db, work_order_id, current_user.org_id)
    if work_order.status in CLOSED_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot edit a {work_order.status.value} work order",
        )
    apply_updates(work_order, data)

    await db.commit()
    await db.refresh(work_order)

    return WorkOrderResponse.model_validate(work_order)


@router.post("/{work_order_id}/assign", response_model=WorkOrderResponse)
async def assign_vendor(
    work_order_id: UUID,
    data: WorkOrderAssign,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Assign (or reassign) a vendor. An open work order becomes assigned."""
    work_order = await _get_work_order(db, work_order_id, current_user.org_id)
    if work_order.status in CLOSED_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot assign a {work_order.status.value} work order",
        )
    vendor = await get_vendor_or_404(db, data.vendor_id, current_user.org_id)
    if not vendor.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Vendor is inactive")

    work_order.vendor_id = vendor.id
    if work_order.status == WorkOrderStatus.OPEN:
        work_order.status = WorkOrderStatus.ASSIGNED

    await AuditService(db).log_for_user(
        current_user,
        AuditAction.VENDOR_ASSIGNED,
        "work_order",
        work_order.id,
        details={"vendor_id": str(vendor.id)},
    )
    await db.commit()
    await db.refresh(work_order)

    return WorkOrderResponse.model_validate(work_order)


@router.post("/{work_order_id}/status", response_model=WorkOrderResponse)
async def update_work_order_status(
    work_order_id: UUID,
    data: WorkOrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    work_order = await _get_work_order(db, work_order_id, current_user.org_id)

    if data.status not in WORK_ORDER_TRANSITIONS[work_order.status]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot change work order from {work_order.status.value} to {data.status.value}",
        )
    if data.status == WorkOrderStatus.ASSIGNED and not work_order.vendor_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Assign a vendor before marking the work order assigned",
        )

    work_order.status = data.status
    if data.actual_cost_cents is not None:
        work_order.actual_cost_cents = data.actual_cost_cents
    if data.status == WorkOrderStatus.COMPLETED:
        work_order.completed_at = datetime.utcnow()

    await db.commit()
    await db.refresh(work_order)

    return WorkOrderResponse.model_validate(work_order)
