"""Portal widgets router - per-user and per-association dashboard layouts."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_member, require_resident, AuthenticatedUser
from hoa_portal.routers.common import get_association_or_404
from hoa_portal.schemas.widget import WidgetReorder, WidgetState, WidgetUpdate
from hoa_portal.services.widgets import WidgetService

router = APIRouter(prefix="/widgets", tags=["widgets"])


# Current user

@router.get("/me", response_model=List[WidgetState])
async def list_my_widgets(
    audience: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_resident),
):
    """Effective widget list: registry defaults merged with stored settings."""
    return await WidgetService(db, user_id=current_user.db_user_id).list_widgets(audience)


@router.post("/me/{widget_type}/toggle", response_model=List[WidgetState])
async def toggle_my_widget(
    widget_type: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_resident),
):
    return await WidgetService(db, user_id=current_user.db_user_id).toggle(widget_type)


@router.patch("/me/{widget_type}", response_model=List[WidgetState])
async def update_my_widget(
    widget_type: str,
    data: WidgetUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_resident),
):
    return await WidgetService(db, user_id=current_user.db_user_id).update(widget_type, data)


@router.put("/me/order", response_model=List[WidgetState])
async def reorder_my_widgets(
    data: WidgetReorder,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_resident),
):
    return await WidgetService(db, user_id=current_user.db_user_id).reorder(data.widget_types)


# Association defaults

@router.get("/associations/{association_id}", response_model=List[WidgetState])
async def list_association_widgets(
    association_id: UUID,
    audience: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_association_or_404(db, association_id, current_user.org_id)
    return await WidgetService(db, association_id=association_id).list_widgets(audience)


@router.post("/associations/{association_id}/{widget_type}/toggle", response_model=List[WidgetState])
async def toggle_association_widget(
    association_id: UUID,
    widget_type: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_association_or_404(db, association_id, current_user.org_id)
    return await WidgetService(db, association_id=association_id).toggle(widget_type)


@router.patch("/associations/{association_id}/{widget_type}", response_model=List[WidgetState])
async def update_association_widget(
    association_id: UUID,
    widget_type: str,
    data: WidgetUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_association_or_404(db, association_id, current_user.org_id)
    return await WidgetService(db, association_id=association_id).update(widget_type, data)


@router.put("/associations/{association_id}/order", response_model=List[WidgetState])
async def reorder_association_widgets(
    association_id: UUID,
    data: WidgetReorder,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_association_or_404(db, association_id, current_user.org_id)
    return await WidgetService(db, association_id=association_id).reorder(data.widget_types)
