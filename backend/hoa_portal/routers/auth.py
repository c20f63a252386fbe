"""Auth router."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import get_current_user, AuthenticatedUser
from hoa_portal.models.association import Resident
from hoa_portal.schemas.auth import CurrentUserResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_info(
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Get current authenticated user info, including linked resident records."""
    resident_ids: list[str] = []
    if current_user.db_user_id:
        result = await db.execute(
            select(Resident.id).where(Resident.user_id == current_user.db_user_id)
        )
        resident_ids = [str(r) for r in result.scalars().all()]

    return CurrentUserResponse(
        uid=current_user.uid,
        email=current_user.email,
        email_verified=current_user.email_verified,
        db_user_id=str(current_user.db_user_id) if current_user.db_user_id else None,
        org_id=str(current_user.org_id) if current_user.org_id else None,
        org_role=current_user.org_role,
        resident_ids=resident_ids,
    )
