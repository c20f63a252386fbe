"""Organization router."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import (
    get_current_user,
    require_org_admin,
    require_org_member,
    AuthenticatedUser,
)
from hoa_portal.models.user import User
from hoa_portal.models.org import Organization, OrgMembership
from hoa_portal.models.enums import OrgRole
from hoa_portal.routers.common import apply_updates
from hoa_portal.schemas.org import (
    OrgCreate, OrgUpdate, OrgResponse, OrgWithMembership,
    OrgMemberResponse, OrgMemberAdd, OrgMemberRoleUpdate,
)

router = APIRouter(prefix="/orgs", tags=["organizations"])


def _member_response(membership: OrgMembership, user: User) -> OrgMemberResponse:
    return OrgMemberResponse(
        id=membership.id,
        user_id=user.id,
        email=user.email,
        name=user.full_name,
        role=membership.role,
        joined_at=membership.created_at.isoformat(),
    )


@router.post("", response_model=OrgResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    data: OrgCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Create a new organization. Creator becomes ORG_OWNER."""
    result = await db.execute(
        select(Organization).where(Organization.slug == data.slug)
    )
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Organization slug already exists",
        )

    # Ensure user exists in DB
    user_result = await db.execute(
        select(User).where(User.firebase_uid == current_user.uid)
    )
    user = user_result.scalar_one_or_none()

    if not user:
        user = User(
            firebase_uid=current_user.uid,
            email=current_user.email or "",
            full_name=current_user.claims.get("name"),
        )
        db.add(user)
        await db.flush()

    membership_result = await db.execute(
        select(OrgMembership).where(OrgMembership.user_id == user.id)
    )
    if membership_result.scalars().first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already belongs to an organization",
        )

    org = Organization(
        name=data.name,
        slug=data.slug,
        email=data.email,
        phone=data.phone,
        address=data.address,
        timezone=data.timezone,
    )
    db.add(org)
    await db.flush()

    db.add(OrgMembership(org_id=org.id, user_id=user.id, role=OrgRole.ORG_OWNER))

    await db.commit()
    await db.refresh(org)

    return OrgResponse.model_validate(org)


@router.get("/me", response_model=OrgWithMembership)
async def get_my_organization(
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Get current user's organization context."""
    org = await db.get(Organization, current_user.org_id)
    if not org:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found",
        )

    return OrgWithMembership(
        id=org.id,
        name=org.name,
        slug=org.slug,
        email=org.email,
        phone=org.phone,
        address=org.address,
        timezone=org.timezone,
        created_at=org.created_at,
        updated_at=org.updated_at,
        current_user_role=OrgRole(current_user.org_role),
    )


@router.patch("/me", response_model=OrgResponse)
async def update_my_organization(
    data: OrgUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_admin),
):
    """Update current user's organization (admin/owner only)."""
    org = await db.get(Organization, current_user.org_id)
    if not org:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found",
        )

    apply_updates(org, data)
    await db.commit()
    await db.refresh(org)

    return OrgResponse.model_validate(org)


@router.get("/members", response_model=list[OrgMemberResponse])
async def list_organization_members(
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """List all members of the current user's organization."""
    result = await db.execute(
        select(OrgMembership, User)
        .join(User, OrgMembership.user_id == User.id)
        .where(OrgMembership.org_id == current_user.org_id)
        .order_by(OrgMembership.created_at.desc())
    )
    return [_member_response(membership, user) for membership, user in result.all()]


@router.post("/members", response_model=OrgMemberResponse, status_code=status.HTTP_201_CREATED)
async def add_organization_member(
    data: OrgMemberAdd,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_admin),
):
    """Add a registered user to the organization."""
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    existing = await db.execute(
        select(OrgMembership).where(OrgMembership.user_id == user.id)
    )
    if existing.scalars().first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already belongs to an organization",
        )
    if data.role == OrgRole.ORG_OWNER and current_user.org_role != OrgRole.ORG_OWNER.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can add another owner",
        )

    membership = OrgMembership(org_id=current_user.org_id, user_id=user.id, role=data.role)
    db.add(membership)
    await db.commit()
    await db.refresh(membership)

    return _member_response(membership, user)


@router.patch("/members/{membership_id}", response_model=OrgMemberResponse)
async def update_member_role(
    membership_id: UUID,
    data: OrgMemberRoleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_admin),
):
    result = await db.execute(
        select(OrgMembership, User)
        .join(User, OrgMembership.user_id == User.id)
        .where(
            OrgMembership.id == membership_id,
            OrgMembership.org_id == current_user.org_id,
        )
    )
    row = result.first()
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    membership, user = row

    if membership.user_id == current_user.db_user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot change your own role",
        )

    membership.role = data.role
    await db.commit()

    return _member_response(membership, user)
