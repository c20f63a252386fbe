"""Firebase JWT verification and role dependencies."""

import logging
from typing import Any, Optional
from uuid import UUID

import firebase_admin
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth, credentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.config import get_settings
from hoa_portal.core.database import get_db

logger = logging.getLogger(__name__)

security = HTTPBearer()

ACCOUNTING_ROLES = {"ORG_OWNER", "ORG_ADMIN", "MANAGER", "ACCOUNTANT"}
ADMIN_ROLES = {"ORG_OWNER", "ORG_ADMIN"}


def init_firebase() -> None:
    """Initialize the Firebase Admin SDK once per process."""
    if firebase_admin._apps:
        return
    settings = get_settings()
    options = {"projectId": settings.firebase_project_id}
    if settings.google_application_credentials:
        cred = credentials.Certificate(settings.google_application_credentials)
        firebase_admin.initialize_app(cred, options)
    else:
        firebase_admin.initialize_app(options=options)
    logger.info(f"[AUTH] Firebase initialized for project {settings.firebase_project_id}")


class AuthenticatedUser:
    """Represents an authenticated user from Firebase JWT."""

    def __init__(
        self,
        uid: str,
        email: Optional[str] = None,
        email_verified: bool = False,
        claims: Optional[dict[str, Any]] = None,
    ):
        self.uid = uid
        self.email = email
        self.email_verified = email_verified
        self.claims = claims or {}
        self.db_user_id: Optional[UUID] = None
        self.org_id: Optional[UUID] = None
        self.org_role: Optional[str] = None


async def verify_firebase_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthenticatedUser:
    """Verify Firebase JWT and return authenticated user.

    Tokens are only verified here, never minted.
    """
    init_firebase()
    token = credentials.credentials

    try:
        decoded_token = auth.verify_id_token(token)
    except auth.ExpiredIdTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except auth.InvalidIdTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except Exception as e:
        logger.warning(f"[AUTH] Token verification failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token verification failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthenticatedUser(
        uid=decoded_token["uid"],
        email=decoded_token.get("email"),
        email_verified=decoded_token.get("email_verified", False),
        claims=decoded_token,
    )


async def get_current_user(
    auth_user: AuthenticatedUser = Depends(verify_firebase_token),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedUser:
    """Get current user with database context (user_id, org_id, org_role)."""
    from hoa_portal.models.user import User
    from hoa_portal.models.org import OrgMembership

    result = await db.execute(
        select(User).where(User.firebase_uid == auth_user.uid)
    )
    user = result.scalar_one_or_none()

    if user:
        auth_user.db_user_id = user.id

        membership_result = await db.execute(
            select(OrgMembership).where(OrgMembership.user_id == user.id)
        )
        membership = membership_result.scalars().first()

        if membership:
            auth_user.org_id = membership.org_id
            auth_user.org_role = membership.role.value

    return auth_user


def require_org_member(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Require user to be a member of an organization."""
    if not current_user.org_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Organization membership required",
        )
    return current_user


def require_org_admin(
    current_user: AuthenticatedUser = Depends(require_org_member),
) -> AuthenticatedUser:
    """Require user to be an org admin or owner."""
    if current_user.org_role not in ADMIN_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


def require_accounting(
    current_user: AuthenticatedUser = Depends(require_org_member),
) -> AuthenticatedUser:
    """Require a role allowed to touch the books."""
    if current_user.org_role not in ACCOUNTING_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Accounting privileges required",
        )
    return current_user


def require_resident(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Require a registered user (homeowner portal)."""
    if not current_user.db_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account required",
        )
    return current_user
