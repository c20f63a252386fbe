"""Organization schemas."""

from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from hoa_portal.schemas.base import BaseSchema, IDMixin, TimestampMixin
from hoa_portal.models.enums import OrgRole


class OrgCreate(BaseSchema):
    """Create a new management organization."""

    name: str = Field(..., min_length=2, max_length=255)
    slug: str = Field(..., min_length=2, max_length=100, pattern=r"^[a-z0-9-]+$")
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    timezone: str = "America/New_York"


class OrgUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    timezone: Optional[str] = None


class OrgResponse(BaseSchema, IDMixin, TimestampMixin):
    """Organization response."""

    name: str
    slug: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    timezone: str


class OrgWithMembership(OrgResponse):
    """Org response with current user's membership."""

    current_user_role: OrgRole


class OrgMemberResponse(BaseSchema):
    """Member in organization list."""

    id: UUID
    user_id: UUID
    email: str
    name: Optional[str] = None
    role: OrgRole
    joined_at: str


class OrgMemberAdd(BaseSchema):
    """Add an existing user to the organization."""

    email: EmailStr
    role: OrgRole = OrgRole.STAFF


class OrgMemberRoleUpdate(BaseSchema):
    role: OrgRole
