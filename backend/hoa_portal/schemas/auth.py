"""Auth schemas."""

from hoa_portal.schemas.base import BaseSchema


class CurrentUserResponse(BaseSchema):
    """Current authenticated user info."""

    uid: str
    email: str | None = None
    email_verified: bool = False
    db_user_id: str | None = None
    org_id: str | None = None
    org_role: str | None = None
    resident_ids: list[str] = []
