"""Recipient group, selection and message schemas."""

from datetime import datetime
from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import Field

from hoa_portal.schemas.base import BaseSchema, IDMixin, TimestampMixin
from hoa_portal.models.enums import MessageStatus, RecipientGroupType


class RecipientGroupCreate(BaseSchema):
    association_id: UUID
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    criteria: dict[str, Any] = {}


class RecipientGroupUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    criteria: Optional[dict[str, Any]] = None


class RecipientGroupResponse(BaseSchema, IDMixin, TimestampMixin):
    association_id: UUID
    name: str
    description: Optional[str] = None
    group_type: RecipientGroupType
    criteria: dict[str, Any]


class SelectionAction(BaseSchema):
    """One edit to a recipient selection."""

    action: Literal[
        "toggle_group",
        "select_association",
        "select_all",
        "clear",
        "toggle_common_type",
        "remove_group",
    ]
    group_id: Optional[UUID] = None
    association_id: Optional[UUID] = None
    select: bool = True
    common_type: Optional[str] = None


class SelectionRequest(BaseSchema):
    selected_group_ids: list[UUID] = []
    actions: list[SelectionAction] = []
    association_ids: Optional[list[UUID]] = None


class SelectedGroup(BaseSchema):
    id: UUID
    name: str
    association_id: UUID
    association_name: str
    group_type: RecipientGroupType


class CommonGroup(BaseSchema):
    common_type: str
    groups: list[SelectedGroup]
    all_selected: bool


class SelectionResponse(BaseSchema):
    selected_group_ids: list[UUID]
    selected_groups: list[SelectedGroup]
    common_groups: list[CommonGroup]


class Recipient(BaseSchema):
    resident_id: UUID
    name: str
    email: str
    property_id: UUID
    association_id: UUID


class ResolveRequest(BaseSchema):
    group_ids: list[UUID] = Field(..., min_length=1)


class ResolveResponse(BaseSchema):
    count: int
    recipients: list[Recipient]


class MessageCreate(BaseSchema):
    association_id: UUID
    subject: str = Field(..., min_length=1, max_length=500)
    body: str = Field(..., min_length=1)
    group_ids: list[UUID] = Field(..., min_length=1)
    channel: Literal["email"] = "email"


class MessagePreviewRequest(BaseSchema):
    subject: str
    body: str
    resident_id: Optional[UUID] = None
    association_id: UUID


class MessagePreview(BaseSchema):
    subject: str
    body: str
    unknown_tags: list[str]


class MessageResponse(BaseSchema, IDMixin):
    association_id: UUID
    subject: str
    body: str
    channel: str
    group_ids: list[str]
    recipient_count: int
    status: MessageStatus
    created_at: datetime
