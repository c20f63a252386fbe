"""Community poll schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from hoa_portal.schemas.base import BaseSchema, IDMixin, TimestampMixin, to_naive_utc


class PollCreate(BaseSchema):
    """Create a poll. Every option must be non-empty and there must be at least two."""

    association_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    options: list[str]
    closes_at: Optional[datetime] = None

    @field_validator("options")
    @classmethod
    def validate_options(cls, options: list[str]) -> list[str]:
        cleaned = [option.strip() for option in options]
        if any(not option for option in cleaned):
            raise ValueError("Poll options cannot be empty")
        if len(cleaned) < 2:
            raise ValueError("A poll needs at least two options")
        if len(set(o.lower() for o in cleaned)) != len(cleaned):
            raise ValueError("Poll options must be unique")
        return cleaned

    @field_validator("closes_at")
    @classmethod
    def validate_closes_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        value = to_naive_utc(value)
        if value is not None and value <= datetime.utcnow():
            raise ValueError("closes_at must be in the future")
        return value


class PollResponseOut(BaseSchema, IDMixin, TimestampMixin):
    association_id: UUID
    title: str
    description: Optional[str] = None
    options: list[str]
    closes_at: Optional[datetime] = None
    is_closed: bool
    created_by: UUID


class VoteRequest(BaseSchema):
    selected_option: str = Field(..., min_length=1)


class VoteResponse(BaseSchema):
    poll_id: UUID
    selected_option: str
    changed: bool


class OptionResult(BaseSchema):
    option: str
    votes: int
    percentage: float


class PollResults(BaseSchema):
    poll_id: UUID
    total_votes: int
    results: list[OptionResult]
    user_vote: Optional[str] = None
    is_open: bool
