"""Workflow schemas."""

from typing import Any, Optional
from uuid import UUID

from pydantic import Field, field_validator

from hoa_portal.schemas.base import BaseSchema, IDMixin, TimestampMixin
from hoa_portal.models.enums import WorkflowStatus


def _check_steps(steps: list[dict[str, Any]]) -> list[dict[str, Any]]:
    for index, step in enumerate(steps):
        name = step.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Step {index + 1} needs a name")
    return steps


class WorkflowCreate(BaseSchema):
    association_id: Optional[UUID] = None
    name: str = Field(..., min_length=2, max_length=255)
    workflow_type: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None
    steps: list[dict[str, Any]] = []
    is_template: bool = False

    @field_validator("steps")
    @classmethod
    def validate_steps(cls, steps: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return _check_steps(steps)


class WorkflowUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    steps: Optional[list[dict[str, Any]]] = None

    @field_validator("steps")
    @classmethod
    def validate_steps(cls, steps: Optional[list[dict[str, Any]]]) -> Optional[list[dict[str, Any]]]:
        return _check_steps(steps) if steps is not None else steps


class WorkflowStatusUpdate(BaseSchema):
    status: WorkflowStatus


class WorkflowInstantiate(BaseSchema):
    association_id: UUID
    name: Optional[str] = Field(None, min_length=2, max_length=255)


class WorkflowResponse(BaseSchema, IDMixin, TimestampMixin):
    org_id: UUID
    association_id: Optional[UUID] = None
    template_id: Optional[UUID] = None
    name: str
    workflow_type: str
    description: Optional[str] = None
    steps: list[dict[str, Any]]
    is_template: bool
    status: WorkflowStatus
