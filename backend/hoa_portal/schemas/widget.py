"""Portal widget schemas."""

from typing import Any, Optional

from pydantic import Field, field_validator

from hoa_portal.schemas.base import BaseSchema


class WidgetState(BaseSchema):
    """Effective state of one widget after merging stored rows over the registry."""

    widget_type: str
    title: str
    description: str
    category: str
    is_enabled: bool
    position: int
    settings: dict[str, Any]
    is_default: bool


class WidgetUpdate(BaseSchema):
    is_enabled: Optional[bool] = None
    settings: Optional[dict[str, Any]] = None


class WidgetReorder(BaseSchema):
    widget_types: list[str] = Field(..., min_length=1)

    @field_validator("widget_types")
    @classmethod
    def unique(cls, widget_types: list[str]) -> list[str]:
        if len(set(widget_types)) != len(widget_types):
            raise ValueError("widget_types must not repeat")
        return widget_types
