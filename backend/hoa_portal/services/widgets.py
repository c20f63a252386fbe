"""Portal widget registry and per-user / per-association widget settings."""

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.errors import ServiceError
from hoa_portal.models.widget import PortalWidget
from hoa_portal.schemas.widget import WidgetState, WidgetUpdate


@dataclass(frozen=True)
class WidgetDefinition:
    widget_type: str
    title: str
    description: str
    audiences: tuple[str, ...]
    default_enabled: bool = True

    @property
    def category(self) -> str:
        return self.audiences[0]


_DEFINITIONS = (
    WidgetDefinition("payments", "Payments", "View and manage your payments", ("homeowner", "board")),
    WidgetDefinition("requests", "Requests", "View and submit homeowner requests", ("homeowner", "board")),
    WidgetDefinition("financial-chart", "Financial Chart", "Financial trends for the association", ("board",)),
    WidgetDefinition("delinquent-accounts", "Delinquent Accounts", "Track overdue accounts and payments", ("board",)),
    WidgetDefinition("amenity-bookings", "Amenity Bookings", "Book and manage community amenities", ("homeowner",)),
    WidgetDefinition("upcoming-bids", "Upcoming Bids", "Upcoming bid opportunities", ("vendor",)),
    WidgetDefinition("documents", "Documents", "Access important documents", ("homeowner", "board", "vendor")),
    WidgetDefinition("violations", "Violations", "Track property violations", ("homeowner", "board")),
    WidgetDefinition("announcements", "Announcements", "Community announcements", ("homeowner", "board")),
    WidgetDefinition("calendar", "Calendar", "Upcoming events", ("homeowner", "board", "vendor")),
    WidgetDefinition("vendor-stats", "Vendor Statistics", "Your vendor performance", ("vendor",)),
    WidgetDefinition("invoices", "Invoices", "Manage your invoices", ("vendor",)),
    WidgetDefinition("preferred-status", "Preferred Status", "Your preferred vendor status", ("vendor",)),
)

WIDGET_REGISTRY: dict[str, WidgetDefinition] = {d.widget_type: d for d in _DEFINITIONS}
DEFAULT_ORDER = [d.widget_type for d in _DEFINITIONS]


def get_definition(widget_type: str) -> WidgetDefinition:
    definition = WIDGET_REGISTRY.get(widget_type)
    if not definition:
        raise ServiceError(f"Unknown widget type: {widget_type}", status_code=status.HTTP_404_NOT_FOUND)
    return definition


def merge_widgets(
    stored: list[PortalWidget],
    audience: Optional[str] = None,
) -> list[WidgetState]:
    """Registry defaults overlaid with stored rows, sorted by position.

    Stored rows for widget types no longer in the registry are ignored.
    """
    rows = {row.widget_type: row for row in stored}
    states = []
    for index, widget_type in enumerate(DEFAULT_ORDER):
        definition = WIDGET_REGISTRY[widget_type]
        if audience and audience not in definition.audiences:
            continue
        row = rows.get(widget_type)
        states.append((
            row.position if row else index,
            index,
            WidgetState(
                widget_type=widget_type,
                title=definition.title,
                description=definition.description,
                category=definition.category,
                is_enabled=row.is_enabled if row else definition.default_enabled,
                position=row.position if row else index,
                settings=dict(row.settings or {}) if row else {},
                is_default=row is None,
            ),
        ))
    states.sort(key=lambda item: (item[0], item[1]))
    return [state for _, _, state in states]


class WidgetService:
    """Widget settings for exactly one owner: a user or an association."""

    def __init__(
        self,
        db: AsyncSession,
        user_id: Optional[UUID] = None,
        association_id: Optional[UUID] = None,
    ):
        if (user_id is None) == (association_id is None):
            raise ValueError("WidgetService needs exactly one of user_id or association_id")
        self.db = db
        self.user_id = user_id
        self.association_id = association_id

    def _owner_filter(self):
        if self.user_id is not None:
            return PortalWidget.user_id == self.user_id
        return PortalWidget.association_id == self.association_id

    async def _rows(self) -> dict[str, PortalWidget]:
        result = await self.db.execute(select(PortalWidget).where(self._owner_filter()))
        return {row.widget_type: row for row in result.scalars().all()}

    def _upsert(self, rows: dict[str, PortalWidget], widget_type: str, **values: Any) -> PortalWidget:
        row = rows.get(widget_type)
        if row is None:
            effective = {s.widget_type: s for s in merge_widgets(list(rows.values()))}[widget_type]
            row = PortalWidget(
                user_id=self.user_id,
                association_id=self.association_id,
                widget_type=widget_type,
                is_enabled=effective.is_enabled,
                position=effective.position,
                settings={},
            )
            self.db.add(row)
            rows[widget_type] = row
        for key, value in values.items():
            setattr(row, key, value)
        return row

    async def list_widgets(self, audience: Optional[str] = None) -> list[WidgetState]:
        rows = await self._rows()
        return merge_widgets(list(rows.values()), audience)

    async def toggle(self, widget_type: str) -> list[WidgetState]:
        get_definition(widget_type)
        rows = await self._rows()
        current = {s.widget_type: s for s in merge_widgets(list(rows.values()))}[widget_type]
        self._upsert(rows, widget_type, is_enabled=not current.is_enabled)
        await self.db.commit()
        return merge_widgets(list(rows.values()))

    async def update(self, widget_type: str, data: WidgetUpdate) -> list[WidgetState]:
        get_definition(widget_type)
        rows = await self._rows()
        values: dict[str, Any] = {}
        if data.is_enabled is not None:
            values["is_enabled"] = data.is_enabled
        if data.settings is not None:
            values["settings"] = data.settings
        self._upsert(rows, widget_type, **values)
        await self.db.commit()
        return merge_widgets(list(rows.values()))

    async def reorder(self, widget_types: list[str]) -> list[WidgetState]:
        """Listed widgets first in the given order; the rest keep their relative order."""
        if len(set(widget_types)) != len(widget_types):
            raise ServiceError("widget_types must not repeat", status_code=status.HTTP_400_BAD_REQUEST)
        for widget_type in widget_types:
            get_definition(widget_type)
        rows = await self._rows()
        current = [s.widget_type for s in merge_widgets(list(rows.values()))]
        ordered = list(widget_types) + [t for t in current if t not in widget_types]
        for position, widget_type in enumerate(ordered):
            self._upsert(rows, widget_type, position=position)
        await self.db.commit()
        return merge_widgets(list(rows.values()))
