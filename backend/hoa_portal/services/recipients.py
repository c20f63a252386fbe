"""Recipient groups: selection editing and resolution to residents."""

import logging
from typing import Any, Iterable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.models.association import Association, Property, Resident
from hoa_portal.models.communication import RecipientGroup
from hoa_portal.models.enums import RecipientGroupType, ResidentType
from hoa_portal.schemas.communication import (
    CommonGroup,
    Recipient,
    SelectedGroup,
    SelectionAction,
)

logger = logging.getLogger(__name__)

COMMON_GROUP_TYPES = ("owners", "residents")

SYSTEM_GROUPS = (
    ("All Owners", "Every owner of record in the association", {"resident_type": ResidentType.OWNER.value}),
    ("All Residents", "Everyone living in or owning a property", {}),
)


def normalize_group_type(value: Any) -> RecipientGroupType:
    """Anything other than ``system`` is a custom group."""
    raw = value.value if isinstance(value, RecipientGroupType) else str(value or "")
    return RecipientGroupType.SYSTEM if raw.lower() == "system" else RecipientGroupType.CUSTOM


class RecipientSelection:
    """Ordered set of selected group ids over a fixed list of groups.

    Selection order is preserved: newly added ids go to the end.
    """

    def __init__(
        self,
        groups: list[RecipientGroup],
        association_names: dict[UUID, str],
        selected: Iterable[UUID] = (),
    ):
        self.groups = groups
        self.association_names = association_names
        known = {g.id for g in groups}
        self.selected: list[UUID] = []
        for group_id in selected:
            if group_id in known and group_id not in self.selected:
                self.selected.append(group_id)

    def _add(self, ids: Iterable[UUID]) -> None:
        for group_id in ids:
            if group_id not in self.selected:
                self.selected.append(group_id)

    def _remove(self, ids: Iterable[UUID]) -> None:
        drop = set(ids)
        self.selected = [g for g in self.selected if g not in drop]

    def toggle_group(self, group_id: UUID) -> None:
        if group_id in self.selected:
            self._remove([group_id])
        elif any(g.id == group_id for g in self.groups):
            self.selected.append(group_id)

    def select_association(self, association_id: UUID, selected: bool) -> None:
        ids = [g.id for g in self.groups if g.association_id == association_id]
        if selected:
            self._add(ids)
        else:
            self._remove(ids)

    def select_all(self, selected: bool) -> None:
        self.selected = [g.id for g in self.groups] if selected else []

    def clear(self) -> None:
        self.selected = []

    def matching_common_type(self, common_type: str) -> list[RecipientGroup]:
        needle = common_type.lower()
        return [g for g in self.groups if needle in g.name.lower()]

    def toggle_common_type(self, common_type: str) -> None:
        """Select every group of a common type, or drop them all if already selected."""
        ids = [g.id for g in self.matching_common_type(common_type)]
        if not ids:
            return
        if all(group_id in self.selected for group_id in ids):
            self._remove(ids)
        else:
            self._add(ids)

    def remove_group(self, group_id: UUID) -> None:
        self._remove([group_id])

    def apply(self, action: SelectionAction) -> None:
        if action.action == "toggle_group" and action.group_id:
            self.toggle_group(action.group_id)
        elif action.action == "select_association" and action.association_id:
            self.select_association(action.association_id, action.select)
        elif action.action == "select_all":
            self.select_all(action.select)
        elif action.action == "clear":
            self.clear()
        elif action.action == "toggle_common_type" and action.common_type:
            self.toggle_common_type(action.common_type)
        elif action.action == "remove_group" and action.group_id:
            self.remove_group(action.group_id)

    def _describe(self, group: RecipientGroup) -> SelectedGroup:
        return SelectedGroup(
            id=group.id,
            name=group.name,
            association_id=group.association_id,
            association_name=self.association_names.get(group.association_id, ""),
            group_type=normalize_group_type(group.group_type),
        )

    def selected_groups(self) -> list[SelectedGroup]:
        by_id = {g.id: g for g in self.groups}
        return [self._describe(by_id[group_id]) for group_id in self.selected]

    def common_groups(self) -> list[CommonGroup]:
        result = []
        for common_type in COMMON_GROUP_TYPES:
            matches = self.matching_common_type(common_type)
            result.append(CommonGroup(
                common_type=common_type,
                groups=[self._describe(g) for g in matches],
                all_selected=bool(matches) and all(g.id in self.selected for g in matches),
            ))
        return result


def matches_criteria(resident: Resident, prop: Property, criteria: dict[str, Any]) -> bool:
    """Does a resident belong to a group with these criteria?"""
    wanted_type = criteria.get("resident_type")
    if wanted_type:
        allowed = wanted_type if isinstance(wanted_type, list) else [wanted_type]
        if resident.resident_type.value not in allowed:
            return False

    property_ids = criteria.get("property_ids")
    if property_ids and str(prop.id) not in {str(p) for p in property_ids}:
        return False

    if criteria.get("is_primary") is not None and bool(resident.is_primary) != bool(criteria["is_primary"]):
        return False

    return True


class RecipientService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_selection(
        self,
        org_id: UUID,
        selected: Iterable[UUID] = (),
        association_ids: Optional[list[UUID]] = None,
    ) -> RecipientSelection:
        """Groups of the organization's associations (optionally narrowed)."""
        query = (
            select(RecipientGroup, Association.name)
            .join(Association, RecipientGroup.association_id == Association.id)
            .where(Association.org_id == org_id, Association.is_archived.is_(False))
            .order_by(Association.name, RecipientGroup.name)
        )
        if association_ids:
            query = query.where(Association.id.in_(association_ids))

        result = await self.db.execute(query)
        groups = []
        names: dict[UUID, str] = {}
        for group, association_name in result.all():
            groups.append(group)
            names[group.association_id] = association_name
        return RecipientSelection(groups, names, selected)

    async def seed_system_groups(self, association_id: UUID) -> list[RecipientGroup]:
        groups = [
            RecipientGroup(
                association_id=association_id,
                name=name,
                description=description,
                group_type=RecipientGroupType.SYSTEM,
                criteria=dict(criteria),
            )
            for name, description, criteria in SYSTEM_GROUPS
        ]
        self.db.add_all(groups)
        await self.db.flush()
        return groups

    async def resolve(
        self,
        group_ids: list[UUID],
        org_id: UUID,
    ) -> list[tuple[Recipient, Resident, Property]]:
        """Residents with an email matching any of the groups, one per email address."""
        result = await self.db.execute(
            select(RecipientGroup)
            .join(Association, RecipientGroup.association_id == Association.id)
            .where(RecipientGroup.id.in_(group_ids), Association.org_id == org_id)
        )
        groups = list(result.scalars().all())
        if not groups:
            return []

        association_ids = {g.association_id for g in groups}
        rows = await self.db.execute(
            select(Resident, Property)
            .join(Property, Resident.property_id == Property.id)
            .where(
                Property.association_id.in_(association_ids),
                Property.is_archived.is_(False),
                Resident.email.is_not(None),
            )
            .order_by(Resident.last_name, Resident.first_name)
        )
        candidates = rows.all()

        seen: set[str] = set()
        recipients = []
        for group in groups:
            criteria = group.criteria or {}
            for resident, prop in candidates:
                if prop.association_id != group.association_id:
                    continue
                email = (resident.email or "").strip().lower()
                if not email or email in seen:
                    continue
                if not matches_criteria(resident, prop, criteria):
                    continue
                seen.add(email)
                recipients.append((
                    Recipient(
                        resident_id=resident.id,
                        name=resident.full_name,
                        email=resident.email,
                        property_id=prop.id,
                        association_id=prop.association_id,
                    ),
                    resident,
                    prop,
                ))

        logger.info(f"[COMMS] Resolved {len(groups)} groups to {len(recipients)} recipients")
        return recipients
