"""Merge tag rendering for outbound messages."""

import re
from datetime import date
from typing import Optional

from hoa_portal.models.association import Association, Property, Resident

TAG_RE = re.compile(r"\{([a-z_]+\.[a-z_]+)\}")

SUPPORTED_TAGS = (
    "resident.first_name",
    "resident.last_name",
    "resident.full_name",
    "resident.email",
    "property.address",
    "property.unit",
    "association.name",
    "date.current",
    "date.current_year",
)


def build_context(
    resident: Optional[Resident] = None,
    prop: Optional[Property] = None,
    association: Optional[Association] = None,
    today: Optional[date] = None,
) -> dict[str, str]:
    today = today or date.today()
    context = {
        "date.current": today.strftime("%B %d, %Y"),
        "date.current_year": str(today.year),
    }
    if resident is not None:
        context.update({
            "resident.first_name": resident.first_name,
            "resident.last_name": resident.last_name,
            "resident.full_name": resident.full_name,
            "resident.email": resident.email or "",
        })
    if prop is not None:
        context.update({
            "property.address": prop.address,
            "property.unit": prop.unit_number or "",
        })
    if association is not None:
        context["association.name"] = association.name
    return context


def unknown_tags(text: str) -> list[str]:
    found = []
    for tag in TAG_RE.findall(text):
        if tag not in SUPPORTED_TAGS and tag not in found:
            found.append(tag)
    return found


def render(text: str, context: dict[str, str]) -> str:
    """Replace known tags; tags without a value in context are left as written."""
    return TAG_RE.sub(lambda m: context.get(m.group(1), m.group(0)), text)
