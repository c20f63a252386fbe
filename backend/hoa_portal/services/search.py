"""
Global search across the caller's organization.

One substring query per entity type; rows are reshaped into SearchResult
and ranked exact title > title prefix > everything else, keeping type order
within each rank.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable
from uuid import UUID

from fastapi import status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.config import get_settings
from hoa_portal.core.errors import ServiceError
from hoa_portal.models.association import Association, Property, Resident
from hoa_portal.models.invoice import Invoice
from hoa_portal.models.lead import Lead
from hoa_portal.models.vendor import Vendor
from hoa_portal.schemas.search import SearchResponse, SearchResult

logger = logging.getLogger(__name__)

# Misspellings seen in the search box and what they were meant to be.
TYPO_MAP = {
    "asociation": "association",
    "assocation": "association",
    "associaton": "association",
    "propety": "property",
    "proprety": "property",
    "properyt": "property",
    "resdient": "resident",
    "residnet": "resident",
    "homeownr": "homeowner",
    "homeonwer": "homeowner",
    "invocie": "invoice",
    "invoce": "invoice",
    "vender": "vendor",
    "vendr": "vendor",
    "maintenace": "maintenance",
    "maintainance": "maintenance",
    "landscapping": "landscaping",
    "complaince": "compliance",
    "violaton": "violation",
    "amenitiy": "amenity",
    "aplication": "application",
    "acounting": "accounting",
}

WORD_RE = re.compile(r"[A-Za-z]+")


@dataclass(frozen=True)
class SearchTarget:
    result_type: str
    fields: tuple[str, ...]
    title: Callable[[Any], str]
    subtitle: Callable[[Any], str]
    path: Callable[[Any], str]


def _join(*parts: Any, sep: str = ", ") -> str:
    return sep.join(str(p) for p in parts if p)


TARGETS = {
    "association": SearchTarget(
        "association",
        ("name", "address", "city"),
        title=lambda a: a.name,
        subtitle=lambda a: _join(a.address, a.city, a.state),
        path=lambda a: f"/associations/{a.id}",
    ),
    "property": SearchTarget(
        "property",
        ("address", "unit_number", "city"),
        title=lambda p: _join(p.address, f"Unit {p.unit_number}" if p.unit_number else None, sep=" "),
        subtitle=lambda p: _join(p.city, p.state),
        path=lambda p: f"/properties/{p.id}",
    ),
    "resident": SearchTarget(
        "resident",
        ("first_name", "last_name", "email"),
        title=lambda r: r.full_name,
        subtitle=lambda r: _join(r.email, r.resident_type.value.replace("_", " ")),
        path=lambda r: f"/residents/{r.id}",
    ),
    "lead": SearchTarget(
        "lead",
        ("first_name", "last_name", "email", "company", "street_address", "city"),
        title=lambda lead: lead.display_name,
        subtitle=lambda lead: _join(lead.company, lead.email, lead.status.value),
        path=lambda lead: f"/leads/{lead.id}",
    ),
    "invoice": SearchTarget(
        "invoice",
        ("invoice_number", "vendor_name", "description"),
        title=lambda i: i.invoice_number or i.vendor_name or "Invoice",
        subtitle=lambda i: _join(i.vendor_name, f"${i.amount_cents / 100:,.2f}", i.status.value),
        path=lambda i: f"/accounting/invoices/{i.id}",
    ),
    "vendor": SearchTarget(
        "vendor",
        ("name", "service_type"),
        title=lambda v: v.name,
        subtitle=lambda v: _join(v.service_type, v.email),
        path=lambda v: f"/vendors/{v.id}",
    ),
}


def normalize_query(raw: str, min_length: int = 2, max_length: int = 100) -> str:
    query = (raw or "").strip()
    if len(query) < min_length or len(query) > max_length:
        raise ServiceError(
            f"Search query must be between {min_length} and {max_length} characters",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return query


def typo_suggestions(query: str) -> list[str]:
    """Corrected queries for every known misspelling in the query."""
    suggestions: list[str] = []
    corrected = query
    for word in WORD_RE.findall(query):
        fix = TYPO_MAP.get(word.lower())
        if not fix:
            continue
        single = re.sub(rf"\b{re.escape(word)}\b", fix, query)
        if single not in suggestions:
            suggestions.append(single)
        corrected = re.sub(rf"\b{re.escape(word)}\b", fix, corrected)
    if len(suggestions) > 1 and corrected not in suggestions:
        suggestions.insert(0, corrected)
    return suggestions


def matched_field(row: Any, fields: tuple[str, ...], needle: str) -> str:
    for name in fields:
        value = getattr(row, name, None)
        if value and needle in str(value).lower():
            return name
    return fields[0]


def rank(result: SearchResult, needle: str) -> int:
    title = result.title.lower()
    if title == needle:
        return 0
    if title.startswith(needle):
        return 1
    return 2


def rank_results(results: list[SearchResult], needle: str, limit: int) -> list[SearchResult]:
    # sorted() is stable, so type order survives within each rank
    return sorted(results, key=lambda r: rank(r, needle))[:limit]


class SearchService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()

    def _scoped_query(self, result_type: str, org_id: UUID):
        if result_type == "association":
            return select(Association).where(
                Association.org_id == org_id, Association.is_archived.is_(False)
            ), Association
        if result_type == "property":
            return select(Property).join(Association, Property.association_id == Association.id).where(
                Association.org_id == org_id, Property.is_archived.is_(False)
            ), Property
        if result_type == "resident":
            return (
                select(Resident)
                .join(Property, Resident.property_id == Property.id)
                .join(Association, Property.association_id == Association.id)
                .where(Association.org_id == org_id)
            ), Resident
        if result_type == "lead":
            return select(Lead).where(Lead.org_id == org_id), Lead
        if result_type == "invoice":
            return select(Invoice).join(Association, Invoice.association_id == Association.id).where(
                Association.org_id == org_id
            ), Invoice
        return select(Vendor).where(Vendor.org_id == org_id, Vendor.is_active.is_(True)), Vendor

    async def search(self, raw_query: str, org_id: UUID) -> SearchResponse:
        query = normalize_query(
            raw_query,
            self.settings.search_min_query_length,
            self.settings.search_max_query_length,
        )
        needle = query.lower()

        results: list[SearchResult] = []
        for result_type, target in TARGETS.items():
            stmt, model = self._scoped_query(result_type, org_id)
            conditions = [
                func.lower(getattr(model, name)).contains(needle, autoescape=True)
                for name in target.fields
            ]
            stmt = stmt.where(or_(*conditions)).limit(self.settings.search_results_per_type)
            rows = (await self.db.execute(stmt)).scalars().all()

            for row in rows:
                results.append(SearchResult(
                    id=row.id,
                    title=target.title(row),
                    subtitle=target.subtitle(row),
                    type=result_type,
                    path=target.path(row),
                    matched_field=matched_field(row, target.fields, needle),
                ))

        ranked = rank_results(results, needle, self.settings.search_max_results)
        logger.info(f"[SEARCH] '{query}' -> {len(ranked)} results")
        return SearchResponse(
            query=query,
            total=len(ranked),
            results=ranked,
            suggestions=typo_suggestions(query),
        )
