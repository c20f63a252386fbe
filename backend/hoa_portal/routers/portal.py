"""Homeowner portal router - what a signed-in resident sees."""

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_resident, AuthenticatedUser
from hoa_portal.models.amenity import AmenityBooking
from hoa_portal.models.association import Association, Property, Resident
from hoa_portal.models.compliance import ComplianceIssue
from hoa_portal.models.enums import BookingStatus, ComplianceStatus
from hoa_portal.models.poll import CommunityPoll
from hoa_portal.schemas.amenity import BookingResponse
from hoa_portal.schemas.association import PropertyResponse, ResidentResponse
from hoa_portal.schemas.compliance import ComplianceIssueResponse
from hoa_portal.schemas.poll import PollResponseOut

router = APIRouter(prefix="/portal", tags=["portal"])


@router.get("/me")
async def get_portal_overview(
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_resident),
):
    """Resident records linked to the caller, with their homes and activity.

    Returns:
    - residents and their properties (with association name)
    - open compliance issues on those properties
    - open polls of those associations
    - upcoming amenity bookings made by or for the caller
    """
    now = datetime.utcnow()

    result = await db.execute(
        select(Resident, Property, Association)
        .join(Property, Resident.property_id == Property.id)
        .join(Association, Property.association_id == Association.id)
        .where(Resident.user_id == current_user.db_user_id)
        .order_by(Association.name, Property.address)
    )
    rows = result.all()

    residents = []
    properties: dict = {}
    associations: dict = {}
    for resident, prop, association in rows:
        residents.append(ResidentResponse.model_validate(resident).model_dump(mode="json"))
        properties[prop.id] = prop
        associations[association.id] = association

    issues = []
    polls = []
    bookings = []
    if properties:
        issue_result = await db.execute(
            select(ComplianceIssue)
            .where(
                ComplianceIssue.property_id.in_(properties.keys()),
                ComplianceIssue.status != ComplianceStatus.RESOLVED,
            )
            .order_by(ComplianceIssue.due_date.asc(), ComplianceIssue.created_at.asc())
        )
        issues = [
            ComplianceIssueResponse.model_validate(i).model_dump(mode="json")
            for i in issue_result.scalars().all()
        ]

        poll_result = await db.execute(
            select(CommunityPoll)
            .where(CommunityPoll.association_id.in_(associations.keys()))
            .order_by(CommunityPoll.created_at.desc())
        )
        polls = [
            PollResponseOut.model_validate(p).model_dump(mode="json")
            for p in poll_result.scalars().all()
            if p.is_open(now)
        ]

    booking_filter = AmenityBooking.booked_by == current_user.db_user_id
    if rows:
        resident_ids = [resident.id for resident, _, _ in rows]
        booking_filter = or_(booking_filter, AmenityBooking.resident_id.in_(resident_ids))
    booking_result = await db.execute(
        select(AmenityBooking)
        .where(
            booking_filter,
            AmenityBooking.status != BookingStatus.CANCELLED,
            AmenityBooking.end_time >= now,
        )
        .order_by(AmenityBooking.start_time.asc())
    )
    bookings = [
        BookingResponse.model_validate(b).model_dump(mode="json")
        for b in booking_result.scalars().all()
    ]

    return {
        "residents": residents,
        "properties": [
            {
                **PropertyResponse.model_validate(prop).model_dump(mode="json"),
                "association_name": associations[prop.association_id].name,
            }
            for prop in properties.values()
        ],
        "compliance_issues": issues,
        "open_polls": polls,
        "upcoming_bookings": bookings,
    }
