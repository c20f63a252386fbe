"""Dashboard router - aggregate stats for the management overview."""

from datetime import date, datetime, timedelta
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, case, and_
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_member, AuthenticatedUser
from hoa_portal.models.amenity import Amenity, AmenityBooking
from hoa_portal.models.association import Association, Property, Resident
from hoa_portal.models.compliance import ComplianceIssue
from hoa_portal.models.enums import (
    BookingStatus,
    ComplianceStatus,
    InvoiceStatus,
    LeadStatus,
    PropertyStatus,
    WorkOrderStatus,
)
from hoa_portal.models.invoice import Invoice
from hoa_portal.models.lead import Lead
from hoa_portal.models.vendor import WorkOrder
from hoa_portal.routers.common import get_association_or_404

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

UNPAID_STATUSES = (InvoiceStatus.DRAFT, InvoiceStatus.PENDING_APPROVAL, InvoiceStatus.APPROVED)


@router.get("/stats")
async def get_dashboard_stats(
    association_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Get aggregate dashboard statistics for the organization or one association.

    Returns:
    - Association, property and resident counts
    - Open compliance issues by status
    - Unpaid invoices (count, total, overdue)
    - Open work orders by status
    - Active leads
    - Upcoming amenity bookings (next 7 days)
    """
    org_id = current_user.org_id
    now = datetime.utcnow()
    today = now.date()
    week_ahead = now + timedelta(days=7)

    if association_id:
        await get_association_or_404(db, association_id, org_id)
        scope = and_(Association.org_id == org_id, Association.id == association_id)
    else:
        scope = and_(Association.org_id == org_id, Association.is_archived.is_(False))

    assoc_count = await db.scalar(select(func.count(Association.id)).where(scope))

    prop_query = await db.execute(
        select(
            func.count(Property.id).label("total"),
            func.sum(case((Property.status == PropertyStatus.OCCUPIED, 1), else_=0)).label("occupied"),
            func.sum(case((Property.status == PropertyStatus.VACANT, 1), else_=0)).label("vacant"),
        )
        .join(Association, Property.association_id == Association.id)
        .where(scope, Property.is_archived.is_(False))
    )
    prop_stats = prop_query.one()

    resident_count = await db.scalar(
        select(func.count(Resident.id))
        .join(Property, Resident.property_id == Property.id)
        .join(Association, Property.association_id == Association.id)
        .where(scope, Property.is_archived.is_(False))
    )

    compliance_query = await db.execute(
        select(
            func.sum(case((ComplianceIssue.status == ComplianceStatus.OPEN, 1), else_=0)).label("open"),
            func.sum(case((ComplianceIssue.status == ComplianceStatus.IN_PROGRESS, 1), else_=0)).label("in_progress"),
            func.sum(case((ComplianceIssue.status == ComplianceStatus.ESCALATED, 1), else_=0)).label("escalated"),
            func.sum(case(
                (and_(ComplianceIssue.status != ComplianceStatus.RESOLVED, ComplianceIssue.due_date < today), 1),
                else_=0
            )).label("overdue"),
        )
        .join(Association, ComplianceIssue.association_id == Association.id)
        .where(scope)
    )
    compliance_stats = compliance_query.one()

    invoice_query = await db.execute(
        select(
            func.count(Invoice.id).label("unpaid"),
            func.coalesce(func.sum(Invoice.amount_cents), 0).label("unpaid_total"),
            func.sum(case((Invoice.due_date < today, 1), else_=0)).label("overdue"),
        )
        .join(Association, Invoice.association_id == Association.id)
        .where(scope, Invoice.status.in_(UNPAID_STATUSES))
    )
    invoice_stats = invoice_query.one()

    work_order_query = await db.execute(
        select(
            func.sum(case((WorkOrder.status == WorkOrderStatus.OPEN, 1), else_=0)).label("open"),
            func.sum(case((WorkOrder.status == WorkOrderStatus.ASSIGNED, 1), else_=0)).label("assigned"),
            func.sum(case((WorkOrder.status == WorkOrderStatus.IN_PROGRESS, 1), else_=0)).label("in_progress"),
        )
        .join(Association, WorkOrder.association_id == Association.id)
        .where(scope)
    )
    work_order_stats = work_order_query.one()

    # Leads belong to the organization, not an association
    active_leads = await db.scalar(
        select(func.count(Lead.id)).where(
            Lead.org_id == org_id,
            Lead.status.not_in((LeadStatus.WON, LeadStatus.LOST)),
        )
    )

    upcoming_bookings = await db.scalar(
        select(func.count(AmenityBooking.id))
        .join(Amenity, AmenityBooking.amenity_id == Amenity.id)
        .join(Association, Amenity.association_id == Association.id)
        .where(
            scope,
            AmenityBooking.status != BookingStatus.CANCELLED,
            AmenityBooking.start_time >= now,
            AmenityBooking.start_time <= week_ahead,
        )
    )

    return {
        "associations": assoc_count or 0,
        "properties": {
            "total": prop_stats.total or 0,
            "occupied": prop_stats.occupied or 0,
            "vacant": prop_stats.vacant or 0,
        },
        "residents": resident_count or 0,
        "compliance": {
            "open": compliance_stats.open or 0,
            "in_progress": compliance_stats.in_progress or 0,
            "escalated": compliance_stats.escalated or 0,
            "overdue": compliance_stats.overdue or 0,
        },
        "invoices": {
            "unpaid": invoice_stats.unpaid or 0,
            "unpaid_total_cents": invoice_stats.unpaid_total or 0,
            "overdue": invoice_stats.overdue or 0,
        },
        "work_orders": {
            "open": work_order_stats.open or 0,
            "assigned": work_order_stats.assigned or 0,
            "in_progress": work_order_stats.in_progress or 0,
        },
        "leads": {
            "active": active_leads or 0,
        },
        "bookings": {
            "upcoming": upcoming_bookings or 0,
        },
    }


@router.get("/invoices/due")
async def get_invoices_due(
    days: int = Query(default=14, ge=1, le=365),
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Unpaid invoices due within the given number of days, overdue ones included."""
    today = date.today()
    cutoff = today + timedelta(days=days)

    result = await db.execute(
        select(Invoice, Association)
        .join(Association, Invoice.association_id == Association.id)
        .where(
            Association.org_id == current_user.org_id,
            Invoice.status.in_(UNPAID_STATUSES),
            Invoice.due_date.is_not(None),
            Invoice.due_date <= cutoff,
        )
        .order_by(Invoice.due_date.asc())
    )

    invoices = []
    for invoice, association in result.all():
        invoices.append({
            "id": str(invoice.id),
            "invoice_number": invoice.invoice_number,
            "vendor_name": invoice.vendor_name,
            "amount_cents": invoice.amount_cents,
            "due_date": invoice.due_date.isoformat(),
            "days_until_due": (invoice.due_date - today).days,
            "status": invoice.status.value,
            "association": {
                "id": str(association.id),
                "name": association.name,
            },
        })

    return {"invoices": invoices, "total": len(invoices)}
