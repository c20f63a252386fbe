"""Invoices router."""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_member, AuthenticatedUser
from hoa_portal.models.association import Association
from hoa_portal.models.enums import InvoiceStatus
from hoa_portal.models.invoice import Invoice, InvoiceLineItem
from hoa_portal.routers.common import apply_updates, get_association_or_404, get_vendor_or_404
from hoa_portal.schemas.invoice import (
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceResponse,
    LineItemInput,
)

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _line_items(items: list[LineItemInput]) -> list[InvoiceLineItem]:
    return [
        InvoiceLineItem(position=position, **item.model_dump())
        for position, item in enumerate(items)
    ]


async def _get_invoice(db: AsyncSession, invoice_id: UUID, org_id: UUID) -> Invoice:
    result = await db.execute(
        select(Invoice)
        .join(Association, Invoice.association_id == Association.id)
        .where(Invoice.id == invoice_id, Association.org_id == org_id)
    )
    invoice = result.scalar_one_or_none()
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return invoice


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    data: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_association_or_404(db, data.association_id, current_user.org_id)
    vendor_name = data.vendor_name
    if data.vendor_id:
        vendor = await get_vendor_or_404(db, data.vendor_id, current_user.org_id)
        vendor_name = vendor_name or vendor.name

    invoice = Invoice(
        **data.model_dump(exclude={"line_items", "vendor_name"}),
        vendor_name=vendor_name,
        line_items=_line_items(data.line_items),
    )
    db.add(invoice)
    await db.commit()

    return InvoiceResponse.model_validate(invoice)


@router.get("", response_model=List[InvoiceResponse])
async def list_invoices(
    association_id: Optional[UUID] = None,
    vendor_id: Optional[UUID] = None,
    invoice_status: Optional[InvoiceStatus] = None,
    due_before: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """List invoices across the organization's associations."""
    query = (
        select(Invoice)
        .join(Association, Invoice.association_id == Association.id)
        .where(Association.org_id == current_user.org_id)
    )
    if association_id:
        query = query.where(Invoice.association_id == association_id)
    if vendor_id:
        query = query.where(Invoice.vendor_id == vendor_id)
    if invoice_status:
        query = query.where(Invoice.status == invoice_status)
    if due_before:
        query = query.where(Invoice.due_date <= due_before)

    result = await db.execute(query.order_by(Invoice.created_at.desc()))
    return [InvoiceResponse.model_validate(i) for i in result.scalars().all()]


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    invoice = await _get_invoice(db, invoice_id, current_user.org_id)
    return InvoiceResponse.model_validate(invoice)


@router.patch("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: UUID,
    data: InvoiceUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    invoice = await _get_invoice(db, invoice_id, current_user.org_id)
    if invoice.status == InvoiceStatus.VOID:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Void invoices cannot be edited")
    if data.vendor_id:
        await get_vendor_or_404(db, data.vendor_id, current_user.org_id)

    apply_updates(invoice, data)
    if invoice.status == InvoiceStatus.PAID and not invoice.payment_date:
        invoice.payment_date = date.today()

    await db.commit()
    await db.refresh(invoice)

    return InvoiceResponse.model_validate(invoice)


@router.put("/{invoice_id}/line-items", response_model=InvoiceResponse)
async def replace_line_items(
    invoice_id: UUID,
    items: list[LineItemInput],
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Replace every line item of an invoice in one operation."""
    invoice = await _get_invoice(db, invoice_id, current_user.org_id)
    if invoice.status in (InvoiceStatus.PAID, InvoiceStatus.VOID):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Line items of a {invoice.status.value} invoice cannot be changed",
        )

    invoice.line_items = _line_items(items)
    await db.commit()
    await db.refresh(invoice)

    return InvoiceResponse.model_validate(invoice)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def void_invoice(
    invoice_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Void an invoice. Paid invoices cannot be voided."""
    invoice = await _get_invoice(db, invoice_id, current_user.org_id)
    if invoice.status == InvoiceStatus.PAID:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Paid invoices cannot be voided")
    invoice.status = InvoiceStatus.VOID
    await db.commit()
