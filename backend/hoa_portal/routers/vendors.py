"""Vendors router - vendors, contracts and contract amendments."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_member, AuthenticatedUser
from hoa_portal.models.association import Association
from hoa_portal.models.enums import ContractStatus
from hoa_portal.models.vendor import Vendor, VendorContract, ContractAmendment
from hoa_portal.routers.common import apply_updates, get_association_or_404, get_vendor_or_404
from hoa_portal.schemas.vendor import (
    VendorCreate,
    VendorUpdate,
    VendorResponse,
    ContractCreate,
    ContractUpdate,
    ContractResponse,
    AmendmentCreate,
)

router = APIRouter(prefix="/vendors", tags=["vendors"])


async def _get_contract(db: AsyncSession, contract_id: UUID, org_id: UUID) -> VendorContract:
    result = await db.execute(
        select(VendorContract)
        .join(Vendor, VendorContract.vendor_id == Vendor.id)
        .where(VendorContract.id == contract_id, Vendor.org_id == org_id)
    )
    contract = result.scalar_one_or_none()
    if not contract:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contract not found")
    return contract


@router.post("", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
async def create_vendor(
    data: VendorCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Create a new vendor (org-scoped)."""
    vendor = Vendor(org_id=current_user.org_id, **data.model_dump())
    db.add(vendor)
    await db.commit()
    await db.refresh(vendor)

    return VendorResponse.model_validate(vendor)


@router.get("", response_model=List[VendorResponse])
async def list_vendors(
    service_type: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_preferred: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """List vendors for the organization."""
    query = select(Vendor).where(Vendor.org_id == current_user.org_id)

    if service_type:
        query = query.where(Vendor.service_type == service_type)
    if is_active is not None:
        query = query.where(Vendor.is_active == is_active)
    if is_preferred is not None:
        query = query.where(Vendor.is_preferred == is_preferred)

    query = query.order_by(Vendor.is_preferred.desc(), Vendor.name)

    result = await db.execute(query)
    return [VendorResponse.model_validate(v) for v in result.scalars().all()]


@router.get("/{vendor_id}", response_model=VendorResponse)
async def get_vendor(
    vendor_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Get a vendor by ID."""
    vendor = await get_vendor_or_404(db, vendor_id, current_user.org_id)
    return VendorResponse.model_validate(vendor)


@router.patch("/{vendor_id}", response_model=VendorResponse)
async def update_vendor(
    vendor_id: UUID,
    data: VendorUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Update a vendor."""
    vendor = await get_vendor_or_404(db, vendor_id, current_user.org_id)
    apply_updates(vendor, data)

    await db.commit()
    await db.refresh(vendor)

    return VendorResponse.model_validate(vendor)


@router.delete("/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vendor(
    vendor_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Delete a vendor (soft delete by setting is_active=False)."""
    vendor = await get_vendor_or_404(db, vendor_id, current_user.org_id)
    vendor.is_active = False
    await db.commit()


@router.post(
    "/{vendor_id}/contracts",
    response_model=ContractResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_contract(
    vendor_id: UUID,
    data: ContractCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    vendor = await get_vendor_or_404(db, vendor_id, current_user.org_id)
    await get_association_or_404(db, data.association_id, current_user.org_id)

    contract = VendorContract(
        vendor_id=vendor.id,
        association_id=data.association_id,
        title=data.title,
        description=data.description,
        start_date=data.start_date,
        end_date=data.end_date,
        original_value_cents=data.value_cents,
        current_value_cents=data.value_cents,
        status=data.status,
        amendments=[],
    )
    db.add(contract)
    await db.commit()

    return ContractResponse.model_validate(contract)


@router.get("/{vendor_id}/contracts", response_model=List[ContractResponse])
async def list_contracts(
    vendor_id: UUID,
    contract_status: Optional[ContractStatus] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    await get_vendor_or_404(db, vendor_id, current_user.org_id)

    query = select(VendorContract).where(VendorContract.vendor_id == vendor_id)
    if contract_status:
        query = query.where(VendorContract.status == contract_status)

    result = await db.execute(query.order_by(VendorContract.start_date.desc()))
    return [ContractResponse.model_validate(c) for c in result.scalars().all()]


@router.get("/contracts/{contract_id}", response_model=ContractResponse)
async def get_contract(
    contract_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    contract = await _get_contract(db, contract_id, current_user.org_id)
    return ContractResponse.model_validate(contract)


@router.patch("/contracts/{contract_id}", response_model=ContractResponse)
async def update_contract(
    contract_id: UUID,
    data: ContractUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    contract = await _get_contract(db, contract_id, current_user.org_id)
    apply_updates(contract, data)

    if contract.end_date and contract.end_date < contract.start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must be on or after start_date",
        )

    await db.commit()
    await db.refresh(contract)

    return ContractResponse.model_validate(contract)


@router.post(
    "/contracts/{contract_id}/amendments",
    response_model=ContractResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_amendment(
    contract_id: UUID,
    data: AmendmentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Amend a contract; the value change is applied to its current value."""
    contract = await _get_contract(db, contract_id, current_user.org_id)
    if contract.status in (ContractStatus.EXPIRED, ContractStatus.TERMINATED):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Contract is {contract.status.value} and cannot be amended",
        )

    new_value = contract.current_value_cents + data.value_change_cents
    if new_value < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Amendment would make the contract value negative",
        )

    db.add(ContractAmendment(contract_id=contract.id, **data.model_dump()))
    contract.current_value_cents = new_value
    await db.commit()
    await db.refresh(contract, attribute_names=["amendments"])

    return ContractResponse.model_validate(contract)


@router.get("/associations/{association_id}/contracts", response_model=List[ContractResponse])
async def list_association_contracts(
    association_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
):
    """Contracts of every vendor serving one association."""
    await get_association_or_404(db, association_id, current_user.org_id)

    result = await db.execute(
        select(VendorContract)
        .join(Association, VendorContract.association_id == Association.id)
        .where(
            VendorContract.association_id == association_id,
            Association.org_id == current_user.org_id,
        )
        .order_by(VendorContract.start_date.desc())
    )
    return [ContractResponse.model_validate(c) for c in result.scalars().all()]
