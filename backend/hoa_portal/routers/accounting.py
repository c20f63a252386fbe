"""Accounting router - chart of accounts, journal entries and financial statements."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_accounting, AuthenticatedUser
from hoa_portal.models.accounting import FinancialStatement, GLAccount, JournalEntry
from hoa_portal.models.association import Association
from hoa_portal.models.enums import GLAccountType, JournalEntryStatus
from hoa_portal.routers.common import apply_updates, get_association_or_404
from hoa_portal.schemas.accounting import (
    GLAccountCreate,
    GLAccountUpdate,
    GLAccountResponse,
    JournalEntryCreate,
    JournalEntryResponse,
    StatementRequest,
    StatementResponse,
)
from hoa_portal.services.financial_statements import FinancialStatementService
from hoa_portal.services.ledger import LedgerService
from hoa_portal.services.pdf_generator import get_pdf_generator

router = APIRouter(prefix="/accounting", tags=["accounting"])


async def _get_gl_account(db: AsyncSession, account_id: UUID, org_id: UUID) -> GLAccount:
    result = await db.execute(
        select(GLAccount)
        .join(Association, GLAccount.association_id == Association.id)
        .where(GLAccount.id == account_id, Association.org_id == org_id)
    )
    account = result.scalar_one_or_none()
    if not account:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="GL account not found")
    return account


async def _get_entry(db: AsyncSession, entry_id: UUID, org_id: UUID) -> JournalEntry:
    result = await db.execute(
        select(JournalEntry)
        .join(Association, JournalEntry.association_id == Association.id)
        .where(JournalEntry.id == entry_id, Association.org_id == org_id)
    )
    entry = result.scalar_one_or_none()
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journal entry not found")
    return entry


async def _get_statement(db: AsyncSession, statement_id: UUID, org_id: UUID) -> FinancialStatement:
    result = await db.execute(
        select(FinancialStatement)
        .join(Association, FinancialStatement.association_id == Association.id)
        .where(FinancialStatement.id == statement_id, Association.org_id == org_id)
    )
    statement = result.scalar_one_or_none()
    if not statement:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Statement not found")
    return statement


# Chart of accounts

@router.post("/gl-accounts", response_model=GLAccountResponse, status_code=status.HTTP_201_CREATED)
async def create_gl_account(
    data: GLAccountCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    await get_association_or_404(db, data.association_id, current_user.org_id)

    existing = await db.execute(
        select(GLAccount.id).where(
            GLAccount.association_id == data.association_id,
            GLAccount.code == data.code,
        )
    )
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"GL account code {data.code} already exists",
        )

    account = GLAccount(**data.model_dump())
    db.add(account)
    await db.commit()
    await db.refresh(account)

    return GLAccountResponse.model_validate(account)


@router.get("/gl-accounts", response_model=List[GLAccountResponse])
async def list_gl_accounts(
    association_id: UUID,
    account_type: Optional[GLAccountType] = None,
    include_inactive: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    """Chart of accounts for one association, ordered by code."""
    await get_association_or_404(db, association_id, current_user.org_id)

    query = select(GLAccount).where(GLAccount.association_id == association_id)
    if account_type:
        query = query.where(GLAccount.account_type == account_type)
    if not include_inactive:
        query = query.where(GLAccount.is_active == True)  # noqa: E712

    result = await db.execute(query.order_by(GLAccount.code))
    return [GLAccountResponse.model_validate(a) for a in result.scalars().all()]


@router.get("/gl-accounts/{account_id}", response_model=GLAccountResponse)
async def get_gl_account(
    account_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    account = await _get_gl_account(db, account_id, current_user.org_id)
    return GLAccountResponse.model_validate(account)


@router.patch("/gl-accounts/{account_id}", response_model=GLAccountResponse)
async def update_gl_account(
    account_id: UUID,
    data: GLAccountUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    account = await _get_gl_account(db, account_id, current_user.org_id)
    apply_updates(account, data)

    await db.commit()
    await db.refresh(account)

    return GLAccountResponse.model_validate(account)


# Journal entries

@router.post("/journal-entries", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_journal_entry(
    data: JournalEntryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    """Create a balanced draft entry. Balances move only when it is posted."""
    await get_association_or_404(db, data.association_id, current_user.org_id)

    entry = await LedgerService(db).create_entry(data, current_user)
    await db.commit()

    return JournalEntryResponse.model_validate(entry)


@router.get("/journal-entries", response_model=List[JournalEntryResponse])
async def list_journal_entries(
    association_id: UUID,
    entry_status: Optional[JournalEntryStatus] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    await get_association_or_404(db, association_id, current_user.org_id)

    query = select(JournalEntry).where(JournalEntry.association_id == association_id)
    if entry_status:
        query = query.where(JournalEntry.status == entry_status)

    result = await db.execute(
        query.order_by(JournalEntry.entry_date.desc(), JournalEntry.created_at.desc())
    )
    return [JournalEntryResponse.model_validate(e) for e in result.scalars().all()]


@router.get("/journal-entries/{entry_id}", response_model=JournalEntryResponse)
async def get_journal_entry(
    entry_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    entry = await _get_entry(db, entry_id, current_user.org_id)
    return JournalEntryResponse.model_validate(entry)


@router.post("/journal-entries/{entry_id}/post", response_model=JournalEntryResponse)
async def post_journal_entry(
    entry_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    entry = await _get_entry(db, entry_id, current_user.org_id)
    await LedgerService(db).post_entry(entry, current_user)
    await db.commit()

    return JournalEntryResponse.model_validate(entry)


@router.post("/journal-entries/{entry_id}/void", response_model=JournalEntryResponse)
async def void_journal_entry(
    entry_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    entry = await _get_entry(db, entry_id, current_user.org_id)
    await LedgerService(db).void_entry(entry, current_user)
    await db.commit()

    return JournalEntryResponse.model_validate(entry)


# Financial statements

@router.post("/statements", response_model=StatementResponse, status_code=status.HTTP_201_CREATED)
async def generate_statement(
    data: StatementRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    """Generate and store an income statement, balance sheet or cash flow statement."""
    await get_association_or_404(db, data.association_id, current_user.org_id)

    statement = await FinancialStatementService(db).generate(data, current_user)
    await db.commit()

    return StatementResponse.model_validate(statement)


@router.get("/statements", response_model=List[StatementResponse])
async def list_statements(
    association_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    await get_association_or_404(db, association_id, current_user.org_id)

    result = await db.execute(
        select(FinancialStatement)
        .where(FinancialStatement.association_id == association_id)
        .order_by(FinancialStatement.created_at.desc())
    )
    return [StatementResponse.model_validate(s) for s in result.scalars().all()]


@router.get("/statements/{statement_id}", response_model=StatementResponse)
async def get_statement(
    statement_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    statement = await _get_statement(db, statement_id, current_user.org_id)
    return StatementResponse.model_validate(statement)


@router.get("/statements/{statement_id}/pdf")
async def download_statement_pdf(
    statement_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    """Render a stored statement as PDF."""
    statement = await _get_statement(db, statement_id, current_user.org_id)
    association = await get_association_or_404(db, statement.association_id, current_user.org_id)

    pdf_bytes = get_pdf_generator().generate_financial_statement(
        statement.statement_type.value,
        statement.data,
        association.name,
    )
    filename = f"{statement.statement_type.value}_{statement.period_end.isoformat()}.pdf"

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
