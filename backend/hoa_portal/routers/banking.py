"""Banking router - bank accounts, transactions, statement uploads, reconciliations."""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_accounting, AuthenticatedUser
from hoa_portal.models.association import Association
from hoa_portal.models.banking import (
    BankAccount,
    BankReconciliation,
    BankStatement,
    BankTransaction,
)
from hoa_portal.models.enums import AuditAction, BankStatementStatus
from hoa_portal.routers.common import get_association_or_404
from hoa_portal.schemas.banking import (
    BankAccountCreate,
    BankAccountResponse,
    BankStatementResponse,
    BankTransactionCreate,
    BankTransactionResponse,
    ClearTransactionRequest,
    ReconciliationCreate,
    ReconciliationResponse,
    StatementUploadRequest,
    StatementUploadResponse,
)
from hoa_portal.services.audit import AuditService
from hoa_portal.services.reconciliation import ReconciliationService
from hoa_portal.services.storage import StorageService, get_storage_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/banking", tags=["banking"])


async def _get_bank_account(db: AsyncSession, account_id: UUID, org_id: UUID) -> BankAccount:
    result = await db.execute(
        select(BankAccount)
        .join(Association, BankAccount.association_id == Association.id)
        .where(BankAccount.id == account_id, Association.org_id == org_id)
    )
    account = result.scalar_one_or_none()
    if not account:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bank account not found")
    return account


async def _get_statement(db: AsyncSession, statement_id: UUID, org_id: UUID) -> BankStatement:
    result = await db.execute(
        select(BankStatement)
        .join(BankAccount, BankStatement.bank_account_id == BankAccount.id)
        .join(Association, BankAccount.association_id == Association.id)
        .where(BankStatement.id == statement_id, Association.org_id == org_id)
    )
    statement = result.scalar_one_or_none()
    if not statement:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bank statement not found")
    return statement


async def _get_reconciliation(db: AsyncSession, reconciliation_id: UUID, org_id: UUID) -> BankReconciliation:
    result = await db.execute(
        select(BankReconciliation)
        .join(BankAccount, BankReconciliation.bank_account_id == BankAccount.id)
        .join(Association, BankAccount.association_id == Association.id)
        .where(BankReconciliation.id == reconciliation_id, Association.org_id == org_id)
    )
    reconciliation = result.scalar_one_or_none()
    if not reconciliation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reconciliation not found")
    return reconciliation


# Accounts and transactions

@router.post("/accounts", response_model=BankAccountResponse, status_code=status.HTTP_201_CREATED)
async def create_bank_account(
    data: BankAccountCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    await get_association_or_404(db, data.association_id, current_user.org_id)

    account = BankAccount(**data.model_dump())
    db.add(account)
    await db.commit()
    await db.refresh(account)

    return BankAccountResponse.model_validate(account)


@router.get("/accounts", response_model=List[BankAccountResponse])
async def list_bank_accounts(
    association_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    await get_association_or_404(db, association_id, current_user.org_id)

    result = await db.execute(
        select(BankAccount)
        .where(BankAccount.association_id == association_id)
        .order_by(BankAccount.name)
    )
    return [BankAccountResponse.model_validate(a) for a in result.scalars().all()]


@router.get("/accounts/{account_id}", response_model=BankAccountResponse)
async def get_bank_account(
    account_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    account = await _get_bank_account(db, account_id, current_user.org_id)
    return BankAccountResponse.model_validate(account)


@router.post(
    "/accounts/{account_id}/transactions",
    response_model=BankTransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    account_id: UUID,
    data: BankTransactionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    """Record a deposit (positive) or withdrawal (negative)."""
    account = await _get_bank_account(db, account_id, current_user.org_id)

    transaction = BankTransaction(bank_account_id=account.id, **data.model_dump())
    account.current_balance_cents += data.amount_cents
    db.add(transaction)
    await db.commit()
    await db.refresh(transaction)

    return BankTransactionResponse.model_validate(transaction)


@router.get("/accounts/{account_id}/transactions", response_model=List[BankTransactionResponse])
async def list_transactions(
    account_id: UUID,
    is_cleared: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    await _get_bank_account(db, account_id, current_user.org_id)

    query = select(BankTransaction).where(BankTransaction.bank_account_id == account_id)
    if is_cleared is not None:
        query = query.where(BankTransaction.is_cleared == is_cleared)

    result = await db.execute(
        query.order_by(BankTransaction.transaction_date.desc(), BankTransaction.created_at.desc())
    )
    return [BankTransactionResponse.model_validate(t) for t in result.scalars().all()]


# Statements

@router.post(
    "/accounts/{account_id}/statements/upload",
    response_model=StatementUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_statement_upload(
    account_id: UUID,
    data: StatementUploadRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
    storage: StorageService = Depends(get_storage_service),
):
    """Get a presigned URL for uploading a bank statement.

    The statement stays pending_upload until the client confirms the upload.
    """
    account = await _get_bank_account(db, account_id, current_user.org_id)

    try:
        upload_url, object_path, expires_at = await storage.create_presigned_upload(
            association_id=account.association_id,
            folder="bank-statements",
            file_name=data.file_name,
            mime_type=data.mime_type,
            file_size_bytes=data.file_size_bytes,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    statement = BankStatement(
        bank_account_id=account.id,
        statement_date=data.statement_date,
        file_name=data.file_name,
        mime_type=data.mime_type,
        object_path=object_path,
        status=BankStatementStatus.PENDING_UPLOAD,
        uploaded_by=current_user.db_user_id,
    )
    db.add(statement)
    await db.commit()

    return StatementUploadResponse(
        statement_id=statement.id,
        upload_url=upload_url,
        object_path=object_path,
        expires_at=expires_at,
    )


@router.post("/statements/{statement_id}/confirm", response_model=BankStatementResponse)
async def confirm_statement_upload(
    statement_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
    storage: StorageService = Depends(get_storage_service),
):
    """Confirm that the file landed in storage."""
    statement = await _get_statement(db, statement_id, current_user.org_id)
    if statement.status == BankStatementStatus.UPLOADED:
        return BankStatementResponse.model_validate(statement)

    if not await storage.verify_upload(statement.object_path):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Upload not found in storage",
        )

    statement.status = BankStatementStatus.UPLOADED
    statement.uploaded_at = datetime.utcnow()
    await AuditService(db).log_for_user(
        current_user,
        AuditAction.STATEMENT_UPLOADED,
        "bank_statement",
        statement.id,
        details={"file_name": statement.file_name},
    )
    await db.commit()
    logger.info(f"[BANKING] Statement {statement.id} uploaded")

    return BankStatementResponse.model_validate(statement)


@router.get("/accounts/{account_id}/statements", response_model=List[BankStatementResponse])
async def list_statements(
    account_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    await _get_bank_account(db, account_id, current_user.org_id)

    result = await db.execute(
        select(BankStatement)
        .where(BankStatement.bank_account_id == account_id)
        .order_by(BankStatement.statement_date.desc())
    )
    return [BankStatementResponse.model_validate(s) for s in result.scalars().all()]


@router.get("/statements/{statement_id}/download")
async def get_statement_download_url(
    statement_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
    storage: StorageService = Depends(get_storage_service),
):
    statement = await _get_statement(db, statement_id, current_user.org_id)
    if statement.status != BankStatementStatus.UPLOADED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Statement has not been uploaded")

    url = await storage.get_download_url(statement.object_path)
    return {"download_url": url}


# Reconciliations

@router.post("/reconciliations", response_model=ReconciliationResponse, status_code=status.HTTP_201_CREATED)
async def create_reconciliation(
    data: ReconciliationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    account = await _get_bank_account(db, data.bank_account_id, current_user.org_id)
    if data.statement_id:
        statement = await _get_statement(db, data.statement_id, current_user.org_id)
        if statement.bank_account_id != account.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Statement belongs to a different bank account",
            )

    reconciliation = BankReconciliation(**data.model_dump())
    db.add(reconciliation)
    await db.flush()
    await ReconciliationService(db).recalculate(reconciliation)
    await db.commit()
    await db.refresh(reconciliation)

    return ReconciliationResponse.model_validate(reconciliation)


@router.get("/reconciliations/{reconciliation_id}", response_model=ReconciliationResponse)
async def get_reconciliation(
    reconciliation_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    reconciliation = await _get_reconciliation(db, reconciliation_id, current_user.org_id)
    return ReconciliationResponse.model_validate(reconciliation)


@router.post("/reconciliations/{reconciliation_id}/clear", response_model=ReconciliationResponse)
async def toggle_cleared(
    reconciliation_id: UUID,
    data: ClearTransactionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    """Mark a transaction cleared, or uncleared if it already was."""
    reconciliation = await _get_reconciliation(db, reconciliation_id, current_user.org_id)
    await ReconciliationService(db).toggle_cleared(reconciliation, data.transaction_id)
    await db.commit()
    await db.refresh(reconciliation)

    return ReconciliationResponse.model_validate(reconciliation)


@router.post("/reconciliations/{reconciliation_id}/complete", response_model=ReconciliationResponse)
async def complete_reconciliation(
    reconciliation_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_accounting),
):
    reconciliation = await _get_reconciliation(db, reconciliation_id, current_user.org_id)
    await ReconciliationService(db).complete(reconciliation, current_user)
    await db.commit()
    await db.refresh(reconciliation)

    return ReconciliationResponse.model_validate(reconciliation)
