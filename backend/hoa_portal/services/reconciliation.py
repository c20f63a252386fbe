"""
Bank reconciliation.

reconciled = beginning balance + cleared transactions dated on or before the
statement date; difference = statement balance - reconciled. A reconciliation
can only be completed at a zero difference.
"""

import logging
from datetime import date, datetime
from typing import Iterable

from fastapi import status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.errors import ServiceError
from hoa_portal.core.security import AuthenticatedUser
from hoa_portal.models.banking import BankReconciliation, BankTransaction
from hoa_portal.models.enums import ReconciliationStatus
from hoa_portal.services.audit import AuditService

logger = logging.getLogger(__name__)


def compute_balances(
    beginning_balance_cents: int,
    statement_balance_cents: int,
    statement_date: date,
    transactions: Iterable[BankTransaction],
) -> tuple[int, int]:
    """Return (reconciled_balance_cents, difference_cents)."""
    cleared = sum(
        t.amount_cents
        for t in transactions
        if t.is_cleared and t.transaction_date <= statement_date
    )
    reconciled = beginning_balance_cents + cleared
    return reconciled, statement_balance_cents - reconciled


class ReconciliationService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _transactions(self, reconciliation: BankReconciliation) -> list[BankTransaction]:
        result = await self.db.execute(
            select(BankTransaction)
            .where(
                BankTransaction.bank_account_id == reconciliation.bank_account_id,
                # cleared by an earlier reconciliation: already in the beginning balance
                or_(
                    BankTransaction.reconciliation_id.is_(None),
                    BankTransaction.reconciliation_id == reconciliation.id,
                ),
            )
            .order_by(BankTransaction.transaction_date, BankTransaction.created_at)
        )
        return list(result.scalars().all())

    def _require_open(self, reconciliation: BankReconciliation) -> None:
        if reconciliation.status == ReconciliationStatus.COMPLETED:
            raise ServiceError(
                "Reconciliation is completed and cannot be changed",
                status_code=status.HTTP_400_BAD_REQUEST,
            )

    async def recalculate(self, reconciliation: BankReconciliation) -> BankReconciliation:
        reconciled, difference = compute_balances(
            reconciliation.beginning_balance_cents,
            reconciliation.statement_balance_cents,
            reconciliation.statement_date,
            await self._transactions(reconciliation),
        )
        reconciliation.reconciled_balance_cents = reconciled
        reconciliation.difference_cents = difference
        return reconciliation

    async def toggle_cleared(self, reconciliation: BankReconciliation, transaction_id) -> BankTransaction:
        """Flip a transaction's cleared flag and recompute the balances."""
        self._require_open(reconciliation)
        result = await self.db.execute(
            select(BankTransaction).where(
                BankTransaction.id == transaction_id,
                BankTransaction.bank_account_id == reconciliation.bank_account_id,
            )
        )
        transaction = result.scalar_one_or_none()
        if not transaction:
            raise ServiceError("Transaction not found", status_code=status.HTTP_404_NOT_FOUND)
        if transaction.reconciliation_id not in (None, reconciliation.id):
            raise ServiceError(
                "Transaction belongs to another reconciliation",
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        if not transaction.is_cleared and transaction.transaction_date > reconciliation.statement_date:
            raise ServiceError(
                "Transaction is dated after the statement date",
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        transaction.is_cleared = not transaction.is_cleared
        transaction.reconciliation_id = reconciliation.id if transaction.is_cleared else None
        await self.db.flush()
        await self.recalculate(reconciliation)
        return transaction

    async def complete(
        self,
        reconciliation: BankReconciliation,
        current_user: AuthenticatedUser,
    ) -> BankReconciliation:
        self._require_open(reconciliation)
        await self.recalculate(reconciliation)
        if reconciliation.difference_cents != 0:
            raise ServiceError(
                "Reconciliation is out of balance",
                status_code=status.HTTP_400_BAD_REQUEST,
                details={"difference_cents": reconciliation.difference_cents},
            )

        reconciliation.status = ReconciliationStatus.COMPLETED
        reconciliation.reconciled_at = datetime.utcnow()
        reconciliation.reconciled_by = current_user.db_user_id
        await AuditService(self.db).log_reconciliation_completed(
            current_user, reconciliation.id, reconciliation.statement_balance_cents
        )
        logger.info(f"[BANKING] Reconciliation {reconciliation.id} completed")
        return reconciliation
