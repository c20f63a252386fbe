"""
General ledger: journal entries and GL balances.

Balances are stored in each account's normal direction: asset and expense
accounts grow with debits, liability, equity and revenue accounts with credits.
"""

import logging
from datetime import date, datetime
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.errors import ServiceError
from hoa_portal.core.security import AuthenticatedUser
from hoa_portal.models.accounting import GLAccount, JournalEntry, JournalEntryLine
from hoa_portal.models.enums import AuditAction, GLAccountType, JournalEntryStatus
from hoa_portal.schemas.accounting import JournalEntryCreate
from hoa_portal.services.audit import AuditService

logger = logging.getLogger(__name__)

DEBIT_NORMAL = {GLAccountType.ASSET, GLAccountType.EXPENSE}


def balance_delta(account_type: GLAccountType, debit_cents: int, credit_cents: int) -> int:
    """Change to an account's balance from one journal line."""
    if account_type in DEBIT_NORMAL:
        return debit_cents - credit_cents
    return credit_cents - debit_cents


class LedgerService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _accounts(self, association_id: UUID, account_ids: set[UUID]) -> dict[UUID, GLAccount]:
        result = await self.db.execute(
            select(GLAccount).where(
                GLAccount.id.in_(account_ids),
                GLAccount.association_id == association_id,
            )
        )
        return {a.id: a for a in result.scalars().all()}

    async def _next_entry_number(self, association_id: UUID, year: int) -> str:
        count = await self.db.scalar(
            select(func.count(JournalEntry.id)).where(
                JournalEntry.association_id == association_id,
                JournalEntry.entry_date >= date(year, 1, 1),
                JournalEntry.entry_date < date(year + 1, 1, 1),
            )
        )
        return f"JE-{year}-{(count or 0) + 1:04d}"

    async def create_entry(self, data: JournalEntryCreate, current_user: AuthenticatedUser) -> JournalEntry:
        """Create a draft entry. Every line must use an active account of the association."""
        account_ids = {line.gl_account_id for line in data.lines}
        accounts = await self._accounts(data.association_id, account_ids)
        missing = account_ids - accounts.keys()
        if missing:
            raise ServiceError(
                "GL account not found for this association",
                status_code=status.HTTP_400_BAD_REQUEST,
                details=[str(m) for m in missing],
            )
        inactive = [a.code for a in accounts.values() if not a.is_active]
        if inactive:
            raise ServiceError(
                f"GL account is inactive: {', '.join(sorted(inactive))}",
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        entry = JournalEntry(
            association_id=data.association_id,
            entry_number=await self._next_entry_number(data.association_id, data.entry_date.year),
            entry_date=data.entry_date,
            description=data.description,
            reference=data.reference,
            status=JournalEntryStatus.DRAFT,
            created_by=current_user.db_user_id,
            lines=[
                JournalEntryLine(
                    gl_account_id=line.gl_account_id,
                    position=index,
                    description=line.description,
                    debit_cents=line.debit_cents,
                    credit_cents=line.credit_cents,
                )
                for index, line in enumerate(data.lines)
            ],
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def _apply(self, entry: JournalEntry, sign: int) -> None:
        accounts = await self._accounts(entry.association_id, {line.gl_account_id for line in entry.lines})
        for line in entry.lines:
            account = accounts[line.gl_account_id]
            account.balance_cents += sign * balance_delta(
                account.account_type, line.debit_cents, line.credit_cents
            )

    async def post_entry(self, entry: JournalEntry, current_user: AuthenticatedUser) -> JournalEntry:
        if entry.status != JournalEntryStatus.DRAFT:
            raise ServiceError(
                f"Only draft entries can be posted (entry is {entry.status.value})",
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        await self._apply(entry, 1)
        entry.status = JournalEntryStatus.POSTED
        entry.posted_at = datetime.utcnow()
        await AuditService(self.db).log_for_user(
            current_user,
            AuditAction.JOURNAL_ENTRY_POSTED,
            "journal_entry",
            entry.id,
            details={"entry_number": entry.entry_number},
        )
        logger.info(f"[LEDGER] Posted {entry.entry_number} ({entry.id})")
        return entry

    async def void_entry(self, entry: JournalEntry, current_user: AuthenticatedUser) -> JournalEntry:
        """Reverse a posted entry's effect on GL balances."""
        if entry.status != JournalEntryStatus.POSTED:
            raise ServiceError(
                "Only posted entries can be voided",
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        await self._apply(entry, -1)
        entry.status = JournalEntryStatus.VOID
        await AuditService(self.db).log_for_user(
            current_user,
            AuditAction.JOURNAL_ENTRY_VOIDED,
            "journal_entry",
            entry.id,
            details={"entry_number": entry.entry_number},
        )
        logger.info(f"[LEDGER] Voided {entry.entry_number} ({entry.id})")
        return entry
