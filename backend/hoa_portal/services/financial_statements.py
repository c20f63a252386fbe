"""
Financial statements built from posted journal lines.

Income statement and cash flow cover activity inside the period; the balance
sheet is cumulative through period_end.
"""

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.errors import ServiceError
from hoa_portal.core.security import AuthenticatedUser
from hoa_portal.models.accounting import FinancialStatement, GLAccount, JournalEntry, JournalEntryLine
from hoa_portal.models.enums import AuditAction, GLAccountType, JournalEntryStatus, StatementType
from hoa_portal.schemas.accounting import StatementRequest
from hoa_portal.services.audit import AuditService
from hoa_portal.services.ledger import DEBIT_NORMAL, balance_delta

logger = logging.getLogger(__name__)

STATEMENT_NAMES = {
    StatementType.INCOME: "Income Statement",
    StatementType.BALANCE_SHEET: "Balance Sheet",
    StatementType.CASH_FLOW: "Cash Flow Statement",
}


def parse_statement_type(value: str) -> StatementType:
    try:
        return StatementType(value)
    except ValueError:
        raise ServiceError("Invalid statement type", status_code=status.HTTP_400_BAD_REQUEST)


def _section(accounts: list[GLAccount], amounts: dict[UUID, int]) -> dict[str, Any]:
    rows = [
        {
            "id": str(a.id),
            "code": a.code,
            "name": a.name,
            "category": a.category,
            "amount_cents": amounts.get(a.id, 0),
        }
        for a in sorted(accounts, key=lambda a: a.code)
    ]
    return {"accounts": rows, "total_cents": sum(r["amount_cents"] for r in rows)}


def income_statement(accounts: list[GLAccount], amounts: dict[UUID, int]) -> dict[str, Any]:
    revenue = _section([a for a in accounts if a.account_type == GLAccountType.REVENUE], amounts)
    expenses = _section([a for a in accounts if a.account_type == GLAccountType.EXPENSE], amounts)
    return {
        "revenue": revenue,
        "expenses": expenses,
        "net_income_cents": revenue["total_cents"] - expenses["total_cents"],
    }


def balance_sheet(accounts: list[GLAccount], amounts: dict[UUID, int]) -> dict[str, Any]:
    assets = _section([a for a in accounts if a.account_type == GLAccountType.ASSET], amounts)
    liabilities = _section([a for a in accounts if a.account_type == GLAccountType.LIABILITY], amounts)
    equity = _section([a for a in accounts if a.account_type == GLAccountType.EQUITY], amounts)
    # Current-period earnings not yet closed to equity
    earnings = sum(
        amounts.get(a.id, 0) * (1 if a.account_type == GLAccountType.REVENUE else -1)
        for a in accounts
        if a.account_type in (GLAccountType.REVENUE, GLAccountType.EXPENSE)
    )
    return {
        "assets": assets,
        "liabilities": liabilities,
        "equity": equity,
        "retained_earnings_cents": earnings,
        "total_liabilities_and_equity_cents": liabilities["total_cents"] + equity["total_cents"] + earnings,
    }


def _cash_section(accounts: list[GLAccount], amounts: dict[UUID, int], category: str) -> dict[str, Any]:
    """Cash effect of the accounts in a category: growth in an asset is cash spent."""
    matching = [a for a in accounts if (a.category or "").lower() == category]
    cash = {
        a.id: -amounts.get(a.id, 0) if a.account_type in DEBIT_NORMAL else amounts.get(a.id, 0)
        for a in matching
    }
    return _section(matching, cash)


def cash_flow_statement(accounts: list[GLAccount], amounts: dict[UUID, int]) -> dict[str, Any]:
    income = income_statement(accounts, amounts)
    investing = _cash_section(accounts, amounts, "investing")
    financing = _cash_section(accounts, amounts, "financing")
    operating_total = income["net_income_cents"]
    return {
        "operating": {
            "revenue_cents": income["revenue"]["total_cents"],
            "expense_cents": income["expenses"]["total_cents"],
            "total_cents": operating_total,
        },
        "investing": investing,
        "financing": financing,
        "net_cash_flow_cents": operating_total + investing["total_cents"] + financing["total_cents"],
    }


BUILDERS = {
    StatementType.INCOME: income_statement,
    StatementType.BALANCE_SHEET: balance_sheet,
    StatementType.CASH_FLOW: cash_flow_statement,
}


class FinancialStatementService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def account_activity(
        self,
        association_id: UUID,
        period_end: date,
        period_start: Optional[date] = None,
    ) -> tuple[list[GLAccount], dict[UUID, int]]:
        """Accounts of the association and their net posted activity, in normal direction."""
        result = await self.db.execute(
            select(GLAccount).where(GLAccount.association_id == association_id)
        )
        accounts = list(result.scalars().all())
        types = {a.id: a.account_type for a in accounts}

        query = (
            select(JournalEntryLine)
            .join(JournalEntry, JournalEntryLine.entry_id == JournalEntry.id)
            .where(
                JournalEntry.association_id == association_id,
                JournalEntry.status == JournalEntryStatus.POSTED,
                JournalEntry.entry_date <= period_end,
            )
        )
        if period_start is not None:
            query = query.where(JournalEntry.entry_date >= period_start)

        amounts: dict[UUID, int] = defaultdict(int)
        for line in (await self.db.execute(query)).scalars().all():
            account_type = types.get(line.gl_account_id)
            if account_type is None:
                continue
            amounts[line.gl_account_id] += balance_delta(account_type, line.debit_cents, line.credit_cents)
        return accounts, dict(amounts)

    async def generate(
        self,
        request: StatementRequest,
        current_user: AuthenticatedUser,
    ) -> FinancialStatement:
        statement_type = parse_statement_type(request.statement_type)
        cumulative = statement_type == StatementType.BALANCE_SHEET
        accounts, amounts = await self.account_activity(
            request.association_id,
            request.period_end,
            None if cumulative else request.period_start,
        )

        data = BUILDERS[statement_type](accounts, amounts)
        data.update({
            "statement_name": STATEMENT_NAMES[statement_type],
            "period_start": request.period_start.isoformat(),
            "period_end": request.period_end.isoformat(),
            "generated_at": datetime.utcnow().isoformat(),
        })

        statement = FinancialStatement(
            association_id=request.association_id,
            statement_type=statement_type,
            period_start=request.period_start,
            period_end=request.period_end,
            data=data,
            generated_by=current_user.db_user_id,
        )
        self.db.add(statement)
        await self.db.flush()
        await AuditService(self.db).log_for_user(
            current_user,
            AuditAction.STATEMENT_GENERATED,
            "financial_statement",
            statement.id,
            details={"statement_type": statement_type.value},
        )
        logger.info(
            f"[STATEMENTS] Generated {statement_type.value} for {request.association_id} "
            f"({request.period_start} to {request.period_end})"
        )
        return statement
