"""Audit logging service."""

from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.security import AuthenticatedUser
from hoa_portal.models.audit import AuditLog
from hoa_portal.models.enums import AuditAction


class AuditService:
    """Service for creating audit log entries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log(
        self,
        action: AuditAction,
        resource_type: str,
        resource_id: UUID,
        org_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        details: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditLog:
        """Create an audit log entry."""
        entry = AuditLog(
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            org_id=org_id,
            user_id=user_id,
            details=details or {},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def log_for_user(
        self,
        current_user: AuthenticatedUser,
        action: AuditAction,
        resource_type: str,
        resource_id: UUID,
        details: Optional[dict[str, Any]] = None,
    ) -> AuditLog:
        """Log an action performed by the authenticated caller."""
        return await self.log(
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            org_id=current_user.org_id,
            user_id=current_user.db_user_id,
            details=details,
        )

    async def log_compliance_status_changed(
        self,
        current_user: AuthenticatedUser,
        issue_id: UUID,
        old_status: str,
        new_status: str,
    ) -> AuditLog:
        return await self.log_for_user(
            current_user,
            AuditAction.COMPLIANCE_STATUS_CHANGED,
            "compliance_issue",
            issue_id,
            details={"from": old_status, "to": new_status},
        )

    async def log_reconciliation_completed(
        self,
        current_user: AuthenticatedUser,
        reconciliation_id: UUID,
        statement_balance_cents: int,
    ) -> AuditLog:
        return await self.log_for_user(
            current_user,
            AuditAction.RECONCILIATION_COMPLETED,
            "bank_reconciliation",
            reconciliation_id,
            details={"statement_balance_cents": statement_balance_cents},
        )

    async def log_invoice_processed(
        self,
        current_user: AuthenticatedUser,
        processing_id: UUID,
        confidence: float,
        invoice_id: Optional[UUID] = None,
    ) -> AuditLog:
        """Log an AI invoice extraction run."""
        return await self.log_for_user(
            current_user,
            AuditAction.INVOICE_AI_PROCESSED,
            "ai_processing_record",
            processing_id,
            details={
                "confidence": confidence,
                "invoice_id": str(invoice_id) if invoice_id else None,
            },
        )
