"""Bank account, statement and reconciliation schemas."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from hoa_portal.schemas.base import BaseSchema, IDMixin, TimestampMixin
from hoa_portal.models.enums import BankStatementStatus, ReconciliationStatus


class BankAccountCreate(BaseSchema):
    association_id: UUID
    name: str = Field(..., min_length=2, max_length=255)
    institution: Optional[str] = Field(None, max_length=255)
    account_number_last4: Optional[str] = Field(None, pattern=r"^\d{4}$")
    account_type: str = Field("operating", max_length=50)
    gl_account_id: Optional[UUID] = None
    current_balance_cents: int = 0


class BankAccountResponse(BaseSchema, IDMixin, TimestampMixin):
    association_id: UUID
    name: str
    institution: Optional[str] = None
    account_number_last4: Optional[str] = None
    account_type: str
    gl_account_id: Optional[UUID] = None
    current_balance_cents: int
    is_active: bool


class BankTransactionCreate(BaseSchema):
    transaction_date: date
    description: str = Field(..., min_length=1)
    amount_cents: int
    reference: Optional[str] = Field(None, max_length=100)


class BankTransactionResponse(BaseSchema, IDMixin):
    bank_account_id: UUID
    transaction_date: date
    description: str
    amount_cents: int
    reference: Optional[str] = None
    is_cleared: bool
    reconciliation_id: Optional[UUID] = None
    created_at: datetime


class StatementUploadRequest(BaseSchema):
    """Request a presigned URL for a bank statement file."""

    statement_date: date
    file_name: str = Field(..., min_length=1, max_length=255)
    mime_type: str
    file_size_bytes: int = Field(..., gt=0)


class StatementUploadResponse(BaseSchema):
    statement_id: UUID
    upload_url: str
    object_path: str
    expires_at: datetime


class BankStatementResponse(BaseSchema, IDMixin):
    bank_account_id: UUID
    statement_date: date
    file_name: str
    mime_type: str
    status: BankStatementStatus
    created_at: datetime
    uploaded_at: Optional[datetime] = None


class ReconciliationCreate(BaseSchema):
    bank_account_id: UUID
    statement_date: date
    statement_balance_cents: int
    beginning_balance_cents: int = 0
    statement_id: Optional[UUID] = None
    notes: Optional[str] = None


class ClearTransactionRequest(BaseSchema):
    transaction_id: UUID


class ReconciliationResponse(BaseSchema, IDMixin, TimestampMixin):
    bank_account_id: UUID
    statement_id: Optional[UUID] = None
    statement_date: date
    beginning_balance_cents: int
    statement_balance_cents: int
    reconciled_balance_cents: int
    difference_cents: int
    status: ReconciliationStatus
    notes: Optional[str] = None
    reconciled_at: Optional[datetime] = None
