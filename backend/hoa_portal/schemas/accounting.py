"""GL account, journal entry and financial statement schemas."""

from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import Field, model_validator

from hoa_portal.schemas.base import BaseSchema, IDMixin, TimestampMixin
from hoa_portal.models.enums import GLAccountType, JournalEntryStatus, StatementType


class GLAccountCreate(BaseSchema):
    association_id: UUID
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=255)
    account_type: GLAccountType
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class GLAccountUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class GLAccountResponse(BaseSchema, IDMixin, TimestampMixin):
    association_id: UUID
    code: str
    name: str
    account_type: GLAccountType
    category: Optional[str] = None
    description: Optional[str] = None
    balance_cents: int
    is_active: bool


class JournalLineInput(BaseSchema):
    gl_account_id: UUID
    description: Optional[str] = None
    debit_cents: int = Field(0, ge=0)
    credit_cents: int = Field(0, ge=0)

    @model_validator(mode="after")
    def one_side_only(self) -> "JournalLineInput":
        if (self.debit_cents > 0) == (self.credit_cents > 0):
            raise ValueError("Each line needs exactly one of debit_cents or credit_cents")
        return self


class JournalEntryCreate(BaseSchema):
    """Create a draft journal entry. Debits must equal credits."""

    association_id: UUID
    entry_date: date
    description: str = Field(..., min_length=1)
    reference: Optional[str] = Field(None, max_length=100)
    lines: list[JournalLineInput] = Field(..., min_length=2)

    @model_validator(mode="after")
    def balanced(self) -> "JournalEntryCreate":
        debits = sum(line.debit_cents for line in self.lines)
        credits = sum(line.credit_cents for line in self.lines)
        if debits != credits:
            raise ValueError(f"Entry is out of balance: debits {debits} != credits {credits}")
        return self


class JournalLineResponse(BaseSchema, IDMixin):
    gl_account_id: UUID
    position: int
    description: Optional[str] = None
    debit_cents: int
    credit_cents: int


class JournalEntryResponse(BaseSchema, IDMixin, TimestampMixin):
    association_id: UUID
    entry_number: Optional[str] = None
    entry_date: date
    description: str
    reference: Optional[str] = None
    status: JournalEntryStatus
    posted_at: Optional[datetime] = None
    lines: list[JournalLineResponse]


class StatementRequest(BaseSchema):
    """Generate a financial statement for a period."""

    association_id: UUID
    statement_type: str
    period_start: date
    period_end: date

    @model_validator(mode="after")
    def validate_period(self) -> "StatementRequest":
        if self.period_end < self.period_start:
            raise ValueError("period_end must be on or after period_start")
        return self


class StatementResponse(BaseSchema, IDMixin):
    association_id: UUID
    statement_type: StatementType
    period_start: date
    period_end: date
    data: dict[str, Any]
    created_at: datetime
