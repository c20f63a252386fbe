"""Enumeration types for the HOA Portal domain model."""

from enum import Enum


class OrgRole(str, Enum):
    """Role within a management organization."""
    ORG_OWNER = "ORG_OWNER"
    ORG_ADMIN = "ORG_ADMIN"
    MANAGER = "MANAGER"
    ACCOUNTANT = "ACCOUNTANT"
    BOARD_MEMBER = "BOARD_MEMBER"
    STAFF = "STAFF"


class PropertyType(str, Enum):
    """Type of property within an association."""
    SINGLE_FAMILY = "single_family"
    TOWNHOUSE = "townhouse"
    CONDO = "condo"
    MULTI_FAMILY = "multi_family"
    COMMERCIAL = "commercial"
    LOT = "lot"


class PropertyStatus(str, Enum):
    OCCUPIED = "occupied"
    VACANT = "vacant"
    FOR_SALE = "for_sale"


class ResidentType(str, Enum):
    """Relationship of a resident to the property."""
    OWNER = "owner"
    TENANT = "tenant"
    FAMILY_MEMBER = "family_member"
    OTHER = "other"


class ContractStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"


class WorkOrderPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class WorkOrderStatus(str, Enum):
    """Status of a vendor work order."""
    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InvoiceStatus(str, Enum):
    """Status of a vendor invoice."""
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    PAID = "paid"
    VOID = "void"


class AIProcessingStatus(str, Enum):
    """Status of an AI processing record (the invoice queue row)."""
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class GLAccountType(str, Enum):
    """Chart-of-accounts classification."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class JournalEntryStatus(str, Enum):
    DRAFT = "draft"
    POSTED = "posted"
    VOID = "void"


class StatementType(str, Enum):
    """Kind of generated financial statement."""
    INCOME = "income"
    BALANCE_SHEET = "balance_sheet"
    CASH_FLOW = "cash_flow"


class BankStatementStatus(str, Enum):
    PENDING_UPLOAD = "pending_upload"
    UPLOADED = "uploaded"


class ReconciliationStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class LeadStatus(str, Enum):
    """Sales pipeline stage of a lead."""
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    WON = "won"
    LOST = "lost"


class ComplianceStatus(str, Enum):
    """Status of a compliance issue (violation)."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    ESCALATED = "escalated"
    RESOLVED = "resolved"


class WorkflowStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class BookingStatus(str, Enum):
    """Status of an amenity booking."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class RecipientGroupType(str, Enum):
    SYSTEM = "system"
    CUSTOM = "custom"


class MessageStatus(str, Enum):
    """Delivery status of a message or one of its recipients."""
    QUEUED = "queued"
    SENT = "sent"
    FAILED = "failed"


class AuditAction(str, Enum):
    """Actions tracked in audit log."""
    ASSOCIATION_CREATED = "association_created"
    VENDOR_ASSIGNED = "vendor_assigned"
    INVOICE_AI_PROCESSED = "invoice_ai_processed"
    LEAD_AI_PROCESSED = "lead_ai_processed"
    JOURNAL_ENTRY_POSTED = "journal_entry_posted"
    JOURNAL_ENTRY_VOIDED = "journal_entry_voided"
    STATEMENT_GENERATED = "statement_generated"
    STATEMENT_UPLOADED = "statement_uploaded"
    RECONCILIATION_COMPLETED = "reconciliation_completed"
    COMPLIANCE_STATUS_CHANGED = "compliance_status_changed"
    BOOKING_CREATED = "booking_created"
    POLL_CLOSED = "poll_closed"
    MESSAGE_QUEUED = "message_queued"


class JobStatus(str, Enum):
    """Status of async job in outbox."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    DEAD_LETTER = "dead_letter"
