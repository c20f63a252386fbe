"""SQLAlchemy models for the HOA Portal."""

from hoa_portal.models.user import User
from hoa_portal.models.org import Organization, OrgMembership
from hoa_portal.models.association import Association, Property, Resident
from hoa_portal.models.vendor import Vendor, VendorContract, ContractAmendment, WorkOrder
from hoa_portal.models.invoice import Invoice, InvoiceLineItem, VendorPattern, AIProcessingRecord
from hoa_portal.models.accounting import GLAccount, JournalEntry, JournalEntryLine, FinancialStatement
from hoa_portal.models.banking import BankAccount, BankTransaction, BankStatement, BankReconciliation
from hoa_portal.models.lead import Lead
from hoa_portal.models.compliance import ComplianceIssue
from hoa_portal.models.workflow import Workflow
from hoa_portal.models.amenity import Amenity, AmenityBooking
from hoa_portal.models.poll import CommunityPoll, PollResponse
from hoa_portal.models.communication import RecipientGroup, Message, CommunicationLog
from hoa_portal.models.widget import PortalWidget
from hoa_portal.models.audit import AuditLog
from hoa_portal.models.jobs import JobsOutbox

__all__ = [
    "User",
    "Organization",
    "OrgMembership",
    "Association",
    "Property",
    "Resident",
    "Vendor",
    "VendorContract",
    "ContractAmendment",
    "WorkOrder",
    "Invoice",
    "InvoiceLineItem",
    "VendorPattern",
    "AIProcessingRecord",
    "GLAccount",
    "JournalEntry",
    "JournalEntryLine",
    "FinancialStatement",
    "BankAccount",
    "BankTransaction",
    "BankStatement",
    "BankReconciliation",
    "Lead",
    "ComplianceIssue",
    "Workflow",
    "Amenity",
    "AmenityBooking",
    "CommunityPoll",
    "PollResponse",
    "RecipientGroup",
    "Message",
    "CommunicationLog",
    "PortalWidget",
    "AuditLog",
    "JobsOutbox",
]
