"""Initial HOA Portal schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

Organizations, associations, vendors, invoices, ledger, banking, compliance,
amenities, polls, communications, widgets, audit log and jobs outbox.
Money as INTEGER CENTS. Enum labels are the Python member names.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(name: str, *labels: str) -> postgresql.ENUM:
    return postgresql.ENUM(*labels, name=name, create_type=False)


orgrole = _enum('orgrole', 'ORG_OWNER', 'ORG_ADMIN', 'MANAGER', 'ACCOUNTANT', 'BOARD_MEMBER', 'STAFF')
propertytype = _enum('propertytype', 'SINGLE_FAMILY', 'TOWNHOUSE', 'CONDO', 'MULTI_FAMILY', 'COMMERCIAL', 'LOT')
propertystatus = _enum('propertystatus', 'OCCUPIED', 'VACANT', 'FOR_SALE')
residenttype = _enum('residenttype', 'OWNER', 'TENANT', 'FAMILY_MEMBER', 'OTHER')
contractstatus = _enum('contractstatus', 'DRAFT', 'ACTIVE', 'EXPIRED', 'TERMINATED')
workorderpriority = _enum('workorderpriority', 'LOW', 'MEDIUM', 'HIGH', 'URGENT')
workorderstatus = _enum('workorderstatus', 'OPEN', 'ASSIGNED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED')
invoicestatus = _enum('invoicestatus', 'DRAFT', 'PENDING_APPROVAL', 'APPROVED', 'PAID', 'VOID')
aiprocessingstatus = _enum('aiprocessingstatus', 'PROCESSING', 'COMPLETED', 'FAILED')
glaccounttype = _enum('glaccounttype', 'ASSET', 'LIABILITY', 'EQUITY', 'REVENUE', 'EXPENSE')
journalentrystatus = _enum('journalentrystatus', 'DRAFT', 'POSTED', 'VOID')
statementtype = _enum('statementtype', 'INCOME', 'BALANCE_SHEET', 'CASH_FLOW')
bankstatementstatus = _enum('bankstatementstatus', 'PENDING_UPLOAD', 'UPLOADED')
reconciliationstatus = _enum('reconciliationstatus', 'IN_PROGRESS', 'COMPLETED')
leadstatus = _enum('leadstatus', 'NEW', 'CONTACTED', 'QUALIFIED', 'PROPOSAL', 'WON', 'LOST')
compliancestatus = _enum('compliancestatus', 'OPEN', 'IN_PROGRESS', 'ESCALATED', 'RESOLVED')
workflowstatus = _enum('workflowstatus', 'DRAFT', 'ACTIVE', 'PAUSED', 'COMPLETED', 'ARCHIVED')
bookingstatus = _enum('bookingstatus', 'PENDING', 'CONFIRMED', 'CANCELLED')
recipientgrouptype = _enum('recipientgrouptype', 'SYSTEM', 'CUSTOM')
messagestatus = _enum('messagestatus', 'QUEUED', 'SENT', 'FAILED')
auditaction = _enum(
    'auditaction',
    'ASSOCIATION_CREATED', 'VENDOR_ASSIGNED', 'INVOICE_AI_PROCESSED', 'LEAD_AI_PROCESSED',
    'JOURNAL_ENTRY_POSTED', 'JOURNAL_ENTRY_VOIDED', 'STATEMENT_GENERATED', 'STATEMENT_UPLOADED',
    'RECONCILIATION_COMPLETED', 'COMPLIANCE_STATUS_CHANGED', 'BOOKING_CREATED', 'POLL_CLOSED',
    'MESSAGE_QUEUED',
)
jobstatus = _enum('jobstatus', 'PENDING', 'PROCESSING', 'COMPLETED', 'FAILED', 'DEAD_LETTER')

ENUMS = (
    orgrole, propertytype, propertystatus, residenttype, contractstatus, workorderpriority,
    workorderstatus, invoicestatus, aiprocessingstatus, glaccounttype, journalentrystatus,
    statementtype, bankstatementstatus, reconciliationstatus, leadstatus, compliancestatus,
    workflowstatus, bookingstatus, recipientgrouptype, messagestatus, auditaction, jobstatus,
)

UUID = postgresql.UUID(as_uuid=True)
JSONB = postgresql.JSONB()


def _id() -> sa.Column:
    return sa.Column('id', UUID, primary_key=True)


def _fk(name: str, target: str, ondelete: str = 'CASCADE', nullable: bool = False, index: bool = True) -> sa.Column:
    return sa.Column(name, UUID, sa.ForeignKey(target, ondelete=ondelete), nullable=nullable, index=index)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    # === USERS / ORGANIZATIONS ===
    op.create_table(
        'users',
        _id(),
        sa.Column('firebase_uid', sa.String(128), unique=True, nullable=False, index=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean(), default=True),
        *_timestamps(),
    )

    op.create_table(
        'organizations',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(100), unique=True, nullable=False, index=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('timezone', sa.String(50), default='America/New_York'),
        *_timestamps(),
    )

    op.create_table(
        'org_memberships',
        _id(),
        _fk('org_id', 'organizations.id'),
        _fk('user_id', 'users.id'),
        sa.Column('role', orgrole, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('org_id', 'user_id', name='uq_org_membership'),
    )

    # === ASSOCIATIONS / PROPERTIES / RESIDENTS ===
    op.create_table(
        'associations',
        _id(),
        _fk('org_id', 'organizations.id'),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(50), nullable=True),
        sa.Column('address', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(50), nullable=True),
        sa.Column('zip_code', sa.String(20), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('website', sa.String(255), nullable=True),
        sa.Column('total_units', sa.Integer(), nullable=True),
        sa.Column('founded_year', sa.Integer(), nullable=True),
        sa.Column('fiscal_year_start_month', sa.Integer(), default=1),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        'properties',
        _id(),
        _fk('association_id', 'associations.id'),
        sa.Column('address', sa.String(255), nullable=False),
        sa.Column('unit_number', sa.String(50), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(50), nullable=True),
        sa.Column('zip_code', sa.String(20), nullable=True),
        sa.Column('property_type', propertytype, nullable=False),
        sa.Column('status', propertystatus, nullable=False),
        sa.Column('bedrooms', sa.Integer(), nullable=True),
        sa.Column('bathrooms', sa.Float(), nullable=True),
        sa.Column('square_feet', sa.Integer(), nullable=True),
        sa.Column('year_built', sa.Integer(), nullable=True),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        'residents',
        _id(),
        _fk('property_id', 'properties.id'),
        _fk('user_id', 'users.id', ondelete='SET NULL', nullable=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True, index=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('resident_type', residenttype, nullable=False),
        sa.Column('is_primary', sa.Boolean(), default=False),
        sa.Column('move_in_date', sa.Date(), nullable=True),
        sa.Column('move_out_date', sa.Date(), nullable=True),
        sa.Column('emergency_contact', sa.Text(), nullable=True),
        *_timestamps(),
    )

    # === VENDORS ===
    op.create_table(
        'vendors',
        _id(),
        _fk('org_id', 'organizations.id'),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('service_type', sa.String(100), nullable=True),
        sa.Column('contact_name', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('is_preferred', sa.Boolean(), default=False),
        sa.Column('rating', sa.Float(), nullable=True),
        sa.Column('insurance_expires_on', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'vendor_contracts',
        _id(),
        _fk('vendor_id', 'vendors.id'),
        _fk('association_id', 'associations.id'),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('original_value_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('current_value_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', contractstatus, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'contract_amendments',
        _id(),
        _fk('contract_id', 'vendor_contracts.id'),
        sa.Column('effective_date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('value_change_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'work_orders',
        _id(),
        _fk('association_id', 'associations.id'),
        _fk('property_id', 'properties.id', ondelete='SET NULL', nullable=True),
        _fk('vendor_id', 'vendors.id', ondelete='SET NULL', nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('priority', workorderpriority, nullable=False),
        sa.Column('status', workorderstatus, nullable=False, index=True),
        sa.Column('estimated_cost_cents', sa.Integer(), nullable=True),
        sa.Column('actual_cost_cents', sa.Integer(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )

    # === INVOICES / AI PROCESSING ===
    op.create_table(
        'invoices',
        _id(),
        _fk('association_id', 'associations.id'),
        _fk('vendor_id', 'vendors.id', ondelete='SET NULL', nullable=True),
        sa.Column('vendor_name', sa.String(255), nullable=True),
        sa.Column('invoice_number', sa.String(100), nullable=True, index=True),
        sa.Column('invoice_date', sa.Date(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('payment_date', sa.Date(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('amount_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', invoicestatus, nullable=False, index=True),
        sa.Column('source_document_url', sa.Text(), nullable=True),
        sa.Column('ai_confidence', sa.Float(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'invoice_line_items',
        _id(),
        _fk('invoice_id', 'invoices.id'),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=True),
        sa.Column('amount_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('gl_account_code', sa.String(20), nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('ai_confidence', sa.Float(), nullable=True),
    )

    op.create_table(
        'ai_vendor_patterns',
        _id(),
        _fk('association_id', 'associations.id'),
        sa.Column('vendor_key', sa.String(255), nullable=False),
        sa.Column('vendor_name', sa.String(255), nullable=False),
        sa.Column('gl_account_code', sa.String(20), nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('invoice_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('average_amount_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('association_id', 'vendor_key', name='uq_vendor_pattern'),
    )

    op.create_table(
        'ai_processing_records',
        _id(),
        _fk('association_id', 'associations.id'),
        _fk('invoice_id', 'invoices.id', ondelete='SET NULL', nullable=True),
        sa.Column('document_type', sa.String(50), nullable=False, server_default='invoice'),
        sa.Column('source_url', sa.Text(), nullable=False),
        sa.Column('status', aiprocessingstatus, nullable=False, index=True),
        sa.Column('extracted_text', sa.Text(), nullable=True),
        sa.Column('result', JSONB, nullable=True),
        sa.Column('confidence_scores', JSONB, nullable=True),
        sa.Column('overall_confidence', sa.Float(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('processing_time_ms', sa.Integer(), nullable=True),
        sa.Column('model_version', sa.String(100), nullable=True),
        sa.Column('created_by', UUID, nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'leads',
        _id(),
        _fk('org_id', 'organizations.id'),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('company', sa.String(255), nullable=True),
        sa.Column('street_address', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(50), nullable=True),
        sa.Column('zip_code', sa.String(20), nullable=True),
        sa.Column('source', sa.String(100), nullable=True),
        sa.Column('lead_type', sa.String(50), nullable=True),
        sa.Column('property_type', sa.String(50), nullable=True),
        sa.Column('unit_count', sa.Integer(), nullable=True),
        sa.Column('current_management', sa.String(255), nullable=True),
        sa.Column('interest_level', sa.String(20), nullable=True),
        sa.Column('timeline', sa.String(100), nullable=True),
        sa.Column('services_needed', JSONB, nullable=True),
        sa.Column('budget_range', sa.String(100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', leadstatus, nullable=False, index=True),
        sa.Column('ai_confidence', JSONB, nullable=True),
        sa.Column('ai_generated_fields', JSONB, nullable=True),
        sa.Column('ai_processed_at', sa.DateTime(), nullable=True),
        sa.Column('lead_score', sa.Float(), nullable=True),
        *_timestamps(),
    )

    # === GENERAL LEDGER ===
    op.create_table(
        'gl_accounts',
        _id(),
        _fk('association_id', 'associations.id'),
        sa.Column('code', sa.String(20), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('account_type', glaccounttype, nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('balance_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('association_id', 'code', name='uq_gl_account_code'),
    )

    op.create_table(
        'journal_entries',
        _id(),
        _fk('association_id', 'associations.id'),
        sa.Column('entry_number', sa.String(50), nullable=True),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('reference', sa.String(100), nullable=True),
        sa.Column('status', journalentrystatus, nullable=False),
        sa.Column('posted_at', sa.DateTime(), nullable=True),
        sa.Column('created_by', UUID, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'journal_entry_lines',
        _id(),
        _fk('entry_id', 'journal_entries.id'),
        _fk('gl_account_id', 'gl_accounts.id', ondelete='RESTRICT'),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('debit_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('credit_cents', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'financial_statements',
        _id(),
        _fk('association_id', 'associations.id'),
        sa.Column('statement_type', statementtype, nullable=False),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=False),
        sa.Column('data', JSONB, nullable=False),
        sa.Column('generated_by', UUID, nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    # === BANKING ===
    op.create_table(
        'bank_accounts',
        _id(),
        _fk('association_id', 'associations.id'),
        _fk('gl_account_id', 'gl_accounts.id', ondelete='SET NULL', nullable=True, index=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('institution', sa.String(255), nullable=True),
        sa.Column('account_number_last4', sa.String(4), nullable=True),
        sa.Column('account_type', sa.String(50), nullable=False, server_default='operating'),
        sa.Column('current_balance_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'bank_statements',
        _id(),
        _fk('bank_account_id', 'bank_accounts.id'),
        sa.Column('statement_date', sa.Date(), nullable=False),
        sa.Column('file_name', sa.String(255), nullable=False),
        sa.Column('mime_type', sa.String(100), nullable=False),
        sa.Column('object_path', sa.Text(), nullable=False),
        sa.Column('status', bankstatementstatus, nullable=False),
        sa.Column('uploaded_by', UUID, nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'bank_reconciliations',
        _id(),
        _fk('bank_account_id', 'bank_accounts.id'),
        _fk('statement_id', 'bank_statements.id', ondelete='SET NULL', nullable=True, index=False),
        sa.Column('statement_date', sa.Date(), nullable=False),
        sa.Column('beginning_balance_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('statement_balance_cents', sa.Integer(), nullable=False),
        sa.Column('reconciled_balance_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('difference_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', reconciliationstatus, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('reconciled_at', sa.DateTime(), nullable=True),
        sa.Column('reconciled_by', UUID, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'bank_transactions',
        _id(),
        _fk('bank_account_id', 'bank_accounts.id'),
        sa.Column('transaction_date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('reference', sa.String(100), nullable=True),
        sa.Column('is_cleared', sa.Boolean(), nullable=False, server_default=sa.false()),
        _fk('reconciliation_id', 'bank_reconciliations.id', ondelete='SET NULL', nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    # === COMPLIANCE / WORKFLOWS ===
    op.create_table(
        'compliance_issues',
        _id(),
        _fk('association_id', 'associations.id'),
        _fk('property_id', 'properties.id'),
        _fk('resident_id', 'residents.id', ondelete='SET NULL', nullable=True, index=False),
        sa.Column('violation_type', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('fine_amount_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', compliancestatus, nullable=False, index=True),
        sa.Column('resolved_date', sa.Date(), nullable=True),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'workflows',
        _id(),
        _fk('org_id', 'organizations.id'),
        _fk('association_id', 'associations.id', nullable=True),
        _fk('template_id', 'workflows.id', ondelete='SET NULL', nullable=True, index=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('workflow_type', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('steps', JSONB, nullable=False),
        sa.Column('is_template', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', workflowstatus, nullable=False),
        *_timestamps(),
    )

    # === AMENITIES ===
    op.create_table(
        'amenities',
        _id(),
        _fk('association_id', 'associations.id'),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('booking_fee_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('requires_approval', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('open_time', sa.Time(), nullable=True),
        sa.Column('close_time', sa.Time(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'amenity_bookings',
        _id(),
        _fk('amenity_id', 'amenities.id'),
        _fk('resident_id', 'residents.id', ondelete='SET NULL', nullable=True),
        sa.Column('booked_by', UUID, nullable=True),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('guest_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('fee_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', bookingstatus, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_amenity_bookings_window', 'amenity_bookings', ['amenity_id', 'start_time', 'end_time'])

    # === POLLS ===
    op.create_table(
        'community_polls',
        _id(),
        _fk('association_id', 'associations.id'),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('options', JSONB, nullable=False),
        sa.Column('closes_at', sa.DateTime(), nullable=True),
        sa.Column('is_closed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_by', UUID, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'poll_responses',
        _id(),
        _fk('poll_id', 'community_polls.id'),
        sa.Column('user_id', UUID, nullable=False),
        sa.Column('selected_option', sa.String(255), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('poll_id', 'user_id', name='uq_poll_response_user'),
    )

    # === COMMUNICATIONS ===
    op.create_table(
        'recipient_groups',
        _id(),
        _fk('association_id', 'associations.id'),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('group_type', recipientgrouptype, nullable=False),
        sa.Column('criteria', JSONB, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'messages',
        _id(),
        _fk('association_id', 'associations.id'),
        sa.Column('subject', sa.String(500), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('channel', sa.String(20), nullable=False, server_default='email'),
        sa.Column('group_ids', JSONB, nullable=False),
        sa.Column('recipient_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', messagestatus, nullable=False),
        sa.Column('sent_by', UUID, nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'communication_logs',
        _id(),
        _fk('message_id', 'messages.id'),
        _fk('resident_id', 'residents.id', ondelete='SET NULL', nullable=True, index=False),
        sa.Column('recipient_email', sa.String(255), nullable=False),
        sa.Column('subject', sa.String(500), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('status', messagestatus, nullable=False),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
    )

    # === PORTAL WIDGETS ===
    op.create_table(
        'portal_widgets',
        _id(),
        _fk('user_id', 'users.id', nullable=True),
        _fk('association_id', 'associations.id', nullable=True),
        sa.Column('widget_type', sa.String(50), nullable=False),
        sa.Column('is_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('settings', JSONB, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'widget_type', name='uq_user_widget'),
        sa.UniqueConstraint('association_id', 'widget_type', name='uq_association_widget'),
    )

    # === AUDIT LOG (append-only) ===
    op.create_table(
        'audit_log',
        _id(),
        _fk('org_id', 'organizations.id', ondelete='SET NULL', nullable=True),
        _fk('user_id', 'users.id', ondelete='SET NULL', nullable=True),
        sa.Column('action', auditaction, nullable=False, index=True),
        sa.Column('resource_type', sa.String(50), nullable=False),
        sa.Column('resource_id', UUID, nullable=False),
        sa.Column('details', JSONB, nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    # === JOBS OUTBOX ===
    op.create_table(
        'jobs_outbox',
        _id(),
        sa.Column('type', sa.String(100), nullable=False, index=True),
        sa.Column('payload', JSONB, nullable=False),
        sa.Column('status', jobstatus, nullable=False, index=True),
        sa.Column('unique_scope', sa.String(500), nullable=False, unique=True),
        sa.Column('attempts', sa.Integer(), server_default='0'),
        sa.Column('max_attempts', sa.Integer(), server_default='3'),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('run_after', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_jobs_outbox_pending', 'jobs_outbox', ['status', 'run_after'])


def downgrade() -> None:
    op.drop_index('ix_jobs_outbox_pending')
    op.drop_table('jobs_outbox')
    op.drop_table('audit_log')
    op.drop_table('portal_widgets')
    op.drop_table('communication_logs')
    op.drop_table('messages')
    op.drop_table('recipient_groups')
    op.drop_table('poll_responses')
    op.drop_table('community_polls')
    op.drop_index('ix_amenity_bookings_window')
    op.drop_table('amenity_bookings')
    op.drop_table('amenities')
    op.drop_table('workflows')
    op.drop_table('compliance_issues')
    op.drop_table('bank_transactions')
    op.drop_table('bank_reconciliations')
    op.drop_table('bank_statements')
    op.drop_table('bank_accounts')
    op.drop_table('financial_statements')
    op.drop_table('journal_entry_lines')
    op.drop_table('journal_entries')
    op.drop_table('gl_accounts')
    op.drop_table('leads')
    op.drop_table('ai_processing_records')
    op.drop_table('ai_vendor_patterns')
    op.drop_table('invoice_line_items')
    op.drop_table('invoices')
    op.drop_table('work_orders')
    op.drop_table('contract_amendments')
    op.drop_table('vendor_contracts')
    op.drop_table('vendors')
    op.drop_table('residents')
    op.drop_table('properties')
    op.drop_table('associations')
    op.drop_table('org_memberships')
    op.drop_table('organizations')
    op.drop_table('users')

    bind = op.get_bind()
    for enum in reversed(ENUMS):
        enum.drop(bind, checkfirst=True)
