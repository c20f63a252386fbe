"""AI processing router - invoice and lead extraction, document extraction.

Every endpoint here calls the configured LLM; without OPENAI_API_KEY they
answer 500 {"error": "OpenAI API key not configured"}.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.config import get_settings
from hoa_portal.core.database import get_db
from hoa_portal.core.security import require_org_admin, require_org_member, AuthenticatedUser
from hoa_portal.routers.common import get_association_or_404
from hoa_portal.schemas.ai import (
    BulkProcessRequest,
    BulkProcessResponse,
    ExtractRequest,
    ExtractResponse,
    FinancialReportExtraction,
    ProcessInvoiceRequest,
    ProcessInvoiceResponse,
    ProcessLeadRequest,
    ProcessLeadResponse,
)
from hoa_portal.services.document_extractor import DocumentExtractor
from hoa_portal.services.invoice_processor import InvoiceProcessor
from hoa_portal.services.job_runner import process_pending_jobs
from hoa_portal.services.lead_processor import LeadProcessor
from hoa_portal.services.llm import LLMClient, get_llm_client

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/process-invoice", response_model=ProcessInvoiceResponse)
async def process_invoice(
    data: ProcessInvoiceRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
    llm: LLMClient = Depends(get_llm_client),
):
    """Read, structure and GL-code one invoice image."""
    await get_association_or_404(db, data.association_id, current_user.org_id)
    return await InvoiceProcessor(db, llm).process(data, current_user)


@router.post("/process-invoices/bulk", response_model=BulkProcessResponse)
async def process_invoices_bulk(
    data: BulkProcessRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
    llm: LLMClient = Depends(get_llm_client),
):
    """Process invoices one by one; a failed item does not stop the batch."""
    for association_id in {item.association_id for item in data.items}:
        await get_association_or_404(db, association_id, current_user.org_id)
    return await InvoiceProcessor(db, llm).process_bulk(data.items, current_user)


@router.post("/process-lead", response_model=ProcessLeadResponse)
async def process_lead(
    data: ProcessLeadRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
    llm: LLMClient = Depends(get_llm_client),
):
    return await LeadProcessor(db, llm).process(data, current_user)


@router.post("/extract", response_model=ExtractResponse)
async def extract(
    data: ExtractRequest,
    current_user: AuthenticatedUser = Depends(require_org_member),
    llm: LLMClient = Depends(get_llm_client),
):
    """Extract structured fields from an invoice, homeowner request or lead text."""
    return await DocumentExtractor(llm).extract(data)


@router.post("/financial-reports/extract", response_model=FinancialReportExtraction)
async def extract_financial_report(
    association_id: UUID = Form(...),
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_member),
    llm: LLMClient = Depends(get_llm_client),
):
    """Read account lines from a PDF financial report and match them to GL accounts."""
    await get_association_or_404(db, association_id, current_user.org_id)

    if file.content_type != "application/pdf":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File must be a PDF")

    pdf_bytes = await file.read()
    if not pdf_bytes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty")
    max_bytes = get_settings().max_upload_size_mb * 1024 * 1024
    if len(pdf_bytes) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File size exceeds maximum of {get_settings().max_upload_size_mb}MB",
        )

    return await DocumentExtractor(llm, db).extract_financial_report(pdf_bytes, association_id)


@router.post("/jobs/process")
async def run_pending_jobs(
    limit: int = 10,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_org_admin),
):
    """Run due outbox jobs (vendor pattern learning, message delivery)."""
    return await process_pending_jobs(db, limit=min(max(limit, 1), 100))
