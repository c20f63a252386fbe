"""Services for the HOA Portal."""

from hoa_portal.services.storage import StorageService, get_storage_service
from hoa_portal.services.audit import AuditService
from hoa_portal.services.jobs import JobsService
from hoa_portal.services.llm import LLMClient, LLMError, get_llm_client

__all__ = [
    "StorageService",
    "get_storage_service",
    "AuditService",
    "JobsService",
    "LLMClient",
    "LLMError",
    "get_llm_client",
]
