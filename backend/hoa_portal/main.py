"""HOA Portal - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hoa_portal.core.config import get_settings
from hoa_portal.core.env_validation import validate_environment
from hoa_portal.core.errors import register_exception_handlers
from hoa_portal.core.logging_config import configure_logging
from hoa_portal.routers import (
    auth_router,
    org_router,
    associations_router,
    properties_router,
    vendors_router,
    work_orders_router,
    invoices_router,
    leads_router,
    ai_router,
    accounting_router,
    banking_router,
    compliance_router,
    workflows_router,
    amenities_router,
    polls_router,
    communications_router,
    widgets_router,
    search_router,
    dashboard_router,
    portal_router,
)

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Hard-fails (exit 1) if required configuration is missing
    validate_environment()
    configure_logging(settings.log_level)
    logger.info(f"[STARTUP] {settings.app_name} CORS origins: {settings.cors_origins}")
    yield


app = FastAPI(
    title=settings.app_name,
    description="Multi-tenant HOA management: associations, vendors, invoices, accounting, banking, compliance, amenities and resident communications.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API v1 routers
app.include_router(auth_router, prefix=settings.api_v1_prefix)
app.include_router(org_router, prefix=settings.api_v1_prefix)
app.include_router(associations_router, prefix=settings.api_v1_prefix)
app.include_router(properties_router, prefix=settings.api_v1_prefix)
app.include_router(vendors_router, prefix=settings.api_v1_prefix)
app.include_router(work_orders_router, prefix=settings.api_v1_prefix)
app.include_router(invoices_router, prefix=settings.api_v1_prefix)
app.include_router(leads_router, prefix=settings.api_v1_prefix)
app.include_router(ai_router, prefix=settings.api_v1_prefix)  # LLM-backed extraction
app.include_router(accounting_router, prefix=settings.api_v1_prefix)
app.include_router(banking_router, prefix=settings.api_v1_prefix)
app.include_router(compliance_router, prefix=settings.api_v1_prefix)
app.include_router(workflows_router, prefix=settings.api_v1_prefix)
app.include_router(amenities_router, prefix=settings.api_v1_prefix)
app.include_router(polls_router, prefix=settings.api_v1_prefix)
app.include_router(communications_router, prefix=settings.api_v1_prefix)
app.include_router(widgets_router, prefix=settings.api_v1_prefix)
app.include_router(search_router, prefix=settings.api_v1_prefix)
app.include_router(dashboard_router, prefix=settings.api_v1_prefix)
app.include_router(portal_router, prefix=settings.api_v1_prefix)  # Homeowner portal


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
    }
