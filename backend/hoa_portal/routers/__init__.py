"""API Routers for the HOA Portal."""

from hoa_portal.routers.auth import router as auth_router
from hoa_portal.routers.org import router as org_router
from hoa_portal.routers.associations import router as associations_router
from hoa_portal.routers.properties import router as properties_router
from hoa_portal.routers.vendors import router as vendors_router
from hoa_portal.routers.work_orders import router as work_orders_router
from hoa_portal.routers.invoices import router as invoices_router
from hoa_portal.routers.leads import router as leads_router
from hoa_portal.routers.ai import router as ai_router
from hoa_portal.routers.accounting import router as accounting_router
from hoa_portal.routers.banking import router as banking_router
from hoa_portal.routers.compliance import router as compliance_router
from hoa_portal.routers.workflows import router as workflows_router
from hoa_portal.routers.amenities import router as amenities_router
from hoa_portal.routers.polls import router as polls_router
from hoa_portal.routers.communications import router as communications_router
from hoa_portal.routers.widgets import router as widgets_router
from hoa_portal.routers.search import router as search_router
from hoa_portal.routers.dashboard import router as dashboard_router
from hoa_portal.routers.portal import router as portal_router

__all__ = [
    "auth_router",
    "org_router",
    "associations_router",
    "properties_router",
    "vendors_router",
    "work_orders_router",
    "invoices_router",
    "leads_router",
    "ai_router",
    "accounting_router",
    "banking_router",
    "compliance_router",
    "workflows_router",
    "amenities_router",
    "polls_router",
    "communications_router",
    "widgets_router",
    "search_router",
    "dashboard_router",
    "portal_router",
]
