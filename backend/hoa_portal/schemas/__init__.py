"""Pydantic schemas for the HOA Portal API."""

from hoa_portal.schemas.auth import *
from hoa_portal.schemas.org import *
from hoa_portal.schemas.association import *
from hoa_portal.schemas.vendor import *
from hoa_portal.schemas.invoice import *
from hoa_portal.schemas.lead import *
from hoa_portal.schemas.accounting import *
from hoa_portal.schemas.banking import *
from hoa_portal.schemas.compliance import *
from hoa_portal.schemas.workflow import *
from hoa_portal.schemas.amenity import *
from hoa_portal.schemas.poll import *
from hoa_portal.schemas.communication import *
from hoa_portal.schemas.widget import *
from hoa_portal.schemas.search import *
from hoa_portal.schemas.ai import *
