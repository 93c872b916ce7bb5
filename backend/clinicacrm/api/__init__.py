"""
API route controllers for Clinica CRM.

Contains FastAPI routers for different endpoints.
Routes handle HTTP requests and delegate to services for business logic.
"""

from .health import router as health_router
from .auth import router as auth_router
from .cases import router as cases_router
from .notes import router as notes_router
from .lookup import router as lookup_router
from .export import router as export_router
from .dialer import router as dialer_router
from .api_keys import router as api_keys_router

__all__ = [
    "health_router",
    "auth_router",
    "cases_router",
    "notes_router",
    "lookup_router",
    "export_router",
    "dialer_router",
    "api_keys_router",
]
