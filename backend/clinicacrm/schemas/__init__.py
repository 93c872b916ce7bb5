"""
Pydantic validation schemas for Clinica CRM.

Contains request/response DTOs with validation rules.
These schemas enforce data integrity at API boundaries.
"""

from .case import (
    CaseCreate,
    CaseUpdate,
    CaseResponse,
    CaseDetailResponse,
    CaseFilters,
    ExportRequest,
    NoteCreate,
    NoteUpdate,
    NoteResponse,
    DialerRequest,
    DialerResponse,
)
from .lookup import LookupRequest, LookupResponse
from .api_key import ApiKeyCreate, ApiKeyUpdate, ApiKeyResponse, ApiKeyCreatedResponse
from .common import (
    HealthResponse,
    ErrorResponse,
    SuccessResponse,
)

__all__ = [
    # Case schemas
    "CaseCreate",
    "CaseUpdate",
    "CaseResponse",
    "CaseDetailResponse",
    "CaseFilters",
    "ExportRequest",
    # Note schemas
    "NoteCreate",
    "NoteUpdate",
    "NoteResponse",
    # Dialer / lookup
    "DialerRequest",
    "DialerResponse",
    "LookupRequest",
    "LookupResponse",
    # API key schemas
    "ApiKeyCreate",
    "ApiKeyUpdate",
    "ApiKeyResponse",
    "ApiKeyCreatedResponse",
    # Common schemas
    "HealthResponse",
    "ErrorResponse",
    "SuccessResponse",
]
