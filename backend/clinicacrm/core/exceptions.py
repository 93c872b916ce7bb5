"""
Domain exceptions.

Raised by services and auth dependencies; rendered as JSON by the
exception handlers registered in main.py.
"""

from typing import Any, Dict, Optional


class ClinicCRMError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    error_code = "internal_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ClinicCRMError, ValueError):
    """Bad or missing input. The caller can fix it and retry."""

    status_code = 400
    error_code = "validation_error"


class NotFoundError(ClinicCRMError):
    """Target record does not exist or is not owned by the caller."""

    status_code = 404
    error_code = "not_found"


class AuthorizationError(ClinicCRMError):
    """
    Credential missing, invalid, expired, or lacking permission.

    ``forbidden=True`` means the caller was identified but may not perform
    the action (403); otherwise the caller is unauthenticated (401).
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(self, message: str, forbidden: bool = False, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        if forbidden:
            self.status_code = 403
            self.error_code = "forbidden"
