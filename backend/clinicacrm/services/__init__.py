"""
Business logic services for Clinica CRM.

Contains business logic separated from the API layer: phone matching for
screen-pops, API key issuance/verification and shared case queries.
"""

from .phone_matching import normalize, variations, match
from .api_keys import ApiKeyPermission, KeyKind, check_permission, issue_api_key

__all__ = [
    "normalize",
    "variations",
    "match",
    "ApiKeyPermission",
    "KeyKind",
    "check_permission",
    "issue_api_key",
]
