"""
SQLAlchemy ORM models for Clinica CRM.

Contains database table definitions and relationships.
"""

from .user import User
from .case import Case, CaseChannel, CaseStatus
from .note import Note
from .api_key import ApiKey

__all__ = [
    "User",
    # Case model and enums
    "Case",
    "CaseChannel",
    "CaseStatus",
    "Note",
    "ApiKey",
]
