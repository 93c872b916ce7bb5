"""
Core module for Clinica CRM backend.

Contains configuration, database setup, security utilities and
request authentication.
"""

from .config import settings
from .database import get_db, engine, SessionLocal

__all__ = ["settings", "get_db", "engine", "SessionLocal"]
