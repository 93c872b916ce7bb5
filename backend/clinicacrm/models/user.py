"""
User model for dashboard authentication.

Users own notes and API keys; they sign in with email + password and
receive a JWT access token.
"""

import uuid

from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.sql import func

from ..core.database import Base
from .base import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(200), nullable=False)
    avatar_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp())

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
