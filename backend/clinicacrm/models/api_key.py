"""
API key model.

One row per issued credential. Only the SHA-256 hash of the secret is
stored; the plaintext is shown to the owner once at creation time.
"""

import uuid

from sqlalchemy import Column, String, Text, Boolean, Integer, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base
from .base import utcnow


class ApiKey(Base):
    """
    Issued API key.

    State: active (initial) <-> inactive, then deleted (row removed).
    Expiry is not a stored state; it is evaluated when a permission is
    checked.
    """

    __tablename__ = "api_keys"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp())
    expires_at = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Ordered list of permission strings ("read", "write", "admin")
    permissions = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)
    last_used = Column(DateTime(timezone=True), nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    key_hash = Column(String(64), nullable=False, unique=True, index=True)

    owner = relationship("User", foreign_keys=[created_by], lazy="joined")

    def __repr__(self) -> str:
        return f"<ApiKey(id={self.id}, name={self.name}, active={self.is_active})>"
