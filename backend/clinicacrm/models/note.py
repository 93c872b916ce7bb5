"""
Case Notes model.

Free-text notes attached to a case. Only the author may edit or delete
a note; notes are removed together with their case.
"""

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base
from .base import utcnow


class Note(Base):
    """Individual note entry for a case."""

    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, autoincrement=True)

    case_id = Column(
        Integer,
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Author (FK to users table)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    content = Column(Text, nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.current_timestamp(),
    )

    # Relationships
    case = relationship("Case", back_populates="notes")
    author = relationship("User", foreign_keys=[user_id], lazy="joined")

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, case_id={self.case_id}, user_id={self.user_id})>"
