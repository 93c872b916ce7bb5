"""
Case database model.

A case is a clinic lead: contact details, acquisition channel, pipeline
status and dialer campaign tag. Phone numbers are stored as entered;
lookups normalize them at query time.
"""

import enum

from sqlalchemy import (
    Column,
    String,
    Integer,
    Text,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Uuid,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base
from .base import utcnow


# =============================================================================
# Enum Definitions
# =============================================================================

class CaseChannel(str, enum.Enum):
    """Acquisition channel."""
    WEB = "WEB"
    FACEBOOK = "FACEBOOK"
    INFLUENCER = "INFLUENCER"


class CaseStatus(str, enum.Enum):
    """Pipeline status."""
    IN_CORSO = "IN_CORSO"            # In progress
    CHIUSO = "CHIUSO"                # Closed
    APPUNTAMENTO = "APPUNTAMENTO"    # Appointment booked


# =============================================================================
# Case Model
# =============================================================================

class Case(Base):
    """
    Clinic lead ("case").

    Attributes:
        id: Integer primary key
        first_name / last_name: Patient name
        phone / home_phone / cell_phone: Free-form phone numbers
        channel: Acquisition channel
        origin: Free-text origin (campaign, landing page...)
        status: Current pipeline status
        clinic: Clinic handling the case
        dialer_campaign_tag: Tag used to feed the outbound dialer
    """

    __tablename__ = "cases"

    id = Column(Integer, primary_key=True, autoincrement=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.current_timestamp(),
        index=True,
    )

    assigned_to = Column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Contact Information
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=True)
    home_phone = Column(String(50), nullable=True)
    cell_phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)

    # Acquisition
    channel = Column(
        SQLEnum(CaseChannel, name="case_channel", native_enum=False, length=20,
                values_callable=lambda e: [x.value for x in e]),
        nullable=False,
    )
    origin = Column(String(255), nullable=False)
    promotion = Column(String(255), nullable=True)

    # Pipeline
    status = Column(
        SQLEnum(CaseStatus, name="case_status", native_enum=False, length=20,
                values_callable=lambda e: [x.value for x in e]),
        nullable=False,
        default=CaseStatus.IN_CORSO,
        index=True,
    )
    disposition = Column(Text, nullable=True)
    outcome = Column(Text, nullable=True)
    clinic = Column(String(255), nullable=False)
    treatment = Column(String(255), nullable=True)
    follow_up_date = Column(DateTime(timezone=True), nullable=True)

    # Outbound dialer
    dialer_campaign_tag = Column(String(100), nullable=True, index=True)

    # Relationships
    assigned_user = relationship("User", foreign_keys=[assigned_to], lazy="joined")
    notes = relationship(
        "Note",
        back_populates="case",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Note.created_at.desc()",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def phone_numbers(self) -> list:
        """All phone fields in lookup order."""
        return [self.phone, self.home_phone, self.cell_phone]

    def __repr__(self) -> str:
        return f"<Case(id={self.id}, status={self.status.value if self.status else None})>"
