"""
Case and Note Pydantic schemas for request/response validation.

Validates all inputs at API boundaries before processing.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from ..models.case import CaseChannel, CaseStatus


def _collapse_whitespace(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = " ".join(v.split())
    if not v:
        raise ValueError("Value cannot be blank")
    return v


# =============================================================================
# Case Schemas
# =============================================================================

class CaseBase(BaseModel):
    """Fields shared by create and update payloads."""

    phone: Optional[str] = Field(default=None, max_length=50)
    home_phone: Optional[str] = Field(default=None, max_length=50)
    cell_phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[EmailStr] = None
    promotion: Optional[str] = Field(default=None, max_length=255)
    disposition: Optional[str] = None
    outcome: Optional[str] = None
    treatment: Optional[str] = Field(default=None, max_length=255)
    follow_up_date: Optional[datetime] = None
    dialer_campaign_tag: Optional[str] = Field(default=None, max_length=100)
    assigned_to: Optional[UUID] = None


class CaseCreate(CaseBase):
    """Payload for creating a case."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    channel: CaseChannel
    origin: str = Field(..., min_length=1, max_length=255)
    status: CaseStatus = CaseStatus.IN_CORSO
    clinic: str = Field(..., min_length=1, max_length=255)

    @field_validator("first_name", "last_name", "origin", "clinic")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Strip and normalize whitespace."""
        return _collapse_whitespace(v)


class CaseUpdate(CaseBase):
    """
    Partial update addressed by ``id``.

    Only fields present in the payload are written.
    """

    id: int
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    channel: Optional[CaseChannel] = None
    origin: Optional[str] = Field(default=None, min_length=1, max_length=255)
    status: Optional[CaseStatus] = None
    clinic: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @field_validator("first_name", "last_name", "origin", "clinic")
    @classmethod
    def validate_text(cls, v: Optional[str]) -> Optional[str]:
        return _collapse_whitespace(v)


class CaseResponse(BaseModel):
    """A case as returned by the API."""

    id: int
    created_at: datetime
    assigned_to: Optional[UUID] = None
    first_name: str
    last_name: str
    phone: Optional[str] = None
    home_phone: Optional[str] = None
    cell_phone: Optional[str] = None
    email: Optional[str] = None
    channel: CaseChannel
    origin: str
    status: CaseStatus
    disposition: Optional[str] = None
    outcome: Optional[str] = None
    clinic: str
    treatment: Optional[str] = None
    promotion: Optional[str] = None
    follow_up_date: Optional[datetime] = None
    dialer_campaign_tag: Optional[str] = None

    model_config = {"from_attributes": True}


class CaseFilters(BaseModel):
    """Filters shared by the case list and the CSV export."""

    search: Optional[str] = None
    status: Optional[CaseStatus] = None
    channel: Optional[CaseChannel] = None
    assigned_to: Optional[UUID] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class ExportRequest(BaseModel):
    filters: CaseFilters = Field(default_factory=CaseFilters)


# =============================================================================
# Note Schemas
# =============================================================================

class AuthorProfile(BaseModel):
    id: UUID
    full_name: str
    avatar_url: Optional[str] = None

    model_config = {"from_attributes": True}


class NoteCreate(BaseModel):
    """Request body for creating a note."""
    case_id: int
    content: str = Field(..., min_length=1, max_length=5000, description="Note content")


class NoteUpdate(BaseModel):
    """Request body for editing a note."""
    id: int
    content: str = Field(..., min_length=1, max_length=5000, description="Note content")


class NoteResponse(BaseModel):
    """Response schema for a single note."""
    id: int
    created_at: datetime
    case_id: int
    user_id: UUID
    content: str
    profiles: Optional[AuthorProfile] = None


class CaseDetailResponse(CaseResponse):
    """A case together with its notes, newest first."""

    notes: List[NoteResponse] = Field(default_factory=list)
    assigned_user: Optional[AuthorProfile] = None


# =============================================================================
# Dialer Schemas
# =============================================================================

class DialerRequest(BaseModel):
    campaign_tag_filter: Optional[str] = None


class DialerLead(BaseModel):
    record_id: int
    phone_e164: str


class DialerResponse(BaseModel):
    success: bool = True
    leads: List[DialerLead]
    count: int
