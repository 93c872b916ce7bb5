"""
Screen-pop lookup schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class LookupRequest(BaseModel):
    phone: Optional[str] = None


class LookupPatient(BaseModel):
    name: str
    phone: Optional[str] = None
    home_phone: Optional[str] = None
    cell_phone: Optional[str] = None
    email: Optional[str] = None


class LookupCase(BaseModel):
    status: str
    clinic: str
    treatment: Optional[str] = None
    disposition: Optional[str] = None
    outcome: Optional[str] = None
    created_at: datetime
    follow_up_date: Optional[datetime] = None


class LookupResponse(BaseModel):
    """Payload consumed by the call-center screen-pop."""
    found: bool = True
    case_id: int
    patient: LookupPatient
    case: LookupCase
    screen_pop_url: str
    phone_searched: str
