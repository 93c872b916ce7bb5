"""
API key management schemas.

Accepts both snake_case and the dashboard's camelCase field names
(``expiresInDays``, ``keyType``).
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..services.api_keys import KeyKind


class ApiKeyCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    expires_in_days: Optional[int] = Field(default=None, alias="expiresInDays")
    permissions: Optional[List[str]] = None
    key_type: KeyKind = Field(default=KeyKind.SECURE, alias="keyType")


class ApiKeyUpdate(BaseModel):
    """
    Partial update addressed by ``id``.

    Fields absent from the payload are left unchanged; an explicit
    ``expiresInDays: null`` removes the expiry.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    name: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    permissions: Optional[List[str]] = None
    expires_in_days: Optional[int] = Field(default=None, alias="expiresInDays")


class ApiKeyResponse(BaseModel):
    """Listed key. ``key_preview`` abbreviates the stored hash, never the secret."""
    id: UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    expires_at: Optional[datetime] = None
    is_active: bool
    permissions: List[str]
    last_used: Optional[datetime] = None
    usage_count: int
    key_preview: str


class ApiKeyCreatedResponse(BaseModel):
    """Returned once at creation; the only time ``key`` is ever shown."""
    id: UUID
    key: str
    name: str
    description: Optional[str] = None
    created_at: datetime
    expires_at: Optional[datetime] = None
    permissions: List[str]
    message: str = (
        "API key created successfully. Please save this key securely - "
        "it will not be shown again."
    )
