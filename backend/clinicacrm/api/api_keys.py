"""
API key management endpoints.

Dashboard users manage their own keys. The plaintext key is returned
once by POST and is never retrievable afterwards; listings show a preview
of the stored hash instead.

Endpoints:
- GET    /api/api-keys           list own keys
- POST   /api/api-keys           issue a key
- PUT    /api/api-keys           update a key (body ``id``)
- DELETE /api/api-keys?id=...    delete a key
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.auth import get_current_user
from ..core.config import settings
from ..core.database import get_db
from ..core.exceptions import NotFoundError, ValidationError
from ..core.transactions import transaction
from ..models.api_key import ApiKey
from ..models.user import User
from ..schemas.api_key import ApiKeyCreate, ApiKeyCreatedResponse, ApiKeyResponse, ApiKeyUpdate
from ..schemas.common import SuccessResponse
from ..services.api_keys import UNSET, display_preview, issue_api_key, update_api_key


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/api-keys", tags=["API Keys"])


def serialize_key(record: ApiKey) -> ApiKeyResponse:
    return ApiKeyResponse(
        id=record.id,
        name=record.name,
        description=record.description,
        created_at=record.created_at,
        expires_at=record.expires_at,
        is_active=record.is_active,
        permissions=list(record.permissions or []),
        last_used=record.last_used,
        usage_count=record.usage_count or 0,
        key_preview=display_preview(record.key_hash, 8),
    )


def _own_key(db: Session, key_id: UUID, owner: User) -> ApiKey:
    record = db.query(ApiKey).filter(
        ApiKey.id == key_id,
        ApiKey.created_by == owner.id,
    ).first()
    if not record:
        raise NotFoundError("API key not found")
    return record


@router.get("", response_model=List[ApiKeyResponse], summary="List API Keys")
async def list_api_keys(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[ApiKeyResponse]:
    """The caller's keys, newest first."""
    keys = (
        db.query(ApiKey)
        .filter(ApiKey.created_by == current_user.id)
        .order_by(desc(ApiKey.created_at))
        .all()
    )
    return [serialize_key(record) for record in keys]


@router.post(
    "",
    response_model=ApiKeyCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create API Key",
)
async def create_api_key(
    body: ApiKeyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiKeyCreatedResponse:
    """Issue a key. The response is the only place the plaintext ever appears."""
    secret, record = issue_api_key(
        body.name,
        current_user.id,
        description=body.description,
        expires_in_days=body.expires_in_days,
        permissions=body.permissions,
        kind=body.key_type,
        prefix=settings.api_key_prefix,
    )

    try:
        with transaction(db):
            db.add(record)
    except SQLAlchemyError as e:
        logger.error(f"Error storing API key for user {current_user.id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create API key",
        )

    logger.info(f"API key {record.id} issued to user {current_user.id} ({', '.join(record.permissions)})")
    return ApiKeyCreatedResponse(
        id=record.id,
        key=secret,
        name=record.name,
        description=record.description,
        created_at=record.created_at,
        expires_at=record.expires_at,
        permissions=list(record.permissions),
    )


@router.put("", response_model=ApiKeyResponse, summary="Update API Key")
async def update_api_key_endpoint(
    body: ApiKeyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiKeyResponse:
    """Rename, describe, (de)activate, re-scope or re-expire one of the caller's keys."""
    record = _own_key(db, body.id, current_user)
    sent = body.model_fields_set

    update_api_key(
        record,
        name=body.name if "name" in sent else UNSET,
        description=body.description if "description" in sent else UNSET,
        is_active=body.is_active if "is_active" in sent and body.is_active is not None else UNSET,
        permissions=body.permissions if "permissions" in sent else UNSET,
        expires_in_days=body.expires_in_days if "expires_in_days" in sent else UNSET,
    )

    try:
        with transaction(db):
            db.add(record)
    except SQLAlchemyError as e:
        logger.error(f"Error updating API key {body.id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update API key",
        )

    return serialize_key(record)


@router.delete("", response_model=SuccessResponse, summary="Delete API Key")
async def delete_api_key(
    key_id: Optional[UUID] = Query(default=None, alias="id"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SuccessResponse:
    """Permanently delete one of the caller's keys."""
    if key_id is None:
        raise ValidationError("API key ID is required")

    record = _own_key(db, key_id, current_user)
    try:
        with transaction(db):
            db.delete(record)
    except SQLAlchemyError as e:
        logger.error(f"Error deleting API key {key_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete API key",
        )

    logger.info(f"API key {key_id} deleted by user {current_user.id}")
    return SuccessResponse(message="API key deleted successfully")
