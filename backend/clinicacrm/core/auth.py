"""
Authentication and authorisation dependencies for FastAPI routes.

Two explicit credential types, chosen by header, never by user agent:

- ``Authorization: Bearer <jwt>``: dashboard user session
- ``X-API-Key: <secret>``: machine caller holding an issued API key

Provides:
- get_current_user: session-only dependency (API key management, /me)
- require_permission(perm): factory returning a dependency that accepts
  either credential and enforces the API key permission
"""

import hmac
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import APIKeyHeader, OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .exceptions import AuthorizationError
from .security import decode_token
from .transactions import safe_commit
from ..models.api_key import ApiKey
from ..models.user import User
from ..services.api_keys import (
    ApiKeyPermission,
    check_permission,
    display_preview,
    hash_secret,
    is_expired,
    is_well_formed_secret,
    record_usage,
    verify_secret,
)


logger = logging.getLogger(__name__)

# The tokenUrl is informational (used by Swagger UI); actual login is POST /api/auth/login
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


@dataclass
class Principal:
    """
    Authenticated caller of a protected endpoint.

    ``user_id`` is the session user or the owner of the API key; it is None
    only for the deployment-wide static key.
    """
    user_id: Optional[UUID]
    via_api_key: bool = False
    api_key_id: Optional[UUID] = None


# =============================================================================
# Session users
# =============================================================================

def user_from_token(token: Optional[str], db: Session) -> User:
    """Resolve a JWT access token to an active user."""
    if not token:
        raise AuthorizationError("Not authenticated")

    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        raise AuthorizationError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthorizationError("Invalid token payload")

    try:
        user_uuid = UUID(str(user_id))
    except ValueError:
        raise AuthorizationError("Invalid token payload")

    user = db.query(User).filter(User.id == user_uuid).first()
    if not user:
        raise AuthorizationError("User not found")

    if not user.is_active:
        raise AuthorizationError("Account has been deactivated", forbidden=True)

    return user


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Decode the JWT bearer token and return the authenticated User.

    Raises AuthorizationError if token is missing, invalid, or the user is inactive.
    """
    return user_from_token(token, db)


# =============================================================================
# API keys
# =============================================================================

def _matches_static_key(secret: str) -> bool:
    if not settings.api_key:
        return False
    return hmac.compare_digest(secret.encode("utf-8"), settings.api_key.encode("utf-8"))


def authenticate_api_key(
    secret: str,
    db: Session,
    required: ApiKeyPermission,
    now: Optional[datetime] = None,
) -> Principal:
    """
    Authenticate an ``X-API-Key`` secret and check ``required``.

    Successful calls update ``last_used``/``usage_count``; usage tracking
    failures are logged and never block the request.
    """
    if _matches_static_key(secret):
        return Principal(user_id=None, via_api_key=True)

    if not is_well_formed_secret(secret):
        raise AuthorizationError("Invalid or missing API key")

    key_hash = hash_secret(secret)
    record = db.query(ApiKey).filter(ApiKey.key_hash == key_hash).first()
    if record is None or not verify_secret(secret, record.key_hash):
        raise AuthorizationError("Invalid or missing API key")

    if not check_permission(record, required, now):
        reason = "inactive" if not record.is_active else "expired" if is_expired(record, now) else "insufficient"
        logger.warning(
            f"API key {display_preview(record.key_hash)} rejected for "
            f"'{required.value}' ({reason})"
        )
        raise AuthorizationError(
            f"API key does not grant '{required.value}' permission",
            forbidden=True,
            details={"reason": reason},
        )

    record_usage(record, now)
    if not safe_commit(db):
        logger.warning(f"Could not record usage for API key {record.id}")

    return Principal(user_id=record.created_by, via_api_key=True, api_key_id=record.id)


def require_permission(permission: ApiKeyPermission):
    """
    Factory: returns a FastAPI dependency protecting a route.

    Session users are allowed everything; API keys must grant ``permission``.

    Usage:
        @router.get("", dependencies=[Depends(require_permission(ApiKeyPermission.READ))])
    """
    permission = ApiKeyPermission(permission)

    async def _check(
        api_key: Optional[str] = Depends(api_key_header),
        token: Optional[str] = Depends(oauth2_scheme),
        db: Session = Depends(get_db),
    ) -> Principal:
        if api_key:
            return authenticate_api_key(api_key, db, permission)
        if token:
            user = user_from_token(token, db)
            return Principal(user_id=user.id)
        raise AuthorizationError(
            "Invalid or missing API key. Provide an X-API-Key header or a Bearer session token."
        )

    return _check
