"""
API key issuance and verification.

Secrets come from the ``secrets`` CSPRNG and are stored only as SHA-256
hex digests. Keys are high-entropy random strings, not passwords, so an
unsalted digest is sufficient and lets the auth gate find a key by hash.

Permission checks are lazy: expiry is evaluated at check time and no
background job ever flips ``is_active``.
"""

import enum
import hashlib
import hmac
import re
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from ..core.exceptions import ValidationError
from ..models.api_key import ApiKey
from ..models.base import as_utc, utcnow


class KeyKind(str, enum.Enum):
    """Secret encodings offered at issue time."""
    SECURE = "secure"        # 32 random bytes, url-safe base64
    READABLE = "readable"    # 16 random bytes, lowercase hex
    PREFIXED = "prefixed"    # "<tag>_" + readable


class ApiKeyPermission(str, enum.Enum):
    """Closed set of permissions. ADMIN implies every other permission."""
    READ = "read"
    WRITE = "write"
    ADMIN = "admin"


DEFAULT_PERMISSIONS: Tuple[ApiKeyPermission, ...] = (ApiKeyPermission.READ, ApiKeyPermission.WRITE)
DEFAULT_PREFIX = "clinicacrm"
MAX_EXPIRY_DAYS = 36500

_URLSAFE_RE = re.compile(r"^[A-Za-z0-9_-]+={0,2}$")
_HEX_RE = re.compile(r"^[A-Fa-f0-9]+$")
_PREFIXED_RE = re.compile(r"^[a-z]+_[A-Fa-f0-9]+$")

# Sentinel distinguishing "leave unchanged" from an explicit None.
UNSET = object()


# =============================================================================
# Secrets & Hashing
# =============================================================================

def generate_secret(kind: KeyKind = KeyKind.SECURE, prefix: str = DEFAULT_PREFIX) -> str:
    """
    Generate a new plaintext secret.

    Args:
        kind: Encoding of the secret
        prefix: Tag used by PREFIXED keys

    Returns:
        Plaintext secret (never persisted)
    """
    kind = KeyKind(kind)
    if kind is KeyKind.READABLE:
        return secrets.token_hex(16)
    if kind is KeyKind.PREFIXED:
        return f"{prefix}_{secrets.token_hex(16)}"
    return secrets.token_urlsafe(32)


def hash_secret(secret: str) -> str:
    """SHA-256 hex digest of a secret, as stored in ``api_keys.key_hash``."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def verify_secret(secret: str, stored_hash: str) -> bool:
    """Constant-time comparison of ``hash_secret(secret)`` with a stored hash."""
    if not secret or not stored_hash:
        return False
    return hmac.compare_digest(hash_secret(secret), stored_hash.lower())


def is_well_formed_secret(secret: Optional[str]) -> bool:
    """
    Cheap format check run before any database lookup.

    Accepts url-safe base64, hex and ``tag_hex`` secrets of 16+ characters.
    """
    if not secret or len(secret) < 16:
        return False
    return bool(
        _URLSAFE_RE.match(secret)
        or _HEX_RE.match(secret)
        or _PREFIXED_RE.match(secret)
    )


def display_preview(value: str, visible_chars: int = 8) -> str:
    """
    Shorten a key hash for display: first and last ``visible_chars``.

    Values no longer than ``2 * visible_chars`` are returned unchanged.
    """
    if len(value) <= visible_chars * 2:
        return value
    return f"{value[:visible_chars]}...{value[-visible_chars:]}"


# =============================================================================
# Validation helpers
# =============================================================================

def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("API key name is required")
    return cleaned


def _clean_permissions(permissions: Optional[Iterable]) -> List[str]:
    if permissions is None:
        return [p.value for p in DEFAULT_PERMISSIONS]

    cleaned: List[str] = []
    for permission in permissions:
        try:
            value = ApiKeyPermission(permission).value
        except ValueError:
            raise ValidationError(
                f"Unknown permission: {permission!r}",
                details={"allowed": [p.value for p in ApiKeyPermission]},
            )
        if value not in cleaned:
            cleaned.append(value)
    if not cleaned:
        raise ValidationError("At least one permission is required")
    return cleaned


def _expiry(expires_in_days: Optional[int], now: datetime) -> Optional[datetime]:
    if expires_in_days is None:
        return None
    if isinstance(expires_in_days, bool) or int(expires_in_days) <= 0:
        raise ValidationError("expires_in_days must be a positive number of days")
    if int(expires_in_days) > MAX_EXPIRY_DAYS:
        raise ValidationError(f"expires_in_days cannot exceed {MAX_EXPIRY_DAYS} days")
    return now + timedelta(days=int(expires_in_days))


# =============================================================================
# Lifecycle
# =============================================================================

def issue_api_key(
    name: str,
    owner_id: uuid.UUID,
    description: Optional[str] = None,
    expires_in_days: Optional[int] = None,
    permissions: Optional[Iterable] = None,
    kind: KeyKind = KeyKind.SECURE,
    prefix: str = DEFAULT_PREFIX,
    now: Optional[datetime] = None,
) -> Tuple[str, ApiKey]:
    """
    Issue a new API key.

    Returns the plaintext secret and a transient ``ApiKey`` row holding
    only its hash. The caller adds the row to the session and hands the
    secret to the owner exactly once.

    Raises:
        ValidationError: blank name, unknown permission or bad expiry
    """
    now = now or utcnow()
    cleaned_name = _clean_name(name)
    cleaned_permissions = _clean_permissions(permissions)
    expires_at = _expiry(expires_in_days, now)

    secret = generate_secret(kind, prefix)
    record = ApiKey(
        id=uuid.uuid4(),
        name=cleaned_name,
        description=(description or "").strip() or None,
        created_at=now,
        expires_at=expires_at,
        is_active=True,
        created_by=owner_id,
        permissions=cleaned_permissions,
        last_used=None,
        usage_count=0,
        key_hash=hash_secret(secret),
    )
    return secret, record


def update_api_key(
    record: ApiKey,
    *,
    name=UNSET,
    description=UNSET,
    is_active=UNSET,
    permissions=UNSET,
    expires_in_days=UNSET,
    now: Optional[datetime] = None,
) -> ApiKey:
    """
    Apply an owner's partial update. Arguments left as ``UNSET`` are kept.

    ``expires_in_days=None`` removes the expiry; a number restarts it from
    ``now``.
    """
    now = now or utcnow()
    if name is not UNSET:
        record.name = _clean_name(name)
    if description is not UNSET:
        record.description = (description or "").strip() or None
    if is_active is not UNSET:
        if is_active:
            reactivate(record)
        else:
            deactivate(record)
    if permissions is not UNSET:
        if permissions is None:
            raise ValidationError("permissions cannot be null")
        record.permissions = _clean_permissions(permissions)
    if expires_in_days is not UNSET:
        record.expires_at = _expiry(expires_in_days, now)
    return record


def deactivate(record: ApiKey) -> ApiKey:
    record.is_active = False
    return record


def reactivate(record: ApiKey) -> ApiKey:
    record.is_active = True
    return record


def is_expired(record: ApiKey, now: Optional[datetime] = None) -> bool:
    """True once ``now`` is past ``expires_at``; keys without expiry never expire."""
    expires_at = as_utc(record.expires_at)
    if expires_at is None:
        return False
    return (now or utcnow()) > expires_at


def check_permission(record: ApiKey, required, now: Optional[datetime] = None) -> bool:
    """
    Whether the key currently grants ``required``.

    Inactive or expired keys grant nothing. ``admin`` grants everything.
    Unknown permission names are never granted.
    """
    if not record.is_active:
        return False
    if is_expired(record, now):
        return False

    try:
        required = ApiKeyPermission(required)
    except ValueError:
        return False
    granted = set(record.permissions or [])
    return required.value in granted or ApiKeyPermission.ADMIN.value in granted


def record_usage(record: ApiKey, now: Optional[datetime] = None) -> ApiKey:
    """Stamp ``last_used`` and bump ``usage_count`` by one."""
    record.last_used = now or utcnow()
    record.usage_count = (record.usage_count or 0) + 1
    return record
