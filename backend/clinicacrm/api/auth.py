"""
Authentication endpoints: login and me.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.auth import get_current_user
from ..core.database import get_db
from ..core.exceptions import AuthorizationError
from ..core.security import verify_password, create_access_token
from ..models.user import User
from ..schemas.user import LoginRequest, LoginResponse, UserResponse


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["Authentication"])


# =============================================================================
# Login
# =============================================================================


@router.post("/login", response_model=LoginResponse)
async def login(credentials: LoginRequest, request: Request, db: Session = Depends(get_db)) -> LoginResponse:
    """
    Authenticate with email + password.  Returns a JWT access token.
    """
    user = db.query(User).filter(User.email == credentials.email).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning(
            f"Failed login attempt for email={credentials.email} "
            f"ip={request.client.host if request.client else 'unknown'}"
        )
        raise AuthorizationError("Invalid email or password")

    if not user.is_active:
        raise AuthorizationError("Account has been deactivated. Contact your administrator.", forbidden=True)

    user.last_login = datetime.now(timezone.utc)
    db.commit()

    access_token = create_access_token(data={"sub": str(user.id), "email": user.email})

    return LoginResponse(
        access_token=access_token,
        user=UserResponse.model_validate(user),
    )


# =============================================================================
# Me
# =============================================================================


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the signed-in user."""
    return UserResponse.model_validate(current_user)
