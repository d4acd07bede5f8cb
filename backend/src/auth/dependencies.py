# pyright: reportMissingTypeStubs=false
"""
Authentication and authorization dependencies for FastAPI.

Provides dependency injection functions for user authentication and
role-based access control. The role in the token is never trusted on its
own: the user row is re-read on each request and its role wins.
"""

import logging
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from core.constants import ROLE_ADMIN, ROLE_OWNER, ROLE_VET, ERROR_FORBIDDEN
from core.database import get_db
from services.jwt_service import jwt_service, TokenPayload
from models import User
from utils.errors import api_error

logger = logging.getLogger(__name__)


class UserContext:
    """Authenticated user context extracted from JWT token and the users table."""

    def __init__(
        self,
        user_id: int,
        email: str,
        role: str,
        name: str = ""
    ):
        self.user_id = user_id
        self.email = email
        self.role = role  # "OWNER", "VET" or "ADMIN"
        self.name = name

    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def is_vet(self) -> bool:
        return self.role == ROLE_VET

    def is_owner(self) -> bool:
        return self.role == ROLE_OWNER

    def __repr__(self) -> str:
        return f"UserContext(user_id={self.user_id}, email='{self.email}', role='{self.role}')"


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenPayload]:
    """Extract and validate JWT token payload."""
    if not credentials:
        return None

    return jwt_service.verify_token(credentials.credentials)


def get_current_user(
    payload: Optional[TokenPayload] = Depends(get_token_payload),
    db: Session = Depends(get_db)
) -> UserContext:
    """Get authenticated user context from JWT token."""
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = int(payload.sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token subject"
        )

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if user.suspended:
        logger.warning(f"Suspended user {user.id} attempted to access the API")
        raise api_error(ERROR_FORBIDDEN, "Account is suspended")

    if payload.role != user.role:
        logger.info(f"Token role {payload.role} for user {user.id} differs from stored role {user.role}")

    return UserContext(
        user_id=user.id,
        email=user.email,
        role=user.role,
        name=user.name
    )


# Role-based authorization dependencies
def require_authenticated(user: UserContext = Depends(get_current_user)) -> UserContext:
    """Require any signed-in, non-suspended user."""
    return user


def require_admin_role(user: UserContext = Depends(get_current_user)) -> UserContext:
    """Require admin role."""
    if not user.is_admin():
        raise api_error(ERROR_FORBIDDEN, "Admin access required")
    return user
