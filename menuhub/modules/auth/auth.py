"""JWT authentication dependency for FastAPI.

Validates Bearer tokens from the Authorization header and extracts the
user claims. Tokens are issued by the identity provider; this service only
verifies them.
"""

import logging
import uuid
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from menuhub.config import settings
from menuhub.exceptions import ForbiddenException, UnauthorizedException
from menuhub.models.enums import UserRole

logger = logging.getLogger(__name__)

# Extracts the Bearer token from the Authorization header
_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    """Represents the authenticated user extracted from a JWT token."""

    id: uuid.UUID
    email: str
    role: UserRole = UserRole.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


def _decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises UnauthorizedException on failure."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        logger.warning("JWT validation failed: %s", exc)
        raise UnauthorizedException("Invalid or expired token") from exc


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> AuthenticatedUser:
    """FastAPI dependency that extracts and validates the current user from JWT."""
    if credentials is None:
        raise UnauthorizedException("Authentication required")

    payload = _decode_token(credentials.credentials)

    try:
        user = AuthenticatedUser(
            id=uuid.UUID(payload["sub"]),
            email=payload["email"],
            role=UserRole(payload.get("role", UserRole.CUSTOMER.value)),
        )
    except (KeyError, ValueError) as exc:
        raise UnauthorizedException("Token is missing required claims") from exc

    request.state.user = user
    return user


async def require_admin(
    user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Dependency that only lets administrators through."""
    if not user.is_admin:
        raise ForbiddenException("Administrator access required")
    return user
