"""Auth module — bearer token verification and role checks."""

from menuhub.modules.auth.auth import AuthenticatedUser, get_current_user, require_admin

__all__ = [
    "AuthenticatedUser",
    "get_current_user",
    "require_admin",
]
