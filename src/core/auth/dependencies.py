from typing import Annotated

import structlog
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.jwt import decode_token
from src.core.auth.models import User, UserRole
from src.core.auth.service import AuthService
from src.core.database import get_db
from src.core.exceptions import AuthenticationError, AuthorizationError


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the user behind a Bearer access token.

    The user id and role are bound to the structlog context, so every log
    line written while serving the request carries them.
    """
    if not authorization:
        raise AuthenticationError("Authorization header required")

    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header format")

    token = authorization.removeprefix("Bearer ")

    payload = decode_token(token, token_type="access")
    user_id = int(payload["sub"])

    auth_service = AuthService(db)
    user = await auth_service.get_user_by_id(user_id)

    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    structlog.contextvars.bind_contextvars(user_id=user.id, role=user.role)
    return user


def require_roles(*roles: UserRole):
    """Dependency factory: reject users whose role is not one of `roles` with a 403."""

    async def role_checker(
        current_user: User = Depends(get_current_user),
    ) -> User:
        if not current_user.has_role(*roles):
            allowed = ", ".join(r.value for r in roles)
            raise AuthorizationError(f"Required role: {allowed}")
        return current_user

    return role_checker


# Convenience dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
SuperAdminUser = Annotated[User, Depends(require_roles(UserRole.SUPER_ADMIN))]
SchoolAdminUser = Annotated[User, Depends(require_roles(UserRole.SCHOOL_ADMIN))]
