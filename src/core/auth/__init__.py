from src.core.auth.models import User, UserRole
from src.core.auth.password import hash_password, verify_password
from src.core.auth.service import AuthService, normalize_email
from src.core.auth.jwt import create_access_token, create_refresh_token, decode_token
from src.core.auth.dependencies import (
    CurrentUser,
    SchoolAdminUser,
    SuperAdminUser,
    get_current_user,
    require_roles,
)

__all__ = [
    "User",
    "UserRole",
    "AuthService",
    "normalize_email",
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "CurrentUser",
    "SchoolAdminUser",
    "SuperAdminUser",
    "get_current_user",
    "require_roles",
]
