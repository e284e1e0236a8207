from datetime import datetime

from pydantic import EmailStr, Field

from src.shared.schemas import CamelSchema


class LoginRequest(CamelSchema):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(CamelSchema):
    """Token pair returned by login and refresh."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(CamelSchema):
    refresh_token: str


class UserResponse(CamelSchema):
    """User response schema."""

    id: int
    email: str
    full_name: str
    phone: str | None
    role: str
    is_active: bool
    last_login_at: datetime | None
    created_at: datetime


class CurrentUserResponse(UserResponse):
    """The authenticated user together with the schools they administer."""

    school_ids: list[int] = []


class LoginResponse(TokenResponse):
    user: UserResponse
