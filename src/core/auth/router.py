from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import CurrentUser
from src.core.auth.schemas import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    TokenResponse,
    UserResponse,
)
from src.core.auth.service import AuthService
from src.core.database import get_db
from src.modules.schools.service import get_user_school_ids
from src.shared.schemas import SuccessResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=SuccessResponse[LoginResponse])
async def login(
    request: Request,
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate a super admin or school admin and return tokens."""
    ip_address = request.client.host if request.client else None
    user, access_token, refresh_token = await AuthService(db).authenticate(
        email=data.email,
        password=data.password,
        ip_address=ip_address,
    )

    return SuccessResponse(
        data=LoginResponse(
            user=UserResponse.model_validate(user),
            access_token=access_token,
            refresh_token=refresh_token,
        ),
        message="Login successful",
    )


@router.post("/refresh", response_model=SuccessResponse[TokenResponse])
async def refresh_tokens(
    data: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    access_token, refresh_token = await AuthService(db).refresh_tokens(data.refresh_token)
    return SuccessResponse(
        data=TokenResponse(access_token=access_token, refresh_token=refresh_token),
        message="Tokens refreshed",
    )


@router.get("/me", response_model=SuccessResponse[CurrentUserResponse])
async def get_current_user_info(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Current user, with the schools a school admin works in."""
    response = CurrentUserResponse.model_validate(current_user)
    response.school_ids = await get_user_school_ids(db, current_user)
    return SuccessResponse(data=response, message="User info retrieved")
