"""API endpoints for Schools module (super admin)."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import SchoolAdminUser, SuperAdminUser
from src.core.database.session import get_db
from src.modules.schools.schemas import (
    SchoolAdminAssign,
    SchoolAdminResponse,
    SchoolCreate,
    SchoolResponse,
    SchoolSettingsUpdate,
    SchoolUpdate,
)
from src.modules.schools.service import SchoolService, admin_link_to_dict
from src.modules.schools.tenancy import CurrentSchoolId
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/schools", tags=["Schools"])
settings_router = APIRouter(prefix="/school-settings", tags=["School settings"])


@router.post(
    "",
    response_model=ApiResponse[SchoolResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_school(
    data: SchoolCreate,
    current_user: SuperAdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a new school. Requires SUPER_ADMIN role."""
    service = SchoolService(db)
    school = await service.create_school(data, current_user.id)
    return ApiResponse(
        success=True,
        message="School created successfully",
        data=SchoolResponse.model_validate(school),
    )


@router.get(
    "",
    response_model=ApiResponse[list[SchoolResponse]],
)
async def list_schools(
    current_user: SuperAdminUser,
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: AsyncSession = Depends(get_db),
):
    """List schools."""
    service = SchoolService(db)
    schools = await service.list_schools(include_inactive=include_inactive)
    return ApiResponse(
        success=True,
        data=[SchoolResponse.model_validate(s) for s in schools],
    )


@router.get(
    "/{school_id}",
    response_model=ApiResponse[SchoolResponse],
)
async def get_school(
    school_id: int,
    current_user: SuperAdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Get school by ID."""
    service = SchoolService(db)
    school = await service.get_school_by_id(school_id)
    return ApiResponse(success=True, data=SchoolResponse.model_validate(school))


@router.patch(
    "/{school_id}",
    response_model=ApiResponse[SchoolResponse],
)
async def update_school(
    school_id: int,
    data: SchoolUpdate,
    current_user: SuperAdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Update the fields sent in the payload; `isActive` activates or deactivates the school."""
    service = SchoolService(db)
    school = await service.update_school(school_id, data, current_user.id)
    return ApiResponse(
        success=True,
        message="School updated successfully",
        data=SchoolResponse.model_validate(school),
    )


@router.post(
    "/{school_id}/admins",
    response_model=ApiResponse[SchoolAdminResponse],
    status_code=status.HTTP_201_CREATED,
)
async def assign_school_admin(
    school_id: int,
    data: SchoolAdminAssign,
    current_user: SuperAdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a school admin account for the school. Requires SUPER_ADMIN role."""
    service = SchoolService(db)
    link = await service.assign_admin(school_id, data, current_user.id)
    return ApiResponse(
        success=True,
        message="School admin assigned successfully",
        data=SchoolAdminResponse.model_validate(admin_link_to_dict(link)),
    )


@settings_router.get(
    "",
    response_model=ApiResponse[SchoolResponse],
)
async def get_school_settings(
    school_id: CurrentSchoolId,
    db: AsyncSession = Depends(get_db),
):
    """Settings of the school the current admin works in."""
    school = await SchoolService(db).get_school_by_id(school_id)
    return ApiResponse(success=True, data=SchoolResponse.model_validate(school))


@settings_router.patch(
    "",
    response_model=ApiResponse[SchoolResponse],
)
async def update_school_settings(
    data: SchoolSettingsUpdate,
    school_id: CurrentSchoolId,
    current_user: SchoolAdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Update contact details, currency and the current academic year and term."""
    school = await SchoolService(db).update_school(school_id, data, current_user.id)
    return ApiResponse(
        success=True,
        message="School settings updated successfully",
        data=SchoolResponse.model_validate(school),
    )
