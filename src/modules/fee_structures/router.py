"""API endpoints for Fee Structures module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import SchoolAdminUser
from src.core.database.session import get_db
from src.modules.fee_structures.models import TermPeriod
from src.modules.fee_structures.schemas import (
    FeeStructureCreate,
    FeeStructureResponse,
    FeeStructureUpdate,
)
from src.modules.fee_structures.service import FeeStructureService
from src.modules.schools.tenancy import CurrentSchoolId
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/fee-structures", tags=["Fee Structures"])


@router.post(
    "",
    response_model=ApiResponse[FeeStructureResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_fee_structure(
    data: FeeStructureCreate,
    school_id: CurrentSchoolId,
    current_user: SchoolAdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a fee structure in the admin's school."""
    service = FeeStructureService(db, school_id)
    fee = await service.create_fee_structure(data, current_user.id)
    return ApiResponse(
        success=True,
        message="Fee structure created successfully",
        data=FeeStructureResponse.model_validate(fee),
    )


@router.get(
    "",
    response_model=ApiResponse[list[FeeStructureResponse]],
)
async def list_fee_structures(
    school_id: CurrentSchoolId,
    academic_year: str | None = Query(None, alias="academicYear"),
    term: TermPeriod | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List fee structures, optionally filtered by academic year and term."""
    service = FeeStructureService(db, school_id)
    fees = await service.list_fee_structures(academic_year=academic_year, term=term)
    return ApiResponse(
        success=True,
        data=[FeeStructureResponse.model_validate(f) for f in fees],
    )


@router.get(
    "/{fee_structure_id}",
    response_model=ApiResponse[FeeStructureResponse],
)
async def get_fee_structure(
    fee_structure_id: int,
    school_id: CurrentSchoolId,
    db: AsyncSession = Depends(get_db),
):
    """Get fee structure by ID."""
    service = FeeStructureService(db, school_id)
    fee = await service.get_fee_structure_by_id(fee_structure_id)
    return ApiResponse(success=True, data=FeeStructureResponse.model_validate(fee))


@router.patch(
    "/{fee_structure_id}",
    response_model=ApiResponse[FeeStructureResponse],
)
async def update_fee_structure(
    fee_structure_id: int,
    data: FeeStructureUpdate,
    school_id: CurrentSchoolId,
    current_user: SchoolAdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Update the fields sent in the payload."""
    service = FeeStructureService(db, school_id)
    fee = await service.update_fee_structure(fee_structure_id, data, current_user.id)
    return ApiResponse(
        success=True,
        message="Fee structure updated successfully",
        data=FeeStructureResponse.model_validate(fee),
    )


@router.delete(
    "/{fee_structure_id}",
    response_model=ApiResponse[None],
)
async def delete_fee_structure(
    fee_structure_id: int,
    school_id: CurrentSchoolId,
    current_user: SchoolAdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Delete a fee structure."""
    service = FeeStructureService(db, school_id)
    await service.delete_fee_structure(fee_structure_id, current_user.id)
    return ApiResponse(success=True, message="Fee structure deleted successfully", data=None)
