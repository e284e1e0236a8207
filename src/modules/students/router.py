"""API endpoints for Students module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import SchoolAdminUser
from src.core.database.session import get_db
from src.modules.schools.tenancy import CurrentSchoolId
from src.modules.students.schemas import StudentCreate, StudentResponse
from src.modules.students.service import StudentService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/students", tags=["Students"])


@router.post(
    "",
    response_model=ApiResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_student(
    data: StudentCreate,
    school_id: CurrentSchoolId,
    current_user: SchoolAdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a new student in the admin's school."""
    service = StudentService(db, school_id)
    student = await service.create_student(data, current_user.id)
    return ApiResponse(
        success=True,
        message="Student created successfully",
        data=StudentResponse.model_validate(student),
    )


@router.get(
    "",
    response_model=ApiResponse[list[StudentResponse]],
)
async def list_students(
    school_id: CurrentSchoolId,
    search: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List students of the admin's school."""
    service = StudentService(db, school_id)
    students = await service.list_students(search=search)
    return ApiResponse(
        success=True,
        data=[StudentResponse.model_validate(s) for s in students],
    )


@router.get(
    "/{student_id}",
    response_model=ApiResponse[StudentResponse],
)
async def get_student(
    student_id: int,
    school_id: CurrentSchoolId,
    db: AsyncSession = Depends(get_db),
):
    """Get student by ID."""
    service = StudentService(db, school_id)
    student = await service.get_student_by_id(student_id)
    return ApiResponse(success=True, data=StudentResponse.model_validate(student))
