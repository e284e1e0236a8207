"""Service for Students module."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.service import AuditAction, AuditService
from src.core.exceptions import DuplicateError, NotFoundError
from src.modules.students.models import Student
from src.modules.students.schemas import StudentCreate


class StudentService:
    """Service for managing the students of one school."""

    def __init__(self, db: AsyncSession, school_id: int):
        self.db = db
        self.school_id = school_id
        self.audit = AuditService(db, school_id=school_id)

    async def create_student(self, data: StudentCreate, created_by_id: int) -> Student:
        """Create a new student in the school."""
        existing = await self.db.execute(
            select(Student.id).where(
                Student.school_id == self.school_id,
                Student.student_number == data.student_number,
            )
        )
        if existing.scalar_one_or_none():
            raise DuplicateError("Student", "studentNumber", data.student_number)

        student = Student(
            school_id=self.school_id,
            student_number=data.student_number,
            first_name=data.first_name,
            last_name=data.last_name,
            is_active=True,
        )
        self.db.add(student)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="Student",
            entity_id=student.id,
            user_id=created_by_id,
            entity_identifier=student.student_number,
            new_values={"student_number": student.student_number, "full_name": student.full_name},
        )

        await self.db.commit()
        await self.db.refresh(student)
        return student

    async def get_student_by_id(self, student_id: int) -> Student:
        """Get a student of this school; other schools' students are not found."""
        result = await self.db.execute(
            select(Student).where(Student.id == student_id, Student.school_id == self.school_id)
        )
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError("Student", student_id)
        return student

    async def list_students(self, search: str | None = None) -> list[Student]:
        """List students ordered by last and first name."""
        query = (
            select(Student)
            .where(Student.school_id == self.school_id)
            .order_by(Student.last_name, Student.first_name, Student.id)
        )
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    Student.first_name.ilike(pattern),
                    Student.last_name.ilike(pattern),
                    Student.student_number.ilike(pattern),
                )
            )
        result = await self.db.execute(query)
        return list(result.scalars().all())
