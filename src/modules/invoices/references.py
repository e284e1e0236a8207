"""Check that everything an invoice points at exists in the school."""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import ReferenceNotFoundError
from src.core.logging import get_logger
from src.modules.fee_structures.models import FeeStructure
from src.modules.students.models import Student

logger = get_logger(__name__)


class ReferenceChecker:
    """Loads referenced rows scoped to one school before anything is written."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def check(
        self,
        school_id: int,
        student_id: int,
        fee_structure_ids: Sequence[int | None] = (),
    ) -> Student:
        """
        Verify the student and every fee structure belong to the school.

        ``fee_structure_ids`` is positional: entry ``i`` is the reference of
        line item ``i`` (None for a custom item).

        Returns:
            The billed student

        Raises:
            ReferenceNotFoundError: Naming ``studentId`` or
                ``lineItems.{i}.feeStructureId`` and the offending id
        """
        result = await self.db.execute(
            select(Student).where(Student.id == student_id, Student.school_id == school_id)
        )
        student = result.scalar_one_or_none()
        if student is None:
            logger.info("reference_not_found", school_id=school_id, field="studentId", value=student_id)
            raise ReferenceNotFoundError("Student", "studentId", student_id)

        wanted = {fid for fid in fee_structure_ids if fid is not None}
        found: set[int] = set()
        if wanted:
            result = await self.db.execute(
                select(FeeStructure.id).where(
                    FeeStructure.id.in_(wanted),
                    FeeStructure.school_id == school_id,
                )
            )
            found = set(result.scalars().all())

        for index, fid in enumerate(fee_structure_ids):
            if fid is not None and fid not in found:
                field = f"lineItems.{index}.feeStructureId"
                logger.info("reference_not_found", school_id=school_id, field=field, value=fid)
                raise ReferenceNotFoundError("Fee structure", field, fid, status_code=400)

        return student
