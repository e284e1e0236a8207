"""Service for Schools module."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.audit.service import AuditAction, AuditService
from src.core.auth.models import User, UserRole
from src.core.auth.service import AuthService
from src.core.exceptions import DuplicateError, NotFoundError, ValidationError
from src.core.logging import get_logger
from src.modules.schools.models import School, SchoolAdmin
from src.modules.schools.schemas import SchoolAdminAssign, SchoolCreate, SchoolSettingsUpdate

logger = get_logger(__name__)


class SchoolService:
    """Service for super-admin management of schools and their admins."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_school(self, data: SchoolCreate, created_by_id: int) -> School:
        """Create a new school."""
        existing = await self.db.execute(select(School).where(School.email == data.email))
        if existing.scalar_one_or_none():
            raise DuplicateError("School", "email", data.email)

        school = School(
            name=data.name,
            email=data.email,
            phone=data.phone,
            address=data.address,
            currency=data.currency,
            is_active=True,
        )
        self.db.add(school)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="School",
            entity_id=school.id,
            user_id=created_by_id,
            entity_identifier=school.name,
            new_values={"name": school.name, "email": school.email, "currency": school.currency},
        )

        await self.db.commit()
        await self.db.refresh(school)
        logger.info("school_created", school_id=school.id, created_by_id=created_by_id)
        return school

    async def get_school_by_id(self, school_id: int) -> School:
        """Get school by ID."""
        result = await self.db.execute(select(School).where(School.id == school_id))
        school = result.scalar_one_or_none()
        if not school:
            raise NotFoundError("School", school_id)
        return school

    async def list_schools(self, include_inactive: bool = False) -> list[School]:
        """List schools ordered by name."""
        query = select(School).order_by(School.name)
        if not include_inactive:
            query = query.where(School.is_active.is_(True))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update_school(
        self, school_id: int, data: SchoolSettingsUpdate, updated_by_id: int
    ) -> School:
        """
        Apply only the fields present in the payload.

        Super admins send a `SchoolUpdate` (any field, including `is_active`);
        school admins send `SchoolSettingsUpdate` for their own school.
        """
        changes = data.changes()
        if not changes:
            raise ValidationError("No fields to update")

        school = await self.get_school_by_id(school_id)
        if "email" in changes and changes["email"] != school.email:
            existing = await self.db.execute(
                select(School.id).where(School.email == changes["email"], School.id != school.id)
            )
            if existing.scalar_one_or_none() is not None:
                raise DuplicateError("School", "email", changes["email"])

        old_values = {field: getattr(school, field) for field in changes}
        for field, value in changes.items():
            setattr(school, field, value)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.UPDATE,
            entity_type="School",
            entity_id=school.id,
            user_id=updated_by_id,
            entity_identifier=school.name,
            old_values=old_values,
            new_values=changes,
        )

        await self.db.commit()
        await self.db.refresh(school)
        logger.info(
            "school_updated", school_id=school.id, fields=sorted(changes), updated_by_id=updated_by_id
        )
        return school

    async def assign_admin(
        self, school_id: int, data: SchoolAdminAssign, assigned_by_id: int
    ) -> SchoolAdmin:
        """Create a SchoolAdmin user and link it to the school."""
        school = await self.get_school_by_id(school_id)

        user = await AuthService(self.db).create_user(
            email=data.email,
            password=data.password,
            full_name=data.full_name,
            role=UserRole.SCHOOL_ADMIN,
            phone=data.phone,
            created_by_id=assigned_by_id,
        )
        link = SchoolAdmin(user_id=user.id, school_id=school.id, job_title=data.job_title)
        self.db.add(link)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.ASSIGN_SCHOOL_ADMIN,
            entity_type="School",
            entity_id=school.id,
            user_id=assigned_by_id,
            entity_identifier=school.name,
            new_values={"user_id": user.id, "email": user.email},
        )

        await self.db.commit()
        logger.info("school_admin_assigned", school_id=school.id, user_id=user.id)
        return await self.get_admin_link(link.id)

    async def get_admin_link(self, link_id: int) -> SchoolAdmin:
        result = await self.db.execute(
            select(SchoolAdmin)
            .where(SchoolAdmin.id == link_id)
            .options(selectinload(SchoolAdmin.user))
        )
        link = result.scalar_one_or_none()
        if not link:
            raise NotFoundError("School admin", link_id)
        return link


def admin_link_to_dict(link: SchoolAdmin) -> dict:
    return {
        "id": link.id,
        "user_id": link.user_id,
        "school_id": link.school_id,
        "email": link.user.email,
        "full_name": link.user.full_name,
        "job_title": link.job_title,
    }


async def get_user_school_ids(db: AsyncSession, user: User) -> list[int]:
    """All school ids linked to a user, oldest link first."""
    result = await db.execute(
        select(SchoolAdmin.school_id)
        .where(SchoolAdmin.user_id == user.id)
        .order_by(SchoolAdmin.id)
    )
    return list(result.scalars().all())
