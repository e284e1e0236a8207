"""Resolve the school (tenant) an authenticated admin works in."""

from typing import Annotated

import structlog
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import require_roles
from src.core.auth.models import User, UserRole
from src.core.database import get_db
from src.core.exceptions import NotAssociatedError
from src.core.logging import get_logger
from src.modules.schools.service import get_user_school_ids

logger = get_logger(__name__)


class TenantResolver:
    """Maps a principal to the single school every read and write is scoped to."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_school_id(self, user: User) -> int:
        """
        Return the school id linked to the user.

        A user linked to several schools is scoped to the earliest link.

        Raises:
            NotAssociatedError: If the user has no school link
        """
        school_ids = await get_user_school_ids(self.db, user)
        if not school_ids:
            logger.warning("tenant_not_associated", user_id=user.id)
            raise NotAssociatedError(user.id)
        return school_ids[0]


async def get_current_school_id(
    current_user: User = Depends(require_roles(UserRole.SCHOOL_ADMIN)),
    db: AsyncSession = Depends(get_db),
) -> int:
    """Dependency: school id of the authenticated school admin."""
    school_id = await TenantResolver(db).resolve_school_id(current_user)
    structlog.contextvars.bind_contextvars(school_id=school_id)
    return school_id


CurrentSchoolId = Annotated[int, Depends(get_current_school_id)]
