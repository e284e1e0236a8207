from datetime import datetime
from enum import StrEnum

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import BaseModel


class UserRole(StrEnum):
    """User roles in the system."""

    SUPER_ADMIN = "SuperAdmin"
    SCHOOL_ADMIN = "SchoolAdmin"


class User(BaseModel):
    """
    User model for authentication and authorization.

    Super admins manage schools; school admins work inside exactly one school,
    resolved through the school_admins link table.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    role: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def has_role(self, *roles: UserRole) -> bool:
        """Check if user has any of the specified roles."""
        return self.role in [r.value for r in roles]

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN.value

    @property
    def is_school_admin(self) -> bool:
        return self.role == UserRole.SCHOOL_ADMIN.value
