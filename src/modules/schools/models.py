"""School (tenant) and SchoolAdmin link models."""

from sqlalchemy import BigInteger, Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel


class School(BaseModel):
    """A school: the unit of data isolation across the system."""

    __tablename__ = "schools"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="GHS")
    current_academic_year: Mapped[str | None] = mapped_column(String(9), nullable=True)
    current_term: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    admins: Mapped[list["SchoolAdmin"]] = relationship(
        "SchoolAdmin", back_populates="school", cascade="all, delete-orphan"
    )


class SchoolAdmin(BaseModel):
    """Links a SchoolAdmin user to the school they administer."""

    __tablename__ = "school_admins"

    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    school_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True
    )
    job_title: Mapped[str | None] = mapped_column(String(100), nullable=True)

    school: Mapped["School"] = relationship("School", back_populates="admins")
    user: Mapped["User"] = relationship("User")

    __table_args__ = (
        UniqueConstraint("user_id", "school_id", name="uq_school_admin_user_school"),
    )


# Import at the end to avoid circular imports
from src.core.auth.models import User
