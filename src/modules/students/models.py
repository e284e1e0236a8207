"""Student model."""

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import BaseModel, SchoolScopedMixin


class Student(SchoolScopedMixin, BaseModel):
    """Student enrolled in a school; the billing subject of invoices."""

    __tablename__ = "students"

    student_number: Mapped[str] = mapped_column(String(50), nullable=False)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("school_id", "student_number", name="uq_student_school_number"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
