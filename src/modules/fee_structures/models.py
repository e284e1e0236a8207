"""FeeStructure model and term enumeration."""

from decimal import Decimal
from enum import StrEnum

from sqlalchemy import Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import BaseModel, SchoolScopedMixin


class TermPeriod(StrEnum):
    """School term enumeration."""

    FIRST_TERM = "FIRST_TERM"
    SECOND_TERM = "SECOND_TERM"
    THIRD_TERM = "THIRD_TERM"


class FeeStructure(SchoolScopedMixin, BaseModel):
    """Reusable, named fee definition of a school.

    Invoice line items may point at a fee structure to pre-fill description and
    price; they keep their own copy of both, so the reference is weak.
    """

    __tablename__ = "fee_structures"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    term: Mapped[str | None] = mapped_column(String(20), nullable=True)  # TermPeriod, None = not term-specific
    frequency: Mapped[str] = mapped_column(String(50), nullable=False)  # Termly, Annually, One-time...

    __table_args__ = (
        UniqueConstraint(
            "school_id", "name", "academic_year", "term", name="uq_fee_structure_school_name_year_term"
        ),
    )
