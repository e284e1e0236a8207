"""Schemas for Fee Structures module."""

from decimal import Decimal
from typing import Any

from pydantic import Field, field_validator

from src.modules.fee_structures.models import TermPeriod
from src.shared.schemas import CamelSchema, TimestampMixin
from src.shared.utils.academic_year import validate_academic_year
from src.shared.utils.money import to_decimal


def _coerce_amount(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    if isinstance(v, (int, float, str)) and not isinstance(v, bool):
        try:
            return to_decimal(v)
        except ValueError:
            raise ValueError("Amount must be a number.")
    return v


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class FeeStructureCreate(CamelSchema):
    """Schema for creating a fee structure."""

    name: str = Field(..., min_length=3, max_length=200)
    description: str | None = None
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    academic_year: str
    term: TermPeriod | None = None
    frequency: str = Field(..., min_length=1, max_length=50)

    @field_validator("description", "term", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return _coerce_amount(v)

    @field_validator("academic_year")
    @classmethod
    def check_academic_year(cls, v: str) -> str:
        return validate_academic_year(v)


class FeeStructureUpdate(CamelSchema):
    """Schema for a partial update: only fields present in the payload are applied."""

    name: str | None = Field(None, min_length=3, max_length=200)
    description: str | None = None
    amount: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    academic_year: str | None = None
    term: TermPeriod | None = None
    frequency: str | None = Field(None, min_length=1, max_length=50)

    @field_validator("description", "term", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return _coerce_amount(v)

    @field_validator("name", "amount", "academic_year", "frequency")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("This field cannot be cleared.")
        return v

    @field_validator("academic_year")
    @classmethod
    def check_academic_year(cls, v: str) -> str:
        return validate_academic_year(v)

    def changes(self) -> dict[str, Any]:
        """Fields the caller explicitly sent, by attribute name."""
        return self.model_dump(exclude_unset=True)


class FeeStructureResponse(TimestampMixin):
    """Schema for fee structure response."""

    id: int
    school_id: int
    name: str
    description: str | None
    amount: Decimal
    academic_year: str
    term: TermPeriod | None
    frequency: str
