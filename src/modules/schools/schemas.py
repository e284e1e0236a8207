"""Schemas for Schools module."""

from typing import Any

from pydantic import EmailStr, Field, field_validator

from src.modules.fee_structures.models import TermPeriod
from src.shared.schemas import CamelSchema
from src.shared.utils.academic_year import validate_academic_year


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _check_currency(v: str) -> str:
    v = v.strip().upper()
    if len(v) != 3 or not v.isalpha():
        raise ValueError("Currency must be a 3-letter code (e.g., GHS).")
    return v


class SchoolCreate(CamelSchema):
    """Schema for creating a school."""

    name: str = Field(..., min_length=2, max_length=200)
    email: EmailStr
    phone: str | None = Field(None, max_length=50)
    address: str | None = None
    currency: str = "GHS"

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return _check_currency(v)


class SchoolSettingsUpdate(CamelSchema):
    """
    Settings a school admin may change on their own school.

    Only fields present in the payload are applied; blank strings clear the
    optional ones.
    """

    phone: str | None = Field(None, max_length=50)
    address: str | None = None
    currency: str | None = None
    current_academic_year: str | None = None
    current_term: TermPeriod | None = None

    @field_validator("phone", "address", "current_academic_year", "current_term", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("This field cannot be cleared.")
        return _check_currency(v)

    @field_validator("current_academic_year")
    @classmethod
    def check_academic_year(cls, v: str | None) -> str | None:
        return None if v is None else validate_academic_year(v)

    def changes(self) -> dict[str, Any]:
        """Fields the caller explicitly sent, by attribute name."""
        changes = self.model_dump(exclude_unset=True)
        if changes.get("current_term") is not None:
            changes["current_term"] = TermPeriod(changes["current_term"]).value
        return changes


class SchoolUpdate(SchoolSettingsUpdate):
    """Super-admin update of any school, including its status."""

    name: str | None = Field(None, min_length=2, max_length=200)
    email: EmailStr | None = None
    is_active: bool | None = None

    @field_validator("name", "email", "is_active")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("This field cannot be cleared.")
        return v


class SchoolResponse(CamelSchema):
    """Schema for school response."""

    id: int
    name: str
    email: str
    phone: str | None
    address: str | None
    currency: str
    current_academic_year: str | None
    current_term: TermPeriod | None
    is_active: bool


class SchoolAdminAssign(CamelSchema):
    """Schema for creating a school admin account and linking it to a school."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=1, max_length=200)
    phone: str | None = Field(None, max_length=50)
    job_title: str | None = Field("School Administrator", max_length=100)


class SchoolAdminResponse(CamelSchema):
    """Schema for school admin link response."""

    id: int
    user_id: int
    school_id: int
    email: str
    full_name: str
    job_title: str | None
