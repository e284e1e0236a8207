"""Schemas for Students module."""

from pydantic import Field, field_validator

from src.shared.schemas import CamelSchema


class StudentCreate(CamelSchema):
    """Schema for creating a student."""

    student_number: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("student_number", "first_name", "last_name")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class StudentResponse(CamelSchema):
    """Schema for student response."""

    id: int
    student_number: str
    first_name: str
    last_name: str
    full_name: str
    is_active: bool
