from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class BaseSchema(BaseModel):
    """Base Pydantic schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class CamelSchema(BaseSchema):
    """Schema exposed to clients with camelCase keys (studentId, lineItems, ...)."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class ErrorDetail(BaseSchema):
    """Error detail for a specific field."""

    field: str | None = None
    message: str


class SuccessResponse(BaseSchema, Generic[T]):
    """Standard success response wrapper."""

    success: bool = True
    data: T
    message: str | None = None


# Alias for cleaner API usage
ApiResponse = SuccessResponse


class ErrorResponse(BaseSchema):
    """Standard error response wrapper."""

    success: bool = False
    data: None = None
    message: str
    errors: list[ErrorDetail] = []
    # field path -> every problem reported for it
    field_errors: dict[str, list[str]] = {}


class TimestampMixin(CamelSchema):
    """Mixin for created_at and updated_at fields."""

    created_at: datetime
    updated_at: datetime
