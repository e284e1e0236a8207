from src.shared.schemas.base import (
    BaseSchema,
    CamelSchema,
    SuccessResponse,
    ErrorResponse,
    ErrorDetail,
    TimestampMixin,
)

__all__ = [
    "BaseSchema",
    "CamelSchema",
    "SuccessResponse",
    "ErrorResponse",
    "ErrorDetail",
    "TimestampMixin",
]
