from src.core.exceptions.base import (
    AppException,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotAssociatedError,
    ReferenceNotFoundError,
    DuplicateError,
    ConflictError,
    ConstraintViolationError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotAssociatedError",
    "ReferenceNotFoundError",
    "DuplicateError",
    "ConflictError",
    "ConstraintViolationError",
]
