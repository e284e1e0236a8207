from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with id={identifier} not found"
        super().__init__(message=message, status_code=404)


class ValidationError(AppException):
    """Validation error.

    ``field_errors`` maps a field path to every problem found on it, so a form
    can highlight all inputs at once.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        field_errors: dict[str, list[str]] | None = None,
    ):
        details: dict[str, Any] = {"field": field} if field else {}
        if field_errors:
            details["field_errors"] = field_errors
        super().__init__(message=message, status_code=400, details=details)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, status_code=401)


class AuthorizationError(AppException):
    """Not authorized to perform action."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message=message, status_code=403)


class NotAssociatedError(AuthorizationError):
    """Authenticated principal is not linked to any school."""

    def __init__(self, user_id: int):
        super().__init__(message="Admin not associated with any school")
        self.details = {"user_id": user_id}


class ReferenceNotFoundError(AppException):
    """A referenced row is missing or belongs to another school."""

    def __init__(
        self,
        resource: str,
        field: str,
        identifier: Any,
        status_code: int = 404,
    ):
        message = f"{resource} with id={identifier} not found in this school"
        super().__init__(
            message=message,
            status_code=status_code,
            details={"field": field, "value": identifier},
        )


class DuplicateError(AppException):
    """Duplicate resource."""

    def __init__(self, resource: str, field: str, value: Any):
        message = f"{resource} with {field}={value} already exists"
        super().__init__(message=message, status_code=409, details={"field": field, "value": value})


class ConflictError(AppException):
    """Write rejected by a uniqueness constraint."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, status_code=409, details=details)


class ConstraintViolationError(AppException):
    """Write rejected by a foreign key or other integrity constraint."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, status_code=400, details=details)
