from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from sqlalchemy.exc import IntegrityError

from src.core.config import settings
from src.core.exceptions import AppException
from src.core.logging import get_logger
from src.shared.schemas import ErrorResponse, ErrorDetail

logger = get_logger(__name__)

_PYDANTIC_VALUE_ERROR_PREFIX = "Value error, "


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application exceptions."""
    field = exc.details.get("field")
    field_errors: dict[str, list[str]] = exc.details.get("field_errors") or {}
    if field_errors:
        errors = [
            ErrorDetail(field=name, message=message)
            for name, messages in field_errors.items()
            for message in messages
        ]
    else:
        errors = [ErrorDetail(field=field, message=exc.message)]
        if field:
            field_errors = {field: [exc.message]}

    response = ErrorResponse(
        message=exc.message,
        errors=errors,
        field_errors=field_errors,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(),
    )


def _format_validation_errors(errors: list[dict]) -> list[ErrorDetail]:
    details: list[ErrorDetail] = []
    for error in errors:
        loc = error.get("loc", ())
        # Drop top-level "body" for cleaner field paths
        if loc and loc[0] == "body":
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) if loc else None
        message = error.get("msg", "Invalid value")
        if message.startswith(_PYDANTIC_VALUE_ERROR_PREFIX):
            message = message[len(_PYDANTIC_VALUE_ERROR_PREFIX):]
        details.append(ErrorDetail(field=field, message=message))
    return details


def _group_by_field(details: list[ErrorDetail]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for detail in details:
        grouped.setdefault(detail.field or "__root__", []).append(detail.message)
    return grouped


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI validation errors: every violation, grouped per field."""
    details = _format_validation_errors(exc.errors())
    response = ErrorResponse(
        message="Validation error",
        errors=details,
        field_errors=_group_by_field(details),
    )
    return JSONResponse(
        status_code=400,
        content=response.model_dump(),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle generic HTTP exceptions."""
    errors = [ErrorDetail(field=None, message=str(exc.detail) if exc.detail else "HTTP error")]
    response = ErrorResponse(
        message=str(exc.detail) if exc.detail else "HTTP error",
        errors=errors,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(),
    )


def friendly_db_error(exc: Exception) -> tuple[str, str | None, int]:
    """
    Convert common DB constraint errors to a stable, user-facing message.

    Note: we intentionally do not expose full DB error details unless debug is enabled.
    """
    raw = str(getattr(exc, "orig", exc))
    lower = raw.lower()

    if "does not exist" in lower and "column" in lower:
        # Typical after deploying code without running Alembic migrations.
        return (
            "Database schema is out of date. Run the latest migrations and try again.",
            None,
            500,
        )

    if "unique" in lower or "duplicate key" in lower:
        field = "invoiceNumber" if "invoice_number" in lower else None
        return ("A record with the same unique details already exists.", field, 409)

    if "foreign key" in lower:
        return (
            "Database constraint violation: a referenced student or fee structure no longer exists.",
            None,
            400,
        )

    if settings.debug:
        return (raw, None, 500)

    return ("Database error", None, 500)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Handle integrity errors that escaped a service."""
    message, field, status_code = friendly_db_error(exc)
    logger.warning("integrity_error", path=request.url.path, status_code=status_code, error=str(exc.orig))
    response = ErrorResponse(
        message=message,
        errors=[ErrorDetail(field=field, message=message)],
    )
    return JSONResponse(status_code=status_code, content=response.model_dump())


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log anything unhandled with full context and answer with a generic 500."""
    logger.exception(
        "unhandled_error",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    message = "An unexpected server error occurred."
    response = ErrorResponse(message=message, errors=[ErrorDetail(field=None, message=message)])
    return JSONResponse(status_code=500, content=response.model_dump())
