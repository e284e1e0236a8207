"""School billing FastAPI application."""
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

from src.core.auth.router import router as auth_router
from src.modules.schools.router import router as schools_router
from src.modules.schools.router import settings_router as school_settings_router
from src.modules.students.router import router as students_router
from src.modules.fee_structures.router import router as fee_structures_router
from src.modules.invoices.router import router as invoices_router
from src.core.config import settings
from src.core.exceptions import AppException
from src.core.exceptions.handlers import (
    app_exception_handler,
    http_exception_handler,
    integrity_error_handler,
    unexpected_exception_handler,
    validation_exception_handler,
)
from src.core.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    configure_logging()
    logger.info("application_started", env=settings.app_env)
    yield
    # Shutdown
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="School Billing",
        description="Multi-school administration backend: students, fee structures and invoices",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        """Fresh structlog context per request, tagged with a request id."""
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        )
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    # Exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    # Routers
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(schools_router, prefix="/api/v1")
    app.include_router(school_settings_router, prefix="/api/v1")
    app.include_router(students_router, prefix="/api/v1")
    app.include_router(fee_structures_router, prefix="/api/v1")
    app.include_router(invoices_router, prefix="/api/v1")

    return app


app = create_app()
