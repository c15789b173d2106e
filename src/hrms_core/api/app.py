"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hrms_core.api.routes import (
    access_router,
    attendance_router,
    compliance_router,
    employees_router,
    health_router,
    leave_router,
    notifications_router,
    organizations_router,
    payroll_router,
)
from hrms_core.config import get_settings
from hrms_core.database import create_schema, dispose_db, init_db
from hrms_core.exceptions import (
    ConflictError,
    HRMSError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from hrms_core.logging_config import configure_logging

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[HRMSError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (StateConflictError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
)


def status_for(exc: HRMSError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging(settings.log_level)
    engine, _ = init_db()
    if settings.create_schema_on_startup:
        await create_schema(engine)
    logger.info("HRMS API started")
    yield
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="HRMS API",
        description="Multi-tenant HR management backend",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HRMSError)
    async def domain_exception_handler(request: Request, exc: HRMSError) -> JSONResponse:
        """Translate domain errors into HTTP responses."""
        return JSONResponse(
            status_code=status_for(exc),
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "code": "BAD_REQUEST"},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    app.include_router(health_router)
    for router in (
        organizations_router,
        employees_router,
        access_router,
        compliance_router,
        leave_router,
        attendance_router,
        payroll_router,
        notifications_router,
    ):
        app.include_router(router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
