"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payroll_recon import __version__
from payroll_recon.api.routes import (
    credential_changes_router,
    health_router,
    invoices_router,
    reports_router,
    time_entries_router,
)
from payroll_recon.config import configure_logging, get_settings
from payroll_recon.database import create_schema, dispose_db, init_db
from payroll_recon.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateInvoiceNumberError,
    InvalidStateError,
    LockedRecordError,
    NotFoundError,
    ReconciliationError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[ReconciliationError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateInvoiceNumberError: status.HTTP_409_CONFLICT,
    InvalidStateError: status.HTTP_409_CONFLICT,
    LockedRecordError: status.HTTP_423_LOCKED,
}


def status_for(exc: ReconciliationError) -> int:
    """HTTP status for a reconciliation error."""
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Set up logging and the engine; dispose the engine on shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)
    init_db()
    if settings.create_schema:
        await create_schema()
        logger.info("Database schema created")
    yield
    await dispose_db()


def create_app() -> FastAPI:
    """Build the API with error mapping and all routers mounted."""
    settings = get_settings()
    app = FastAPI(
        title="Payroll Reconciliation API",
        description="Time entry ledger, invoice reconciliation and credential approvals",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ReconciliationError)
    async def reconciliation_exception_handler(
        request: Request, exc: ReconciliationError
    ) -> JSONResponse:
        """Map domain errors to HTTP responses."""
        return JSONResponse(
            status_code=status_for(exc),
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
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
    app.include_router(time_entries_router, prefix="/api/v1")
    app.include_router(reports_router, prefix="/api/v1")
    app.include_router(invoices_router, prefix="/api/v1")
    app.include_router(credential_changes_router, prefix="/api/v1")

    return app


app = create_app()
