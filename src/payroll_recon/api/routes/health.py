"""Health and readiness endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError

from payroll_recon import __version__
from payroll_recon.api.dependencies import DbSession
from payroll_recon.models import AppUser

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service and database status."""

    status: str
    version: str
    timestamp: datetime
    database: str


@router.get("/health", response_model=HealthResponse)
async def health_check(db: DbSession) -> HealthResponse:
    """Report whether the database answers queries.

    Always 200; a failing database shows as ``degraded``.
    """
    try:
        await db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        database = "unhealthy"

    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        database=database,
    )


@router.get("/ready", responses={503: {"description": "Schema not available"}})
async def readiness_check(db: DbSession):
    """Ready once the schema exists and can be queried."""
    try:
        await db.execute(select(AppUser.user_id).limit(1))
    except SQLAlchemyError:
        logger.warning("Readiness check failed: schema not available")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready"},
        )
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict[str, str]:
    """Process is up."""
    return {"status": "alive"}
