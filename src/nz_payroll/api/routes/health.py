"""Health check endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from nz_payroll.api.dependencies import DbSession, Schedule, resolve_policy
from nz_payroll.calculators.errors import PolicyNotFoundError
from nz_payroll.database import ping

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    database: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(db: DbSession) -> HealthResponse:
    """Check API and database health."""
    db_status = "unhealthy"
    try:
        if await ping(db):
            db_status = "healthy"
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database health check failed: %s", e)

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        database=db_status,
    )


class ReadinessResponse(BaseModel):
    status: str
    policy_version: str | None = None


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(schedule: Schedule, response: Response) -> ReadinessResponse:
    """Ready once a payroll policy is in force for today."""
    try:
        policy = resolve_policy(schedule, None)
    except PolicyNotFoundError as e:
        logger.warning("Not ready: %s", e)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="no_policy")
    return ReadinessResponse(status="ready", policy_version=policy.version)


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}
