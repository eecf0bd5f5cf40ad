"""Health and readiness probes for the payslip API."""

from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from payslip_engine import __version__
from payslip_engine.api.dependencies import DbSession
from payslip_engine.models import Base

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Engine version and database reachability."""

    status: str
    version: str
    timestamp: datetime
    database: str


class ReadinessResponse(BaseModel):
    status: str
    missing_tables: list[str]


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(db: DbSession) -> HealthResponse:
    """Report whether the payroll database answers a trivial query."""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        db_status = "unhealthy"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        database=db_status,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(db: DbSession):
    """Ready once every payroll table exists; 503 otherwise."""
    connection = await db.connection()
    existing = await connection.run_sync(
        lambda sync_conn: set(inspect(sync_conn).get_table_names())
    )
    missing = sorted(set(Base.metadata.tables) - existing)
    if missing:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "schema missing", "missing_tables": missing},
        )
    return ReadinessResponse(status="ready", missing_tables=[])


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
