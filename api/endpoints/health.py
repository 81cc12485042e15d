"""Health check endpoints for monitoring."""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.config.settings import settings
from api.config.database import get_db

logger = structlog.get_logger()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: str
    database: str


def check_database(db: Session) -> str:
    """Check database connectivity."""
    try:
        db.execute(text("SELECT 1")).fetchone()
        return "connected"
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        return "disconnected"


@router.get("", response_model=HealthResponse)
@router.get("/", response_model=HealthResponse, include_in_schema=False)
async def health_check(db: Session = Depends(get_db)) -> HealthResponse:
    """Overall status and database connectivity."""
    db_status = check_database(db)
    return HealthResponse(
        status="healthy" if db_status == "connected" else "unhealthy",
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        database=db_status,
    )


@router.get("/ready")
async def readiness_check(db: Session = Depends(get_db)) -> dict:
    """Readiness probe: 200 with ready=False while the database is unreachable."""
    if check_database(db) != "connected":
        return {"ready": False, "reason": "Database not connected"}
    return {"ready": True}


@router.get("/live")
async def liveness_check() -> dict:
    """Liveness probe."""
    return {"alive": True}
