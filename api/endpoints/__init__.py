"""API endpoints for the Hiring Pipeline."""

from fastapi import APIRouter

from .health import router as health_router
from .jobs import router as jobs_router
from .candidates import router as candidates_router
from .calendar import router as calendar_router
from .settings import router as settings_router
from .public_jobs import router as public_jobs_router
from .public_assignments import router as public_assignments_router
from .public_bookings import router as public_bookings_router

# Create main API router
api_router = APIRouter()

# Include all routers
api_router.include_router(health_router, prefix="/health", tags=["Health"])
api_router.include_router(jobs_router, prefix="/jobs", tags=["Jobs"])
api_router.include_router(candidates_router, prefix="/candidates", tags=["Candidates"])
api_router.include_router(calendar_router, prefix="/calendar", tags=["Calendar"])
api_router.include_router(settings_router, prefix="/settings", tags=["Settings"])
api_router.include_router(public_jobs_router, prefix="/public/jobs", tags=["Public Jobs"])
api_router.include_router(public_assignments_router, prefix="/public/assignments", tags=["Public Assignments"])
api_router.include_router(public_bookings_router, prefix="/public/bookings", tags=["Public Bookings"])

__all__ = ["api_router"]
