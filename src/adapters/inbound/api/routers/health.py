"""Health check endpoints."""

from fastapi import APIRouter

from ..deps import get_store
from ..models import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check endpoint.

    Returns:
        HealthResponse with current status and version.
    """
    return HealthResponse(
        status="healthy",
        version="1.0.0",
        database="not_checked",
    )


@router.get("/ready", response_model=HealthResponse)
async def readiness_check() -> HealthResponse:
    """Readiness probe.

    Checks that the document store answers queries.

    Returns:
        HealthResponse with detailed status.
    """
    try:
        db_status = "connected" if get_store().ping() else "unreachable"
    except Exception as e:
        db_status = f"error: {str(e)}"

    return HealthResponse(
        status="ready" if db_status == "connected" else "degraded",
        version="1.0.0",
        database=db_status,
    )
