"""
Health check endpoint

GET /health - server status
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from web.models.responses import HealthResponse

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Server status

    Returns:
        HealthResponse: status, version, timestamp
    """
    return HealthResponse(
        status="ok",
        version=API_VERSION,
        timestamp=datetime.now(timezone.utc),
    )
