"""
Web model package

Pydantic schema definitions
"""

from web.models.requests import (
    CreateDrawRequest,
    HoldbackReleaseRequest,
    InitializeProjectRequest,
    MarkPaidRequest,
)
from web.models.responses import (
    CalculationResponse,
    DrawResponse,
    DrawResultResponse,
    HealthResponse,
    ProjectResponse,
    ProjectSummaryResponse,
    ReleaseResultResponse,
)

__all__ = [
    # Requests
    "InitializeProjectRequest",
    "CreateDrawRequest",
    "HoldbackReleaseRequest",
    "MarkPaidRequest",
    # Responses
    "HealthResponse",
    "DrawResponse",
    "ProjectResponse",
    "ProjectSummaryResponse",
    "CalculationResponse",
    "DrawResultResponse",
    "ReleaseResultResponse",
]
