"""
Project routes

Progress billing API: project setup, draws, holdback releases,
payments, invoices and export/import.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query
from fastapi.responses import Response

from core.billing.engine import ProgressBillingEngine
from core.billing.errors import (
    BillingError,
    DrawNotFound,
    InsufficientHoldback,
    InvalidAmount,
    InvalidProjectData,
    PercentRegression,
    ProjectNotFound,
    ProjectNotInitialized,
)
from core.billing.invoice import build_invoice, result_for_draw
from core.config.loader import Settings
from core.constants import Defaults
from web.dependencies import get_app_settings, get_engine
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
    ProjectResponse,
    ProjectSummaryResponse,
    ReleaseResultResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["Projects"])

_STATUS_CODES: dict[type[BillingError], int] = {
    ProjectNotFound: 404,
    DrawNotFound: 404,
    ProjectNotInitialized: 409,
    InsufficientHoldback: 409,
    PercentRegression: 409,
    InvalidAmount: 422,
    InvalidProjectData: 422,
}


def _http_error(e: BillingError) -> HTTPException:
    """Domain error -> HTTPException (unmapped errors become 500)"""
    for error_type, status_code in _STATUS_CODES.items():
        if isinstance(e, error_type):
            return HTTPException(status_code=status_code, detail=str(e))
    logger.error(f"Unhandled billing error: {e}")
    return HTTPException(status_code=500, detail=str(e))


@router.get("", response_model=list[ProjectSummaryResponse])
async def list_projects(
    engine: ProgressBillingEngine = Depends(get_engine),
) -> list[ProjectSummaryResponse]:
    """Summary of every project"""
    summaries = await engine.get_all_projects()
    return [ProjectSummaryResponse.from_summary(s) for s in summaries]


@router.post("", response_model=ProjectResponse)
async def initialize_project(
    request: InitializeProjectRequest,
    engine: ProgressBillingEngine = Depends(get_engine),
) -> ProjectResponse:
    """Create or update a project from a QuickBooks estimate

    Existing draws are kept; metadata and holdback rate are replaced.
    """
    try:
        project = await engine.initialize_project(request.estimate, request.holdback_percent)
    except BillingError as e:
        raise _http_error(e) from e
    return ProjectResponse.from_ledger(project)


@router.post("/import", response_model=ProjectResponse)
async def import_project(
    payload: dict[str, Any] = Body(..., description="Exported project ledger"),
    engine: ProgressBillingEngine = Depends(get_engine),
) -> ProjectResponse:
    """Import a project ledger (replaces an existing one)"""
    try:
        project = await engine.import_project(json.dumps(payload))
    except BillingError as e:
        raise _http_error(e) from e
    return ProjectResponse.from_ledger(project)


@router.get("/{estimate_id}", response_model=ProjectResponse)
async def get_project(
    estimate_id: str = Path(..., description="QuickBooks estimate id"),
    engine: ProgressBillingEngine = Depends(get_engine),
) -> ProjectResponse:
    """Project ledger with draw history"""
    project = await engine.get_project(estimate_id)
    if project is None:
        raise _http_error(ProjectNotFound(estimate_id))
    return ProjectResponse.from_ledger(project)


@router.delete("/{estimate_id}")
async def delete_project(
    estimate_id: str = Path(..., description="QuickBooks estimate id"),
    engine: ProgressBillingEngine = Depends(get_engine),
) -> dict[str, str]:
    """Delete a project and all its draws"""
    deleted = await engine.delete_project(estimate_id)
    if not deleted:
        raise _http_error(ProjectNotFound(estimate_id))
    return {"message": f"Project deleted: {estimate_id}"}


@router.get("/{estimate_id}/calculation", response_model=CalculationResponse)
async def preview_draw(
    estimate_id: str = Path(..., description="QuickBooks estimate id"),
    percent_complete: str = Query(..., description="Cumulative percent complete"),
    engine: ProgressBillingEngine = Depends(get_engine),
) -> CalculationResponse:
    """Preview the next progress draw (nothing is saved)"""
    try:
        calculation = await engine.calculate_progress_billing(estimate_id, percent_complete)
    except BillingError as e:
        raise _http_error(e) from e
    return CalculationResponse.from_calculation(calculation)


@router.get("/{estimate_id}/draws", response_model=list[DrawResponse])
async def list_draws(
    estimate_id: str = Path(..., description="QuickBooks estimate id"),
    engine: ProgressBillingEngine = Depends(get_engine),
) -> list[DrawResponse]:
    """Draw history in creation order"""
    draws = await engine.get_draws(estimate_id)
    return [DrawResponse.from_draw(d) for d in draws]


@router.post("/{estimate_id}/draws", response_model=DrawResultResponse)
async def create_draw(
    request: CreateDrawRequest,
    estimate_id: str = Path(..., description="QuickBooks estimate id"),
    engine: ProgressBillingEngine = Depends(get_engine),
) -> DrawResultResponse:
    """Commit a progress draw"""
    try:
        result = await engine.create_draw(
            estimate_id,
            request.percent_complete,
            invoice_number=request.invoice_number,
            notes=request.notes,
        )
    except BillingError as e:
        raise _http_error(e) from e
    return DrawResultResponse.from_result(result)


@router.post("/{estimate_id}/holdback-releases", response_model=ReleaseResultResponse)
async def release_holdback(
    request: HoldbackReleaseRequest,
    estimate_id: str = Path(..., description="QuickBooks estimate id"),
    engine: ProgressBillingEngine = Depends(get_engine),
) -> ReleaseResultResponse:
    """Release retained holdback (partial or full)"""
    try:
        result = await engine.release_holdback(
            estimate_id,
            request.amount,
            invoice_number=request.invoice_number,
            notes=request.notes if request.notes is not None else Defaults.RELEASE_NOTES,
        )
    except BillingError as e:
        raise _http_error(e) from e
    return ReleaseResultResponse.from_result(result)


@router.post("/{estimate_id}/draws/{draw_number}/paid", response_model=DrawResponse)
async def mark_draw_paid(
    request: MarkPaidRequest | None = None,
    estimate_id: str = Path(..., description="QuickBooks estimate id"),
    draw_number: int = Path(..., ge=1, description="Draw number"),
    engine: ProgressBillingEngine = Depends(get_engine),
) -> DrawResponse:
    """Mark a draw as paid (body optional, default date is now)"""
    paid_date = request.paid_date if request is not None else None
    try:
        draw = await engine.mark_draw_paid(estimate_id, draw_number, paid_date)
    except BillingError as e:
        raise _http_error(e) from e
    return DrawResponse.from_draw(draw)


@router.get("/{estimate_id}/draws/{draw_number}/invoice")
async def get_invoice(
    estimate_id: str = Path(..., description="QuickBooks estimate id"),
    draw_number: int = Path(..., ge=1, description="Draw number"),
    engine: ProgressBillingEngine = Depends(get_engine),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Invoice document for a draw

    Totals are as of that draw, so reprints match the original.
    """
    project = await engine.get_project(estimate_id)
    if project is None:
        raise _http_error(ProjectNotFound(estimate_id))

    try:
        result = result_for_draw(project, draw_number)
    except BillingError as e:
        raise _http_error(e) from e

    return build_invoice(result, settings.company).to_dict()


@router.get("/{estimate_id}/export")
async def export_project(
    estimate_id: str = Path(..., description="QuickBooks estimate id"),
    engine: ProgressBillingEngine = Depends(get_engine),
) -> Response:
    """Project ledger as a downloadable JSON file"""
    content = await engine.export_project(estimate_id)
    return Response(
        content=content,
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="project_{estimate_id}.json"',
        },
    )
