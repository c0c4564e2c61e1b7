"""
Response schemas (Pydantic)

Web API response serialization. Currency amounts are strings so no
precision is lost in JSON.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from core.billing.models import (
    BillingCalculation,
    Draw,
    DrawResult,
    ProjectLedger,
    ProjectSummary,
    ReleaseResult,
)


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(default="ok", description="Service status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(..., description="Response time (UTC)")


class DrawResponse(BaseModel):
    """Draw (progress or holdback release)"""

    kind: str = Field(..., description="progress / holdback_release")
    draw_number: int
    invoice_number: str
    date: str
    percent_complete: str | None = Field(default=None, description="None for releases")
    gross_amount: str
    holdback_amount: str = Field(..., description="Negative for releases")
    holdback_percent: str | None = None
    release_amount: str | None = None
    net_payable: str
    cumulative_invoiced: str
    cumulative_percent: str
    remaining_to_bill: str
    notes: str
    is_paid: bool
    paid_date: str | None = None
    is_holdback_release: bool

    @classmethod
    def from_draw(cls, draw: Draw) -> "DrawResponse":
        return cls(**draw.to_dict())


class ProjectResponse(BaseModel):
    """Project ledger with derived totals"""

    estimate_id: str
    estimate_name: str
    client_name: str
    customer_ref: str
    estimate_total: str
    holdback_percent: str
    total_invoiced: str
    total_holdback: str
    holdback_released: str
    available_holdback: str
    percent_complete: str
    remaining_to_bill: str
    is_initialized: bool
    is_complete: bool
    created_at: str
    draws: list[DrawResponse]

    @classmethod
    def from_ledger(cls, project: ProjectLedger) -> "ProjectResponse":
        data = project.to_dict()
        data["draws"] = [DrawResponse.from_draw(d) for d in project.draws]
        return cls(
            **data,
            available_holdback=str(project.available_holdback),
            percent_complete=str(project.percent_complete),
            remaining_to_bill=str(project.remaining_to_bill),
            is_initialized=project.is_initialized,
        )


class ProjectSummaryResponse(BaseModel):
    """Project list row"""

    estimate_id: str
    estimate_name: str
    client_name: str
    customer_ref: str
    estimate_total: str
    total_invoiced: str
    percent_complete: str
    total_holdback: str
    holdback_released: str
    holdback_retained: str
    remaining_to_bill: str
    draw_count: int
    is_complete: bool
    last_draw_date: str | None = None

    @classmethod
    def from_summary(cls, summary: ProjectSummary) -> "ProjectSummaryResponse":
        return cls(**summary.to_dict())


class CalculationResponse(BaseModel):
    """Draw preview (nothing committed)"""

    percent_complete: str
    total_to_date: str
    previously_invoiced: str
    this_invoice_gross: str
    holdback_percent: str
    holdback_amount: str
    net_payable: str
    remaining_to_bill: str
    cumulative_percent: str
    estimate_total: str
    total_holdback_retained: str
    draw_number: int

    @classmethod
    def from_calculation(cls, calculation: BillingCalculation) -> "CalculationResponse":
        return cls(**calculation.to_dict())


class DrawResultResponse(BaseModel):
    """Committed progress draw"""

    draw: DrawResponse
    project: ProjectResponse
    calculation: CalculationResponse

    @classmethod
    def from_result(cls, result: DrawResult) -> "DrawResultResponse":
        return cls(
            draw=DrawResponse.from_draw(result.draw),
            project=ProjectResponse.from_ledger(result.project),
            calculation=CalculationResponse.from_calculation(result.calculation),
        )


class ReleaseResultResponse(BaseModel):
    """Committed holdback release"""

    draw: DrawResponse
    project: ProjectResponse
    remaining_holdback: str

    @classmethod
    def from_result(cls, result: ReleaseResult) -> "ReleaseResultResponse":
        return cls(
            draw=DrawResponse.from_draw(result.draw),
            project=ProjectResponse.from_ledger(result.project),
            remaining_holdback=str(result.remaining_holdback),
        )
