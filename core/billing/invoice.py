"""
Invoice document assembler

Turns a committed draw into a structured invoice payload for an
external renderer (PDF, screen). No I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from core.billing.errors import DrawNotFound
from core.billing.models import (
    BillingCalculation,
    CompanyInfo,
    DrawResult,
    HoldbackReleaseDraw,
    ProgressDraw,
    ProjectLedger,
    ReleaseResult,
    utc_now,
)
from core.constants import Defaults, Money
from core.types import DrawKind

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9]")


def format_currency(amount: Decimal) -> str:
    """$1,234.50 (negative as -$1,234.50)"""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_percent(percent: Decimal | None) -> str:
    """50 / 33.3 (no trailing zeros)"""
    if percent is None:
        return ""
    return f"{percent.normalize():f}"


def sanitize_filename_part(text: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", text)


def progress_invoice_filename(project: ProjectLedger, draw: ProgressDraw) -> str:
    """{percent}%_Invoice_{invoice}_{client}_${net}_{job}.pdf"""
    return (
        f"{format_percent(draw.percent_complete)}%_Invoice_{draw.invoice_number}_"
        f"{sanitize_filename_part(project.client_name)}_${draw.net_payable:.2f}_"
        f"{project.customer_ref}.pdf"
    )


def holdback_release_filename(project: ProjectLedger, draw: HoldbackReleaseDraw) -> str:
    """Holdback_Release_{invoice}_{client}_${net}.pdf"""
    return (
        f"Holdback_Release_{draw.invoice_number}_"
        f"{sanitize_filename_part(project.client_name)}_${draw.net_payable:.2f}.pdf"
    )


@dataclass(frozen=True)
class InvoiceLine:
    """Table row: label and amount"""

    label: str
    amount: Decimal

    def to_dict(self) -> dict[str, str]:
        return {
            "label": self.label,
            "amount": str(self.amount),
            "display": format_currency(self.amount),
        }


@dataclass(frozen=True)
class InvoiceTable:
    """Titled two-column table"""

    title: str
    lines: list[InvoiceLine]

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "lines": [line.to_dict() for line in self.lines],
        }


@dataclass(frozen=True)
class InvoiceDocument:
    """Structured invoice payload

    Everything a renderer needs; amount_due always equals the
    draw's net payable.
    """

    kind: DrawKind
    title: str
    company: CompanyInfo
    invoice_number: str
    draw_number: int
    date: datetime
    percent_complete: Decimal | None
    client_name: str
    job_number: str
    estimate_name: str
    estimate_total: Decimal
    tables: list[InvoiceTable]
    amount_due: Decimal
    filename: str
    generated_at: datetime
    remaining_to_bill: Decimal | None = None
    remaining_holdback: Decimal | None = None
    notes: str = ""
    footer: list[str] = field(default_factory=list)

    def table(self, title: str) -> InvoiceTable | None:
        for table in self.tables:
            if table.title == title:
                return table
        return None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready payload"""
        return {
            "kind": self.kind.value,
            "title": self.title,
            "company": self.company.to_dict(),
            "header": {
                "invoice_number": self.invoice_number,
                "draw_number": self.draw_number,
                "date": self.date.isoformat(),
                "percent_complete": format_percent(self.percent_complete) or None,
            },
            "bill_to": {
                "client_name": self.client_name,
                "job_number": self.job_number,
            },
            "project": {
                "estimate_name": self.estimate_name,
                "estimate_total": str(self.estimate_total),
            },
            "tables": [table.to_dict() for table in self.tables],
            "amount_due": str(self.amount_due),
            "amount_due_display": format_currency(self.amount_due),
            "remaining_to_bill": (
                str(self.remaining_to_bill) if self.remaining_to_bill is not None else None
            ),
            "remaining_holdback": (
                str(self.remaining_holdback) if self.remaining_holdback is not None else None
            ),
            "notes": self.notes,
            "footer": list(self.footer),
            "filename": self.filename,
            "generated_at": self.generated_at.isoformat(),
        }


def build_progress_invoice(
    result: DrawResult,
    company: CompanyInfo | None = None,
    generated_at: datetime | None = None,
) -> InvoiceDocument:
    """Progress invoice for a committed draw

    Args:
        result: create_draw result
        company: company block (None uses the defaults)
        generated_at: generation timestamp (None uses now)
    """
    project, draw, calculation = result.project, result.draw, result.calculation
    generated_at = generated_at or utc_now()
    percent = format_percent(draw.percent_complete)

    progress = InvoiceTable(
        title="PROGRESS SUMMARY",
        lines=[
            InvoiceLine("Original Contract Amount", project.estimate_total),
            InvoiceLine("Previously Invoiced", calculation.previously_invoiced),
            InvoiceLine(f"Current Progress ({percent}%)", calculation.total_to_date),
            InvoiceLine("This Invoice (Gross)", draw.gross_amount),
        ],
    )
    holdback = InvoiceTable(
        title="HOLDBACK CALCULATION",
        lines=[
            InvoiceLine(f"Holdback ({format_percent(draw.holdback_percent)}%)", draw.holdback_amount),
            InvoiceLine("Total Holdback Retained to Date", calculation.total_holdback_retained),
        ],
    )

    return InvoiceDocument(
        kind=DrawKind.PROGRESS,
        title="PROGRESS INVOICE",
        company=company or CompanyInfo(),
        invoice_number=draw.invoice_number,
        draw_number=draw.draw_number,
        date=draw.date,
        percent_complete=draw.percent_complete,
        client_name=project.client_name,
        job_number=project.customer_ref,
        estimate_name=project.estimate_name,
        estimate_total=project.estimate_total,
        tables=[progress, holdback],
        amount_due=draw.net_payable,
        remaining_to_bill=calculation.remaining_to_bill,
        notes=draw.notes,
        footer=[
            Defaults.PAYMENT_TERMS,
            Defaults.HOLDBACK_TERMS,
            f"Generated: {generated_at:%Y-%m-%d %H:%M UTC}",
        ],
        filename=progress_invoice_filename(project, draw),
        generated_at=generated_at,
    )


def build_holdback_release_invoice(
    result: ReleaseResult,
    company: CompanyInfo | None = None,
    generated_at: datetime | None = None,
) -> InvoiceDocument:
    """Holdback release invoice

    Previously released is derived from the project totals after
    this release was applied.
    """
    project, draw = result.project, result.draw
    generated_at = generated_at or utc_now()

    summary = InvoiceTable(
        title="HOLDBACK SUMMARY",
        lines=[
            InvoiceLine("Total Holdback Retained", project.total_holdback),
            InvoiceLine("Previously Released", project.holdback_released - draw.net_payable),
            InvoiceLine("This Release", draw.net_payable),
            InvoiceLine("Remaining Holdback", result.remaining_holdback),
        ],
    )

    return InvoiceDocument(
        kind=DrawKind.HOLDBACK_RELEASE,
        title="HOLDBACK RELEASE",
        company=company or CompanyInfo(),
        invoice_number=draw.invoice_number,
        draw_number=draw.draw_number,
        date=draw.date,
        percent_complete=None,
        client_name=project.client_name,
        job_number=project.customer_ref,
        estimate_name=project.estimate_name,
        estimate_total=project.estimate_total,
        tables=[summary],
        amount_due=draw.net_payable,
        remaining_holdback=result.remaining_holdback,
        notes=draw.notes,
        footer=[f"Generated: {generated_at:%Y-%m-%d %H:%M UTC}"],
        filename=holdback_release_filename(project, draw),
        generated_at=generated_at,
    )


def result_for_draw(project: ProjectLedger, draw_number: int) -> DrawResult | ReleaseResult:
    """Rebuild the result of a past draw from the ledger history

    Totals are taken as of that draw, so a reprinted invoice matches
    the one issued at the time.

    Raises:
        DrawNotFound: no draw with that number
    """
    draw = project.find_draw(draw_number)
    if draw is None:
        raise DrawNotFound(project.estimate_id, draw_number)

    history = [d for d in project.draws if d.draw_number <= draw_number]
    withheld = sum((d.holdback_amount for d in history if not d.is_holdback_release), Money.ZERO)
    released = sum((d.net_payable for d in history if d.is_holdback_release), Money.ZERO)
    snapshot = replace(
        project,
        draws=history,
        total_invoiced=draw.cumulative_invoiced,
        total_holdback=withheld,
        holdback_released=released,
    )

    if isinstance(draw, HoldbackReleaseDraw):
        return ReleaseResult(draw=draw, project=snapshot, remaining_holdback=withheld - released)

    calculation = BillingCalculation(
        percent_complete=draw.percent_complete,
        total_to_date=draw.cumulative_invoiced,
        previously_invoiced=draw.cumulative_invoiced - draw.gross_amount,
        this_invoice_gross=draw.gross_amount,
        holdback_percent=draw.holdback_percent,
        holdback_amount=draw.holdback_amount,
        net_payable=draw.net_payable,
        remaining_to_bill=draw.remaining_to_bill,
        cumulative_percent=draw.cumulative_percent,
        estimate_total=project.estimate_total,
        total_holdback_retained=withheld,
        draw_number=draw.draw_number,
    )
    return DrawResult(draw=draw, project=snapshot, calculation=calculation)


def build_invoice(
    result: DrawResult | ReleaseResult,
    company: CompanyInfo | None = None,
    generated_at: datetime | None = None,
) -> InvoiceDocument:
    """Invoice for either draw variant"""
    if isinstance(result, ReleaseResult):
        return build_holdback_release_invoice(result, company, generated_at)
    return build_progress_invoice(result, company, generated_at)
