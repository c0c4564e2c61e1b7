"""
Progress billing domain models

Project ledger, the two draw variants, calculation and summary records.
All currency amounts are Decimal and serialize as strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Union

from core.billing.errors import InvalidAmount, InvalidProjectData
from core.constants import Defaults, Money
from core.types import DrawKind

_MISSING = object()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_decimal(value: Any) -> Decimal:
    """Convert int/float/str/Decimal to Decimal

    Raises:
        InvalidAmount: value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidAmount(f"Not a number: {value!r}")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmount(f"Not a number: {value!r}") from e
    if not result.is_finite():
        raise InvalidAmount(f"Not a finite number: {value!r}")
    return result


def to_money(value: Any) -> Decimal:
    """Round to cents (ROUND_HALF_UP)"""
    return to_decimal(value).quantize(Money.CENT, rounding=ROUND_HALF_UP)


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole as a percentage; 0 when whole is 0"""
    if not whole:
        return Money.ZERO
    return (part * Money.HUNDRED / whole).quantize(Money.CENT, rounding=ROUND_HALF_UP)


def parse_timestamp(value: Any) -> datetime | None:
    """ISO-8601 string (or datetime) to an aware UTC datetime"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = value
    else:
        text = str(value)
        # Browser exports end with "Z"
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidProjectData(f"Invalid timestamp: {value!r}") from e
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _get(data: dict[str, Any], snake: str, camel: str, default: Any = _MISSING) -> Any:
    """Read a field under its snake_case or camelCase name"""
    if snake in data:
        return data[snake]
    if camel in data:
        return data[camel]
    if default is _MISSING:
        raise InvalidProjectData(f"Missing field: {snake}")
    return default


@dataclass(frozen=True)
class CompanyInfo:
    """Company block printed on invoices"""

    name: str = Defaults.COMPANY_NAME
    address: str = ""
    phone: str = ""
    email: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
        }


class _Payable:
    """Payment tracking shared by both draw variants"""

    is_paid: bool
    paid_date: datetime | None

    def mark_paid(self, paid_date: datetime | None = None) -> None:
        self.is_paid = True
        self.paid_date = paid_date or utc_now()


@dataclass
class ProgressDraw(_Payable):
    """Progress invoice

    percent_complete is cumulative. holdback_percent is the rate used
    for this draw, so history survives a later change of project rate.
    """

    draw_number: int
    invoice_number: str
    date: datetime
    percent_complete: Decimal
    gross_amount: Decimal
    holdback_amount: Decimal
    net_payable: Decimal
    cumulative_invoiced: Decimal
    cumulative_percent: Decimal
    remaining_to_bill: Decimal
    holdback_percent: Decimal
    notes: str = ""
    is_paid: bool = False
    paid_date: datetime | None = None
    kind: DrawKind = field(default=DrawKind.PROGRESS, init=False)

    @property
    def is_holdback_release(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "draw_number": self.draw_number,
            "invoice_number": self.invoice_number,
            "date": _iso(self.date),
            "percent_complete": str(self.percent_complete),
            "gross_amount": str(self.gross_amount),
            "holdback_amount": str(self.holdback_amount),
            "holdback_percent": str(self.holdback_percent),
            "net_payable": str(self.net_payable),
            "cumulative_invoiced": str(self.cumulative_invoiced),
            "cumulative_percent": str(self.cumulative_percent),
            "remaining_to_bill": str(self.remaining_to_bill),
            "notes": self.notes,
            "is_paid": self.is_paid,
            "paid_date": _iso(self.paid_date),
            "is_holdback_release": False,
        }


@dataclass
class HoldbackReleaseDraw(_Payable):
    """Holdback release invoice

    Pays out retained holdback. Bills no new progress.
    """

    draw_number: int
    invoice_number: str
    date: datetime
    release_amount: Decimal
    cumulative_invoiced: Decimal
    cumulative_percent: Decimal
    remaining_to_bill: Decimal
    notes: str = ""
    is_paid: bool = False
    paid_date: datetime | None = None
    kind: DrawKind = field(default=DrawKind.HOLDBACK_RELEASE, init=False)

    @property
    def is_holdback_release(self) -> bool:
        return True

    @property
    def percent_complete(self) -> None:
        return None

    @property
    def gross_amount(self) -> Decimal:
        return Money.ZERO

    @property
    def holdback_amount(self) -> Decimal:
        """Negative: money returned rather than withheld"""
        return -self.release_amount

    @property
    def net_payable(self) -> Decimal:
        return self.release_amount

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "draw_number": self.draw_number,
            "invoice_number": self.invoice_number,
            "date": _iso(self.date),
            "percent_complete": None,
            "gross_amount": str(self.gross_amount),
            "holdback_amount": str(self.holdback_amount),
            "release_amount": str(self.release_amount),
            "net_payable": str(self.net_payable),
            "cumulative_invoiced": str(self.cumulative_invoiced),
            "cumulative_percent": str(self.cumulative_percent),
            "remaining_to_bill": str(self.remaining_to_bill),
            "notes": self.notes,
            "is_paid": self.is_paid,
            "paid_date": _iso(self.paid_date),
            "is_holdback_release": True,
        }


Draw = Union[ProgressDraw, HoldbackReleaseDraw]


def _is_release_payload(data: dict[str, Any]) -> bool:
    kind = data.get("kind")
    if kind is not None:
        return kind == DrawKind.HOLDBACK_RELEASE.value
    if _get(data, "is_holdback_release", "isHoldbackRelease", False):
        return True
    # Older browser exports: no flag, only a null percent and a negative holdback
    holdback = _get(data, "holdback_amount", "holdbackAmount", 0)
    return _get(data, "percent_complete", "percentComplete", 0) is None and to_decimal(holdback) < 0


def draw_from_dict(
    data: dict[str, Any],
    default_holdback_percent: Decimal = Defaults.HOLDBACK_PERCENT,
) -> Draw:
    """Deserialize a draw (snake_case or the browser's camelCase)

    Args:
        data: serialized draw
        default_holdback_percent: rate used when a progress draw carries none
            and it cannot be derived from its amounts

    Raises:
        InvalidProjectData: required field missing or malformed
    """
    if not isinstance(data, dict):
        raise InvalidProjectData(f"Draw must be an object, got {type(data).__name__}")

    try:
        draw_number = int(_get(data, "draw_number", "drawNumber"))
        invoice_number = str(_get(data, "invoice_number", "invoiceNumber", "") or "")
        date = parse_timestamp(_get(data, "date", "date", None)) or utc_now()
        notes = str(_get(data, "notes", "notes", "") or "")
        is_paid = bool(_get(data, "is_paid", "isPaid", False))
        paid_date = parse_timestamp(_get(data, "paid_date", "paidDate", None))
        cumulative_invoiced = to_money(_get(data, "cumulative_invoiced", "cumulativeInvoiced", 0))
        cumulative_percent = to_decimal(_get(data, "cumulative_percent", "cumulativePercent", 0) or 0)
        remaining_to_bill = to_money(_get(data, "remaining_to_bill", "remainingToBill", 0))

        if _is_release_payload(data):
            release = _get(data, "release_amount", "releaseAmount", None)
            if release is None:
                release = _get(data, "net_payable", "netPayable")
            return HoldbackReleaseDraw(
                draw_number=draw_number,
                invoice_number=invoice_number,
                date=date,
                release_amount=to_money(release),
                cumulative_invoiced=cumulative_invoiced,
                cumulative_percent=cumulative_percent,
                remaining_to_bill=remaining_to_bill,
                notes=notes,
                is_paid=is_paid,
                paid_date=paid_date,
            )

        gross = to_money(_get(data, "gross_amount", "grossAmount"))
        holdback = to_money(_get(data, "holdback_amount", "holdbackAmount"))
        holdback_percent = _get(data, "holdback_percent", "holdbackPercent", None)
        if holdback_percent is None:
            holdback_percent = percent_of(holdback, gross) if gross else default_holdback_percent

        return ProgressDraw(
            draw_number=draw_number,
            invoice_number=invoice_number,
            date=date,
            percent_complete=to_decimal(_get(data, "percent_complete", "percentComplete")),
            gross_amount=gross,
            holdback_amount=holdback,
            net_payable=to_money(_get(data, "net_payable", "netPayable")),
            cumulative_invoiced=cumulative_invoiced,
            cumulative_percent=cumulative_percent,
            remaining_to_bill=remaining_to_bill,
            holdback_percent=to_decimal(holdback_percent),
            notes=notes,
            is_paid=is_paid,
            paid_date=paid_date,
        )
    except (InvalidAmount, TypeError, ValueError) as e:
        raise InvalidProjectData(f"Invalid draw data: {e}") from e


@dataclass(frozen=True)
class BillingCalculation:
    """Result of calculate_progress_billing (nothing committed)"""

    percent_complete: Decimal
    total_to_date: Decimal
    previously_invoiced: Decimal
    this_invoice_gross: Decimal
    holdback_percent: Decimal
    holdback_amount: Decimal
    net_payable: Decimal
    remaining_to_bill: Decimal
    cumulative_percent: Decimal
    estimate_total: Decimal
    total_holdback_retained: Decimal
    draw_number: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "percent_complete": str(self.percent_complete),
            "total_to_date": str(self.total_to_date),
            "previously_invoiced": str(self.previously_invoiced),
            "this_invoice_gross": str(self.this_invoice_gross),
            "holdback_percent": str(self.holdback_percent),
            "holdback_amount": str(self.holdback_amount),
            "net_payable": str(self.net_payable),
            "remaining_to_bill": str(self.remaining_to_bill),
            "cumulative_percent": str(self.cumulative_percent),
            "estimate_total": str(self.estimate_total),
            "total_holdback_retained": str(self.total_holdback_retained),
            "draw_number": self.draw_number,
        }


@dataclass(frozen=True)
class ProjectSummary:
    """One row of the project list / dashboard"""

    estimate_id: str
    estimate_name: str
    client_name: str
    customer_ref: str
    estimate_total: Decimal
    total_invoiced: Decimal
    percent_complete: Decimal
    total_holdback: Decimal
    holdback_released: Decimal
    holdback_retained: Decimal
    remaining_to_bill: Decimal
    draw_count: int
    is_complete: bool
    last_draw_date: datetime | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "estimate_id": self.estimate_id,
            "estimate_name": self.estimate_name,
            "client_name": self.client_name,
            "customer_ref": self.customer_ref,
            "estimate_total": str(self.estimate_total),
            "total_invoiced": str(self.total_invoiced),
            "percent_complete": str(self.percent_complete),
            "total_holdback": str(self.total_holdback),
            "holdback_released": str(self.holdback_released),
            "holdback_retained": str(self.holdback_retained),
            "remaining_to_bill": str(self.remaining_to_bill),
            "draw_count": self.draw_count,
            "is_complete": self.is_complete,
            "last_draw_date": _iso(self.last_draw_date),
        }


@dataclass
class ProjectLedger:
    """Draw ledger for one estimate

    Draws are append-only and numbered from 1. Totals only move forward
    through the engine.
    """

    estimate_id: str
    estimate_name: str = ""
    client_name: str = ""
    customer_ref: str = ""
    estimate_total: Decimal = Money.ZERO
    holdback_percent: Decimal = Defaults.HOLDBACK_PERCENT
    draws: list[Draw] = field(default_factory=list)
    total_invoiced: Decimal = Money.ZERO
    total_holdback: Decimal = Money.ZERO
    holdback_released: Decimal = Money.ZERO
    is_complete: bool = False
    created_at: datetime = field(default_factory=utc_now)

    @property
    def is_initialized(self) -> bool:
        return self.estimate_total > 0

    @property
    def available_holdback(self) -> Decimal:
        """Holdback withheld and not yet released"""
        return self.total_holdback - self.holdback_released

    @property
    def percent_complete(self) -> Decimal:
        return percent_of(self.total_invoiced, self.estimate_total)

    @property
    def remaining_to_bill(self) -> Decimal:
        return self.estimate_total - self.total_invoiced

    @property
    def next_draw_number(self) -> int:
        return len(self.draws) + 1

    @property
    def last_draw_date(self) -> datetime | None:
        return self.draws[-1].date if self.draws else None

    def find_draw(self, draw_number: int) -> Draw | None:
        for draw in self.draws:
            if draw.draw_number == draw_number:
                return draw
        return None

    def to_summary(self) -> ProjectSummary:
        return ProjectSummary(
            estimate_id=self.estimate_id,
            estimate_name=self.estimate_name,
            client_name=self.client_name,
            customer_ref=self.customer_ref,
            estimate_total=self.estimate_total,
            total_invoiced=self.total_invoiced,
            percent_complete=self.percent_complete,
            total_holdback=self.total_holdback,
            holdback_released=self.holdback_released,
            holdback_retained=self.available_holdback,
            remaining_to_bill=self.remaining_to_bill,
            draw_count=len(self.draws),
            is_complete=self.is_complete,
            last_draw_date=self.last_draw_date,
        )

    def to_dict(self) -> dict[str, Any]:
        """Dictionary form (serialization)"""
        return {
            "estimate_id": self.estimate_id,
            "estimate_name": self.estimate_name,
            "client_name": self.client_name,
            "customer_ref": self.customer_ref,
            "estimate_total": str(self.estimate_total),
            "holdback_percent": str(self.holdback_percent),
            "draws": [draw.to_dict() for draw in self.draws],
            "total_invoiced": str(self.total_invoiced),
            "total_holdback": str(self.total_holdback),
            "holdback_released": str(self.holdback_released),
            "is_complete": self.is_complete,
            "created_at": _iso(self.created_at),
        }

    @staticmethod
    def from_dict(data: Any) -> "ProjectLedger":
        """Build from a dictionary (deserialization)

        Accepts this system's snake_case form and the browser
        application's camelCase export.

        Raises:
            InvalidProjectData: not an object, missing estimate id,
                or malformed values
        """
        if not isinstance(data, dict):
            raise InvalidProjectData(
                f"Project data must be an object, got {type(data).__name__}"
            )

        estimate_id = _get(data, "estimate_id", "estimateId", None)
        if estimate_id is None or str(estimate_id) == "":
            raise InvalidProjectData("Invalid project data: missing estimate_id")

        try:
            holdback_percent = to_decimal(
                _get(data, "holdback_percent", "holdbackPercent", Defaults.HOLDBACK_PERCENT)
            )
            raw_draws = _get(data, "draws", "draws", []) or []
            if not isinstance(raw_draws, list):
                raise InvalidProjectData("Invalid project data: draws must be a list")

            project = ProjectLedger(
                estimate_id=str(estimate_id),
                estimate_name=str(_get(data, "estimate_name", "estimateName", "") or ""),
                client_name=str(_get(data, "client_name", "clientName", "") or ""),
                customer_ref=str(_get(data, "customer_ref", "customerRef", "") or ""),
                estimate_total=to_money(_get(data, "estimate_total", "estimateTotal", 0) or 0),
                holdback_percent=holdback_percent,
                draws=[draw_from_dict(d, holdback_percent) for d in raw_draws],
                total_invoiced=to_money(_get(data, "total_invoiced", "totalInvoiced", 0) or 0),
                total_holdback=to_money(_get(data, "total_holdback", "totalHoldback", 0) or 0),
                holdback_released=to_money(
                    _get(data, "holdback_released", "holdbackReleased", 0) or 0
                ),
                is_complete=bool(_get(data, "is_complete", "isComplete", False)),
                created_at=parse_timestamp(_get(data, "created_at", "createdAt", None)) or utc_now(),
            )
        except InvalidAmount as e:
            raise InvalidProjectData(f"Invalid project data: {e}") from e

        _check_ledger(project)
        return project


def _check_ledger(project: ProjectLedger) -> None:
    """Ledger invariants a deserialized project must satisfy

    Draws are numbered 1..n in order and released holdback never
    exceeds the holdback retained.

    Raises:
        InvalidProjectData: an invariant does not hold
    """
    for index, draw in enumerate(project.draws, start=1):
        if draw.draw_number != index:
            raise InvalidProjectData(
                f"Invalid project data: draw #{draw.draw_number} at position {index}, "
                f"draws must be numbered 1..{len(project.draws)} in order"
            )

    if project.estimate_total < 0:
        raise InvalidProjectData(
            f"Invalid project data: negative estimate_total {project.estimate_total}"
        )

    if not Money.ZERO <= project.holdback_released <= project.total_holdback:
        raise InvalidProjectData(
            f"Invalid project data: holdback_released {project.holdback_released} "
            f"must be between 0 and total_holdback {project.total_holdback}"
        )


@dataclass(frozen=True)
class DrawResult:
    """create_draw result"""

    draw: ProgressDraw
    project: ProjectLedger
    calculation: BillingCalculation


@dataclass(frozen=True)
class ReleaseResult:
    """release_holdback result"""

    draw: HoldbackReleaseDraw
    project: ProjectLedger
    remaining_holdback: Decimal
