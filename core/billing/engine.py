"""
Progress billing engine

Draw calculation, holdback tracking and payment history per estimate.
Every mutation is a read-modify-write of the ledger document and is
persisted before the call returns.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from adapters.models import Estimate
from core.billing.errors import (
    DrawNotFound,
    InsufficientHoldback,
    InvalidAmount,
    InvalidProjectData,
    PercentRegression,
    ProjectNotInitialized,
)
from core.billing.models import (
    BillingCalculation,
    Draw,
    DrawResult,
    HoldbackReleaseDraw,
    ProgressDraw,
    ProjectLedger,
    ProjectSummary,
    ReleaseResult,
    parse_timestamp,
    to_decimal,
    to_money,
    utc_now,
)
from core.constants import Defaults, Money
from core.types import PercentRegressionPolicy

if TYPE_CHECKING:
    from core.storage.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


def _check_percent_range(value: Decimal, name: str) -> None:
    if not Money.ZERO <= value <= Money.HUNDRED:
        raise InvalidAmount(f"{name} must be between 0 and 100, got {value}")


class ProgressBillingEngine:
    """Progress billing engine

    Owns the billing rules. Persistence goes through the injected
    LedgerStore; the engine keeps no ledger state between calls.

    Args:
        store: ledger store
        default_holdback_percent: holdback rate for new projects
        regression_policy: handling of a percent below what is already invoiced

    Usage:
    ```python
    engine = ProgressBillingEngine(LedgerStore(InMemoryKeyValueStore()))

    await engine.initialize_project(estimate, holdback_percent=10)
    result = await engine.create_draw(estimate.estimate_id, 50)
    release = await engine.release_holdback(estimate.estimate_id, Decimal("500"))
    ```
    """

    def __init__(
        self,
        store: LedgerStore,
        default_holdback_percent: Decimal | int | str = Defaults.HOLDBACK_PERCENT,
        regression_policy: PercentRegressionPolicy = PercentRegressionPolicy.REJECT,
    ):
        self.store = store
        self.default_holdback_percent = to_decimal(default_holdback_percent)
        _check_percent_range(self.default_holdback_percent, "default_holdback_percent")
        self.regression_policy = regression_policy

        # One read-modify-write at a time
        self._lock = asyncio.Lock()

    def _new_project(self, estimate_id: str) -> ProjectLedger:
        return ProjectLedger(
            estimate_id=estimate_id,
            holdback_percent=self.default_holdback_percent,
        )

    async def _load(self, estimate_id: str) -> tuple[dict[str, ProjectLedger], ProjectLedger]:
        projects = await self.store.load_all()
        project = projects.get(estimate_id)
        if project is None:
            project = self._new_project(estimate_id)
        return projects, project

    async def _commit(self, projects: dict[str, ProjectLedger], project: ProjectLedger) -> None:
        projects[project.estimate_id] = project
        await self.store.save_all(projects)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def get_project(self, estimate_id: str) -> ProjectLedger | None:
        """Ledger for an estimate, or None (never creates one)"""
        return await self.store.get(estimate_id)

    async def get_draws(self, estimate_id: str) -> list[Draw]:
        """Draw history in creation order (empty for unknown projects)"""
        project = await self.store.get(estimate_id)
        return list(project.draws) if project else []

    async def get_all_projects(self) -> list[ProjectSummary]:
        """Summary of every project

        Returns a new list on each call. Percent complete is 0 for
        projects without an estimate total.
        """
        projects = await self.store.load_all()
        return [project.to_summary() for project in projects.values()]

    async def get_or_create_project(self, estimate_id: str) -> ProjectLedger:
        """Existing ledger, or a new zeroed one (persisted)"""
        async with self._lock:
            projects = await self.store.load_all()
            project = projects.get(estimate_id)
            if project is None:
                project = self._new_project(estimate_id)
                await self._commit(projects, project)
                logger.info(f"Project ledger created: {estimate_id}")
            return project

    # -------------------------------------------------------------------------
    # Project setup
    # -------------------------------------------------------------------------

    async def initialize_project(
        self,
        estimate: Estimate | dict[str, Any],
        holdback_percent: Decimal | int | float | str | None = None,
    ) -> ProjectLedger:
        """Set project metadata from an estimate

        Overwrites name, client, job number, estimate total and holdback
        rate. Existing draws and totals are left untouched.

        Args:
            estimate: normalized Estimate or a raw QuickBooks estimate dict
            holdback_percent: holdback rate 0-100 (None uses the default)

        Returns:
            updated ProjectLedger

        Raises:
            InvalidAmount: holdback_percent outside 0-100
            InvalidProjectData: raw estimate without an Id
        """
        if isinstance(estimate, dict):
            from adapters.quickbooks.models import parse_estimate
            estimate = parse_estimate(estimate)

        if holdback_percent is None:
            percent = self.default_holdback_percent
        else:
            percent = to_decimal(holdback_percent)
        _check_percent_range(percent, "holdback_percent")

        async with self._lock:
            projects, project = await self._load(estimate.estimate_id)

            project.estimate_name = estimate.estimate_name
            project.estimate_total = to_money(estimate.total_amount)
            project.client_name = estimate.client_name
            project.customer_ref = estimate.customer_ref
            project.holdback_percent = percent

            await self._commit(projects, project)

        logger.info(
            f"Project initialized: {project.estimate_id} '{project.estimate_name}' "
            f"total=${project.estimate_total:,.2f} holdback={percent}% "
            f"existing_draws={len(project.draws)}"
        )
        return project

    # -------------------------------------------------------------------------
    # Progress draws
    # -------------------------------------------------------------------------

    def _calculate(self, project: ProjectLedger, percent_complete: Any) -> BillingCalculation:
        if not project.is_initialized:
            raise ProjectNotInitialized(project.estimate_id)

        percent = max(Money.ZERO, min(Money.HUNDRED, to_decimal(percent_complete)))

        total_to_date = to_money(project.estimate_total * percent / Money.HUNDRED)
        previously_invoiced = project.total_invoiced
        this_invoice_gross = total_to_date - previously_invoiced

        if this_invoice_gross < 0 and self.regression_policy == PercentRegressionPolicy.REJECT:
            logger.warning(
                f"Percent regression rejected for {project.estimate_id}: "
                f"{percent}% bills ${total_to_date:,.2f}, "
                f"${previously_invoiced:,.2f} already invoiced"
            )
            raise PercentRegression(previously_invoiced, total_to_date)

        holdback_amount = to_money(this_invoice_gross * project.holdback_percent / Money.HUNDRED)

        # A credit draw cannot take back holdback that was already released
        if project.total_holdback + holdback_amount < project.holdback_released:
            logger.warning(
                f"Credit draw rejected for {project.estimate_id}: "
                f"holdback ${-holdback_amount:,.2f} exceeds ${project.available_holdback:,.2f} retained"
            )
            raise InsufficientHoldback(-holdback_amount, project.available_holdback)

        return BillingCalculation(
            percent_complete=percent,
            total_to_date=total_to_date,
            previously_invoiced=previously_invoiced,
            this_invoice_gross=this_invoice_gross,
            holdback_percent=project.holdback_percent,
            holdback_amount=holdback_amount,
            net_payable=this_invoice_gross - holdback_amount,
            remaining_to_bill=project.estimate_total - total_to_date,
            cumulative_percent=percent,
            estimate_total=project.estimate_total,
            total_holdback_retained=project.total_holdback + holdback_amount,
            draw_number=project.next_draw_number,
        )

    async def calculate_progress_billing(
        self,
        estimate_id: str,
        percent_complete: Decimal | int | float | str,
    ) -> BillingCalculation:
        """Preview a progress draw (nothing is written)

        Args:
            estimate_id: estimate id
            percent_complete: cumulative percent complete, clamped to 0-100

        Raises:
            ProjectNotInitialized: estimate total not set
            PercentRegression: percent below already invoiced (REJECT policy)
            InsufficientHoldback: credit draw would take back released holdback (ALLOW policy)
        """
        project = await self.store.get(estimate_id) or self._new_project(estimate_id)
        return self._calculate(project, percent_complete)

    async def create_draw(
        self,
        estimate_id: str,
        percent_complete: Decimal | int | float | str,
        invoice_number: str | None = None,
        notes: str = "",
    ) -> DrawResult:
        """Commit a progress draw

        Args:
            estimate_id: estimate id
            percent_complete: cumulative percent complete, clamped to 0-100
            invoice_number: invoice number (None generates "{job#|INV}-NNN")
            notes: free text printed on the invoice

        Returns:
            DrawResult(draw, project, calculation)

        Raises:
            ProjectNotInitialized: estimate total not set
            PercentRegression: percent below already invoiced (REJECT policy)
            InsufficientHoldback: credit draw would take back released holdback (ALLOW policy)
        """
        async with self._lock:
            projects, project = await self._load(estimate_id)
            calculation = self._calculate(project, percent_complete)

            if not invoice_number:
                prefix = project.customer_ref or Defaults.INVOICE_PREFIX
                invoice_number = f"{prefix}-{calculation.draw_number:03d}"

            draw = ProgressDraw(
                draw_number=calculation.draw_number,
                invoice_number=invoice_number,
                date=utc_now(),
                percent_complete=calculation.percent_complete,
                gross_amount=calculation.this_invoice_gross,
                holdback_amount=calculation.holdback_amount,
                net_payable=calculation.net_payable,
                cumulative_invoiced=calculation.total_to_date,
                cumulative_percent=calculation.cumulative_percent,
                remaining_to_bill=calculation.remaining_to_bill,
                holdback_percent=calculation.holdback_percent,
                notes=notes or "",
            )

            project.draws.append(draw)
            project.total_invoiced = calculation.total_to_date
            project.total_holdback += calculation.holdback_amount
            if calculation.percent_complete >= Money.HUNDRED:
                project.is_complete = True

            await self._commit(projects, project)

        logger.info(
            f"Draw #{draw.draw_number} ({draw.invoice_number}) created for {estimate_id}: "
            f"{draw.percent_complete}% gross=${draw.gross_amount:,.2f} "
            f"holdback=${draw.holdback_amount:,.2f} net=${draw.net_payable:,.2f}"
        )
        return DrawResult(draw=draw, project=project, calculation=calculation)

    # -------------------------------------------------------------------------
    # Holdback release
    # -------------------------------------------------------------------------

    async def release_holdback(
        self,
        estimate_id: str,
        release_amount: Decimal | int | float | str,
        invoice_number: str | None = None,
        notes: str = Defaults.RELEASE_NOTES,
    ) -> ReleaseResult:
        """Release retained holdback (partial or full)

        Args:
            estimate_id: estimate id
            release_amount: amount to pay out, > 0 and <= available holdback
            invoice_number: invoice number (None generates "{job#|HB}-RELEASE-NNN")
            notes: free text printed on the invoice

        Returns:
            ReleaseResult(draw, project, remaining_holdback)

        Raises:
            InvalidAmount: release_amount <= 0
            InsufficientHoldback: release_amount > available holdback
        """
        amount = to_money(release_amount)
        if amount <= 0:
            raise InvalidAmount(f"Release amount must be positive, got {amount}")

        async with self._lock:
            projects, project = await self._load(estimate_id)

            available = project.available_holdback
            if amount > available:
                logger.warning(
                    f"Holdback release rejected for {estimate_id}: "
                    f"requested ${amount:,.2f}, available ${available:,.2f}"
                )
                raise InsufficientHoldback(amount, available)

            draw_number = project.next_draw_number
            if not invoice_number:
                prefix = project.customer_ref or Defaults.RELEASE_PREFIX
                invoice_number = f"{prefix}-RELEASE-{draw_number:03d}"

            draw = HoldbackReleaseDraw(
                draw_number=draw_number,
                invoice_number=invoice_number,
                date=utc_now(),
                release_amount=amount,
                cumulative_invoiced=project.total_invoiced,
                cumulative_percent=project.percent_complete,
                remaining_to_bill=project.remaining_to_bill,
                notes=notes or "",
            )

            project.draws.append(draw)
            project.holdback_released += amount

            await self._commit(projects, project)

        remaining = project.available_holdback
        logger.info(
            f"Holdback release #{draw_number} ({invoice_number}) for {estimate_id}: "
            f"${amount:,.2f} released, ${remaining:,.2f} remaining"
        )
        return ReleaseResult(draw=draw, project=project, remaining_holdback=remaining)

    # -------------------------------------------------------------------------
    # Payment tracking
    # -------------------------------------------------------------------------

    async def mark_draw_paid(
        self,
        estimate_id: str,
        draw_number: int,
        paid_date: datetime | str | None = None,
    ) -> Draw:
        """Mark a draw as paid

        Args:
            estimate_id: estimate id
            draw_number: draw number (1-based)
            paid_date: payment date (None uses now)

        Raises:
            DrawNotFound: no draw with that number
        """
        paid_at = parse_timestamp(paid_date) or utc_now()

        async with self._lock:
            projects, project = await self._load(estimate_id)

            draw = project.find_draw(draw_number)
            if draw is None:
                raise DrawNotFound(estimate_id, draw_number)

            draw.mark_paid(paid_at)
            await self._commit(projects, project)

        logger.info(f"Draw #{draw_number} of {estimate_id} marked paid ({paid_at.date()})")
        return draw

    # -------------------------------------------------------------------------
    # Project lifecycle
    # -------------------------------------------------------------------------

    async def delete_project(self, estimate_id: str) -> bool:
        """Delete a project and all its draws

        Returns:
            True when the project existed
        """
        async with self._lock:
            deleted = await self.store.delete(estimate_id)

        if deleted:
            logger.info(f"Project deleted: {estimate_id}")
        return deleted

    async def export_project(self, estimate_id: str) -> str:
        """Serialize one project ledger to indented JSON"""
        project = await self.get_or_create_project(estimate_id)
        return json.dumps(project.to_dict(), indent=2, ensure_ascii=False)

    async def import_project(self, data: str) -> ProjectLedger:
        """Load a project ledger from JSON, replacing any existing one

        Accepts this system's export and the browser application's
        camelCase export.

        Raises:
            InvalidProjectData: malformed JSON, missing estimate id, draws not
                numbered 1..n, or released holdback outside 0..total_holdback
        """
        try:
            payload = json.loads(data)
        except (json.JSONDecodeError, TypeError) as e:
            raise InvalidProjectData(f"Import failed: {e}") from e

        project = ProjectLedger.from_dict(payload)

        async with self._lock:
            projects = await self.store.load_all()
            await self._commit(projects, project)

        logger.info(
            f"Project imported: {project.estimate_id} ({len(project.draws)} draws)"
        )
        return project
