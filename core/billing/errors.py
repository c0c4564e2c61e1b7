"""
Billing errors

Every engine failure raises one of these; none are retryable.
"""

from decimal import Decimal


class BillingError(Exception):
    """Base class for progress billing errors"""

    pass


class ProjectNotInitialized(BillingError):
    """Calculation requested before the estimate total was set"""

    def __init__(self, estimate_id: str):
        self.estimate_id = estimate_id
        super().__init__(
            f"Project {estimate_id} not initialized. Call initialize_project first."
        )


class ProjectNotFound(BillingError):
    """No ledger exists for the estimate id"""

    def __init__(self, estimate_id: str):
        self.estimate_id = estimate_id
        super().__init__(f"Project not found: {estimate_id}")


class InsufficientHoldback(BillingError):
    """Release amount exceeds the holdback still retained"""

    def __init__(self, requested: Decimal, available: Decimal):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot release ${requested:,.2f}. Only ${available:,.2f} available."
        )


class DrawNotFound(BillingError):
    """No draw with that number in the project"""

    def __init__(self, estimate_id: str, draw_number: int):
        self.estimate_id = estimate_id
        self.draw_number = draw_number
        super().__init__(f"Draw #{draw_number} not found in project {estimate_id}")


class PercentRegression(BillingError):
    """Requested percent is below what has already been invoiced"""

    def __init__(self, previously_invoiced: Decimal, total_to_date: Decimal):
        self.previously_invoiced = previously_invoiced
        self.total_to_date = total_to_date
        super().__init__(
            f"Requested progress bills ${total_to_date:,.2f} to date, "
            f"but ${previously_invoiced:,.2f} is already invoiced"
        )


class InvalidAmount(BillingError, ValueError):
    """Amount or percentage outside its allowed range"""

    pass


class InvalidProjectData(BillingError):
    """Serialized project data is malformed or incomplete"""

    pass


class LedgerStoreError(BillingError):
    """Stored ledger document could not be decoded"""

    pass
