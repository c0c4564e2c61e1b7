"""
Construction progress billing

Draw calculations, holdback tracking and payment history for
estimates billed in progress draws.

Usage:
```python
from core.billing import ProgressBillingEngine
from core.storage import LedgerStore

engine = ProgressBillingEngine(LedgerStore(kv_store))

await engine.initialize_project(quickbooks_estimate, holdback_percent=10)
result = await engine.create_draw("177", 50)
document = build_invoice(result, company)
```
"""

from core.billing.engine import ProgressBillingEngine
from core.billing.errors import (
    BillingError,
    DrawNotFound,
    InsufficientHoldback,
    InvalidAmount,
    InvalidProjectData,
    LedgerStoreError,
    PercentRegression,
    ProjectNotFound,
    ProjectNotInitialized,
)
from core.billing.invoice import (
    InvoiceDocument,
    build_holdback_release_invoice,
    build_invoice,
    build_progress_invoice,
    result_for_draw,
)
from core.billing.models import (
    BillingCalculation,
    CompanyInfo,
    Draw,
    DrawResult,
    HoldbackReleaseDraw,
    ProgressDraw,
    ProjectLedger,
    ProjectSummary,
    ReleaseResult,
)

__all__ = [
    # Core classes
    "ProgressBillingEngine",
    "ProjectLedger",
    "ProgressDraw",
    "HoldbackReleaseDraw",
    "Draw",
    "BillingCalculation",
    "ProjectSummary",
    "DrawResult",
    "ReleaseResult",
    "CompanyInfo",
    # Invoice documents
    "InvoiceDocument",
    "build_invoice",
    "build_progress_invoice",
    "build_holdback_release_invoice",
    "result_for_draw",
    # Errors
    "BillingError",
    "ProjectNotInitialized",
    "ProjectNotFound",
    "InsufficientHoldback",
    "DrawNotFound",
    "PercentRegression",
    "InvalidAmount",
    "InvalidProjectData",
    "LedgerStoreError",
]
