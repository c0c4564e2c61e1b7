"""
Adapter common data models

Accounting-system records normalized into domain models.
All amounts use Decimal.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Estimate:
    """Normalized estimate

    What the billing engine needs from an accounting-system estimate.

    Attributes:
        estimate_id: accounting-system estimate id
        estimate_name: display name (memo, document number or "Estimate {id}")
        client_name: customer display name
        customer_ref: job number used as the invoice number prefix
        total_amount: contract value
        doc_number: estimate document number, if any
    """

    estimate_id: str
    estimate_name: str
    client_name: str
    customer_ref: str
    total_amount: Decimal
    doc_number: str | None = None
