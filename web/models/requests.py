"""
Request schemas (Pydantic)

Web API request validation
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class InitializeProjectRequest(BaseModel):
    """Project setup from a QuickBooks estimate

    The estimate is passed through as returned by the QuickBooks API
    (PascalCase) or as the browser app stores it (camelCase).
    """

    estimate: dict[str, Any] = Field(..., description="QuickBooks estimate")
    holdback_percent: Decimal | None = Field(
        default=None, ge=0, le=100, description="Holdback rate (None uses the default)"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "estimate": {
                        "Id": "177",
                        "DocNumber": "1045",
                        "CustomerRef": {"value": "58", "name": "Riverside Dental"},
                        "CustomerMemo": {"value": "Clinic renovation - phase 1"},
                        "CustomField": [
                            {"Name": "Job #", "StringValue": "J-2207"},
                        ],
                        "TotalAmt": 48250.0,
                    },
                    "holdback_percent": "10",
                },
            ]
        }
    }


class CreateDrawRequest(BaseModel):
    """Progress draw request"""

    percent_complete: Decimal = Field(..., description="Cumulative percent complete")
    invoice_number: str | None = Field(default=None, description="Invoice number (None generates one)")
    notes: str = Field(default="", description="Invoice notes")


class HoldbackReleaseRequest(BaseModel):
    """Holdback release request"""

    amount: Decimal = Field(..., gt=0, description="Amount to release")
    invoice_number: str | None = Field(default=None, description="Invoice number (None generates one)")
    notes: str | None = Field(default=None, description="Invoice notes")


class MarkPaidRequest(BaseModel):
    """Payment record"""

    paid_date: datetime | None = Field(default=None, description="Payment date (None uses now)")
