"""
QuickBooks API response -> common model conversion

Converts QuickBooks Online estimate records into adapters.models.Estimate.
Amounts are converted to Decimal via their string form.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from adapters.models import Estimate
from core.billing.errors import InvalidProjectData
from core.constants import Defaults


def _field(data: dict[str, Any], name: str) -> Any:
    """Read an API field under its PascalCase or camelCase name"""
    if name in data:
        return data[name]
    camel = name[0].lower() + name[1:]
    return data.get(camel)


def _nested(value: Any, name: str) -> Any:
    """Read .name / .value of a reference object ({"value": ..., "name": ...})"""
    if isinstance(value, dict):
        return value.get(name) or value.get(name.capitalize())
    return None


def _custom_field(data: dict[str, Any], field_name: str) -> str | None:
    """StringValue of the custom field with the given Name"""
    fields = _field(data, "CustomField") or []
    for custom in fields:
        if not isinstance(custom, dict):
            continue
        if _field(custom, "Name") == field_name:
            value = _field(custom, "StringValue")
            return str(value) if value else None
    return None


def parse_estimate(data: dict[str, Any]) -> Estimate:
    """QuickBooks estimate -> Estimate model

    QuickBooks GET /v3/company/{realm}/estimate/{id} response example:
    {
        "Id": "177",
        "DocNumber": "1045",
        "TxnDate": "2025-03-14",
        "CustomerRef": {"value": "58", "name": "Riverside Dental"},
        "CustomerMemo": {"value": "Clinic renovation - phase 1"},
        "CustomField": [
            {"DefinitionId": "1", "Name": "Job #", "Type": "StringType",
             "StringValue": "J-2207"}
        ],
        "TotalAmt": 48250.0
    }

    Missing values fall back: name to the document number, client to
    "Unknown Client", job number to the document number or "".

    Raises:
        InvalidProjectData: no Id, or TotalAmt is not a finite non-negative number
    """
    if not isinstance(data, dict):
        raise InvalidProjectData(f"Estimate must be an object, got {type(data).__name__}")

    estimate_id = _field(data, "Id")
    if estimate_id is None or str(estimate_id) == "":
        raise InvalidProjectData("Estimate has no Id")
    estimate_id = str(estimate_id)

    doc_number = _field(data, "DocNumber")
    doc_number = str(doc_number) if doc_number else None

    memo = _nested(_field(data, "CustomerMemo"), "value")
    client = _nested(_field(data, "CustomerRef"), "name")

    raw_total = _field(data, "TotalAmt")
    try:
        total_amount = Decimal(str(raw_total or 0))
    except InvalidOperation as e:
        raise InvalidProjectData(f"Estimate {estimate_id} has invalid TotalAmt: {raw_total!r}") from e
    if not total_amount.is_finite() or total_amount < 0:
        raise InvalidProjectData(f"Estimate {estimate_id} has invalid TotalAmt: {raw_total!r}")

    return Estimate(
        estimate_id=estimate_id,
        estimate_name=memo or doc_number or f"Estimate {estimate_id}",
        client_name=client or Defaults.UNKNOWN_CLIENT,
        customer_ref=_custom_field(data, Defaults.JOB_NUMBER_FIELD) or doc_number or "",
        total_amount=total_amount,
        doc_number=doc_number,
    )
