"""
Shared pytest fixtures

Engine wired to an in-memory key-value store, plus sample estimates.
"""

import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from adapters.mock.kv_store import InMemoryKeyValueStore
from adapters.models import Estimate
from core.billing.engine import ProgressBillingEngine
from core.storage.ledger_store import LedgerStore


@pytest.fixture
def temp_dir() -> Path:
    """OS independent temporary directory"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    """In-memory key-value store"""
    return InMemoryKeyValueStore()


@pytest.fixture
def ledger_store(kv: InMemoryKeyValueStore) -> LedgerStore:
    """Ledger store on the in-memory store"""
    return LedgerStore(kv)


@pytest.fixture
def engine(ledger_store: LedgerStore) -> ProgressBillingEngine:
    """Engine with default settings (10% holdback, regression rejected)"""
    return ProgressBillingEngine(ledger_store)


@pytest.fixture
def qb_estimate() -> dict[str, Any]:
    """QuickBooks estimate as returned by the API"""
    return {
        "Id": "177",
        "DocNumber": "1045",
        "TxnDate": "2025-03-14",
        "CustomerRef": {"value": "58", "name": "Riverside Dental"},
        "CustomerMemo": {"value": "Clinic renovation - phase 1"},
        "CustomField": [
            {
                "DefinitionId": "1",
                "Name": "Job #",
                "Type": "StringType",
                "StringValue": "J-2207",
            }
        ],
        "TotalAmt": 10000.0,
    }


@pytest.fixture
def estimate() -> Estimate:
    """Normalized estimate (total 10,000.00)"""
    return Estimate(
        estimate_id="177",
        estimate_name="Clinic renovation - phase 1",
        client_name="Riverside Dental",
        customer_ref="J-2207",
        total_amount=Decimal("10000"),
        doc_number="1045",
    )
