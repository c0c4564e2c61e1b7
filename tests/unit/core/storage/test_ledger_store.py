"""
LedgerStore tests

Ledger map (de)serialization over an in-memory key-value store
"""

import json
from decimal import Decimal

import pytest

from adapters.mock.kv_store import InMemoryKeyValueStore
from core.billing.errors import InvalidProjectData, LedgerStoreError
from core.billing.models import ProjectLedger
from core.storage.ledger_store import LedgerStore


def _project(estimate_id: str, total: str = "1000.00") -> ProjectLedger:
    return ProjectLedger(
        estimate_id=estimate_id,
        estimate_name=f"Job {estimate_id}",
        estimate_total=Decimal(total),
    )


class TestLoadAll:
    """load_all()"""

    @pytest.mark.asyncio
    async def test_empty_store(self, ledger_store: LedgerStore) -> None:
        """Nothing stored -> empty map"""
        assert await ledger_store.load_all() == {}

    @pytest.mark.asyncio
    async def test_round_trip(self, ledger_store: LedgerStore, kv: InMemoryKeyValueStore) -> None:
        """save_all then load_all"""
        projects = {"1": _project("1"), "2": _project("2", "2500.50")}

        await ledger_store.save_all(projects)
        loaded = await ledger_store.load_all()

        assert loaded == projects
        assert kv.write_count == 1

    @pytest.mark.asyncio
    async def test_single_document(self, ledger_store: LedgerStore, kv: InMemoryKeyValueStore) -> None:
        """Whole map lives under one key"""
        await ledger_store.save_all({"1": _project("1")})

        assert list(kv.data) == ["construction_progress_billing"]
        document = json.loads(kv.data["construction_progress_billing"])
        assert document["1"]["estimate_total"] == "1000.00"

    @pytest.mark.asyncio
    async def test_custom_key(self, kv: InMemoryKeyValueStore) -> None:
        """Key is configurable"""
        store = LedgerStore(kv, key="other_ledger")

        await store.save_all({"1": _project("1")})

        assert "other_ledger" in kv.data

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["{broken", "[1, 2]", '"text"'])
    async def test_corrupt_document(
        self,
        ledger_store: LedgerStore,
        kv: InMemoryKeyValueStore,
        raw: str,
    ) -> None:
        """Undecodable documents are reported"""
        kv.data["construction_progress_billing"] = raw

        with pytest.raises(LedgerStoreError):
            await ledger_store.load_all()

    @pytest.mark.asyncio
    async def test_invalid_project_entry(
        self,
        ledger_store: LedgerStore,
        kv: InMemoryKeyValueStore,
    ) -> None:
        """A malformed project inside the document"""
        kv.data["construction_progress_billing"] = json.dumps({"1": {"estimate_name": "x"}})

        with pytest.raises(InvalidProjectData):
            await ledger_store.load_all()


class TestSingleProject:
    """get() / delete()"""

    @pytest.mark.asyncio
    async def test_get(self, ledger_store: LedgerStore) -> None:
        """One project out of the map"""
        await ledger_store.save_all({"1": _project("1"), "2": _project("2", "5.00")})

        assert (await ledger_store.get("1")).estimate_name == "Job 1"
        assert (await ledger_store.get("2")).estimate_total == Decimal("5.00")

    @pytest.mark.asyncio
    async def test_get_missing(self, ledger_store: LedgerStore) -> None:
        """Unknown id -> None"""
        assert await ledger_store.get("missing") is None

    @pytest.mark.asyncio
    async def test_delete(self, ledger_store: LedgerStore, kv: InMemoryKeyValueStore) -> None:
        """delete reports whether the project existed"""
        await ledger_store.save_all({"1": _project("1"), "2": _project("2")})
        writes = kv.write_count

        assert await ledger_store.delete("1") is True
        assert await ledger_store.delete("1") is False
        assert await ledger_store.get("1") is None
        assert await ledger_store.get("2") is not None
        assert kv.write_count == writes + 1
