"""
InMemoryKeyValueStore tests
"""

import pytest

from adapters.mock.kv_store import InMemoryKeyValueStore, StoreUnavailableError


class TestInMemoryKeyValueStore:
    """In-memory store behaviour"""

    @pytest.mark.asyncio
    async def test_set_get_delete(self) -> None:
        """Basic round trip"""
        store = InMemoryKeyValueStore()

        assert await store.get("k") is None

        await store.set("k", "v1")
        await store.set("k", "v2")
        assert await store.get("k") == "v2"

        await store.delete("k")
        assert await store.get("k") is None
        assert store.write_count == 3

    @pytest.mark.asyncio
    async def test_delete_missing_key(self) -> None:
        """Deleting an absent key is a no-op"""
        store = InMemoryKeyValueStore()

        await store.delete("missing")

        assert store.data == {}

    @pytest.mark.asyncio
    async def test_fail_writes(self) -> None:
        """Writes raise and leave data untouched"""
        store = InMemoryKeyValueStore()
        await store.set("k", "v")
        store.fail_writes = True

        with pytest.raises(StoreUnavailableError):
            await store.set("k", "other")
        with pytest.raises(StoreUnavailableError):
            await store.delete("k")

        assert await store.get("k") == "v"

    @pytest.mark.asyncio
    async def test_fail_reads(self) -> None:
        """Reads raise"""
        store = InMemoryKeyValueStore(fail_reads=True)

        with pytest.raises(StoreUnavailableError):
            await store.get("k")

    def test_error_is_os_error(self) -> None:
        """Storage failures are OSError"""
        assert issubclass(StoreUnavailableError, OSError)

    @pytest.mark.asyncio
    async def test_clear(self) -> None:
        """clear() drops data and counters"""
        store = InMemoryKeyValueStore()
        await store.set("k", "v")

        store.clear()

        assert store.data == {}
        assert store.write_count == 0
