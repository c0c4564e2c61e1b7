"""
Mock key-value store

In-memory store for tests.
Satisfies the IKeyValueStore Protocol.
"""


class StoreUnavailableError(OSError):
    """Raised by InMemoryKeyValueStore when switched to failure mode"""

    pass


class InMemoryKeyValueStore:
    """In-memory key-value store

    IKeyValueStore Protocol implementation.
    Records every write so tests can assert on persistence.

    Usage:
    ```python
    store = InMemoryKeyValueStore()

    await store.set("key", "value")
    assert await store.get("key") == "value"

    # failure scenario
    store.fail_writes = True
    await store.set("key", "other")  # raises StoreUnavailableError
    ```
    """

    def __init__(self, fail_writes: bool = False, fail_reads: bool = False):
        """
        Args:
            fail_writes: True makes every set/delete raise (error scenarios)
            fail_reads: True makes every get raise
        """
        self.fail_writes = fail_writes
        self.fail_reads = fail_reads
        self.data: dict[str, str] = {}
        self.write_count = 0

    async def get(self, key: str) -> str | None:
        """Read a value"""
        if self.fail_reads:
            raise StoreUnavailableError(f"Mock store read failed: {key}")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        """Write a value"""
        if self.fail_writes:
            raise StoreUnavailableError(f"Mock store write failed: {key}")
        self.data[key] = value
        self.write_count += 1

    async def delete(self, key: str) -> None:
        """Remove a key"""
        if self.fail_writes:
            raise StoreUnavailableError(f"Mock store delete failed: {key}")
        self.data.pop(key, None)
        self.write_count += 1

    # -------------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """Drop all data and counters"""
        self.data.clear()
        self.write_count = 0
