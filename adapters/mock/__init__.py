"""
Mock adapters

Mock implementations for tests.
They satisfy the Protocols so they can replace real implementations.
"""

from adapters.mock.kv_store import InMemoryKeyValueStore, StoreUnavailableError

__all__ = [
    "InMemoryKeyValueStore",
    "StoreUnavailableError",
]
