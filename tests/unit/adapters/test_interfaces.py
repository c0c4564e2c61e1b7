"""
Protocol interface tests

Implementations satisfy IKeyValueStore.
"""

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import IKeyValueStore
from adapters.mock.kv_store import InMemoryKeyValueStore
from core.storage.kv_store import SQLiteKeyValueStore


class TestIKeyValueStore:
    """IKeyValueStore Protocol"""

    def test_mock_implements_protocol(self) -> None:
        """In-memory store satisfies the Protocol"""
        assert isinstance(InMemoryKeyValueStore(), IKeyValueStore)

    def test_sqlite_store_implements_protocol(self) -> None:
        """SQLite store satisfies the Protocol"""
        store = SQLiteKeyValueStore(SQLiteAdapter(":memory:"))

        assert isinstance(store, IKeyValueStore)

    @pytest.mark.parametrize("obj", [object(), {"get": None}])
    def test_other_objects_do_not(self, obj) -> None:
        """Objects without the methods are rejected"""
        assert not isinstance(obj, IKeyValueStore)
