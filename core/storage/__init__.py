"""
Storage module

Key-value store and the progress billing ledger store built on it
"""

from core.storage.kv_store import SQLiteKeyValueStore
from core.storage.ledger_store import LedgerStore

__all__ = [
    "SQLiteKeyValueStore",
    "LedgerStore",
]
