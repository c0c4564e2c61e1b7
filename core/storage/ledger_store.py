"""
Ledger store

Persists the map estimate_id -> ProjectLedger as one JSON document
in a key-value store.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from core.billing.errors import LedgerStoreError
from core.billing.models import ProjectLedger
from core.constants import StorageKeys

if TYPE_CHECKING:
    from adapters.interfaces import IKeyValueStore

logger = logging.getLogger(__name__)


class LedgerStore:
    """Progress billing ledger store

    Plain get/save over an IKeyValueStore. Every call reads or writes
    the whole document; nothing is cached between calls.

    Args:
        kv: key-value store
        key: storage key for the ledger document
    """

    def __init__(self, kv: IKeyValueStore, key: str = StorageKeys.PROGRESS_BILLING):
        self.kv = kv
        self.key = key

    async def load_all(self) -> dict[str, ProjectLedger]:
        """Load every ledger

        Returns:
            estimate_id -> ProjectLedger (empty when nothing is stored)

        Raises:
            LedgerStoreError: stored document is not valid ledger JSON
        """
        raw = await self.kv.get(self.key)
        if raw is None or raw == "":
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise LedgerStoreError(f"Stored ledger under '{self.key}' is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise LedgerStoreError(f"Stored ledger under '{self.key}' is not an object")

        return {
            str(estimate_id): ProjectLedger.from_dict(project)
            for estimate_id, project in data.items()
        }

    async def save_all(self, projects: dict[str, ProjectLedger]) -> None:
        """Write every ledger (replaces the stored document)"""
        document = {
            estimate_id: project.to_dict()
            for estimate_id, project in projects.items()
        }
        await self.kv.set(self.key, json.dumps(document, ensure_ascii=False))
        logger.debug(f"Saved {len(document)} project ledger(s)")

    async def get(self, estimate_id: str) -> ProjectLedger | None:
        """Load one ledger"""
        projects = await self.load_all()
        return projects.get(estimate_id)

    async def delete(self, estimate_id: str) -> bool:
        """Remove one ledger

        Returns:
            True when the ledger existed
        """
        projects = await self.load_all()
        if projects.pop(estimate_id, None) is None:
            return False
        await self.save_all(projects)
        return True
