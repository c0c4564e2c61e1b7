"""
Adapter interface definitions

Protocol based so dependencies can be injected and replaced with mocks.
Every implementation must satisfy these Protocols.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class IKeyValueStore(Protocol):
    """Key-value string store interface

    Values are opaque strings. Failures must raise, never return silently.
    """

    async def get(self, key: str) -> str | None:
        """Read a value

        Args:
            key: storage key

        Returns:
            stored string or None (absent)
        """
        ...

    async def set(self, key: str, value: str) -> None:
        """Write a value (insert or replace)

        Args:
            key: storage key
            value: string to store
        """
        ...

    async def delete(self, key: str) -> None:
        """Remove a key (no-op when absent)"""
        ...
