"""
Adapter layer

Integration with external collaborators (accounting system, DB, key-value store).
Protocol based interfaces so mocks can be swapped in.
"""

from adapters.interfaces import IKeyValueStore
from adapters.models import Estimate

__all__ = [
    # Interfaces
    "IKeyValueStore",
    # Models
    "Estimate",
]
