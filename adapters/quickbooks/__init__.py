"""
QuickBooks Online adapter

Maps QuickBooks API records onto adapters.models.
"""

from adapters.quickbooks.models import parse_estimate

__all__ = [
    "parse_estimate",
]
