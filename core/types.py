"""
Type definitions

Core Enum definitions.
Every Enum inherits from str so it serializes as a plain string.
"""

from enum import Enum


class DrawKind(str, Enum):
    """Draw variant tag"""

    PROGRESS = "progress"
    HOLDBACK_RELEASE = "holdback_release"


class PercentRegressionPolicy(str, Enum):
    """What to do when a requested percent is below the already-invoiced percent

    REJECT: raise PercentRegression
    ALLOW: bill a negative (credit-like) amount
    """

    REJECT = "reject"
    ALLOW = "allow"
