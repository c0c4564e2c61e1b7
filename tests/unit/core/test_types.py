"""
core/types.py tests

Every Enum serializes as a plain string
"""

import json

import pytest

from core.types import DrawKind, PercentRegressionPolicy


class TestDrawKind:
    """DrawKind"""

    def test_values(self) -> None:
        """Tag values"""
        assert DrawKind.PROGRESS.value == "progress"
        assert DrawKind.HOLDBACK_RELEASE.value == "holdback_release"

    def test_is_string(self) -> None:
        """str subclass compares with plain strings"""
        assert DrawKind.PROGRESS == "progress"
        assert json.dumps(DrawKind.HOLDBACK_RELEASE) == '"holdback_release"'


class TestPercentRegressionPolicy:
    """PercentRegressionPolicy"""

    def test_values(self) -> None:
        """Policy values"""
        assert PercentRegressionPolicy.REJECT.value == "reject"
        assert PercentRegressionPolicy.ALLOW.value == "allow"

    def test_from_string(self) -> None:
        """Built from its config value"""
        assert PercentRegressionPolicy("allow") is PercentRegressionPolicy.ALLOW

    def test_unknown_value(self) -> None:
        """Unknown values are rejected"""
        with pytest.raises(ValueError):
            PercentRegressionPolicy("credit")
