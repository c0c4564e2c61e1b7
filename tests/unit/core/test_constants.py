"""
core/constants.py tests

Every path is a pathlib.Path and the constants are reachable
"""

from decimal import Decimal
from pathlib import Path

from core.constants import (
    PROJECT_ROOT,
    Defaults,
    Money,
    Paths,
    StorageKeys,
)


class TestProjectRoot:
    """PROJECT_ROOT"""

    def test_project_root_is_path(self) -> None:
        """PROJECT_ROOT is a Path"""
        assert isinstance(PROJECT_ROOT, Path)

    def test_project_root_is_absolute(self) -> None:
        """PROJECT_ROOT is absolute"""
        assert PROJECT_ROOT.is_absolute()

    def test_project_root_contains_core_directory(self) -> None:
        """PROJECT_ROOT holds the core package"""
        assert (PROJECT_ROOT / "core").exists()


class TestPaths:
    """Paths"""

    def test_all_paths_are_path_objects(self) -> None:
        """Every path constant is a Path"""
        for name in ("CONFIG_DIR", "DATA_DIR", "LOGS_DIR", "WEB_LOGS_DIR", "SETTINGS_FILE", "DB_FILE"):
            assert isinstance(getattr(Paths, name), Path), name

    def test_paths_under_project_root(self) -> None:
        """Paths hang off the project root"""
        assert Paths.SETTINGS_FILE == PROJECT_ROOT / "config" / "settings.yaml"
        assert Paths.DB_FILE.parent == Paths.DATA_DIR
        assert Paths.WEB_LOGS_DIR.parent == Paths.LOGS_DIR


class TestDefaults:
    """Defaults"""

    def test_holdback_percent(self) -> None:
        """10% holdback"""
        assert Defaults.HOLDBACK_PERCENT == Decimal("10")

    def test_invoice_prefixes(self) -> None:
        """Prefixes used without a job number"""
        assert Defaults.INVOICE_PREFIX == "INV"
        assert Defaults.RELEASE_PREFIX == "HB"

    def test_storage_key(self) -> None:
        """Ledger document key"""
        assert StorageKeys.PROGRESS_BILLING == "construction_progress_billing"


class TestMoney:
    """Money"""

    def test_values(self) -> None:
        """Rounding constants"""
        assert Money.CENT == Decimal("0.01")
        assert Money.HUNDRED == Decimal("100")
        assert Money.ZERO == Decimal("0")
