"""
Hard-coded constants - fixed values that rarely change

Paths must always use pathlib.Path (Windows/Linux cross platform)
"""

from decimal import Decimal
from pathlib import Path


# Project root (two levels above this file: core/constants.py -> project/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """Default values"""

    HOLDBACK_PERCENT: Decimal = Decimal("10")

    # Invoice number prefixes when the project has no job number
    INVOICE_PREFIX: str = "INV"
    RELEASE_PREFIX: str = "HB"

    UNKNOWN_CLIENT: str = "Unknown Client"
    JOB_NUMBER_FIELD: str = "Job #"
    RELEASE_NOTES: str = "Holdback Release"

    COMPANY_NAME: str = "TAYLOR CONSTRUCTION"
    PAYMENT_TERMS: str = "Payment Terms: Net 30 days from invoice date"
    HOLDBACK_TERMS: str = (
        "Holdback to be released upon substantial completion per contract terms"
    )

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000


class StorageKeys:
    """Key-value store keys"""

    # The whole ledger map lives under a single key
    PROGRESS_BILLING: str = "construction_progress_billing"


class Paths:
    """Project path constants (pathlib - OS independent)"""

    # Directories
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"

    # Config files
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB file
    DB_FILE: Path = DATA_DIR / "progress_billing.db"


class Money:
    """Currency rounding"""

    CENT: Decimal = Decimal("0.01")
    HUNDRED: Decimal = Decimal("100")
    ZERO: Decimal = Decimal("0")
