"""
Settings loader

Loads settings.yaml and builds the application settings
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from core.billing.models import CompanyInfo
from core.constants import Defaults, Paths, PROJECT_ROOT
from core.types import PercentRegressionPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BillingSettings:
    """Billing rules

    Immutable so settings cannot drift at runtime
    """

    default_holdback_percent: Decimal = Defaults.HOLDBACK_PERCENT
    regression_policy: PercentRegressionPolicy = PercentRegressionPolicy.REJECT


@dataclass(frozen=True)
class AppSettings:
    """Application settings (loaded from settings.yaml)"""

    company: CompanyInfo = field(default_factory=CompanyInfo)
    billing: BillingSettings = field(default_factory=BillingSettings)
    db_path: Path = Paths.DB_FILE
    web_host: str = Defaults.WEB_HOST
    web_port: int = Defaults.WEB_PORT


class SettingsLoadError(Exception):
    """Settings could not be loaded"""

    pass


def _parse_company(data: dict[str, Any]) -> CompanyInfo:
    return CompanyInfo(
        name=str(data.get("name") or Defaults.COMPANY_NAME),
        address=str(data.get("address") or ""),
        phone=str(data.get("phone") or ""),
        email=str(data.get("email") or ""),
    )


def _parse_billing(data: dict[str, Any]) -> BillingSettings:
    raw_percent = data.get("default_holdback_percent", Defaults.HOLDBACK_PERCENT)
    try:
        percent = Decimal(str(raw_percent))
    except InvalidOperation as e:
        raise SettingsLoadError(
            f"billing.default_holdback_percent is not a number: {raw_percent!r}"
        ) from e

    if not Decimal("0") <= percent <= Decimal("100"):
        raise SettingsLoadError(
            f"billing.default_holdback_percent must be between 0 and 100: {percent}"
        )

    policy_str = str(data.get("percent_regression", PercentRegressionPolicy.REJECT.value))
    try:
        policy = PercentRegressionPolicy(policy_str.lower())
    except ValueError as e:
        valid = [p.value for p in PercentRegressionPolicy]
        raise SettingsLoadError(
            f"Invalid billing.percent_regression: '{policy_str}'. Valid values: {valid}"
        ) from e

    return BillingSettings(default_holdback_percent=percent, regression_policy=policy)


def load_settings(path: Path | None = None) -> AppSettings:
    """Load settings.yaml

    Args:
        path: settings.yaml path (None uses the default path; a missing
            default file falls back to built-in defaults)

    Returns:
        AppSettings instance

    Raises:
        SettingsLoadError: the file is missing (explicit path) or malformed
    """
    if path is None:
        path = Paths.SETTINGS_FILE
        if not path.exists():
            logger.info(f"No settings file at {path}, using defaults")
            return AppSettings()

    if not path.exists():
        raise SettingsLoadError(f"Settings file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"Failed to parse {path.name}: {e}") from e

    if data is None:
        return AppSettings()

    if not isinstance(data, dict):
        raise SettingsLoadError(f"{path.name} must contain a mapping at the top level")

    storage = data.get("storage") or {}
    web = data.get("web") or {}

    db_path = Path(storage.get("db_path") or Paths.DB_FILE)
    if not db_path.is_absolute():
        db_path = PROJECT_ROOT / db_path

    return AppSettings(
        company=_parse_company(data.get("company") or {}),
        billing=_parse_billing(data.get("billing") or {}),
        db_path=db_path,
        web_host=str(web.get("host") or Defaults.WEB_HOST),
        web_port=int(web.get("port") or Defaults.WEB_PORT),
    )


class Settings:
    """Application settings (singleton)

    Loads settings.yaml once and serves the values
    """

    _instance: "Settings | None" = None
    _settings: AppSettings | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._settings is None:
            self._settings = load_settings(settings_path)

    @property
    def company(self) -> CompanyInfo:
        """Company block printed on invoices"""
        assert self._settings is not None
        return self._settings.company

    @property
    def billing(self) -> BillingSettings:
        """Billing rules"""
        assert self._settings is not None
        return self._settings.billing

    @property
    def db_path(self) -> Path:
        """SQLite DB path"""
        assert self._settings is not None
        return self._settings.db_path

    @property
    def web_host(self) -> str:
        assert self._settings is not None
        return self._settings.web_host

    @property
    def web_port(self) -> int:
        assert self._settings is not None
        return self._settings.web_port

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (tests)"""
        cls._instance = None
        cls._settings = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Return the Settings instance

    Args:
        settings_path: settings.yaml path (None uses the default path)

    Returns:
        Settings singleton
    """
    return Settings(settings_path)
