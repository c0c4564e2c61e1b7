"""
Dependency injection

Dependencies resolved through FastAPI's Depends.
"""

from fastapi import Request

from core.billing.engine import ProgressBillingEngine
from core.config.loader import Settings, get_settings


def get_app_settings() -> Settings:
    """Application settings"""
    return get_settings()


def get_engine(request: Request) -> ProgressBillingEngine:
    """Billing engine created in the app lifespan

    One engine per process so its lock serializes every ledger write.
    """
    return request.app.state.engine
