"""
FastAPI application

Router registration and app setup.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config.loader import get_settings
from core.logging import setup_logging

# Logging setup (console + file)
setup_logging("web")

from web.routes import health, projects

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """App lifecycle

    Opens the DB, makes sure the schema exists and builds the engine
    shared by every request.
    """
    from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
    from core.billing.engine import ProgressBillingEngine
    from core.storage import LedgerStore, SQLiteKeyValueStore

    settings = get_settings()

    db = SQLiteAdapter(settings.db_path)
    await db.connect()
    await init_schema(db)

    app.state.engine = ProgressBillingEngine(
        LedgerStore(SQLiteKeyValueStore(db)),
        default_holdback_percent=settings.billing.default_holdback_percent,
        regression_policy=settings.billing.regression_policy,
    )
    logger.info(
        f"Web: engine ready (db={settings.db_path}, "
        f"holdback={settings.billing.default_holdback_percent}%, "
        f"regression={settings.billing.regression_policy.value})"
    )

    yield

    await db.close()
    logger.info("Web: DB connection closed")


app = FastAPI(
    title="Progress Billing API",
    description="Construction progress billing with holdback tracking",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS (development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =========================================================================
# API routers
# =========================================================================

app.include_router(health.router)
app.include_router(projects.router)
