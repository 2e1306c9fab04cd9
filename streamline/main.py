"""
Streamline: application entry point.

This is the **only** file that assembles the app. Business logic lives in
the `api/`, `services/`, `models/` and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from streamline.api.v1.api import api_router
from streamline.core.config import settings
from streamline.core.constants import DEFAULT_PLANS
from streamline.core.exceptions import register_exception_handlers
from streamline.core.rate_limit import limiter
from streamline.db.base import Base
from streamline.db.session import async_session_factory, engine

# Ensure all models are imported so metadata.create_all can see them
from streamline.models import (billing, company, geofence,  # noqa: F401
                               invitation, job, timesheet, user)
from streamline.models.billing import SubscriptionPlan

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def seed_plans(session: AsyncSession) -> int:
    """Insert any default plan that does not exist yet; returns how many were added."""
    result = await session.execute(select(SubscriptionPlan.name))
    existing = set(result.scalars().all())

    added = 0
    for plan in DEFAULT_PLANS:
        if plan["name"] in existing:
            continue
        session.add(SubscriptionPlan(**plan))
        added += 1
    if added:
        await session.commit()
    return added


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    async with async_session_factory() as session:
        added = await seed_plans(session)
        if added:
            logger.info("Seeded %d subscription plans", added)

    logger.info("Streamline v%s started", settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Workforce time tracking, payroll and billing API",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # slowapi looks the limiter up on app.state
    application.state.limiter = limiter

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_V1_PREFIX)
    return application


app = create_app()
