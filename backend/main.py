"""
CarePay - Main Application Entry Point

Draft pay computation for home-care companies.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import get_settings
from backend.db.session import engine
from backend.middleware.request_log import RequestLogMiddleware
from backend.routers.v1 import pay

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# Initialize Sentry for error monitoring
if settings.sentry_dsn:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"carepay@{settings.app_version}",
        traces_sample_rate=0.1 if settings.environment == "production" else 1.0,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
        ],
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    logger.info(f"{settings.app_name} {settings.app_version} starting ({settings.environment})")
    # Database connection pool is lazy-initialized by SQLAlchemy
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description=(
        "CarePay computes the draft pay of home-care workers: worked hours, "
        "surcharged hours, paid transport, balance against contract hours "
        "and corrections of the previous month."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    openapi_url="/api/openapi.json" if settings.debug else None,
)

# Request logging middleware
app.add_middleware(RequestLogMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "carepay-api"}


# API v1 routes
app.include_router(
    pay.router,
    prefix=f"{settings.api_v1_prefix}/companies/{{company_id}}/pay",
    tags=["Pay"],
)
