"""
LUDUS Marketplace API - Main Application Entry Point

Users book vendor-run activities across Saudi Arabia:
- Capacity-safe booking admission, serialized per activity/date
- Redis caching of the activity catalogue
- Structured logging with request correlation
- Prometheus metrics for the booking path
"""

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ludus.core.config import get_settings
from ludus.core.logging import setup_logging, get_logger
from ludus.core.metrics import metrics_endpoint
from ludus.api.router import api_router
from ludus.api.middleware import RequestLoggingMiddleware
from ludus.db.session import get_db
from ludus.infrastructure.redis_client import get_redis, close_redis
from ludus.services.cache_service import get_cache_stats

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        admission_strategy=settings.ADMISSION_STRATEGY,
        capacity_granularity=settings.CAPACITY_GRANULARITY,
    )

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache or distributed locks")

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Activity marketplace API with capacity-safe bookings",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Liveness plus the admission setup this worker runs with.

    Reports `degraded` instead of failing when the database does not answer,
    so load balancers can tell a slow DB from a dead worker.
    """
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        get_logger(__name__).error("health_database_unreachable", error=str(e))
        database = "unreachable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": database,
        "admission": {
            "strategy": settings.ADMISSION_STRATEGY,
            "capacity_granularity": settings.CAPACITY_GRANULARITY,
        },
        "cache": await get_cache_stats(),
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
