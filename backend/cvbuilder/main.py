"""
CV Builder API - Main Application Entry Point

This module initializes the FastAPI application with:
- Database schema initialization and default theme seeding
- CORS, Prometheus metrics, performance monitoring, rate limiting
  and response caching middleware
- JSON error envelopes for every failure
- API router registration

Architecture:
    FastAPI App
    ├── Lifespan Management (startup/shutdown)
    ├── Middleware (outermost first)
    │   ├── CORS
    │   ├── Prometheus metrics
    │   ├── Performance monitor (X-Response-Time)
    │   ├── Rate limit /api/ai (20/min)
    │   ├── Rate limit /api (100/min)
    │   └── Response cache /api/themes (1h)
    └── API Router (/api)
        ├── /auth - Registration, login, token verification
        ├── /users - Profile, password, account
        ├── /cvs - Master CV storage, layout analysis, PDF export
        ├── /ai - Extraction, tailoring, cover letters
        ├── /files - CV upload and text extraction
        ├── /download - Cover letter PDF
        └── /themes - Theme management
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import psutil
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cvbuilder.api import api_router
from cvbuilder.config import get_settings
from cvbuilder.database import async_session, init_db
from cvbuilder.errors import register_exception_handlers
from cvbuilder.middleware import (
    PerformanceMonitorMiddleware,
    RateLimitMiddleware,
    ResponseCacheMiddleware,
    performance_cache,
    setup_metrics,
)
from cvbuilder.services.cache import close_cache, get_cache
from cvbuilder.services.themes import seed_default_themes

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle events.

    Startup:
        1. Initialize database tables
        2. Insert the built-in themes that are missing

    Shutdown:
        1. Close the Redis extraction cache
    """
    await init_db()
    async with async_session() as db:
        await seed_default_themes(db)
    logger.info(f"CV Builder API started ({settings.environment})")
    yield
    await close_cache()


app = FastAPI(
    title="CV Builder API",
    description="CV builder with AI extraction, tailoring and PDF export",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(ResponseCacheMiddleware, prefix="/api/themes", ttl=settings.theme_cache_ttl)
app.add_middleware(
    RateLimitMiddleware,
    prefix="/api",
    limit=settings.api_rate_limit,
    window=settings.rate_limit_window_seconds,
    scope="api",
)
app.add_middleware(
    RateLimitMiddleware,
    prefix="/api/ai",
    limit=settings.ai_rate_limit,
    window=settings.rate_limit_window_seconds,
    scope="ai",
    message="AI rate limit exceeded. Please wait before making more requests.",
)
app.add_middleware(PerformanceMonitorMiddleware)
setup_metrics(app)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "Content-Length", "Content-Type"],
)

register_exception_handlers(app)
app.include_router(api_router)


@app.get("/health")
async def health_check():
    memory = psutil.Process().memory_info()
    cache = await get_cache()

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT),
        "memory": {
            "rss": round(memory.rss / 1024 / 1024),
            "vms": round(memory.vms / 1024 / 1024),
        },
        "cache": performance_cache.get_metrics(),
        "extractionCache": cache.get_stats(),
        "environment": settings.environment,
    }
