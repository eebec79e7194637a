"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import redis
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from sqlalchemy import text

from estate_scraper.config import get_settings
from estate_scraper.models.base import engine, AsyncSessionLocal
from estate_scraper.api.v1 import router as api_v1_router
from estate_scraper.tasks.celery_app import CHANNELS, SCRAPE_CHANNEL, celery_app

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info("Starting %s...", settings.app_name)
    yield
    logger.info("Shutting down...")
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Status API for the real-estate listing scraper",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(GZipMiddleware, minimum_size=500)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(api_v1_router)


def channel_consumers(active_queues: dict | None) -> dict[str, list[str]]:
    """Map each channel work queue to the workers consuming it.

    ``active_queues`` is the reply of ``inspect().active_queues()``:
    worker name -> list of queue declarations.
    """
    consumers = {channel.queue_name: [] for channel in CHANNELS.values()}
    for worker, queues in (active_queues or {}).items():
        for queue in queues:
            if queue.get("name") in consumers:
                consumers[queue["name"]].append(worker)
    return consumers


@app.get("/health")
async def health_check():
    return {"status": "healthy", "app": settings.app_name}


@app.get("/health/detailed")
async def detailed_health_check():
    checks = {}

    # Database
    try:
        async with AsyncSessionLocal() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            checks["database"] = {"ok": True}
    except Exception as e:
        checks["database"] = {"ok": False, "message": str(e)}

    # Result backend
    try:
        r = redis.from_url(settings.result_backend, socket_timeout=5)
        r.ping()
        checks["redis"] = {"ok": True}
    except Exception as e:
        checks["redis"] = {"ok": False, "message": str(e)}

    # Consumers on the bus channels; scraping stalls without one on the scrape queue
    try:
        inspect = celery_app.control.inspect(timeout=5)
        consumers = channel_consumers(inspect.active_queues())
        checks["consumers"] = {
            "ok": bool(consumers[CHANNELS[SCRAPE_CHANNEL].queue_name]),
            "queues": consumers,
        }
    except Exception as e:
        checks["consumers"] = {"ok": False, "message": str(e)}

    all_ok = all(check.get("ok", False) for check in checks.values())
    status = "healthy" if all_ok else "degraded"

    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
