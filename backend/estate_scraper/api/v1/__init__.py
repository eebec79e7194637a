"""API v1 router aggregation."""

from fastapi import APIRouter

from estate_scraper.api.v1.jobs import router as jobs_router
from estate_scraper.api.v1.listings import router as listings_router
from estate_scraper.api.v1.sources import router as sources_router

router = APIRouter(prefix="/api/v1")

router.include_router(sources_router)
router.include_router(jobs_router)
router.include_router(listings_router)
