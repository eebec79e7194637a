"""Source API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from estate_scraper.models.base import get_db
from estate_scraper.models.scraping_job import ScrapingJob
from estate_scraper.models.source import Source
from estate_scraper.schemas.scraping_job import ScrapingJobSummary
from estate_scraper.schemas.source import SourceRead, SourceWithJobs

router = APIRouter(prefix="/sources", tags=["sources"])


@router.get("", response_model=list[SourceRead])
async def list_sources(
    db: AsyncSession = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    enabled: bool | None = Query(None, description="Filter by enabled flag"),
):
    """List configured sources."""
    query = select(Source)
    if enabled is not None:
        query = query.where(Source.enabled == enabled)

    query = query.order_by(Source.name).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{source_id}", response_model=SourceWithJobs)
async def get_source(
    source_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a single source with its most recent scraping jobs."""
    source = await db.get(Source, source_id)
    if not source:
        raise HTTPException(status_code=404, detail="Source not found")

    jobs_query = (
        select(ScrapingJob)
        .where(ScrapingJob.source_id == source_id)
        .order_by(ScrapingJob.created_at.desc(), ScrapingJob.id.desc())
        .limit(10)
    )
    jobs_result = await db.execute(jobs_query)
    jobs = jobs_result.scalars().all()

    return SourceWithJobs(
        **SourceRead.model_validate(source).model_dump(),
        recent_jobs=[ScrapingJobSummary.model_validate(job) for job in jobs],
    )
