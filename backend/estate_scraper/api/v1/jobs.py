"""Scraping job API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from estate_scraper.models.base import get_db
from estate_scraper.models.scraping_job import ScrapingJob, ScrapingJobStatus
from estate_scraper.schemas.scraping_job import ScrapingJobRead

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=list[ScrapingJobRead])
async def list_jobs(
    db: AsyncSession = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    source_id: int | None = Query(None, description="Filter by source"),
    status: ScrapingJobStatus | None = Query(None, description="Filter by status"),
):
    """List scraping jobs, newest first."""
    query = select(ScrapingJob)

    if source_id:
        query = query.where(ScrapingJob.source_id == source_id)
    if status:
        query = query.where(ScrapingJob.status == status.value)

    query = query.order_by(ScrapingJob.created_at.desc(), ScrapingJob.id.desc()).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{job_id}", response_model=ScrapingJobRead)
async def get_job(
    job_id: int,
    db: AsyncSession = Depends(get_db),
):
    job = await db.get(ScrapingJob, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Scraping job not found")
    return job
