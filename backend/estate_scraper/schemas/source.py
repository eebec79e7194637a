"""Pydantic schemas for Source model."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from estate_scraper.schemas.scraping_job import ScrapingJobSummary


class SourceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str | None = None
    base_url: str
    enabled: bool = True
    scrape_interval_minutes: int = 360
    last_scrape_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class SourceWithJobs(SourceRead):
    """Source with recent scraping jobs."""

    recent_jobs: list[ScrapingJobSummary] = []
