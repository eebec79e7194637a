"""Pydantic schemas for ScrapingJob model."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ScrapingJobRead(BaseModel):
    """Full job output."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    source_id: int
    status: str
    triggered_by: str | None = None
    attempt: int = 1
    started_at: datetime | None = None
    completed_at: datetime | None = None
    items_scraped: int = 0
    items_new: int = 0
    items_updated: int = 0
    error_message: str | None = None
    created_at: datetime


class ScrapingJobSummary(BaseModel):
    """Minimal job info for list views."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    status: str
    started_at: datetime | None = None
    completed_at: datetime | None = None
    items_scraped: int = 0
    items_new: int = 0
