"""Scraping job model — one execution attempt against a source."""

import enum

from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey, Index

from estate_scraper.models.base import Base, CreatedAtMixin, IdMixin, IdType


class ScrapingJobStatus(str, enum.Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (ScrapingJobStatus.COMPLETED, ScrapingJobStatus.FAILED)


class TriggerType(str, enum.Enum):
    MANUAL = "MANUAL"
    SCHEDULED = "SCHEDULED"


class ScrapingJob(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "scraping_jobs"

    source_id = Column(IdType, ForeignKey("sources.id"), nullable=False)

    status = Column(String(20), nullable=False, default=ScrapingJobStatus.PENDING.value)
    triggered_by = Column(String(20))
    attempt = Column(Integer, default=1, nullable=False)

    started_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))
    items_scraped = Column(Integer, default=0, nullable=False)
    items_new = Column(Integer, default=0, nullable=False)
    items_updated = Column(Integer, default=0, nullable=False)
    error_message = Column(Text)

    __table_args__ = (
        Index("idx_scraping_jobs_source", "source_id"),
        Index("idx_scraping_jobs_status", "status", "started_at"),
    )

    @property
    def is_terminal(self) -> bool:
        return ScrapingJobStatus(self.status).is_terminal

    def __repr__(self) -> str:
        return f"<ScrapingJob {self.id} source={self.source_id} {self.status}>"
