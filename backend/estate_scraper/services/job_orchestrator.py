"""Scrape job orchestration: the state machine behind one queue message.

PENDING -> RUNNING -> COMPLETED | FAILED. Every transition is committed
immediately so the job row reflects progress while the scrape is still
running. Pages are reconciled as they arrive; a failure on page N keeps
the listings from pages 1..N-1.
"""

import logging
from dataclasses import dataclass, asdict

from sqlalchemy.orm import Session

from estate_scraper.exceptions import (
    ConfigurationError,
    ExtractionError,
    InvalidTransitionError,
    JobNotFoundError,
    SourceDisabledError,
    SourceNotFoundError,
)
from estate_scraper.models.base import utcnow
from estate_scraper.models.scraping_job import ScrapingJob, ScrapingJobStatus
from estate_scraper.models.source import Source
from estate_scraper.schemas.listing import ListingCandidate
from estate_scraper.schemas.messages import ScrapeJobMessage
from estate_scraper.scrapers.registry import ScraperDispatcher
from estate_scraper.services.listing_reconciler import ListingReconciler, UpsertResult

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 2000

_ALLOWED_TRANSITIONS = {
    # PENDING -> FAILED when the message never reached the bus or a worker
    ScrapingJobStatus.PENDING: {ScrapingJobStatus.RUNNING, ScrapingJobStatus.FAILED},
    # RUNNING -> RUNNING happens when a message is redelivered after a crash
    ScrapingJobStatus.RUNNING: {
        ScrapingJobStatus.RUNNING,
        ScrapingJobStatus.COMPLETED,
        ScrapingJobStatus.FAILED,
    },
    ScrapingJobStatus.COMPLETED: set(),
    ScrapingJobStatus.FAILED: set(),
}


@dataclass
class JobOutcome:
    job_id: int
    source_id: int
    status: str
    items_scraped: int
    items_new: int
    items_updated: int
    items_skipped: int

    def as_dict(self) -> dict:
        return asdict(self)


def transition(job: ScrapingJob, target: ScrapingJobStatus) -> None:
    current = ScrapingJobStatus(job.status)
    if target not in _ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(job.id, current.value, target.value)
    job.status = target.value


def error_summary(exc: Exception) -> str:
    if isinstance(exc, ExtractionError):
        prefix = "Scraping error"
    elif isinstance(exc, ConfigurationError):
        prefix = "Configuration error"
    else:
        prefix = "Unexpected error"
    return f"{prefix}: {exc}"[:MAX_ERROR_LENGTH]


class ScrapeJobProcessor:
    """Runs one ScrapeJobMessage to a terminal job state.

    Raises whatever made the job fail, after recording it, so the bus
    adapter can retry or dead-letter the message.
    """

    def __init__(self, db: Session, dispatcher: ScraperDispatcher | None = None, attempt: int = 1):
        self.db = db
        self.dispatcher = dispatcher or ScraperDispatcher()
        self.attempt = attempt

    def process(self, message: ScrapeJobMessage) -> JobOutcome:
        logger.info(
            f"Received scrape job: jobId={message.job_id}, sourceId={message.source_id}, "
            f"sourceName={message.source_name}, triggeredBy={message.triggered_by.value}, "
            f"attempt={self.attempt}"
        )

        source = self.db.get(Source, message.source_id)
        if source is None:
            raise SourceNotFoundError(message.source_id)
        if message.source_name and message.source_name.lower() != source.name.lower():
            logger.warning(
                f"Message names source {message.source_name} but source "
                f"{source.id} is {source.name}; using {source.name}"
            )

        job = self._start_job(message, source)
        result = UpsertResult()
        try:
            if not source.enabled:
                raise SourceDisabledError(source.name)

            scraper = self.dispatcher.select(source.name)
            reconciler = ListingReconciler(self.db)

            for page, raw_listings in scraper.iter_pages(source):
                candidates = [ListingCandidate.from_raw(raw, source.id) for raw in raw_listings]
                logger.info(f"Upserting {len(candidates)} listings from page {page} of {source.name}")
                result = result + reconciler.reconcile(candidates)

        except Exception as e:
            logger.error(f"Scrape job {job.id} for {source.name} failed: {e}", exc_info=True)
            self._fail_job(job, e, result)
            raise

        self._complete_job(job, source, result)
        logger.info(
            f"Scrape job completed successfully: jobId={job.id}, source={source.name}, "
            f"total={result.total_processed}, new={result.new_count}, "
            f"updated={result.updated_count}, skipped={result.skipped_count}"
        )
        return JobOutcome(
            job_id=job.id,
            source_id=source.id,
            status=job.status,
            items_scraped=result.total_processed,
            items_new=result.new_count,
            items_updated=result.updated_count,
            items_skipped=result.skipped_count,
        )

    def _start_job(self, message: ScrapeJobMessage, source: Source) -> ScrapingJob:
        job = None
        if message.job_id is not None:
            job = self.db.get(ScrapingJob, message.job_id)
            if job is None:
                raise JobNotFoundError(message.job_id)
            if job.source_id != source.id:
                raise ConfigurationError(
                    f"Scraping job {job.id} belongs to source {job.source_id}, not {source.id}"
                )
            if job.is_terminal:
                # Terminal jobs are immutable; this delivery gets its own record
                logger.warning(f"Job {job.id} is already {job.status}, recording redelivery as a new job")
                job = None

        if job is None:
            job = ScrapingJob(
                source_id=source.id,
                status=ScrapingJobStatus.RUNNING.value,
                triggered_by=message.triggered_by.value,
                items_scraped=0,
                items_new=0,
                items_updated=0,
                created_at=utcnow(),
            )
            self.db.add(job)
        else:
            transition(job, ScrapingJobStatus.RUNNING)

        job.started_at = utcnow()
        job.attempt = self.attempt
        self.db.commit()
        logger.info(f"Scraping job {job.id} is RUNNING for source {source.name}")
        return job

    def _complete_job(self, job: ScrapingJob, source: Source, result: UpsertResult) -> None:
        now = utcnow()
        transition(job, ScrapingJobStatus.COMPLETED)
        job.completed_at = now
        job.items_scraped = result.total_processed
        job.items_new = result.new_count
        job.items_updated = result.updated_count

        source.last_scrape_at = now
        source.updated_at = now
        self.db.commit()

    def _fail_job(self, job: ScrapingJob, exc: Exception, result: UpsertResult) -> None:
        # Drop whatever half-finished work is pending; committed pages stay
        self.db.rollback()
        try:
            transition(job, ScrapingJobStatus.FAILED)
            job.completed_at = utcnow()
            job.items_scraped = result.total_processed
            job.items_new = result.new_count
            job.items_updated = result.updated_count
            job.error_message = error_summary(exc)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"Could not record failure of scraping job {job.id}")
