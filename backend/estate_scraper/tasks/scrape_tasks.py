"""Scrape orchestration tasks."""

import logging
from datetime import timedelta

from pydantic import ValidationError

from estate_scraper.config import get_settings
from estate_scraper.models.base import SyncSessionLocal, as_utc, utcnow
from estate_scraper.models.scraping_job import ScrapingJob, ScrapingJobStatus, TriggerType
from estate_scraper.models.source import Source
from estate_scraper.schemas.messages import ScrapeJobMessage
from estate_scraper.services.job_orchestrator import MAX_ERROR_LENGTH, ScrapeJobProcessor, transition
from estate_scraper.services.publisher import MessagePublisher
from estate_scraper.tasks.celery_app import SCRAPE_TASK, celery_app
from estate_scraper.tasks.retry_policy import reject_invalid, retry_or_dead_letter

logger = logging.getLogger(__name__)


def is_due(source: Source, now) -> bool:
    if source.last_scrape_at is None:
        return True
    next_scrape = as_utc(source.last_scrape_at) + timedelta(minutes=source.scrape_interval_minutes)
    return now >= next_scrape


@celery_app.task(name="estate_scraper.tasks.scrape_tasks.dispatch_due_scrapes")
def dispatch_due_scrapes():
    """Create a PENDING job for each enabled source that is due and publish it."""
    publisher = MessagePublisher()
    db = SyncSessionLocal()
    try:
        now = utcnow()
        sources = db.query(Source).filter(Source.enabled == True).all()  # noqa: E712

        dispatched = 0
        for source in sources:
            if not is_due(source, now):
                continue

            # Skip sources that already have work queued or running
            in_flight = db.query(ScrapingJob).filter(
                ScrapingJob.source_id == source.id,
                ScrapingJob.status.in_([ScrapingJobStatus.PENDING.value, ScrapingJobStatus.RUNNING.value]),
            ).first()
            if in_flight:
                logger.debug(f"Source {source.name} already has job {in_flight.id} in flight")
                continue

            job = ScrapingJob(
                source_id=source.id,
                status=ScrapingJobStatus.PENDING.value,
                triggered_by=TriggerType.SCHEDULED.value,
                created_at=now,
            )
            db.add(job)
            db.commit()

            try:
                publisher.publish_scrape_job(ScrapeJobMessage(
                    job_id=job.id,
                    source_id=source.id,
                    source_name=source.name,
                    triggered_by=TriggerType.SCHEDULED,
                ))
            except Exception as e:
                # An orphaned PENDING row would block the source from every later dispatch
                logger.error(f"Could not publish scrape job {job.id} for {source.name}: {e}")
                transition(job, ScrapingJobStatus.FAILED)
                job.completed_at = utcnow()
                job.error_message = f"Publish failed: {e}"[:MAX_ERROR_LENGTH]
                db.commit()
                continue
            dispatched += 1

        logger.info(f"Dispatched {dispatched} scrape jobs")
        return {"dispatched": dispatched}

    finally:
        db.close()


@celery_app.task(name=SCRAPE_TASK, bind=True, max_retries=None)
def process_scrape_job(self, payload: dict):
    """Consume one message from the scrape channel."""
    try:
        message = ScrapeJobMessage.model_validate(payload)
    except ValidationError as e:
        raise reject_invalid(self, payload, e)

    db = SyncSessionLocal()
    try:
        processor = ScrapeJobProcessor(db, attempt=self.request.retries + 1)
        return processor.process(message).as_dict()
    except Exception as e:
        raise retry_or_dead_letter(self, e, get_settings().scrape_max_attempts)
    finally:
        db.close()
