"""Maintenance tasks: stale job recovery."""

import logging
from datetime import timedelta

from sqlalchemy import and_, or_

from estate_scraper.config import get_settings
from estate_scraper.models.base import SyncSessionLocal, utcnow
from estate_scraper.models.scraping_job import ScrapingJob, ScrapingJobStatus, TriggerType
from estate_scraper.models.source import Source
from estate_scraper.schemas.messages import ScrapeJobMessage
from estate_scraper.services.job_orchestrator import transition
from estate_scraper.services.publisher import MessagePublisher
from estate_scraper.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="estate_scraper.tasks.maintenance_tasks.requeue_stale_jobs")
def requeue_stale_jobs():
    """Fail jobs stuck past the threshold and reschedule their sources.

    A worker killed mid-scrape leaves its job RUNNING, and a message that
    never reached a worker leaves its job PENDING; nothing else ever
    moves either on. RUNNING jobs age from ``started_at``, PENDING jobs
    from ``created_at``.
    """
    threshold = get_settings().stale_job_after_minutes
    publisher = MessagePublisher()
    db = SyncSessionLocal()
    try:
        now = utcnow()
        cutoff = now - timedelta(minutes=threshold)
        stale = db.query(ScrapingJob).filter(
            or_(
                and_(
                    ScrapingJob.status == ScrapingJobStatus.RUNNING.value,
                    ScrapingJob.started_at < cutoff,
                ),
                and_(
                    ScrapingJob.status == ScrapingJobStatus.PENDING.value,
                    ScrapingJob.created_at < cutoff,
                ),
            )
        ).all()

        requeued = 0
        for job in stale:
            previous = job.status
            transition(job, ScrapingJobStatus.FAILED)
            job.completed_at = now
            job.error_message = f"Abandoned: still {previous} after {threshold} minutes"
            db.commit()
            logger.warning(f"Marked stale {previous} scraping job {job.id} as FAILED")

            source = db.get(Source, job.source_id)
            if source is None or not source.enabled:
                continue
            publisher.publish_scrape_job(ScrapeJobMessage(
                source_id=source.id,
                source_name=source.name,
                triggered_by=TriggerType.SCHEDULED,
            ))
            requeued += 1

        logger.info(f"Abandoned {len(stale)} stale jobs, requeued {requeued}")
        return {"abandoned": len(stale), "requeued": requeued}
    finally:
        db.close()
