"""Email channel consumer."""

import logging

from pydantic import ValidationError

from estate_scraper.config import get_settings
from estate_scraper.models.base import SyncSessionLocal, utcnow
from estate_scraper.models.email_job import EmailJob, EmailJobStatus
from estate_scraper.schemas.messages import EmailJobMessage
from estate_scraper.services.email_sender import get_email_sender
from estate_scraper.tasks.celery_app import EMAIL_TASK, celery_app
from estate_scraper.tasks.retry_policy import reject_invalid, retry_or_dead_letter

logger = logging.getLogger(__name__)


@celery_app.task(name=EMAIL_TASK, bind=True, max_retries=None)
def send_email(self, payload: dict):
    """Deliver one email and record the outcome on its EmailJob."""
    try:
        message = EmailJobMessage.model_validate(payload)
    except ValidationError as e:
        raise reject_invalid(self, payload, e)

    db = SyncSessionLocal()
    try:
        job = db.get(EmailJob, message.job_id)
        if job is None:
            raise LookupError(f"Email job not found: {message.job_id}")
        if job.status == EmailJobStatus.SENT.value:
            logger.info(f"Email job {job.id} already sent, acknowledging duplicate delivery")
            return {"job_id": job.id, "status": job.status}

        try:
            get_email_sender().send(message)
        except Exception as e:
            job.status = EmailJobStatus.FAILED.value
            job.error_message = str(e)[:2000]
            db.commit()
            raise

        job.status = EmailJobStatus.SENT.value
        job.sent_at = utcnow()
        job.error_message = None
        db.commit()
        logger.info(f"Email job {job.id} sent to {job.recipient_email}")
        return {"job_id": job.id, "status": job.status}

    except Exception as e:
        raise retry_or_dead_letter(self, e, get_settings().email_max_attempts)
    finally:
        db.close()
