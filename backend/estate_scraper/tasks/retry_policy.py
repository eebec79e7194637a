"""Bounded retry with exponential backoff, then dead-letter.

Used by every bus consumer: a failed delivery is retried after
``initial * multiplier ** retries`` seconds (capped), and once the
attempt budget is spent the message is rejected without requeue so the
broker routes it to the channel's DLQ.
"""

import logging

from celery.exceptions import Reject

from estate_scraper.config import get_settings

logger = logging.getLogger(__name__)


def backoff_delay(retries: int) -> float:
    settings = get_settings()
    delay = settings.scrape_retry_initial_interval * settings.scrape_retry_multiplier ** retries
    return min(delay, settings.scrape_retry_max_interval)


def retry_or_dead_letter(task, exc: Exception, max_attempts: int) -> Exception:
    """Schedule a retry of ``task`` or build the rejection that dead-letters it.

    Call as ``raise retry_or_dead_letter(self, e, n)`` from a bound task.
    """
    attempt = task.request.retries + 1
    if attempt >= max_attempts:
        logger.error(
            f"{task.name} failed on attempt {attempt}/{max_attempts}, "
            f"sending message to dead-letter queue: {exc}"
        )
        return Reject(exc, requeue=False)

    countdown = backoff_delay(task.request.retries)
    logger.warning(
        f"{task.name} failed on attempt {attempt}/{max_attempts}, retrying in {countdown:.1f}s: {exc}"
    )
    return task.retry(exc=exc, countdown=countdown, max_retries=max_attempts - 1)


def reject_invalid(task, payload, exc: Exception) -> Reject:
    logger.error(f"{task.name} received an invalid message, dead-lettering it: {exc}; payload={payload!r}")
    return Reject(exc, requeue=False)
