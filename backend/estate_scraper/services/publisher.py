"""Publishes job messages onto the bus channels."""

import logging

from celery import Celery

from estate_scraper.schemas.messages import BusMessage, EmailJobMessage, ScrapeJobMessage
from estate_scraper.tasks.celery_app import CHANNELS, EMAIL_CHANNEL, SCRAPE_CHANNEL, celery_app

logger = logging.getLogger(__name__)


class MessagePublisher:
    def __init__(self, app: Celery | None = None):
        self.app = app or celery_app

    def publish(self, message: BusMessage, channel: str):
        """Send ``message`` to the exchange and routing key of ``channel``."""
        try:
            route = CHANNELS[channel]
        except KeyError:
            raise ValueError(f"Unknown channel: {channel}") from None

        return self.app.send_task(
            route.task_name,
            args=[message.to_wire()],
            exchange=route.exchange.name,
            routing_key=route.routing_key,
        )

    def publish_scrape_job(self, message: ScrapeJobMessage):
        logger.info(
            f"Publishing scrape job: jobId={message.job_id}, sourceId={message.source_id}, "
            f"source={message.source_name}, triggeredBy={message.triggered_by.value}"
        )
        return self.publish(message, SCRAPE_CHANNEL)

    def publish_email_job(self, message: EmailJobMessage):
        logger.info(f"Publishing email job: jobId={message.job_id}, type={message.email_type}")
        return self.publish(message, EMAIL_CHANNEL)
