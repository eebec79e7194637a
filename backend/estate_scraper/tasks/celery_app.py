"""Celery application, broker topology and beat schedule.

Each channel is a durable direct exchange bound to one work queue. Work
queues dead-letter through the default exchange into ``<channel>.dlq``,
so a message rejected without requeue lands there for inspection.
"""

import logging

from celery import Celery
from celery.schedules import crontab
from celery.signals import worker_ready, worker_shutting_down
from kombu import Exchange, Queue

from estate_scraper.config import get_settings
from estate_scraper.scrapers.base import shutdown_event

logger = logging.getLogger(__name__)

settings = get_settings()

SCRAPE_CHANNEL = "scrape"
EMAIL_CHANNEL = "email"

SCRAPE_TASK = "estate_scraper.tasks.scrape_tasks.process_scrape_job"
EMAIL_TASK = "estate_scraper.tasks.email_tasks.send_email"


class Channel:
    def __init__(self, name: str, task_name: str):
        self.name = name
        self.task_name = task_name
        self.exchange = Exchange(f"{name}.exchange", type="direct", durable=True)
        self.routing_key = name
        self.queue_name = f"{name}.queue"
        self.dead_letter_queue = f"{name}.dlq"

    @property
    def queue(self) -> Queue:
        return Queue(
            self.queue_name,
            self.exchange,
            routing_key=self.routing_key,
            durable=True,
            queue_arguments={
                "x-dead-letter-exchange": "",
                "x-dead-letter-routing-key": self.dead_letter_queue,
            },
        )


CHANNELS = {
    SCRAPE_CHANNEL: Channel(SCRAPE_CHANNEL, SCRAPE_TASK),
    EMAIL_CHANNEL: Channel(EMAIL_CHANNEL, EMAIL_TASK),
}

# Beat-driven housekeeping runs off the bus channels
MAINTENANCE_QUEUE = Queue("maintenance", Exchange("maintenance", type="direct"), routing_key="maintenance")

celery_app = Celery(
    "estate_scraper",
    broker=settings.broker_url,
    backend=settings.result_backend,
    include=[
        "estate_scraper.tasks.scrape_tasks",
        "estate_scraper.tasks.email_tasks",
        "estate_scraper.tasks.maintenance_tasks",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    task_track_started=True,
    task_time_limit=600,
    task_soft_time_limit=540,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_queues=[channel.queue for channel in CHANNELS.values()] + [MAINTENANCE_QUEUE],
    task_default_queue=MAINTENANCE_QUEUE.name,
    task_default_exchange=MAINTENANCE_QUEUE.exchange.name,
    task_default_routing_key=MAINTENANCE_QUEUE.routing_key,
    task_routes={
        channel.task_name: {"queue": channel.queue_name} for channel in CHANNELS.values()
    },
)

celery_app.conf.beat_schedule = {
    "dispatch-due-scrapes": {
        "task": "estate_scraper.tasks.scrape_tasks.dispatch_due_scrapes",
        "schedule": crontab(minute="*/30"),
    },
    "requeue-stale-jobs": {
        "task": "estate_scraper.tasks.maintenance_tasks.requeue_stale_jobs",
        "schedule": crontab(minute="*/15"),
    },
}


@worker_ready.connect
def declare_dead_letter_queues(**kwargs):
    """Dead-lettered messages are dropped unless the target queue exists."""
    with celery_app.connection_for_write() as conn:
        channel = conn.default_channel
        for bus_channel in CHANNELS.values():
            channel.queue_declare(queue=bus_channel.dead_letter_queue, durable=True, auto_delete=False)
            logger.info(f"Declared dead-letter queue {bus_channel.dead_letter_queue}")


@worker_shutting_down.connect
def interrupt_running_scrapes(**kwargs):
    logger.info("Worker shutting down, interrupting in-flight scrapes")
    shutdown_event.set()
