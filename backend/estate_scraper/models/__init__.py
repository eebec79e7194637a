"""ORM models — import all so metadata is complete."""

from estate_scraper.models.base import Base  # noqa: F401
from estate_scraper.models.source import Source  # noqa: F401
from estate_scraper.models.scraping_job import ScrapingJob, ScrapingJobStatus, TriggerType  # noqa: F401
from estate_scraper.models.listing import Listing  # noqa: F401
from estate_scraper.models.email_job import EmailJob, EmailJobStatus  # noqa: F401
