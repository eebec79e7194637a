"""Pydantic schemas for request/response validation and wire records."""

from estate_scraper.schemas.listing import RawListing, ListingCandidate, ListingRead
from estate_scraper.schemas.messages import ScrapeJobMessage, EmailJobMessage
from estate_scraper.schemas.scraping_job import ScrapingJobRead, ScrapingJobSummary
from estate_scraper.schemas.source import SourceRead, SourceWithJobs

__all__ = [
    "RawListing",
    "ListingCandidate",
    "ListingRead",
    "ScrapeJobMessage",
    "EmailJobMessage",
    "ScrapingJobRead",
    "ScrapingJobSummary",
    "SourceRead",
    "SourceWithJobs",
]
