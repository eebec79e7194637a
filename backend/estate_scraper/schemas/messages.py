"""Wire records carried on the message bus.

Field names on the wire are camelCase (``jobId``, ``sourceId`` ...);
Python code uses the snake_case attribute names.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from estate_scraper.models.scraping_job import TriggerType


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BusMessage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ScrapeJobMessage(BusMessage):
    """Request to scrape one source. ``job_id`` absent means create on receipt."""

    job_id: int | None = None
    source_id: int
    source_name: str
    triggered_by: TriggerType = TriggerType.SCHEDULED
    timestamp: datetime = Field(default_factory=_now)


class EmailJobMessage(BusMessage):
    job_id: int
    recipient_email: str
    email_type: str
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=_now)
