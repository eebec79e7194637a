"""Pydantic schemas for extracted and persisted listings."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict


class RawListing(BaseModel):
    """One record as produced by an extraction strategy.

    Only ``url`` is required downstream; everything else is best-effort
    and ``None`` means "not extracted", never "cleared".
    """

    external_id: str | None = None
    url: str | None = None
    title: str | None = None
    description: str | None = None
    price: Decimal | None = None
    currency: str | None = None
    surface_sqm: Decimal | None = None
    price_per_sqm: Decimal | None = None
    rooms: int | None = None
    bathrooms: int | None = None
    floor: int | None = None
    total_floors: int | None = None
    year_built: int | None = None
    city: str | None = None
    neighborhood: str | None = None
    address: str | None = None
    latitude: Decimal | None = None
    longitude: Decimal | None = None
    image_urls: list[str] | None = None
    features: dict[str, Any] | None = None


class ListingCandidate(RawListing):
    """A raw listing bound to the source it was scraped from."""

    source_id: int

    @classmethod
    def from_raw(cls, raw: RawListing, source_id: int) -> "ListingCandidate":
        return cls(**raw.model_dump(), source_id=source_id)


class ListingRead(RawListing):
    model_config = ConfigDict(from_attributes=True)

    id: int
    source_id: int
    url: str
    first_scraped_at: datetime
    last_scraped_at: datetime
