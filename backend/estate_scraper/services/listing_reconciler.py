"""Bulk upsert of scraped listings, keyed by URL.

Each candidate is looked up by URL and either inserted, updated field by
field, or left as is. A candidate field that is ``None`` never
overwrites a stored value, so a partial scrape cannot erase data. Every
candidate is committed on its own: one bad row costs one skip, not the
batch.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from estate_scraper.models.base import utcnow
from estate_scraper.models.listing import Listing
from estate_scraper.schemas.listing import ListingCandidate

logger = logging.getLogger(__name__)

# Fields compared against the stored row; anything else is set on insert only
MUTABLE_FIELDS = (
    "price",
    "title",
    "description",
    "surface_sqm",
    "rooms",
    "bathrooms",
    "floor",
    "total_floors",
    "year_built",
    "city",
    "neighborhood",
    "address",
    "latitude",
    "longitude",
    "image_urls",
    "features",
)

NEW = "new"
UPDATED = "updated"
UNCHANGED = "unchanged"


@dataclass
class UpsertResult:
    new_count: int = 0
    updated_count: int = 0
    skipped_count: int = 0

    @property
    def total_processed(self) -> int:
        return self.new_count + self.updated_count + self.skipped_count

    def __add__(self, other: "UpsertResult") -> "UpsertResult":
        return UpsertResult(
            self.new_count + other.new_count,
            self.updated_count + other.updated_count,
            self.skipped_count + other.skipped_count,
        )


class ListingReconciler:
    def __init__(self, db: Session):
        self.db = db

    def reconcile(self, candidates: Iterable[ListingCandidate]) -> UpsertResult:
        """Upsert candidates in order. Returns new/updated/skipped counts."""
        result = UpsertResult()

        for candidate in candidates:
            if not candidate.url:
                logger.warning("Skipping listing with empty URL")
                result.skipped_count += 1
                continue

            try:
                outcome = self._upsert(candidate)
            except Exception as e:
                self.db.rollback()
                logger.error(f"Error upserting listing {candidate.url}: {e}")
                result.skipped_count += 1
                continue

            if outcome == NEW:
                result.new_count += 1
            elif outcome == UPDATED:
                result.updated_count += 1
            else:
                result.skipped_count += 1

        logger.info(
            f"Bulk upsert completed. New: {result.new_count}, "
            f"Updated: {result.updated_count}, Skipped: {result.skipped_count}"
        )
        return result

    def _upsert(self, candidate: ListingCandidate) -> str:
        existing = self._find_by_url(candidate.url)

        if existing is None:
            try:
                # Savepoint so a lost insert race leaves the outer transaction usable
                with self.db.begin_nested():
                    self.db.add(self._new_listing(candidate))
                self.db.commit()
                logger.debug(f"Inserted new listing: {candidate.url}")
                return NEW
            except IntegrityError:
                logger.info(f"Listing {candidate.url} appeared concurrently, updating instead")
                existing = self._find_by_url(candidate.url)
                if existing is None:
                    raise

        changed = self._merge(existing, candidate)
        self.db.commit()
        if changed:
            logger.debug(f"Updated listing {candidate.url}: {', '.join(changed)}")
            return UPDATED
        logger.debug(f"No changes detected for listing: {candidate.url}")
        return UNCHANGED

    def _find_by_url(self, url: str) -> Listing | None:
        return (
            self.db.query(Listing)
            .filter(Listing.url == url)
            .with_for_update()
            .first()
        )

    @staticmethod
    def _new_listing(candidate: ListingCandidate) -> Listing:
        now = utcnow()
        values = {
            field: fit_to_column(field, value)
            for field, value in candidate.model_dump(exclude_none=True).items()
        }
        return Listing(
            **values,
            first_scraped_at=now,
            last_scraped_at=now,
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def _merge(existing: Listing, candidate: ListingCandidate) -> list[str]:
        """Apply differing non-null candidate fields. Returns the changed field names."""
        now = utcnow()
        changed = []
        for field in MUTABLE_FIELDS:
            value = getattr(candidate, field)
            if value is None:
                continue
            value = fit_to_column(field, value)
            if not _same(getattr(existing, field), value):
                setattr(existing, field, value)
                changed.append(field)

        existing.last_scraped_at = now
        if changed:
            existing.updated_at = now
        return changed


def fit_to_column(field: str, value):
    """Round a Decimal to the scale of its Numeric column, as the database would on write."""
    if not isinstance(value, Decimal):
        return value
    scale = getattr(Listing.__table__.c[field].type, "scale", None)
    if scale is None:
        return value
    return value.quantize(Decimal(1).scaleb(-scale), rounding=ROUND_HALF_UP)


def _same(stored, incoming) -> bool:
    # Numeric columns come back as Decimal with column scale; compare by value
    if stored is None:
        return False
    try:
        return stored == incoming
    except TypeError:
        return False
