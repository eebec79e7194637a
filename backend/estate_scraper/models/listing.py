"""Listing model — one real-world property, keyed by URL."""

from sqlalchemy import Column, String, Integer, Numeric, DateTime, Text, ForeignKey, Index

from estate_scraper.models.base import Base, TimestampMixin, IdMixin, IdType, JSONType


class Listing(IdMixin, TimestampMixin, Base):
    __tablename__ = "listings"

    source_id = Column(IdType, ForeignKey("sources.id"), nullable=False)

    # Dedup
    url = Column(Text, unique=True, nullable=False)
    external_id = Column(String(255))

    # Core
    title = Column(Text)
    description = Column(Text)
    price = Column(Numeric(12, 2))
    currency = Column(String(3), default="EUR")

    # Physical attributes
    surface_sqm = Column(Numeric(10, 2))
    price_per_sqm = Column(Numeric(10, 2))
    rooms = Column(Integer)
    bathrooms = Column(Integer)
    floor = Column(Integer)
    total_floors = Column(Integer)
    year_built = Column(Integer)

    # Location
    city = Column(String(255))
    neighborhood = Column(String(255))
    address = Column(String(500))
    latitude = Column(Numeric(10, 8))
    longitude = Column(Numeric(11, 8))

    image_urls = Column(JSONType)
    features = Column(JSONType)

    # Lifecycle
    first_scraped_at = Column(DateTime(timezone=True), nullable=False)
    last_scraped_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_listings_city", "city"),
        Index("idx_listings_price", "price"),
        Index("idx_listings_scraped", "last_scraped_at"),
        Index("idx_listings_source_external", "source_id", "external_id"),
    )

    def __repr__(self) -> str:
        return f"<Listing {self.id} {self.url}>"
