"""Source model — a configured site to scrape and its scrape state."""

from sqlalchemy import Column, String, Integer, Boolean, DateTime, Index

from estate_scraper.models.base import Base, TimestampMixin, IdMixin


class Source(IdMixin, TimestampMixin, Base):
    __tablename__ = "sources"

    # Canonical name, matched case-insensitively against registered scrapers
    name = Column(String(100), unique=True, nullable=False)
    display_name = Column(String(255))
    base_url = Column(String(500), nullable=False)

    # Scrape config
    enabled = Column(Boolean, default=True, nullable=False)
    scrape_interval_minutes = Column(Integer, default=360, nullable=False)

    # Scrape state
    last_scrape_at = Column(DateTime(timezone=True))

    __table_args__ = (
        Index("idx_source_due", "enabled", "last_scrape_at"),
    )

    def __repr__(self) -> str:
        return f"<Source {self.id} {self.name}>"
