"""Seed the sources the worker ships scrapers for.

Usage:
    docker compose exec backend python -m scripts.seed_sources
"""

from estate_scraper.config import get_settings
from estate_scraper.models.base import SyncSessionLocal
from estate_scraper.models.source import Source

settings = get_settings()

KNOWN_SOURCES = [
    {
        "name": "olx.ro",
        "display_name": "OLX Romania",
        "base_url": "https://www.olx.ro",
    },
    {
        "name": "imobiliare.ro",
        "display_name": "Imobiliare.ro",
        "base_url": "https://www.imobiliare.ro",
    },
    {
        "name": "storia.ro",
        "display_name": "Storia",
        "base_url": "https://www.storia.ro",
    },
]


def seed():
    db = SyncSessionLocal()
    try:
        created = 0
        for entry in KNOWN_SOURCES:
            existing = db.query(Source).filter(Source.name == entry["name"]).first()
            if existing:
                print(f"  Skipped: {entry['name']} already exists")
                continue

            db.add(Source(
                name=entry["name"],
                display_name=entry["display_name"],
                base_url=entry["base_url"],
                enabled=True,
                scrape_interval_minutes=settings.default_scrape_interval_minutes,
            ))
            created += 1
            print(f"  Added: {entry['name']} -> {entry['base_url']}")

        db.commit()
        print(f"\nDone. Sources created: {created}")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
