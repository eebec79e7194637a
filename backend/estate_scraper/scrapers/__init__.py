"""Scraper package — import all scrapers to trigger @register_scraper decorators."""

from estate_scraper.scrapers.olx import OlxScraper  # noqa: F401
from estate_scraper.scrapers.imobiliare import ImobiliareScraper  # noqa: F401
from estate_scraper.scrapers.storia import StoriaScraper  # noqa: F401
