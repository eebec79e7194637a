"""Scraper registry — maps canonical source names to scraper classes."""

import logging
from typing import Type

from estate_scraper.exceptions import (
    AmbiguousScraperError,
    ConfigurationError,
    ScraperNotFoundError,
)
from estate_scraper.scrapers.base import BaseScraper

logger = logging.getLogger(__name__)

# Canonical source name -> scraper class mapping
_REGISTRY: dict[str, Type[BaseScraper]] = {}


def register_scraper(source_name: str):
    """Decorator to register a scraper class for a source."""
    key = source_name.lower()

    def decorator(cls: Type[BaseScraper]):
        existing = _REGISTRY.get(key)
        if existing is not None and existing is not cls:
            raise ConfigurationError(
                f"Source {source_name} already handled by {existing.__name__}, "
                f"cannot register {cls.__name__}"
            )
        cls.source_name = key
        _REGISTRY[key] = cls
        logger.debug(f"Registered scraper for source: {key}")
        return cls
    return decorator


def get_scraper_class(source_name: str) -> Type[BaseScraper] | None:
    """Look up the scraper class for a given source name."""
    return _REGISTRY.get(source_name.lower())


def available_scrapers() -> list[str]:
    """List all registered source names."""
    return sorted(_REGISTRY.keys())


class ScraperDispatcher:
    """Selects the extraction strategy for a source. Fails closed.

    ``registry`` defaults to the classes collected by ``@register_scraper``;
    tests pass their own mapping.
    """

    def __init__(self, registry: dict[str, Type[BaseScraper]] | None = None, **scraper_kwargs):
        if registry is None:
            import estate_scraper.scrapers  # noqa: F401  (triggers @register_scraper)
            registry = _REGISTRY
        self.registry = registry
        self.scraper_kwargs = scraper_kwargs

    def select(self, source_name: str) -> BaseScraper:
        if not source_name or not source_name.strip():
            raise ConfigurationError("Source name is required for scraper dispatch")

        matches = [cls for cls in self.registry.values() if cls.supports(source_name)]
        if not matches:
            raise ScraperNotFoundError(source_name)
        if len(matches) > 1:
            names = sorted(cls.__name__ for cls in matches)
            logger.error(f"Ambiguous scraper configuration for {source_name}: {names}")
            raise AmbiguousScraperError(source_name, names)

        return matches[0](**self.scraper_kwargs)
