"""Base scraper abstract class."""

import logging
import random
import threading
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Iterator
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from estate_scraper.config import get_settings
from estate_scraper.exceptions import ExtractionError
from estate_scraper.models.source import Source
from estate_scraper.schemas.listing import RawListing

logger = logging.getLogger(__name__)

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)

# Set on worker shutdown; a pacing wait in progress returns early and aborts the scrape
shutdown_event = threading.Event()


class BaseScraper(ABC):
    """Abstract base class for all source scrapers.

    Subclasses declare ``source_name`` (canonical, lowercase) and implement:
        build_page_url(base_url, page) -> str
        parse_page(body) -> list: raw per-listing items (HTML cards, JSON nodes)
        normalize(item, base_url) -> RawListing | None

    Pagination, pacing, per-record error isolation and end-of-results
    detection live here so every source behaves the same way.
    """

    source_name: ClassVar[str]
    max_pages: ClassVar[int] = 5
    request_delay: ClassVar[float] = 2.0  # seconds between page requests

    def __init__(
        self,
        client: httpx.Client | None = None,
        stop_event: threading.Event | None = None,
        timeout: float | None = None,
    ):
        self._client = client
        self.stop_event = stop_event or shutdown_event
        self.timeout = timeout if timeout is not None else get_settings().http_timeout

    @classmethod
    def supports(cls, source_name: str) -> bool:
        return bool(source_name) and source_name.lower() == cls.source_name.lower()

    @abstractmethod
    def build_page_url(self, base_url: str, page: int) -> str:
        ...

    @abstractmethod
    def parse_page(self, body: str) -> list[Any]:
        """Split a fetched page into raw items. An empty list ends pagination."""
        ...

    @abstractmethod
    def normalize(self, item: Any, base_url: str) -> RawListing | None:
        ...

    def extract(self, source: Source) -> list[RawListing]:
        """Scrape every page of ``source`` and return the listings in page order."""
        listings: list[RawListing] = []
        for _, page_listings in self.iter_pages(source):
            listings.extend(page_listings)
        return listings

    def iter_pages(self, source: Source) -> Iterator[tuple[int, list[RawListing]]]:
        """Yield ``(page_number, listings)`` in ascending page order.

        Raises ExtractionError on network failure, an unparseable page or
        an interrupted pacing delay. Pages already yielded stay yielded.
        """
        base_url = source.base_url.rstrip("/")
        owns_client = self._client is None
        client = self._client or httpx.Client(timeout=self.timeout, follow_redirects=True)

        total = 0
        errors = 0
        pages = 0
        logger.info(f"Starting scrape for source: {source.name}")
        try:
            for page in range(1, self.max_pages + 1):
                url = self.build_page_url(base_url, page)
                logger.debug(f"[{self.source_name}] Scraping page {page} of {self.max_pages}: {url}")
                body = self._fetch(client, url)

                try:
                    items = self.parse_page(body)
                except ExtractionError:
                    raise
                except Exception as e:
                    raise ExtractionError(f"Malformed page {page} from {self.source_name}: {e}") from e

                if not items:
                    logger.info(f"[{self.source_name}] No listings on page {page}, stopping pagination")
                    break

                listings, page_errors = self._normalize_items(items, base_url)
                pages += 1
                total += len(listings)
                errors += page_errors
                yield page, listings

                if page < self.max_pages:
                    self._pause()
        finally:
            if owns_client:
                client.close()

        logger.info(
            f"Scraping completed for {self.source_name}. "
            f"Pages: {pages}, Listings: {total}, Errors: {errors}"
        )

    def _fetch(self, client: httpx.Client, url: str) -> str:
        try:
            response = client.get(
                url,
                timeout=self.timeout,
                follow_redirects=True,
                headers={
                    "User-Agent": random.choice(USER_AGENTS),
                    "Referer": "https://www.google.com",
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExtractionError(f"Failed to scrape {self.source_name}: {e}") from e
        return response.text

    def _pause(self) -> None:
        # Event.wait returns True only if the event was set: shutdown requested
        if self.stop_event.wait(self.request_delay):
            raise ExtractionError(f"Scraping {self.source_name} interrupted")

    def _normalize_items(self, items: list[Any], base_url: str) -> tuple[list[RawListing], int]:
        listings = []
        errors = 0
        for item in items:
            try:
                listing = self.normalize(item, base_url)
            except Exception as e:
                errors += 1
                logger.warning(f"[{self.source_name}] Failed to extract listing: {e}")
                continue

            if listing is None or not listing.url:
                logger.debug(f"[{self.source_name}] Dropping listing without URL")
                continue
            listings.append(listing)
        return listings, errors

    @staticmethod
    def soup(body: str) -> BeautifulSoup:
        return BeautifulSoup(body, "lxml")

    @staticmethod
    def absolute_url(base_url: str, href: str | None) -> str | None:
        if not href or href.startswith(("#", "javascript:", "mailto:")):
            return None
        return urljoin(base_url + "/", href)
