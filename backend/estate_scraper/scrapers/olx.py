"""OLX Romania scraper.

Search results are server-rendered cards (``[data-cy='l-card']``), 40 or
so per page, paginated with ``?page=N``. Each card carries the offer
link, title, price, a "location - date" line and a few parameter chips
(rooms, surface).
"""

import logging
import re

from estate_scraper.schemas.listing import RawListing
from estate_scraper.scrapers.base import BaseScraper
from estate_scraper.scrapers.parsing import (
    detect_currency,
    detect_features,
    parse_decimal,
    parse_int,
    split_location,
)
from estate_scraper.scrapers.registry import register_scraper

logger = logging.getLogger(__name__)

SEARCH_PATH = "/d/imobiliare/apartamente-garsoniere-de-vanzare/bucuresti/"

CARD_SELECTOR = "[data-cy='l-card'], .offer-wrapper, div[data-id]"
LINK_SELECTOR = "a[href*='/oferta/']"
TITLE_SELECTOR = "h6, h4, .title, [data-cy='ad-card-title']"
PRICE_SELECTOR = "p[data-testid='ad-price'], .price, [class*='price']"
LOCATION_SELECTOR = "p[data-testid='location-date'], .bottom-cell span, [class*='location']"
PARAM_SELECTOR = "span[class*='param'], .params span, li"

EXTERNAL_ID_PATTERNS = (
    re.compile(r"/oferta/[^/]+-ID([A-Za-z0-9]+)\.html"),
    re.compile(r"/d/oferta/([A-Za-z0-9-]+)"),
)


@register_scraper("olx.ro")
class OlxScraper(BaseScraper):
    max_pages = 5

    def build_page_url(self, base_url: str, page: int) -> str:
        if page == 1:
            return f"{base_url}{SEARCH_PATH}"
        return f"{base_url}{SEARCH_PATH}?page={page}"

    def parse_page(self, body: str) -> list:
        return self.soup(body).select(CARD_SELECTOR)

    def normalize(self, card, base_url: str) -> RawListing | None:
        link = card.select_one(LINK_SELECTOR)
        href = link.get("href") if link else None
        url = self.absolute_url(base_url, href)
        if not url:
            return None

        data = {
            "url": url,
            "external_id": card.get("data-id") or self._external_id(href),
        }

        title_el = card.select_one(TITLE_SELECTOR)
        if title_el:
            data["title"] = title_el.get_text(strip=True)

        price_el = card.select_one(PRICE_SELECTOR)
        if price_el:
            price_text = price_el.get_text(" ", strip=True)
            data["price"] = parse_decimal(price_text)
            data["currency"] = detect_currency(price_text, default="RON")

        location_el = card.select_one(LOCATION_SELECTOR)
        if location_el:
            # "Bucuresti, Sector 3 - Reactualizat azi la 10:15"
            location_text = location_el.get_text(" ", strip=True).split(" - ")[0]
            data.update(split_location(location_text))

        params = [el.get_text(" ", strip=True) for el in card.select(PARAM_SELECTOR)]
        for text in params:
            lowered = text.lower()
            if "camer" in lowered and parse_int(lowered) is not None:
                data["rooms"] = parse_int(lowered)
            elif ("m²" in lowered or "mp" in lowered) and parse_decimal(lowered) is not None:
                data["surface_sqm"] = parse_decimal(lowered)

        images = []
        for img in card.select("img[src], img[data-src]"):
            src = img.get("src") or img.get("data-src")
            if src and "placeholder" not in src and "no-image" not in src:
                images.append(src)

        data["image_urls"] = images or None
        data["features"] = detect_features(params) or None
        return RawListing(**data)

    @staticmethod
    def _external_id(href: str | None) -> str | None:
        if not href:
            return None
        for pattern in EXTERNAL_ID_PATTERNS:
            match = pattern.search(href)
            if match:
                return match.group(1)
        return None
