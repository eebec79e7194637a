"""Imobiliare.ro scraper.

Listing cards (``.box-std-property`` on the legacy layout,
``.card-property`` on the current one) with a ``/anunt/<id>`` link and a
``.caract`` block of spans: surface ("65 mp"), rooms ("3 camere"),
floor ("Etaj 2/8"). Pagination uses ``?pagina=N``.
"""

import logging
import re

from estate_scraper.schemas.listing import RawListing
from estate_scraper.scrapers.base import BaseScraper
from estate_scraper.scrapers.parsing import (
    detect_currency,
    detect_features,
    parse_decimal,
    parse_floor,
    parse_int,
    split_location,
)
from estate_scraper.scrapers.registry import register_scraper

logger = logging.getLogger(__name__)

SEARCH_PATH = "/vanzare-apartamente/bucuresti"

CARD_SELECTOR = ".box-std-property, .card-property, article[data-item-id]"
CARACT_SELECTOR = ".caract span, [class*='surface'], [class*='rooms'], [class*='floor']"

EXTERNAL_ID_RE = re.compile(r"/anunt/(\w+)")
FLOOR_RE = re.compile(r"etaj\s*([^/]+?)\s*(?:/\s*(\d+))?$", re.IGNORECASE)


@register_scraper("imobiliare.ro")
class ImobiliareScraper(BaseScraper):
    max_pages = 5

    def build_page_url(self, base_url: str, page: int) -> str:
        if page == 1:
            return f"{base_url}{SEARCH_PATH}"
        return f"{base_url}{SEARCH_PATH}?pagina={page}"

    def parse_page(self, body: str) -> list:
        return self.soup(body).select(CARD_SELECTOR)

    def normalize(self, card, base_url: str) -> RawListing | None:
        link = card.select_one("a[href*='/anunt/']")
        href = link.get("href") if link else None
        url = self.absolute_url(base_url, href)
        if not url:
            return None

        match = EXTERNAL_ID_RE.search(href)
        data = {
            "url": url,
            "external_id": match.group(1) if match else card.get("data-item-id"),
        }

        title_el = card.select_one("h2, .title, .card-title")
        if title_el:
            data["title"] = title_el.get_text(strip=True)

        price_el = card.select_one(".pret, .price, [class*='price']")
        if price_el:
            price_text = price_el.get_text(" ", strip=True)
            data["price"] = parse_decimal(price_text)
            data["currency"] = detect_currency(price_text, default="EUR")

        for span in card.select(CARACT_SELECTOR):
            text = span.get_text(" ", strip=True)
            lowered = text.lower()
            if "etaj" in lowered:
                self._apply_floor(text, data)
            elif "camer" in lowered and parse_int(lowered) is not None:
                data["rooms"] = parse_int(lowered)
            elif ("mp" in lowered or "m²" in lowered) and parse_decimal(lowered) is not None:
                data["surface_sqm"] = parse_decimal(lowered)

        location_el = card.select_one(".location, .locatie, [class*='location']")
        if location_el:
            # "Bucuresti, Sector 2, Obor": the neighborhood is the last part
            data.update(split_location(location_el.get_text(" ", strip=True), neighborhood_last=True))

        desc_el = card.select_one(".description, .descriere")
        if desc_el:
            data["description"] = desc_el.get_text(" ", strip=True)

        images = []
        for img in card.select("img[src], img[data-src]"):
            src = img.get("src") or img.get("data-src")
            if src and "placeholder" not in src and "no-image" not in src:
                images.append(src)
        data["image_urls"] = images or None

        feature_texts = [el.get_text(" ", strip=True) for el in card.select(".caract span, .features li")]
        data["features"] = detect_features(feature_texts) or None
        return RawListing(**data)

    @staticmethod
    def _apply_floor(text: str, data: dict) -> None:
        match = FLOOR_RE.search(text.strip())
        if not match:
            return
        data["floor"] = parse_floor(match.group(1))
        if match.group(2):
            data["total_floors"] = int(match.group(2))
