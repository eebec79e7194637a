"""Storia.ro scraper.

Storia is a Next.js site; search results are embedded as JSON in the
``<script id="__NEXT_DATA__">`` tag under
``props.pageProps.data.searchAds.items``, so no per-field HTML parsing
is needed. Rooms and floors come as enums (``"THREE"``, ``"GROUND"``).
"""

import json
import logging

from estate_scraper.exceptions import ExtractionError
from estate_scraper.schemas.listing import RawListing
from estate_scraper.scrapers.base import BaseScraper
from estate_scraper.scrapers.parsing import detect_features, parse_decimal
from estate_scraper.scrapers.registry import register_scraper

logger = logging.getLogger(__name__)

SEARCH_PATH = "/ro/rezultate/vanzare/apartament/bucuresti"

ROOMS = {
    "ONE": 1, "TWO": 2, "THREE": 3, "FOUR": 4, "FIVE": 5,
    "SIX": 6, "SEVEN": 7, "EIGHT": 8, "NINE": 9, "TEN_OR_MORE": 10,
}

FLOORS = {
    "BASEMENT": -1, "CELLAR": -1, "GROUND": 0,
    "FIRST": 1, "SECOND": 2, "THIRD": 3, "FOURTH": 4, "FIFTH": 5,
    "SIXTH": 6, "SEVENTH": 7, "EIGHTH": 8, "NINTH": 9, "TENTH": 10,
    "ABOVE_TENTH": 11,
}


@register_scraper("storia.ro")
class StoriaScraper(BaseScraper):
    max_pages = 30

    def build_page_url(self, base_url: str, page: int) -> str:
        if page == 1:
            return f"{base_url}{SEARCH_PATH}"
        return f"{base_url}{SEARCH_PATH}?page={page}"

    def parse_page(self, body: str) -> list[dict]:
        script = self.soup(body).find("script", id="__NEXT_DATA__")
        if script is None or not script.string:
            logger.warning("[storia.ro] No __NEXT_DATA__ payload on page, treating as end of results")
            return []

        try:
            payload = json.loads(script.string)
        except ValueError as e:
            raise ExtractionError(f"Invalid __NEXT_DATA__ JSON from storia.ro: {e}") from e

        items = (
            payload.get("props", {})
            .get("pageProps", {})
            .get("data", {})
            .get("searchAds", {})
            .get("items")
        )
        if not isinstance(items, list):
            return []
        return items

    def normalize(self, item: dict, base_url: str) -> RawListing | None:
        slug = item.get("slug")
        if not slug:
            return None

        data = {
            "url": f"{base_url}/ro/oferta/{slug}",
            "external_id": str(item["id"]) if item.get("id") else None,
            "title": item.get("title") or None,
        }

        total_price = item.get("totalPrice") or {}
        if total_price.get("value") is not None:
            data["price"] = parse_decimal(total_price["value"])
            data["currency"] = total_price.get("currency") or "EUR"

        area = parse_decimal(item.get("areaInSquareMeters"))
        if area:
            data["surface_sqm"] = area

        per_sqm = parse_decimal((item.get("pricePerSquareMeter") or {}).get("value"))
        if per_sqm:
            data["price_per_sqm"] = per_sqm

        rooms = item.get("roomsNumber")
        if rooms:
            data["rooms"] = ROOMS.get(rooms)
            if data["rooms"] is None:
                logger.warning(f"[storia.ro] Unknown roomsNumber enum: {rooms}")

        floor = item.get("floorNumber")
        if floor:
            data["floor"] = FLOORS.get(floor)
            if data["floor"] is None:
                logger.warning(f"[storia.ro] Unknown floorNumber enum: {floor}")

        data.update(self._location(item.get("location") or {}))

        images = [img["large"] for img in item.get("images") or [] if img.get("large")]
        data["image_urls"] = images or None

        features = detect_features([item.get("title") or ""])
        if item.get("isPromoted"):
            features["promoted"] = True
        data["features"] = features or None

        return RawListing(**data)

    @staticmethod
    def _location(location: dict) -> dict:
        result = {}
        city = ((location.get("address") or {}).get("city") or {}).get("name")
        if city:
            result["city"] = city

        levels = (location.get("reverseGeocoding") or {}).get("locations") or []
        for level in levels:
            if level.get("locationLevel") == "district" and level.get("name"):
                result["neighborhood"] = level["name"]
                break

        names = [level["name"] for level in levels if level.get("name")]
        if names:
            result["address"] = ", ".join(names)

        coordinates = location.get("coordinates") or {}
        if coordinates.get("latitude") is not None and coordinates.get("longitude") is not None:
            result["latitude"] = parse_decimal(coordinates["latitude"])
            result["longitude"] = parse_decimal(coordinates["longitude"])
        return result
