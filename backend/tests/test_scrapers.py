import json
import threading
from decimal import Decimal

import httpx
import pytest

from estate_scraper.exceptions import ExtractionError
from estate_scraper.models import Source
from estate_scraper.scrapers.imobiliare import ImobiliareScraper
from estate_scraper.scrapers.olx import OlxScraper
from estate_scraper.scrapers.storia import StoriaScraper

from conftest import FakeScraper, listing_item, page_transport

EMPTY_PAGE = "<html><body><p>Nu am gasit rezultate</p></body></html>"

OLX_PAGE = """
<html><body>
<div data-cy="l-card" data-id="123">
  <a href="/d/oferta/apartament-3-camere-titan-IDabc123.html"><h6>Apartament 3 camere Titan</h6></a>
  <p data-testid="ad-price">350.000 €</p>
  <p data-testid="location-date">Bucuresti, Sector 3 - Reactualizat azi la 10:15</p>
  <span class="param">3 camere</span>
  <span class="param">65 m²</span>
  <span class="param">Balcon</span>
  <img src="https://img.olx.test/1.jpg"/>
  <img src="https://www.olx.ro/app/static/media/no-image.png"/>
</div>
<div data-cy="l-card" data-id="124">
  <h6>Promoted banner without an offer link</h6>
</div>
<div data-cy="l-card" data-id="125">
  <a href="/d/oferta/garsoniera-militari-IDxyz9.html"><h6>Garsoniera Militari</h6></a>
  <p data-testid="ad-price">Pret la cerere</p>
</div>
</body></html>
"""

IMOBILIARE_PAGE = """
<html><body>
<div class="box-std-property">
  <a href="https://www.imobiliare.ro/anunt/X7AB12"><h2>Apartament 2 camere Obor</h2></a>
  <div class="pret">89.500 EUR</div>
  <div class="caract"><span>54 mp</span><span>2 camere</span><span>Etaj 3/10</span></div>
  <div class="location">Bucuresti, Sector 2, Obor</div>
  <div class="description">Bloc reabilitat, centrala proprie</div>
  <img data-src="https://img.imobiliare.test/a.jpg"/>
</div>
</body></html>
"""

STORIA_ITEMS = [
    {
        "id": 6010,
        "slug": "apartament-3-camere-ID4abc",
        "title": "Apartament 3 camere cu balcon",
        "totalPrice": {"value": 152000, "currency": "EUR"},
        "areaInSquareMeters": 72.5,
        "pricePerSquareMeter": {"value": 2097, "currency": "EUR"},
        "roomsNumber": "THREE",
        "floorNumber": "GROUND",
        "isPromoted": True,
        "location": {
            "address": {"city": {"name": "Bucuresti"}},
            "reverseGeocoding": {"locations": [
                {"locationLevel": "city", "name": "Bucuresti"},
                {"locationLevel": "district", "name": "Sectorul 1"},
            ]},
            "coordinates": {"latitude": 44.4268, "longitude": 26.1025},
        },
        "images": [{"large": "https://img.storia.test/1.jpg"}, {"medium": "https://img.storia.test/m.jpg"}],
    },
    {"id": 6011, "slug": "penthouse-ID4abd", "title": "Penthouse", "roomsNumber": "ELEVEN"},
    {"id": 6012, "title": "Card without slug"},
]


def next_data_page(items) -> str:
    payload = {"props": {"pageProps": {"data": {"searchAds": {"items": items}}}}}
    return (
        "<html><body>"
        f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(payload)}</script>'
        "</body></html>"
    )


def html_client(first_page: str, later_pages: str = EMPTY_PAGE) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("page") or request.url.params.get("pagina"):
            return httpx.Response(200, text=later_pages)
        return httpx.Response(200, text=first_page)

    return httpx.Client(transport=httpx.MockTransport(handler))


def make_scraper(cls, client, stop_event=None):
    scraper = cls(client=client, stop_event=stop_event or threading.Event())
    scraper.request_delay = 0
    return scraper


def test_olx_extracts_cards_and_skips_cards_without_link():
    source = Source(name="olx.ro", base_url="https://www.olx.ro")
    listings = make_scraper(OlxScraper, html_client(OLX_PAGE)).extract(source)

    assert len(listings) == 2
    first, second = listings
    assert first.url == "https://www.olx.ro/d/oferta/apartament-3-camere-titan-IDabc123.html"
    assert first.external_id == "123"
    assert first.title == "Apartament 3 camere Titan"
    assert first.price == Decimal("350000")
    assert first.currency == "EUR"
    assert first.rooms == 3
    assert first.surface_sqm == Decimal("65")
    assert first.city == "Bucuresti"
    assert first.neighborhood == "Sector 3"
    assert first.image_urls == ["https://img.olx.test/1.jpg"]
    assert first.features == {"balcony": True}

    assert second.price is None
    assert second.currency == "RON"
    assert second.image_urls is None
    assert second.features is None


def test_imobiliare_parses_characteristics():
    source = Source(name="imobiliare.ro", base_url="https://www.imobiliare.ro/")
    [listing] = make_scraper(ImobiliareScraper, html_client(IMOBILIARE_PAGE)).extract(source)

    assert listing.url == "https://www.imobiliare.ro/anunt/X7AB12"
    assert listing.external_id == "X7AB12"
    assert listing.price == Decimal("89500")
    assert listing.currency == "EUR"
    assert listing.surface_sqm == Decimal("54")
    assert listing.rooms == 2
    assert listing.floor == 3
    assert listing.total_floors == 10
    assert listing.city == "Bucuresti"
    assert listing.neighborhood == "Obor"
    assert listing.description == "Bloc reabilitat, centrala proprie"
    assert listing.image_urls == ["https://img.imobiliare.test/a.jpg"]


def test_storia_reads_embedded_search_results():
    source = Source(name="storia.ro", base_url="https://www.storia.ro")
    client = html_client(next_data_page(STORIA_ITEMS), later_pages=EMPTY_PAGE)
    listings = make_scraper(StoriaScraper, client).extract(source)

    assert [listing.external_id for listing in listings] == ["6010", "6011"]
    flat, penthouse = listings
    assert flat.url == "https://www.storia.ro/ro/oferta/apartament-3-camere-ID4abc"
    assert flat.price == Decimal("152000")
    assert flat.surface_sqm == Decimal("72.5")
    assert flat.price_per_sqm == Decimal("2097")
    assert flat.rooms == 3
    assert flat.floor == 0
    assert flat.city == "Bucuresti"
    assert flat.neighborhood == "Sectorul 1"
    assert flat.address == "Bucuresti, Sectorul 1"
    assert flat.latitude == Decimal("44.4268")
    assert flat.longitude == Decimal("26.1025")
    assert flat.image_urls == ["https://img.storia.test/1.jpg"]
    assert flat.features == {"balcony": True, "promoted": True}

    assert penthouse.rooms is None
    assert penthouse.price is None


def test_storia_invalid_payload_is_an_extraction_error():
    source = Source(name="storia.ro", base_url="https://www.storia.ro")
    broken = '<html><body><script id="__NEXT_DATA__">{not json</script></body></html>'
    scraper = make_scraper(StoriaScraper, html_client(broken))

    with pytest.raises(ExtractionError, match="Invalid __NEXT_DATA__"):
        scraper.extract(source)


def test_pagination_stops_at_first_empty_page():
    transport = page_transport({1: [listing_item(1)], 2: [listing_item(2), listing_item(3)]})
    scraper = FakeScraper(client=httpx.Client(transport=transport), stop_event=threading.Event())
    source = Source(name="olx.ro", base_url="https://listings.test/")

    pages = list(scraper.iter_pages(source))

    assert [(page, len(listings)) for page, listings in pages] == [(1, 1), (2, 2)]
    assert transport.requested == [1, 2, 3]


def test_pagination_is_capped_at_max_pages():
    transport = page_transport({n: [listing_item(n)] for n in range(1, 10)})
    scraper = FakeScraper(client=httpx.Client(transport=transport), stop_event=threading.Event())

    listings = scraper.extract(Source(name="olx.ro", base_url="https://listings.test"))

    assert len(listings) == FakeScraper.max_pages
    assert transport.requested == [1, 2, 3, 4, 5]


def test_bad_records_are_isolated():
    items = [listing_item(1), {"boom": True}, listing_item(2, url=None), listing_item(3)]
    transport = page_transport({1: items})
    scraper = FakeScraper(client=httpx.Client(transport=transport), stop_event=threading.Event())

    listings = scraper.extract(Source(name="olx.ro", base_url="https://listings.test"))

    assert [listing.external_id for listing in listings] == ["1", "3"]


def test_http_failure_keeps_earlier_pages():
    transport = page_transport({1: [listing_item(1)], 2: [listing_item(2)]}, failing={2})
    scraper = FakeScraper(client=httpx.Client(transport=transport), stop_event=threading.Event())
    received = []

    with pytest.raises(ExtractionError, match="Failed to scrape"):
        for page, listings in scraper.iter_pages(Source(name="olx.ro", base_url="https://listings.test")):
            received.append(page)

    assert received == [1]


def test_stop_event_interrupts_between_pages():
    stop = threading.Event()
    stop.set()
    transport = page_transport({1: [listing_item(1)], 2: [listing_item(2)]})
    scraper = FakeScraper(client=httpx.Client(transport=transport), stop_event=stop)

    with pytest.raises(ExtractionError, match="interrupted"):
        scraper.extract(Source(name="olx.ro", base_url="https://listings.test"))

    assert transport.requested == [1]
