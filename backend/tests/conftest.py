import json

import httpx
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from estate_scraper.models import Base, Source
from estate_scraper.schemas.listing import RawListing
from estate_scraper.scrapers.base import BaseScraper

BASE_URL = "https://listings.test"


@pytest.fixture()
def sync_engine(tmp_path):
    eng = create_engine(f"sqlite+pysqlite:///{tmp_path / 'estate.db'}")

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN
    @event.listens_for(eng, "connect")
    def _disable_pysqlite_transactions(dbapi_conn, _record):
        dbapi_conn.isolation_level = None
        # Readers must not block a second session's commit
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(eng, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(sync_engine):
    return sessionmaker(bind=sync_engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def source(db):
    src = Source(name="olx.ro", display_name="OLX", base_url=BASE_URL + "/", enabled=True)
    db.add(src)
    db.commit()
    return src


class FakeScraper(BaseScraper):
    """Serves JSON pages from an httpx.MockTransport."""

    source_name = "olx.ro"

    max_pages = 5
    request_delay = 0

    def build_page_url(self, base_url: str, page: int) -> str:
        return f"{base_url}/search?page={page}"

    def parse_page(self, body: str) -> list:
        return json.loads(body)["items"]

    def normalize(self, item, base_url: str):
        if item.get("boom"):
            raise ValueError("broken card")
        return RawListing(**item)


def page_transport(pages: dict[int, list[dict]], failing: set[int] = frozenset()):
    """MockTransport serving ``pages``; missing pages are empty, ``failing`` return 500."""
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        requested.append(page)
        if page in failing:
            return httpx.Response(500, text="upstream error")
        return httpx.Response(200, json={"items": pages.get(page, [])})

    transport = httpx.MockTransport(handler)
    transport.requested = requested
    return transport


def listing_item(n: int, **overrides) -> dict:
    item = {
        "url": f"{BASE_URL}/offer/{n}",
        "external_id": str(n),
        "title": f"Apartament {n} camere",
        "price": str(100000 + n),
        "currency": "EUR",
        "city": "Bucuresti",
    }
    item.update(overrides)
    return item
