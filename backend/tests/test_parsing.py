from decimal import Decimal

import pytest

from estate_scraper.scrapers.parsing import (
    detect_currency,
    detect_features,
    parse_decimal,
    parse_floor,
    parse_int,
    split_location,
)


@pytest.mark.parametrize("text, expected", [
    ("350.000 €", Decimal("350000")),
    ("1,250.50 EUR", Decimal("1250.50")),
    ("1.250,50 lei", Decimal("1250.50")),
    ("65,5 mp", Decimal("65.5")),
    ("72.5 m²", Decimal("72.5")),
    ("1.250.000 lei", Decimal("1250000")),
    ("89 500 €", Decimal("89500")),
    ("89\u00a0500 €", Decimal("89500")),
    ("0.750", Decimal("0.750")),
    ("Pret: 120000", Decimal("120000")),
])
def test_parse_decimal_handles_mixed_locales(text, expected):
    assert parse_decimal(text) == expected


def test_parse_decimal_passes_numbers_through():
    assert parse_decimal(44.4268) == Decimal("44.4268")
    assert parse_decimal(150000) == Decimal("150000")


@pytest.mark.parametrize("text", [None, "", "Pret la cerere", "mp"])
def test_parse_decimal_returns_none_without_a_number(text):
    assert parse_decimal(text) is None


def test_parse_int():
    assert parse_int("3 camere") == 3
    assert parse_int(4) == 4
    assert parse_int("garsoniera") is None
    assert parse_int(None) is None


@pytest.mark.parametrize("text, expected", [
    ("Parter", 0),
    ("demisol", -1),
    ("4", 4),
    ("etaj 7", 7),
    ("necunoscut", None),
])
def test_parse_floor(text, expected):
    assert parse_floor(text) == expected


def test_detect_currency():
    assert detect_currency("350.000 €", default="RON") == "EUR"
    assert detect_currency("1.200 lei", default="EUR") == "RON"
    assert detect_currency("$ 99", default="EUR") == "USD"
    assert detect_currency("120 000", default="RON") == "RON"
    assert detect_currency(None, default="EUR") == "EUR"


def test_detect_features():
    features = detect_features(["Balcon inchis", "Loc de parcare", "Centrala proprie"])
    assert features == {"balcony": True, "parking": True, "central_heating": True}
    assert detect_features([]) == {}


def test_split_location():
    assert split_location("Bucuresti, Sector 3, Titan") == {
        "city": "Bucuresti",
        "neighborhood": "Sector 3",
        "address": "Bucuresti, Sector 3, Titan",
    }
    assert split_location("Bucuresti, Sector 2, Obor", neighborhood_last=True)["neighborhood"] == "Obor"
    assert split_location("Cluj-Napoca") == {"city": "Cluj-Napoca", "neighborhood": None, "address": "Cluj-Napoca"}
    assert split_location("   ") == {"city": None, "neighborhood": None, "address": None}
