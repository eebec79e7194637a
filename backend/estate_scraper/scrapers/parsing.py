"""Text-to-value helpers shared by the scrapers.

Listing sites mix locales freely ("350.000 €", "1,250.50 EUR",
"65,5 mp"), so numbers are parsed from the first numeric token with
separator detection instead of a fixed format. Anything that fails to
parse comes back as ``None``.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

# First number in a string; spaces (incl. NBSP / narrow NBSP) may group thousands
_NUMBER_RE = re.compile(r"-?[0-9](?:[0-9., \u00a0\u202f]*[0-9])?")
_INT_RE = re.compile(r"-?[0-9]+")

FEATURE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "balcony": ("balcon",),
    "parking": ("parcare", "garaj"),
    "elevator": ("lift", "ascensor"),
    "central_heating": ("centrala",),
    "furnished": ("mobilat",),
}

FLOOR_WORDS = {
    "parter": 0,
    "demisol": -1,
    "subsol": -1,
}


def _normalize_separators(token: str) -> str:
    last_comma = token.rfind(",")
    last_dot = token.rfind(".")

    if last_comma >= 0 and last_dot >= 0:
        # Whichever comes last is the decimal separator
        decimal_sep = "," if last_comma > last_dot else "."
        group_sep = "." if decimal_sep == "," else ","
        return token.replace(group_sep, "").replace(decimal_sep, ".")

    sep = "," if last_comma >= 0 else "." if last_dot >= 0 else None
    if sep is None:
        return token
    if token.count(sep) > 1:
        return token.replace(sep, "")

    head, tail = token.split(sep)
    if len(tail) == 3 and head.lstrip("-") not in ("", "0"):
        # "350.000" / "1,250" are thousands groups
        return head + tail
    return f"{head or '0'}.{tail}"


def parse_decimal(text: Any) -> Decimal | None:
    """Parse the first number in ``text``, tolerating decimal comma or point."""
    if text is None:
        return None
    if isinstance(text, (int, float, Decimal)) and not isinstance(text, bool):
        return Decimal(str(text))

    match = _NUMBER_RE.search(str(text))
    if not match:
        return None

    token = re.sub(r"[\s\u00a0\u202f]", "", match.group(0))
    try:
        return Decimal(_normalize_separators(token))
    except InvalidOperation:
        return None


def parse_int(text: Any) -> int | None:
    """First integer in ``text`` ("3 camere" -> 3)."""
    if text is None:
        return None
    if isinstance(text, int) and not isinstance(text, bool):
        return text
    match = _INT_RE.search(str(text))
    return int(match.group(0)) if match else None


def parse_floor(text: Any) -> int | None:
    """Floor number; understands Romanian words for ground/basement levels."""
    if text is None:
        return None
    lowered = str(text).lower()
    for word, value in FLOOR_WORDS.items():
        if word in lowered:
            return value
    return parse_int(lowered)


def detect_currency(text: str | None, default: str) -> str:
    if not text:
        return default
    lowered = text.lower()
    if "€" in text or "eur" in lowered:
        return "EUR"
    if "lei" in lowered or "ron" in lowered:
        return "RON"
    if "$" in text or "usd" in lowered:
        return "USD"
    return default


def detect_features(texts: Iterable[str]) -> dict[str, bool]:
    """Keyword detection over ancillary text (attribute chips, bullet lists)."""
    features: dict[str, bool] = {}
    for text in texts:
        lowered = text.lower()
        for feature, keywords in FEATURE_KEYWORDS.items():
            if any(keyword in lowered for keyword in keywords):
                features[feature] = True
    return features


def split_location(text: str | None, neighborhood_last: bool = False) -> dict[str, str | None]:
    """Split "Bucuresti, Sector 3, Titan" into city / neighborhood / address."""
    if not text or not text.strip():
        return {"city": None, "neighborhood": None, "address": None}

    parts = [part.strip() for part in text.split(",") if part.strip()]
    city = parts[0] if parts else None
    neighborhood = None
    if len(parts) > 1:
        neighborhood = parts[-1] if neighborhood_last else parts[1]

    return {"city": city, "neighborhood": neighborhood, "address": text.strip()}
