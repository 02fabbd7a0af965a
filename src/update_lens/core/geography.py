"""Country extraction from free-text and HTML geography fields."""

import re
from typing import Iterable

from bs4 import BeautifulSoup

SEPARATORS = re.compile(r"[,\n;/|•·]+")
CONJUNCTIONS = re.compile(r"\s+(?:and|e)\s+", re.IGNORECASE)
EDGE_PUNCTUATION = re.compile(r"^[\s\-–—•·,;:()]+|[\s\-–—•·,;:()]+$")
WHITESPACE = re.compile(r"\s+")
MAX_WORDS = 6


def _collapse(value: str) -> str:
    return WHITESPACE.sub(" ", value).strip()


def _strip_edges(value: str) -> str:
    return EDGE_PUNCTUATION.sub("", value).strip()


def _key(value: str) -> str:
    cleaned = value.lower()
    cleaned = re.sub(r"['’]", " ", cleaned)
    cleaned = re.sub(r"[^a-z0-9 ]+", " ", cleaned)
    cleaned = _collapse(cleaned)
    # "u s a" and "usa" share a key
    return re.sub(r"\b([a-z])\s+(?=[a-z]\b)", r"\1", cleaned)


REGION_EXCLUSIONS = {
    _key(value)
    for value in [
        "apac",
        "emea",
        "latam",
        "worldwide",
        "global",
        "europe",
        "asia",
        "asia pacific",
        "pacific",
        "north america",
        "south america",
        "middle east",
    ]
}

BLOCKLIST_TERMS = [
    "microsoft",
    "azure",
    "report",
    "visit",
    "explore",
    "feature",
    "planned",
    "available",
    "geographic area",
    "geographic areas",
]

COUNTRY_SYNONYMS = {
    "usa": "United States",
    "us": "United States",
    "united states": "United States",
    "united states of america": "United States",
    "uk": "United Kingdom",
    "united kingdom": "United Kingdom",
    "great britain": "United Kingdom",
    "britain": "United Kingdom",
    "uae": "United Arab Emirates",
    "united arab emirates": "United Arab Emirates",
    "south korea": "South Korea",
    "korea south": "South Korea",
    "republic of korea": "South Korea",
    "north korea": "North Korea",
    "korea north": "North Korea",
    "dprk": "North Korea",
    "czechia": "Czech Republic",
    "czech republic": "Czech Republic",
    "viet nam": "Vietnam",
    "vietnam": "Vietnam",
}


def _is_blocked(key: str) -> bool:
    if not key or key in REGION_EXCLUSIONS:
        return True
    return any(term in key for term in BLOCKLIST_TERMS)


def normalize_country(value: str) -> str:
    """Canonical country name, or empty string for regions and boilerplate."""
    stripped = _strip_edges(_collapse(value))
    if not stripped:
        return ""

    key = _key(stripped)
    if _is_blocked(key):
        return ""

    return COUNTRY_SYNONYMS.get(key, stripped)


def dedupe_case_insensitive(values: Iterable[str]) -> list[str]:
    seen: dict[str, str] = {}
    for value in values:
        seen.setdefault(value.lower(), value)
    return list(seen.values())


def extract_countries_from_text(text: str) -> list[str]:
    """Split a free-text geography list into canonical country names."""
    cleaned = _collapse(text or "")
    if not cleaned:
        return []

    if not SEPARATORS.search(cleaned):
        cleaned = CONJUNCTIONS.sub(",", cleaned)

    results = []
    for part in SEPARATORS.split(cleaned):
        segment = _collapse(part)
        if ":" in segment:
            segment = _collapse(segment.rsplit(":", 1)[-1])
        segment = _strip_edges(segment)
        if not segment or len(segment.split(" ")) > MAX_WORDS:
            continue

        country = normalize_country(segment)
        if country:
            results.append(country)

    return dedupe_case_insensitive(results)


def extract_countries_from_html(html: str) -> list[str]:
    """Countries listed in an HTML geography block.

    List items are read one by one when present; otherwise the whole text
    is treated as a single list.
    """
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    list_items = soup.find_all("li")
    if list_items:
        chunks = [node.get_text(" ") for node in list_items]
    else:
        chunks = [soup.get_text(" ")]

    countries = []
    for chunk in chunks:
        countries.extend(extract_countries_from_text(chunk))

    return dedupe_case_insensitive(countries)
