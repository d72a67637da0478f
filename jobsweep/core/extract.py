"""
Card extraction driven by a per-site field map.

A FieldMap lists, per logical field, candidate locators tried in order inside
each result card; the first non-empty value wins. A locator ending in
"@attr" reads that attribute instead of the text, and ":scope" addresses the
card itself.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import urljoin, urlsplit

from jobsweep.browser.page import SELF_LOCATOR, ElementAccessor, PageAccessor
from jobsweep.core.models import JobRecord

logger = logging.getLogger(__name__)

# Logical fields beyond title and url, mapped to JobRecord attributes
OPTIONAL_FIELDS: Dict[str, str] = {
    "employer": "employer",
    "location": "location",
    "date": "posted_date",
    "salary": "salary",
    "summary": "summary",
}

_ATTRIBUTE_SUFFIX = re.compile(r"^(?P<locator>.*?)@(?P<attr>[A-Za-z_:][\w:.-]*)$")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class FieldMap:
    """
    Extraction configuration for one site.

    cards: candidate card locators, the first one matching anything wins
    fields: logical field name -> ordered candidate locators
    url: ordered candidate locators for the listing link (href unless "@attr")
    """

    cards: Tuple[str, ...]
    fields: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    url: Tuple[str, ...] = (SELF_LOCATOR,)


def normalize_text(value: Optional[str]) -> Optional[str]:
    """Collapse whitespace runs to one space and trim. Empty results become None."""
    if value is None:
        return None
    value = _WHITESPACE.sub(" ", value).strip()
    return value or None


def split_locator(locator: str, default_attr: Optional[str] = None) -> Tuple[str, Optional[str]]:
    """'a.link@href' -> ('a.link', 'href'); 'h3' -> ('h3', default_attr)."""
    match = _ATTRIBUTE_SUFFIX.match(locator)
    if match and "]" not in match.group("attr"):
        return match.group("locator") or SELF_LOCATOR, match.group("attr")
    return locator, default_attr


def page_origin(url: str) -> str:
    """'https://x.com/a/b?c=1' -> 'https://x.com/'; empty when url has no origin."""
    parts = urlsplit(url or "")
    if not parts.scheme or not parts.netloc:
        return ""
    return f"{parts.scheme}://{parts.netloc}/"


def resolve_url(href: Optional[str], base_url: str) -> Optional[str]:
    """Absolute http(s) url for href relative to base_url, or None."""
    href = (href or "").strip()
    if not href:
        return None
    absolute = urljoin(base_url, href) if base_url else href
    parts = urlsplit(absolute)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return absolute


class Extractor:
    """
    Turns the cards currently rendered on a page into JobRecords.
    """

    async def extract(self, page: PageAccessor, field_map: FieldMap) -> List[JobRecord]:
        cards = await self._find_cards(page, field_map.cards)
        if not cards:
            logger.warning("No result cards found with any selector")
            return []

        base_url = page_origin(page.url)
        records: List[JobRecord] = []
        incomplete = 0
        for card in cards:
            record = await self._extract_card(card, field_map, base_url)
            if record is None:
                incomplete += 1
                continue
            records.append(record)

        logger.info(
            f"Extracted {len(records)} records from {len(cards)} cards"
            + (f" ({incomplete} incomplete dropped)" if incomplete else "")
        )
        return records

    async def _find_cards(
        self, page: PageAccessor, locators: Sequence[str]
    ) -> List[ElementAccessor]:
        for locator in locators:
            cards = await page.query_all(locator)
            if cards:
                logger.debug(f"Found {len(cards)} cards using selector: {locator}")
                return cards
        return []

    async def _extract_card(
        self, card: ElementAccessor, field_map: FieldMap, base_url: str
    ) -> Optional[JobRecord]:
        title = await self._first_value(card, field_map.fields.get("title", ()))
        if not title:
            return None

        url = None
        for locator in field_map.url:
            target, attr = split_locator(locator, default_attr="href")
            url = resolve_url(await card.read_attribute(attr, target), base_url)
            if url:
                break
        if not url:
            return None

        values = {}
        for name, attribute in OPTIONAL_FIELDS.items():
            values[attribute] = await self._first_value(card, field_map.fields.get(name, ()))

        return JobRecord(
            title=title,
            employer=values.pop("employer") or "",
            url=url,
            **values,
        )

    async def _first_value(
        self, card: ElementAccessor, locators: Sequence[str]
    ) -> Optional[str]:
        for locator in locators:
            target, attr = split_locator(locator)
            if attr:
                raw = await card.read_attribute(attr, target)
            else:
                raw = await card.read_text(target)
            value = normalize_text(raw)
            if value:
                return value
        return None
