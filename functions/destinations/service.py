# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

"""Serves the destination directory for a (field, lang), scraping on cache miss."""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Protocol

from destinations import fetch_utils
from destinations.cache import DEFAULT_TTL, CacheStore, DestinationCache, utc_now
from destinations.countries import CountryResolver
from destinations.errors import (
    DestinationError,
    DestinationExtractionError,
    SourceUrlNotConfiguredError,
)
from destinations.sections import PanelExtractor, extract_sections
from destinations.tables import extract_business_sections, extract_health_sections
from shared.types import (
    DestinationRecord,
    Lang,
    SectionedDestinations,
    SourceUrlEntry,
    StudyField,
)

logger = logging.getLogger(__name__)

VALID_FIELDS = tuple(field.value for field in StudyField)
VALID_LANGS = tuple(lang.value for lang in Lang)
DEFAULT_FIELD = StudyField.TECH.value
DEFAULT_LANG = Lang.EN.value


class DestinationStore(CacheStore, Protocol):
    def get_source_url(self, field: str, lang: str) -> Optional[SourceUrlEntry]:
        ...


def normalize_field(field: Optional[str]) -> str:
    """Unknown or missing fields fall back to tech."""
    return field if field in VALID_FIELDS else DEFAULT_FIELD


def normalize_lang(lang: Optional[str]) -> str:
    return lang if lang in VALID_LANGS else DEFAULT_LANG


def _is_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def normalize_coordinates(record: dict) -> dict:
    """Gives every record numeric lat/lng keys; a missing value becomes 0."""
    coords = record.get("coordinates")
    coords = coords if isinstance(coords, dict) else {}
    normalized = dict(record)
    normalized["coordinates"] = {
        "lat": 0 if coords.get("lat") is None else coords["lat"],
        "lng": 0 if coords.get("lng") is None else coords["lng"],
    }
    return normalized


def is_valid_record(record: dict) -> bool:
    if not isinstance(record, dict):
        return False
    country, title, link = (record.get(key) for key in ("country", "title", "link"))
    if not (isinstance(country, str) and isinstance(title, str) and isinstance(link, str)):
        return False
    if not country.strip() or not title.strip():
        return False
    coords = record.get("coordinates")
    return (
        isinstance(coords, dict)
        and _is_number(coords.get("lat"))
        and _is_number(coords.get("lng"))
    )


def validate_sections(
    sections: Dict[str, List[DestinationRecord]],
) -> SectionedDestinations:
    """Normalizes coordinates and silently drops records with a bad shape."""
    validated: SectionedDestinations = {}
    dropped = 0
    for title, records in sections.items():
        kept = []
        for record in records:
            payload = record.as_dict() if isinstance(record, DestinationRecord) else record
            payload = normalize_coordinates(payload) if isinstance(payload, dict) else payload
            if is_valid_record(payload):
                kept.append(payload)
            else:
                dropped += 1
        validated[title] = kept
    if dropped:
        logger.debug("Dropped %d malformed destination records", dropped)
    return validated


class DestinationService:
    """
    Orchestrates cache lookup, scraping, validation and persistence.

    Concurrent misses for the same key each scrape; the last upsert wins.
    """

    def __init__(
        self,
        db: DestinationStore,
        panel_extractor: PanelExtractor,
        cache_ttl: timedelta = DEFAULT_TTL,
        fetch_html: Callable[..., str] = fetch_utils.fetch_html,
        fetch_timeout: Optional[float] = None,
        resolver: Optional[CountryResolver] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.panel_extractor = panel_extractor
        self.cache = DestinationCache(db, ttl=cache_ttl, clock=clock)
        self.fetch_html = fetch_html
        self.fetch_timeout = fetch_timeout
        self.resolver = resolver

    def get_destinations(
        self, field: Optional[str] = None, lang: Optional[str] = None
    ) -> SectionedDestinations:
        field = normalize_field(field)
        lang = normalize_lang(lang)

        cached = self.cache.get_fresh(field, lang)
        if cached is not None:
            logger.info("Destination cache hit for %s/%s", field, lang)
            return cached.sections

        logger.info("Destination cache miss for %s/%s, refreshing", field, lang)
        return self.refresh(field, lang)

    def refresh(self, field: str, lang: str) -> SectionedDestinations:
        """Scrapes the configured page and overwrites the cache entry."""
        field = normalize_field(field)
        lang = normalize_lang(lang)

        source = self.db.get_source_url(field, lang)
        if source is None:
            raise SourceUrlNotConfiguredError(field, lang)

        html = self.fetch_html(source.url, timeout=self.fetch_timeout)
        sections = validate_sections(self.scrape(field, lang, html))
        self.cache.put(field, lang, sections)
        logger.info(
            "Refreshed %s/%s from %s: %d sections, %d records",
            field,
            lang,
            source.url,
            len(sections),
            sum(len(records) for records in sections.values()),
        )
        return sections

    def scrape(
        self, field: str, lang: str, html: str
    ) -> Dict[str, List[DestinationRecord]]:
        """Runs the extractor that matches the field's page layout."""
        try:
            if field == StudyField.BUSINESS:
                return extract_business_sections(html, lang, self.resolver)
            if field == StudyField.HEALTH:
                return extract_health_sections(html, lang, self.resolver)
            return extract_sections(html, lang, self.panel_extractor, self.resolver)
        except DestinationError:
            raise
        except Exception as e:
            raise DestinationExtractionError(
                f"Failed to extract destinations for {field}/{lang}: {e}"
            ) from e
