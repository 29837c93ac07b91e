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

"""Extracts partner destinations from accordion-structured partner pages."""

import logging
from typing import Dict, List, Optional, Protocol

from bs4 import BeautifulSoup, Tag

from destinations.countries import CountryResolver, dedupe_tokens, get_country_resolver
from destinations.panels import clean_whitespace
from shared.types import Coordinates, DestinationRecord, ExtractedDestination, Lang

logger = logging.getLogger(__name__)

ACCORDION_SELECTOR = "div.paragraph--type--accordion"
PANEL_SELECTOR = ".accordion-panel"
UNKNOWN_COUNTRY = "Unknown"

# Site chrome rendered with the same accordion markup, in both languages.
SKIP_SECTIONS = frozenset(
    [
        "Metropolia University of Applied Sciences",
        "Information on the site",
        "Other services",
        "Metropolia in social media",
        "Metropolia Ammattikorkeakoulu",
        "Tietoa sivustosta",
        "Palvelut muualla",
        "Metropolia somessa",
    ]
)


class PanelExtractor(Protocol):
    """Turns one accordion panel into (country, title, link) triples."""

    def extract(
        self, section_title: str, panel_html: str, panel_country: str
    ) -> List[ExtractedDestination]:
        ...


class Geocoder:
    """Memoizes country -> coordinates lookups for one extraction run."""

    def __init__(self, lang: str, resolver: Optional[CountryResolver] = None):
        self.lang = lang
        self.resolver = resolver or get_country_resolver()
        self._cache: Dict[str, Coordinates] = {}

    def locate(self, country: str) -> Coordinates:
        if not country or country == UNKNOWN_COUNTRY:
            return Coordinates()
        if country not in self._cache:
            coords = self.resolver.coordinates_for_country(country, self.lang)
            self._cache[country] = coords or Coordinates()
        found = self._cache[country]
        return Coordinates(lat=found.lat, lng=found.lng)


def get_panel_country(soup: BeautifulSoup, panel: Tag) -> str:
    """Reads the panel's label via aria-labelledby, collapsing repeated words."""
    label_id = panel.get("aria-labelledby")
    if not label_id:
        return UNKNOWN_COUNTRY
    label = soup.find(id=label_id)
    text = clean_whitespace(label.get_text(" ")) if label else ""
    return dedupe_tokens(text) or UNKNOWN_COUNTRY


def extract_sections(
    html: str,
    lang: str,
    extractor: PanelExtractor,
    resolver: Optional[CountryResolver] = None,
) -> Dict[str, List[DestinationRecord]]:
    """
    Builds the sectioned destination list from an accordion partner page.

    Args:
        html (str): The fetched page.
        lang (str): Page language, used for country resolution.
        extractor (PanelExtractor): Produces records for each panel.
        resolver (CountryResolver | None): Overrides the packaged resolver.

    Returns:
        Dict[str, List[DestinationRecord]]: Section title -> records in
            document order. Sections without panels map to an empty list.
            A section without a heading voids the whole page and yields {}.

    Raises:
        Whatever the extractor raises; one failing panel fails the page.
    """
    soup = BeautifulSoup(html, "html.parser")
    geocoder = Geocoder(lang or Lang.EN, resolver)
    sections: Dict[str, List[DestinationRecord]] = {}

    for section in soup.select(ACCORDION_SELECTOR):
        heading = section.find("h2")
        if heading is None:
            logger.warning("Accordion section without a heading, discarding page")
            return {}

        section_title = clean_whitespace(heading.get_text())
        if section_title in SKIP_SECTIONS:
            continue

        records = sections.setdefault(section_title, [])
        for panel in section.select(PANEL_SELECTOR):
            panel_country = get_panel_country(soup, panel)
            items = extractor.extract(
                section_title, panel.decode_contents(), panel_country
            )
            for item in items:
                country = item.country.strip() or panel_country
                # The panel label is in the page language; the extractor's
                # country may not be.
                coordinates = geocoder.locate(panel_country)
                if coordinates.lat is None and country != panel_country:
                    coordinates = geocoder.locate(country)
                records.append(
                    DestinationRecord(
                        country=country,
                        title=item.title,
                        link=item.link,
                        coordinates=coordinates,
                    )
                )

    logger.info(
        "Extracted %d accordion sections (%d records)",
        len(sections),
        sum(len(records) for records in sections.values()),
    )
    return sections
