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

"""Extracts partner destinations from table-based partner pages (business, health)."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from destinations.countries import CountryResolver, dedupe_tokens
from destinations.panels import clean_entry, clean_whitespace
from destinations.sections import SKIP_SECTIONS, Geocoder
from shared.types import DestinationRecord

logger = logging.getLogger(__name__)

DEFAULT_SECTION = "Partners"

COUNTRY_HEADERS = ("country", "maa", "valtio")
INSTITUTION_HEADERS = (
    "institution",
    "university",
    "school",
    "partner",
    "name",
    "korkeakoulu",
    "oppilaitos",
    "yliopisto",
    "kumppani",
    "nimi",
)
LINK_HEADERS = ("link", "website", "www", "url", "verkkosivu", "linkki")


@dataclass(frozen=True)
class TableLayout:
    """Where a field's partner page puts its section headings and columns."""

    heading_tags: Sequence[str] = ("h2",)
    country_headers: Sequence[str] = COUNTRY_HEADERS
    institution_headers: Sequence[str] = INSTITUTION_HEADERS
    link_headers: Sequence[str] = LINK_HEADERS


BUSINESS_LAYOUT = TableLayout(heading_tags=("h2",))
HEALTH_LAYOUT = TableLayout(
    heading_tags=("h2", "h3"),
    institution_headers=INSTITUTION_HEADERS + ("organisation", "organization"),
)


@dataclass
class ColumnRoles:
    country: int = 0
    institution: int = 1
    link: Optional[int] = None


def _matches(header: str, keywords: Sequence[str]) -> bool:
    header = header.lower()
    return any(keyword in header for keyword in keywords)


def detect_columns(headers: List[str], layout: TableLayout) -> ColumnRoles:
    """Assigns column roles from header labels, defaulting to (country, institution)."""
    roles = ColumnRoles()
    if not headers:
        return roles

    country = next(
        (i for i, h in enumerate(headers) if _matches(h, layout.country_headers)), None
    )
    institution = next(
        (
            i
            for i, h in enumerate(headers)
            if i != country and _matches(h, layout.institution_headers)
        ),
        None,
    )
    link = next(
        (
            i
            for i, h in enumerate(headers)
            if i not in (country, institution) and _matches(h, layout.link_headers)
        ),
        None,
    )

    if country is not None:
        roles.country = country
    if institution is not None:
        roles.institution = institution
    elif roles.country == roles.institution:
        roles.institution = 0 if roles.country != 0 else 1
    roles.link = link
    return roles


def _rowspan(cell: Tag) -> int:
    try:
        return max(int(cell.get("rowspan", 1)), 1)
    except (TypeError, ValueError):
        return 1


def expand_rows(table: Tag) -> List[List[Optional[Tag]]]:
    """
    Returns the table's rows with rowspan cells repeated into the rows they
    cover, so every row lines up with the header columns.
    """
    grid: List[List[Optional[Tag]]] = []
    carry: Dict[int, tuple[Tag, int]] = {}

    for tr in table.find_all("tr"):
        cells = iter(tr.find_all(["td", "th"], recursive=False))
        row: List[Optional[Tag]] = []
        col = 0
        while True:
            if col in carry:
                cell, remaining = carry[col]
                row.append(cell)
                if remaining <= 1:
                    del carry[col]
                else:
                    carry[col] = (cell, remaining - 1)
                col += 1
                continue
            cell = next(cells, None)
            if cell is None:
                if any(pending > col for pending in carry):
                    row.append(None)
                    col += 1
                    continue
                break
            span = _rowspan(cell)
            if span > 1:
                carry[col] = (cell, span - 1)
            row.append(cell)
            col += 1
        grid.append(row)
    return grid


def _is_header_row(row: List[Optional[Tag]]) -> bool:
    return bool(row) and all(cell is not None and cell.name == "th" for cell in row)


def _cell_text(row: List[Optional[Tag]], index: Optional[int]) -> str:
    if index is None or index >= len(row) or row[index] is None:
        return ""
    return clean_whitespace(row[index].get_text(" "))


def _row_link(row: List[Optional[Tag]], roles: ColumnRoles) -> str:
    preferred = [roles.institution, roles.link]
    for index in preferred:
        if index is None or index >= len(row) or row[index] is None:
            continue
        anchor = row[index].find("a", href=True)
        if anchor is not None:
            return anchor["href"]
    link_text = _cell_text(row, roles.link)
    if link_text.startswith(("http://", "https://", "www.")):
        return link_text
    for cell in row:
        if cell is None:
            continue
        anchor = cell.find("a", href=True)
        if anchor is not None:
            return anchor["href"]
    return ""


def _section_title(soup: BeautifulSoup, table: Tag, layout: TableLayout) -> str:
    heading = table.find_previous(list(layout.heading_tags))
    if heading is not None:
        return clean_whitespace(heading.get_text())
    page_heading = soup.find("h1")
    if page_heading is not None:
        return clean_whitespace(page_heading.get_text()) or DEFAULT_SECTION
    return DEFAULT_SECTION


def parse_table(
    table: Tag, layout: TableLayout, geocoder: Geocoder
) -> List[DestinationRecord]:
    rows = expand_rows(table)
    if not rows:
        return []

    headers: List[str] = []
    if _is_header_row(rows[0]):
        headers = [_cell_text(rows[0], i) for i in range(len(rows[0]))]
        rows = rows[1:]
    roles = detect_columns(headers, layout)

    records: List[DestinationRecord] = []
    last_country = ""
    for row in rows:
        if _is_header_row(row):
            continue
        title = clean_entry(_cell_text(row, roles.institution))
        if not title:
            continue
        country = dedupe_tokens(_cell_text(row, roles.country)) or last_country
        last_country = country
        records.append(
            DestinationRecord(
                country=country,
                title=title,
                link=_row_link(row, roles),
                coordinates=geocoder.locate(country),
            )
        )
    return records


def extract_table_sections(
    html: str,
    lang: str,
    layout: TableLayout = BUSINESS_LAYOUT,
    resolver: Optional[CountryResolver] = None,
) -> Dict[str, List[DestinationRecord]]:
    """
    Builds the sectioned destination list from a page of partner tables.

    Each table is filed under the nearest preceding heading; tables under
    site-chrome headings are ignored.
    """
    soup = BeautifulSoup(html, "html.parser")
    geocoder = Geocoder(lang, resolver)
    sections: Dict[str, List[DestinationRecord]] = {}

    for table in soup.find_all("table"):
        if table.find_parent("table") is not None:
            continue
        section_title = _section_title(soup, table, layout)
        if section_title in SKIP_SECTIONS:
            continue
        sections.setdefault(section_title, []).extend(
            parse_table(table, layout, geocoder)
        )

    logger.info(
        "Extracted %d table sections (%d records)",
        len(sections),
        sum(len(records) for records in sections.values()),
    )
    return sections


def extract_business_sections(
    html: str, lang: str, resolver: Optional[CountryResolver] = None
) -> Dict[str, List[DestinationRecord]]:
    return extract_table_sections(html, lang, BUSINESS_LAYOUT, resolver)


def extract_health_sections(
    html: str, lang: str, resolver: Optional[CountryResolver] = None
) -> Dict[str, List[DestinationRecord]]:
    return extract_table_sections(html, lang, HEALTH_LAYOUT, resolver)
