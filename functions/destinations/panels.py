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

"""Rule-based extraction of destination entries from a single accordion panel."""

import re
from typing import List, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from shared.types import ExtractedDestination


def clean_whitespace(text: Optional[str]) -> str:
    if text is None:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def clean_entry(text: str) -> str:
    """
    Normalizes the punctuation of a scraped list entry.

    Keeps the first colon as a "name: details" separator, turns any further
    colons and all semicolons into commas, and drops a trailing colon.
    """
    text = clean_whitespace(text)
    text = re.sub(r":$", "", text)

    parts = [part.strip() for part in text.split(":")]
    if len(parts) > 1:
        text = f"{parts[0]}: {', '.join(parts[1:])}"

    text = text.replace(";", ", ")
    text = re.sub(r"\s+,", ",", text)
    text = re.sub(r",+", ",", text)
    return clean_whitespace(text)


def _parse_list_item(li: Tag) -> tuple[str, str]:
    parts: List[str] = []
    link = ""
    for node in li.contents:
        if isinstance(node, Comment):
            continue
        if isinstance(node, NavigableString):
            text = node.strip()
            if text:
                parts.append(text)
            continue
        if not isinstance(node, Tag):
            continue
        anchor = node if node.name == "a" else node.find("a", href=True)
        if anchor is not None and not link:
            link = anchor.get("href", "")
        text = clean_whitespace(node.get_text(" "))
        if text:
            parts.append(text)

    full_text = ": ".join(re.sub(r"^:|:$", "", part).strip() for part in parts)
    return clean_entry(full_text), link


def parse_panel_items(panel: Tag, country: str) -> List[ExtractedDestination]:
    """
    Extracts entries from a panel's <li> elements, falling back to its bare
    links and finally to the panel's plain text.
    """
    items: List[ExtractedDestination] = []

    list_items = panel.find_all("li")
    for li in list_items:
        title, link = _parse_list_item(li)
        items.append(ExtractedDestination(country=country, title=title, link=link))
    if list_items:
        return items

    anchors = panel.find_all("a")
    for anchor in anchors:
        items.append(
            ExtractedDestination(
                country=country,
                title=clean_entry(anchor.get_text(" ")),
                link=anchor.get("href", ""),
            )
        )
    if anchors:
        return items

    plain_text = clean_entry(panel.get_text(" "))
    if plain_text:
        items.append(ExtractedDestination(country=country, title=plain_text, link=""))
    return items


class RuleBasedPanelExtractor:
    """PanelExtractor that parses the panel markup without calling a model."""

    def extract(
        self, section_title: str, panel_html: str, panel_country: str
    ) -> List[ExtractedDestination]:
        panel = BeautifulSoup(panel_html, "html.parser")
        return parse_panel_items(panel, panel_country)
