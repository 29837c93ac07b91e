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

"""Resolves free-text country names to ISO codes and map coordinates."""

import json
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from rapidfuzz import fuzz, process

from shared.types import Coordinates, Lang

DATA_DIR = Path(__file__).parent / "data"
COORDS_FILE = DATA_DIR / "coords.json"

# Abbreviations the fuzzy matcher gets wrong. Keys are matched verbatim.
ALIASES: Dict[str, str] = {
    "UK": "United Kingdom",
    "GB": "United Kingdom",
    "US": "United States",
    "USA": "United States",
    "UAE": "United Arab Emirates",
    "ROK": "South Korea",
    "S. Korea": "South Korea",
    "N. Korea": "North Korea",
    "Republic of Korea": "South Korea",
}


def normalize(value: str) -> str:
    return re.sub(r"\s+", " ", value.strip().lower())


def dedupe_tokens(text: str) -> str:
    """Drops repeated whitespace-separated tokens, e.g. "SWEDEN SWEDEN" -> "SWEDEN"."""
    return " ".join(dict.fromkeys(text.split()))


class CountryResolver:
    """
    Fuzzy country lookup over per-language name -> ISO code dictionaries.

    Lookups never raise: an unresolvable name or code yields None, which the
    caller treats as missing coordinates.
    """

    def __init__(
        self,
        dictionaries: Dict[str, Dict[str, str]],
        coordinates: Dict[str, dict],
        aliases: Optional[Dict[str, str]] = None,
    ):
        self.dictionaries = dictionaries
        self.coordinates = coordinates
        self.aliases = ALIASES if aliases is None else aliases
        self._candidates: Dict[str, tuple[list[str], list[str]]] = {}

    def _candidates_for(self, lang: str) -> tuple[list[str], list[str]]:
        if lang not in self._candidates:
            names = list(self.dictionaries.get(lang, {}).keys())
            self._candidates[lang] = (names, [normalize(name) for name in names])
        return self._candidates[lang]

    def resolve_country(self, name: str, lang: str = Lang.EN) -> Optional[str]:
        if not name or not name.strip():
            return None
        lang = str(lang)

        if lang == Lang.EN.value and name in self.aliases:
            canonical = self.aliases[name]
            return self.dictionaries.get(Lang.EN.value, {}).get(canonical)

        names, normalized = self._candidates_for(lang)
        if not names:
            return None

        best = process.extractOne(normalize(name), normalized, scorer=fuzz.WRatio)
        if best is None:
            return None
        _, _, index = best
        return self.dictionaries[lang][names[index]]

    def resolve_coordinates(self, iso_code: Optional[str]) -> Optional[Coordinates]:
        if not iso_code or iso_code not in self.coordinates:
            return None
        entry = self.coordinates[iso_code]
        return Coordinates(lat=entry.get("lat"), lng=entry.get("lng"))

    def coordinates_for_country(
        self, name: str, lang: str = Lang.EN
    ) -> Optional[Coordinates]:
        return self.resolve_coordinates(self.resolve_country(name, lang))


def _load_json(path: Path) -> dict:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=1)
def get_country_resolver() -> CountryResolver:
    """Return the process-wide resolver backed by the packaged data files."""
    dictionaries = {
        lang.value: _load_json(DATA_DIR / f"country_to_iso_{lang.value}.json")
        for lang in Lang
    }
    return CountryResolver(dictionaries, _load_json(COORDS_FILE))


def resolve_country(name: str, lang: str = Lang.EN) -> Optional[str]:
    return get_country_resolver().resolve_country(name, lang)


def resolve_coordinates(iso_code: Optional[str]) -> Optional[Coordinates]:
    return get_country_resolver().resolve_coordinates(iso_code)


def coordinates_for_country(name: str, lang: str = Lang.EN) -> Optional[Coordinates]:
    return get_country_resolver().coordinates_for_country(name, lang)
