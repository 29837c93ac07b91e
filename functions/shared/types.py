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

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Dict, List, Optional


class StudyField(StrEnum):
    TECH = "tech"
    HEALTH = "health"
    BUSINESS = "business"
    CULTURE = "culture"


class Lang(StrEnum):
    EN = "en"
    FI = "fi"


# Persisted/served shape: section title -> list of destination dicts.
SectionedDestinations = Dict[str, List[dict]]


@dataclass
class Coordinates:
    lat: Optional[float] = None
    lng: Optional[float] = None

    def as_dict(self) -> dict:
        coords = {}
        if self.lat is not None:
            coords["lat"] = self.lat
        if self.lng is not None:
            coords["lng"] = self.lng
        return coords


@dataclass
class ExtractedDestination:
    """A (country, title, link) triple as returned by a panel extractor."""

    country: str
    title: str
    link: str


@dataclass
class DestinationRecord:
    """A partner institution entry, optionally geocoded."""

    country: str
    title: str
    link: str = ""
    coordinates: Coordinates = field(default_factory=Coordinates)

    def as_dict(self) -> dict:
        return {
            "country": self.country,
            "title": self.title,
            "link": self.link,
            "coordinates": self.coordinates.as_dict(),
        }


@dataclass
class CacheEntry:
    field: str
    lang: str
    sections: SectionedDestinations
    last_updated: datetime

    def as_dict(self) -> dict:
        return {
            "field": self.field,
            "lang": self.lang,
            "sections": self.sections,
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass
class SourceUrlEntry:
    """Admin-configured page to scrape for a (field, lang) pair."""

    field: str
    lang: str
    url: str
    last_modified: datetime
    updated_by: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "field": self.field,
            "lang": self.lang,
            "url": self.url,
            "last_modified": self.last_modified.isoformat(),
            "updated_by": self.updated_by,
        }
