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

"""Time-boxed cache of scraped destinations, one entry per (field, lang)."""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

from shared.types import CacheEntry, SectionedDestinations

DEFAULT_TTL = timedelta(days=30)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treats naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CacheStore(Protocol):
    def get_destination_cache(self, field: str, lang: str) -> Optional[CacheEntry]:
        ...

    def save_destination_cache(self, entry: CacheEntry) -> None:
        ...


class DestinationCache:
    """
    Serves stored sections while they are younger than the TTL.

    The TTL is fixed: an entry is fresh iff now - last_updated < ttl.
    """

    def __init__(
        self,
        store: CacheStore,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.ttl = ttl
        self.clock = clock

    def get(self, field: str, lang: str) -> Optional[CacheEntry]:
        return self.store.get_destination_cache(field, lang)

    def put(self, field: str, lang: str, sections: SectionedDestinations) -> CacheEntry:
        entry = CacheEntry(
            field=field, lang=lang, sections=sections, last_updated=self.clock()
        )
        self.store.save_destination_cache(entry)
        return entry

    def is_fresh(self, entry: CacheEntry, now: Optional[datetime] = None) -> bool:
        now = as_utc(now or self.clock())
        return now - as_utc(entry.last_updated) < self.ttl

    def get_fresh(self, field: str, lang: str) -> Optional[CacheEntry]:
        entry = self.get(field, lang)
        if entry is None or not self.is_fresh(entry):
            return None
        return entry
