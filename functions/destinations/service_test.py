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
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

from backend.db import InMemoryDbClient
from destinations import service as service_lib
from destinations.countries import CountryResolver
from destinations.errors import (
    DestinationExtractionError,
    DestinationFetchError,
    SourceUrlNotConfiguredError,
)
from destinations.service import DestinationService
from shared.types import (
    CacheEntry,
    DestinationRecord,
    ExtractedDestination,
    SourceUrlEntry,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
SOURCE_URL = "https://partners.example/tech-en"
PAGE = (
    '<div class="paragraph--type--accordion"><h2>Europe</h2>'
    '<button id="fr">FRANCE</button>'
    '<div class="accordion-panel" aria-labelledby="fr">'
    '<a href="http://example.edu">Sorbonne</a></div></div>'
)
SORBONNE = {
    "country": "France",
    "title": "Sorbonne",
    "link": "http://example.edu",
    "coordinates": {"lat": 46.227638, "lng": 2.213749},
}


class FakeExtractor:
    def __init__(self, items):
        self.items = items
        self.calls = 0

    def extract(self, section_title, panel_html, panel_country):
        self.calls += 1
        return list(self.items)


class DestinationServiceTest(unittest.TestCase):

    def setUp(self):
        self.db = InMemoryDbClient()
        self.now = NOW
        self.fetch_html = MagicMock(return_value=PAGE)
        self.extractor = FakeExtractor(
            [ExtractedDestination(country="France", title="Sorbonne", link="http://example.edu")]
        )
        self.service = DestinationService(
            self.db,
            self.extractor,
            fetch_html=self.fetch_html,
            clock=lambda: self.now,
        )

    def _configure(self, field="tech", lang="en"):
        self.db.save_source_url(
            SourceUrlEntry(field=field, lang=lang, url=SOURCE_URL, last_modified=NOW)
        )

    def test_cache_miss_scrapes_and_persists(self):
        self._configure()

        result = self.service.get_destinations("tech", "en")

        self.assertEqual(result, {"Europe": [SORBONNE]})
        self.fetch_html.assert_called_once_with(SOURCE_URL, timeout=None)
        entry = self.db.get_destination_cache("tech", "en")
        self.assertEqual(entry.field, "tech")
        self.assertEqual(entry.lang, "en")
        self.assertEqual(entry.sections, {"Europe": [SORBONNE]})
        self.assertEqual(entry.last_updated, NOW)

    def test_fresh_cache_skips_network_and_model(self):
        self._configure()
        cached = {"Asia": []}
        self.db.save_destination_cache(
            CacheEntry(
                field="tech",
                lang="en",
                sections=cached,
                last_updated=NOW - timedelta(days=29, hours=23),
            )
        )

        self.assertEqual(self.service.get_destinations("tech", "en"), cached)
        self.fetch_html.assert_not_called()
        self.assertEqual(self.extractor.calls, 0)

    def test_stale_cache_is_refreshed(self):
        self._configure()
        self.db.save_destination_cache(
            CacheEntry(
                field="tech",
                lang="en",
                sections={"Asia": []},
                last_updated=NOW - timedelta(days=30, seconds=1),
            )
        )

        self.assertEqual(self.service.get_destinations("tech", "en"), {"Europe": [SORBONNE]})
        self.fetch_html.assert_called_once()

    def test_missing_source_url_never_writes_cache(self):
        with self.assertRaises(SourceUrlNotConfiguredError) as ctx:
            self.service.get_destinations("culture", "fi")

        self.assertEqual((ctx.exception.field, ctx.exception.lang), ("culture", "fi"))
        self.assertEqual(self.db.destination_cache, {})
        self.fetch_html.assert_not_called()

    def test_unknown_field_falls_back_to_tech(self):
        self._configure("tech", "en")
        self.assertEqual(self.service.get_destinations("astronomy", None), {"Europe": [SORBONNE]})
        self.assertIsNotNone(self.db.get_destination_cache("tech", "en"))

    def test_fetch_failure_propagates_without_stale_fallback(self):
        self._configure()
        self.db.save_destination_cache(
            CacheEntry(
                field="tech",
                lang="en",
                sections={"Asia": []},
                last_updated=NOW - timedelta(days=31),
            )
        )
        self.fetch_html.side_effect = DestinationFetchError("503")

        with self.assertRaises(DestinationFetchError):
            self.service.get_destinations("tech", "en")
        self.assertEqual(
            self.db.get_destination_cache("tech", "en").sections, {"Asia": []}
        )

    def test_extractor_failure_aborts_refresh(self):
        class FailingExtractor:
            def extract(self, section_title, panel_html, panel_country):
                raise RuntimeError("model unavailable")

        self._configure()
        service = DestinationService(
            self.db, FailingExtractor(), fetch_html=self.fetch_html, clock=lambda: self.now
        )

        with self.assertRaises(DestinationExtractionError):
            service.get_destinations("tech", "en")
        self.assertIsNone(self.db.get_destination_cache("tech", "en"))

    def test_invalid_records_are_dropped_and_coordinates_defaulted(self):
        self._configure()
        self.extractor.items = [
            ExtractedDestination(country="Atlantis", title="Lost U", link=""),
            ExtractedDestination(country="Atlantis", title="  ", link=""),
        ]
        service = DestinationService(
            self.db,
            self.extractor,
            fetch_html=self.fetch_html,
            resolver=CountryResolver({"en": {}}, {}),
            clock=lambda: self.now,
        )

        result = service.get_destinations("tech", "en")

        self.assertEqual(
            result,
            {
                "Europe": [
                    {
                        "country": "Atlantis",
                        "title": "Lost U",
                        "link": "",
                        "coordinates": {"lat": 0, "lng": 0},
                    }
                ]
            },
        )

    @patch("destinations.service.extract_business_sections")
    def test_business_uses_table_extractor(self, mock_tables):
        self._configure("business", "en")
        mock_tables.return_value = {
            "Europe": [DestinationRecord(country="France", title="ESSEC")]
        }

        result = self.service.get_destinations("business", "en")

        mock_tables.assert_called_once_with(PAGE, "en", None)
        self.assertEqual(result["Europe"][0]["title"], "ESSEC")
        self.assertEqual(result["Europe"][0]["coordinates"], {"lat": 0, "lng": 0})
        self.assertEqual(self.extractor.calls, 0)

    def test_finnish_page_is_geocoded_with_finnish_dictionary(self):
        self._configure("tech", "fi")
        self.fetch_html.return_value = (
            '<div class="paragraph--type--accordion"><h2>Eurooppa</h2>'
            '<button id="fr">RANSKA</button>'
            '<div class="accordion-panel" aria-labelledby="fr">'
            '<a href="http://example.edu">Sorbonne</a></div></div>'
        )

        result = self.service.get_destinations("tech", "fi")

        self.assertEqual(result, {"Eurooppa": [SORBONNE]})
        self.assertIsNotNone(self.db.get_destination_cache("tech", "fi"))
        self.assertIsNone(self.db.get_destination_cache("tech", "en"))

    def test_refresh_ignores_fresh_cache(self):
        self._configure()
        self.service.get_destinations("tech", "en")
        self.service.refresh("tech", "en")
        self.assertEqual(self.fetch_html.call_count, 2)


class ValidationTest(unittest.TestCase):

    def test_is_valid_record(self):
        good = dict(SORBONNE)
        self.assertTrue(service_lib.is_valid_record(good))
        self.assertFalse(service_lib.is_valid_record({**good, "country": ""}))
        self.assertFalse(service_lib.is_valid_record({**good, "link": None}))
        self.assertFalse(
            service_lib.is_valid_record({**good, "coordinates": {"lat": float("nan"), "lng": 1}})
        )
        self.assertFalse(
            service_lib.is_valid_record({**good, "coordinates": {"lat": True, "lng": 1}})
        )
        self.assertFalse(
            service_lib.is_valid_record({**good, "coordinates": {"lat": "1", "lng": 1}})
        )

    def test_normalize_coordinates(self):
        record = {"country": "X", "title": "Y", "link": "", "coordinates": {"lat": 5}}
        self.assertEqual(
            service_lib.normalize_coordinates(record)["coordinates"], {"lat": 5, "lng": 0}
        )
        self.assertEqual(record["coordinates"], {"lat": 5})

    def test_normalize_field_and_lang(self):
        self.assertEqual(service_lib.normalize_field(None), "tech")
        self.assertEqual(service_lib.normalize_field("health"), "health")
        self.assertEqual(service_lib.normalize_lang("sv"), "en")
        self.assertEqual(service_lib.normalize_lang("fi"), "fi")


if __name__ == "__main__":
    unittest.main()
