"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import os

from backend.config import get_settings
from backend.db import DbClient, InMemoryDbClient, PostgresDbClient
from destinations.panels import RuleBasedPanelExtractor
from destinations.sections import PanelExtractor
from destinations.service import DestinationService
from models import api_config
from models.extract_destinations import AiPanelExtractor

_db_client: DbClient | None = None
_panel_extractor: PanelExtractor | None = None
_destination_service: DestinationService | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so cache and source-URL state persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = PostgresDbClient(settings.database_url)
    return _db_client


def get_panel_extractor() -> PanelExtractor:
    global _panel_extractor
    if _panel_extractor:
        return _panel_extractor

    settings = get_settings()
    if settings.destination_extractor == "rules":
        _panel_extractor = RuleBasedPanelExtractor()
    else:
        # Ensure Gemini API key is wired for downstream calls.
        if settings.gemini_api_key:
            api_config.DEFAULT_API_KEY = settings.gemini_api_key
            os.environ["GEMINI_API_KEY"] = settings.gemini_api_key
        _panel_extractor = AiPanelExtractor(
            model=settings.gemini_model, api_key=settings.gemini_api_key
        )
    return _panel_extractor


def get_destination_service() -> DestinationService:
    global _destination_service
    if _destination_service:
        return _destination_service

    settings = get_settings()
    _destination_service = DestinationService(
        db=get_db_client(),
        panel_extractor=get_panel_extractor(),
        cache_ttl=settings.destination_cache_ttl,
        fetch_timeout=settings.fetch_timeout_seconds,
    )
    return _destination_service
