"""
Background loop that keeps the destination cache warm.

Each sweep refreshes every configured (field, lang) pair whose cache entry is
missing or older than the TTL, so user requests rarely pay for a scrape.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from backend.config import get_settings
from backend.db import DbClient
from backend.dependencies import get_db_client, get_destination_service
from backend.seed import seed_source_urls
from destinations.service import DestinationService

logger = logging.getLogger(__name__)


def refresh_stale(
    db: Optional[DbClient] = None,
    service: Optional[DestinationService] = None,
    force: bool = False,
) -> int:
    """
    Refreshes stale or missing cache entries. Returns the number refreshed.

    A failing pair is logged and skipped; the sweep carries on with the rest.
    """
    db = db or get_db_client()
    service = service or get_destination_service()

    refreshed = 0
    for source in db.list_source_urls():
        if not force and service.cache.get_fresh(source.field, source.lang):
            continue
        try:
            service.refresh(source.field, source.lang)
            refreshed += 1
        except Exception:
            logger.exception(
                "Failed to refresh destinations for %s/%s", source.field, source.lang
            )
    logger.info("Refresh sweep complete: %d pairs refreshed", refreshed)
    return refreshed


def run_loop(poll_interval_seconds: Optional[float] = None) -> None:
    """
    Simple polling loop. Intended to be run under systemd/supervisor.
    """
    settings = get_settings()
    if poll_interval_seconds is None:
        poll_interval_seconds = settings.refresh_interval_seconds
    db = get_db_client()
    service = get_destination_service()
    seed_source_urls(db, settings)
    while True:
        refresh_stale(db=db, service=service)
        time.sleep(poll_interval_seconds)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_loop()
