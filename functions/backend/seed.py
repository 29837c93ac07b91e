"""
Seeds destination source URLs from the environment.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from backend.config import Settings
from backend.db import DbClient
from destinations.service import VALID_FIELDS, VALID_LANGS
from shared.types import SourceUrlEntry

logger = logging.getLogger(__name__)

SEED_USER = "env"


def seed_source_urls(db: DbClient, settings: Settings) -> int:
    """
    Inserts a source URL for every configured <FIELD>_PARTNERS_<LANG> setting
    whose (field, lang) pair has no entry yet. Existing entries are left alone
    so admin edits survive restarts. Returns the number of entries written.
    """
    seeded = 0
    for field in VALID_FIELDS:
        for lang in VALID_LANGS:
            url = settings.seed_url_for(field, lang)
            if not url or db.get_source_url(field, lang) is not None:
                continue
            db.save_source_url(
                SourceUrlEntry(
                    field=field,
                    lang=lang,
                    url=url,
                    last_modified=datetime.now(timezone.utc),
                    updated_by=SEED_USER,
                )
            )
            seeded += 1
    if seeded:
        logger.info("Seeded %d destination source URLs from settings", seeded)
    return seeded
