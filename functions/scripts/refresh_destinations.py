"""
CLI helper to scrape partner pages into the destination cache.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.config import get_settings
from backend.dependencies import get_db_client, get_destination_service
from backend.seed import seed_source_urls
from backend.worker import refresh_stale
from destinations.service import VALID_FIELDS, VALID_LANGS

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Refresh cached partner destinations")
    parser.add_argument(
        "-f",
        "--field",
        choices=VALID_FIELDS,
        default=None,
        help="Study field to refresh",
    )
    parser.add_argument(
        "-l",
        "--lang",
        choices=VALID_LANGS,
        default=None,
        help="Language to refresh",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Refresh every configured (field, lang) pair",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Refresh even if the cached entry is still fresh",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    db = get_db_client()
    service = get_destination_service()
    seed_source_urls(db, get_settings())

    if args.all:
        refresh_stale(db=db, service=service, force=args.force)
        return 0

    if not args.field or not args.lang:
        parser.error("--field and --lang are required unless --all is given")

    if not args.force and service.cache.get_fresh(args.field, args.lang):
        logger.info("Cache for %s/%s is fresh, nothing to do", args.field, args.lang)
        return 0

    try:
        sections = service.refresh(args.field, args.lang)
    except Exception:
        logger.exception("Refresh failed for %s/%s", args.field, args.lang)
        return 1
    logger.info(
        "Cached %d sections for %s/%s", len(sections), args.field, args.lang
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
