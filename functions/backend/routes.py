"""
HTTP routes for the destinations API.
"""

from __future__ import annotations

import hmac
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from backend.config import Settings, get_settings
from backend.db import DbClient
from backend.dependencies import get_db_client, get_destination_service
from backend.schemas import (
    FIELD_ERROR,
    LANG_ERROR,
    DestinationsResponse,
    MessageResponse,
    SourceUrlListResponse,
    SourceUrlPayload,
    SourceUrlResponse,
    SourceUrlSavedResponse,
)
from destinations.errors import SourceUrlNotConfiguredError
from destinations.service import (
    DEFAULT_FIELD,
    DEFAULT_LANG,
    VALID_FIELDS,
    VALID_LANGS,
    DestinationService,
)
from shared.types import SourceUrlEntry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/data/metropolia")

FETCH_FAILED_MESSAGE = "Failed to fetch destinations"


def _validated_field(field: Optional[str]) -> str:
    if not field:
        return DEFAULT_FIELD
    if field not in VALID_FIELDS:
        raise HTTPException(status_code=400, detail=FIELD_ERROR)
    return field


def _validated_lang(lang: Optional[str]) -> str:
    if not lang:
        return DEFAULT_LANG
    if lang not in VALID_LANGS:
        raise HTTPException(status_code=400, detail=LANG_ERROR)
    return lang


def require_admin(
    x_admin_token: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Single shared-secret check for the source-URL admin endpoints."""
    if not settings.admin_token:
        raise HTTPException(status_code=403, detail="Admin endpoints are disabled")
    if not x_admin_token or not hmac.compare_digest(
        x_admin_token.encode(), settings.admin_token.encode()
    ):
        raise HTTPException(status_code=401, detail="Unauthorized")


def _load_destinations(
    service: DestinationService, field: str, lang: str, force: bool = False
) -> DestinationsResponse:
    try:
        if force:
            sections = service.refresh(field, lang)
        else:
            sections = service.get_destinations(field, lang)
    except SourceUrlNotConfiguredError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except Exception as e:
        logger.exception("Failed to load destinations for %s/%s", field, lang)
        raise HTTPException(status_code=500, detail=FETCH_FAILED_MESSAGE) from e
    return DestinationsResponse(destinations=sections)


@router.get("/destinations", response_model=DestinationsResponse)
def get_destinations(
    field: Optional[str] = Query(default=None),
    lang: Optional[str] = Query(default=None),
    service: DestinationService = Depends(get_destination_service),
):
    lang = _validated_lang(lang)
    field = _validated_field(field)
    return _load_destinations(service, field, lang)


@router.post(
    "/destinations/refresh",
    response_model=DestinationsResponse,
    dependencies=[Depends(require_admin)],
)
def refresh_destinations(
    field: Optional[str] = Query(default=None),
    lang: Optional[str] = Query(default=None),
    service: DestinationService = Depends(get_destination_service),
):
    lang = _validated_lang(lang)
    field = _validated_field(field)
    return _load_destinations(service, field, lang, force=True)


@router.put(
    "/destination-url",
    response_model=SourceUrlSavedResponse,
    dependencies=[Depends(require_admin)],
)
def update_destination_url(
    payload: SourceUrlPayload,
    x_admin_user: Optional[str] = Header(default=None),
    db: DbClient = Depends(get_db_client),
):
    entry = SourceUrlEntry(
        field=payload.field,
        lang=payload.lang,
        url=str(payload.url),
        last_modified=datetime.now(timezone.utc),
        updated_by=x_admin_user,
    )
    db.save_source_url(entry)
    logger.info(
        "Destination URL for %s/%s set to %s by %s",
        entry.field,
        entry.lang,
        entry.url,
        entry.updated_by or "unknown",
    )
    return SourceUrlSavedResponse(
        message="Destination URL updated successfully",
        entry=SourceUrlResponse.from_entry(entry),
    )


@router.get(
    "/destination-urls",
    response_model=SourceUrlListResponse,
    dependencies=[Depends(require_admin)],
)
def list_destination_urls(db: DbClient = Depends(get_db_client)):
    return SourceUrlListResponse(
        urls=[SourceUrlResponse.from_entry(entry) for entry in db.list_source_urls()]
    )


@router.delete(
    "/destination-url/{field}/{lang}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def delete_destination_url(
    field: str,
    lang: str,
    db: DbClient = Depends(get_db_client),
):
    field = _validated_field(field)
    lang = _validated_lang(lang)
    if not db.delete_source_url(field, lang):
        raise HTTPException(
            status_code=404, detail=f"No destination URL configured for {field}/{lang}"
        )
    return MessageResponse(message="Destination URL deleted successfully")
