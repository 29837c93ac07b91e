"""
Pydantic schemas for the destinations FastAPI backend.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from destinations.service import VALID_FIELDS, VALID_LANGS
from shared.types import SourceUrlEntry

FIELD_ERROR = "field must be one of: " + ", ".join(VALID_FIELDS)
LANG_ERROR = "lang must be either 'en' or 'fi'"
URL_ERROR = "url must be a valid URL"


class Coordinates(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None


class Destination(BaseModel):
    country: str
    title: str
    link: str
    coordinates: Coordinates


class DestinationsResponse(BaseModel):
    destinations: Dict[str, List[Destination]]


class SourceUrlPayload(BaseModel):
    field: str
    lang: str
    url: HttpUrl

    @field_validator("field")
    @classmethod
    def _check_field(cls, value: str) -> str:
        if value not in VALID_FIELDS:
            raise ValueError(FIELD_ERROR)
        return value

    @field_validator("lang")
    @classmethod
    def _check_lang(cls, value: str) -> str:
        if value not in VALID_LANGS:
            raise ValueError(LANG_ERROR)
        return value


class SourceUrlResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    field: str
    lang: str
    url: str
    last_modified: datetime = Field(..., alias="lastModified")
    updated_by: Optional[str] = Field(default=None, alias="updatedBy")

    @classmethod
    def from_entry(cls, entry: SourceUrlEntry) -> "SourceUrlResponse":
        return cls(
            field=entry.field,
            lang=entry.lang,
            url=entry.url,
            last_modified=entry.last_modified,
            updated_by=entry.updated_by,
        )


class SourceUrlSavedResponse(BaseModel):
    message: str
    entry: SourceUrlResponse


class SourceUrlListResponse(BaseModel):
    urls: List[SourceUrlResponse]


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
