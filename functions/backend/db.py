"""
Database abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from sqlalchemy import JSON, Column, Float, String, create_engine, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shared.types import CacheEntry, SourceUrlEntry


class DbClient(Protocol):
    """Interface for database access."""

    def get_destination_cache(self, field: str, lang: str) -> Optional[CacheEntry]:
        ...

    def save_destination_cache(self, entry: CacheEntry) -> None:
        ...

    def get_source_url(self, field: str, lang: str) -> Optional[SourceUrlEntry]:
        ...

    def save_source_url(self, entry: SourceUrlEntry) -> None:
        ...

    def list_source_urls(self) -> list[SourceUrlEntry]:
        ...

    def delete_source_url(self, field: str, lang: str) -> bool:
        ...


def _to_epoch(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _from_epoch(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.destination_cache: Dict[tuple[str, str], CacheEntry] = {}
        self.source_urls: Dict[tuple[str, str], SourceUrlEntry] = {}

    def get_destination_cache(self, field: str, lang: str) -> Optional[CacheEntry]:
        entry = self.destination_cache.get((field, lang))
        return copy.deepcopy(entry) if entry else None

    def save_destination_cache(self, entry: CacheEntry) -> None:
        self.destination_cache[(entry.field, entry.lang)] = copy.deepcopy(entry)

    def get_source_url(self, field: str, lang: str) -> Optional[SourceUrlEntry]:
        return self.source_urls.get((field, lang))

    def save_source_url(self, entry: SourceUrlEntry) -> None:
        self.source_urls[(entry.field, entry.lang)] = entry

    def list_source_urls(self) -> list[SourceUrlEntry]:
        return sorted(self.source_urls.values(), key=lambda e: (e.field, e.lang))

    def delete_source_url(self, field: str, lang: str) -> bool:
        return self.source_urls.pop((field, lang), None) is not None

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.destination_cache.clear()
        self.source_urls.clear()


UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts a Postgres URL, or SQLite for tests.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        if self.engine.dialect.name not in UPSERT_DIALECTS:
            raise ValueError(f"Unsupported database backend: {self.engine.dialect.name}")
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _upsert(self, model, **values) -> None:
        """
        Single-statement INSERT .. ON CONFLICT (field, lang) DO UPDATE, so
        concurrent first writes to a key cannot collide; the last writer wins.
        """
        insert = UPSERT_DIALECTS[self.engine.dialect.name]
        stmt = insert(model).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["field", "lang"],
            set_={
                key: stmt.excluded[key]
                for key in values
                if key not in ("field", "lang")
            },
        )
        with self.Session() as session:
            session.execute(stmt)
            session.commit()

    def _to_cache_entry(self, row: "DestinationCacheRow") -> CacheEntry:
        return CacheEntry(
            field=row.field,
            lang=row.lang,
            sections=row.sections,
            last_updated=_from_epoch(row.last_updated),
        )

    def _to_source_url(self, row: "SourceUrlRow") -> SourceUrlEntry:
        return SourceUrlEntry(
            field=row.field,
            lang=row.lang,
            url=row.url,
            last_modified=_from_epoch(row.last_modified),
            updated_by=row.updated_by,
        )

    def get_destination_cache(self, field: str, lang: str) -> Optional[CacheEntry]:
        with self.Session() as session:
            row = session.get(DestinationCacheRow, (field, lang))
            if not row:
                return None
            return self._to_cache_entry(row)

    def save_destination_cache(self, entry: CacheEntry) -> None:
        self._upsert(
            DestinationCacheRow,
            field=entry.field,
            lang=entry.lang,
            sections=entry.sections,
            last_updated=_to_epoch(entry.last_updated),
        )

    def get_source_url(self, field: str, lang: str) -> Optional[SourceUrlEntry]:
        with self.Session() as session:
            row = session.get(SourceUrlRow, (field, lang))
            if not row:
                return None
            return self._to_source_url(row)

    def save_source_url(self, entry: SourceUrlEntry) -> None:
        self._upsert(
            SourceUrlRow,
            field=entry.field,
            lang=entry.lang,
            url=entry.url,
            last_modified=_to_epoch(entry.last_modified),
            updated_by=entry.updated_by,
        )

    def list_source_urls(self) -> list[SourceUrlEntry]:
        with self.Session() as session:
            stmt = select(SourceUrlRow).order_by(
                SourceUrlRow.field.asc(), SourceUrlRow.lang.asc()
            )
            return [self._to_source_url(row) for row in session.scalars(stmt)]

    def delete_source_url(self, field: str, lang: str) -> bool:
        with self.Session() as session:
            row = session.get(SourceUrlRow, (field, lang))
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True


Base = declarative_base()


class DestinationCacheRow(Base):
    __tablename__ = "destination_cache"

    field = Column(String, primary_key=True)
    lang = Column(String, primary_key=True)
    sections = Column(JSON, nullable=False)
    last_updated = Column(Float, nullable=False)


class SourceUrlRow(Base):
    __tablename__ = "destination_source_urls"

    field = Column(String, primary_key=True)
    lang = Column(String, primary_key=True)
    url = Column(String, nullable=False)
    last_modified = Column(Float, nullable=False)
    updated_by = Column(String, nullable=True)
