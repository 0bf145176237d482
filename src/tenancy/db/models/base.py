"""Base models for SQLAlchemy."""

from datetime import UTC, datetime
from typing import Any, Self

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator
from uuid_utils import uuid7

from tenancy.core.context import get_current_actor_id


def generate_id() -> str:
    """Opaque, time-ordered primary key."""
    return str(uuid7())


def utc_now() -> datetime:
    return datetime.now(UTC)


class PortableJSON(TypeDecorator):
    """JSON type that uses JSONB on PostgreSQL and JSON elsewhere."""

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetime on every backend.

    SQLite drops tzinfo on storage; values are normalized to UTC on the way
    in and tagged as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        value = value.astimezone(UTC)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class Base(DeclarativeBase):
    """Base class for all database models.

    Adds a JSON round trip used by the cache-aside repositories. Cached
    instances are transient: they are read models and must not be attached
    to a session.
    """

    def to_cache_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                value = value.isoformat()
            data[column.key] = value
        return data

    @classmethod
    def from_cache_dict(cls, data: dict[str, Any]) -> Self:
        values: dict[str, Any] = {}
        for column in cls.__table__.columns:
            if column.key not in data:
                continue
            value = data[column.key]
            if value is not None and isinstance(column.type, UTCDateTime):
                value = datetime.fromisoformat(value)
            values[column.key] = value
        return cls(**values)


class IdMixin:
    """String primary key generated from UUIDv7."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)


class TimestampMixin:
    """Mixin for created_at/updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )


class ProvenanceMixin(TimestampMixin):
    """Timestamps plus the actor that created and last updated the row."""

    created_by: Mapped[str | None] = mapped_column(
        String(36), default=get_current_actor_id, nullable=True
    )
    updated_by: Mapped[str | None] = mapped_column(
        String(36), default=get_current_actor_id, onupdate=get_current_actor_id, nullable=True
    )
