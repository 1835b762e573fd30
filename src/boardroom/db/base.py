# src/boardroom/db/base.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from sqlalchemy import MetaData
from sqlalchemy.dialects import postgresql as pg
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import CHAR, TypeDecorator


# -----------------------------------------------------------------------------
# Declarative Base with naming conventions (great for Alembic autogenerate)
# -----------------------------------------------------------------------------
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Shared declarative base for all models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# -----------------------------------------------------------------------------
# GUID type that works on both Postgres and SQLite
# -----------------------------------------------------------------------------
class GUID(TypeDecorator):
    """
    Platform-independent UUID type.

    - On PostgreSQL ⇒ uses UUID(as_uuid=True)
    - Elsewhere     ⇒ stores as CHAR(36)

    Returns/accepts Python uuid.UUID objects in both cases.
    """
    impl = CHAR(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(pg.UUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
        return str(value if isinstance(value, uuid.UUID) else uuid.UUID(str(value)))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


# -----------------------------------------------------------------------------
# Common mixins: UUID PK + timestamps
# -----------------------------------------------------------------------------
class TimestampMixin:
    # Python-side defaults so values are present right after flush;
    # async sessions cannot lazy-load expired server defaults.
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=utcnow,
        server_default=sa.func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=utcnow,
        server_default=sa.func.now(),
        onupdate=utcnow,
        nullable=False,
    )


class UUIDMixin:
    """
    Mixin that adds:
      - id: UUID primary key (GUID), generated client-side
    """
    id: Mapped[Any] = mapped_column(
        GUID(),
        primary_key=True,
        default=uuid.uuid4,
    )


__all__ = ["Base", "UUIDMixin", "GUID", "TimestampMixin", "utcnow", "as_utc"]
