"""
Base database models and utilities.

This module provides the foundational database components used across
all entities in the database layer using SQLModel.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ConfigDict
from sqlalchemy import Column, DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import SQLModel


class Base(SQLModel):
    """Base class for all SQLModel entities."""

    model_config = ConfigDict(arbitrary_types_allowed=True)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert a datetime to aware UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware timestamp column that always binds and loads UTC.

    SQLite drops the offset on storage, so loaded values get UTC attached
    back and compare the same on every backend.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> Any:
        return as_utc(value)

    def process_result_value(self, value: Any, dialect: Any) -> Any:
        return as_utc(value)


def utc_column(*, index: bool = False, nullable: bool = False) -> Column:
    """Build a UTC timestamp column for ``Field(sa_column=...)``."""
    return Column(UTCDateTime(), index=index, nullable=nullable)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a primary key in the BaaS uuid format."""
    return str(uuid.uuid4())
