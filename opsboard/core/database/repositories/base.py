"""
Base repository utilities.

Transaction model
-----------------

Each repository method opens an ``AsyncSession`` from the shared factory,
performs its operation, and commits. Rows are returned detached, which is safe
because the session factory is configured with ``expire_on_commit=False``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


@dataclass(frozen=True)
class AsyncBaseRepository:
    """Base class holding the session factory shared by all repositories."""

    session_factory: async_sessionmaker[AsyncSession]
