"""
Integration repository.

Read access to vendor integration rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlmodel import select

from ..entities.integrations import Integration
from .base import AsyncBaseRepository


@dataclass(frozen=True)
class IntegrationRepository(AsyncBaseRepository):
    """SQL access to the ``integrations`` table."""

    async def create(self, integration: Integration) -> Integration:
        """Persist a new integration row."""
        async with self.session_factory() as s:
            s.add(integration)
            await s.commit()
            await s.refresh(integration)
            return integration

    async def get_active_by_type(self, integration_type: str) -> Optional[Integration]:
        """
        Get the first active integration of a vendor type.

        Args:
            integration_type: Vendor type such as ``evolution_api``.

        Returns:
            The oldest active row of that type, or None.
        """
        async with self.session_factory() as s:
            stmt = (
                select(Integration)
                .where(Integration.type == integration_type)
                .where(Integration.is_active == True)  # noqa: E712
                .order_by(Integration.created_at)
                .limit(1)
            )
            result = await s.execute(stmt)
            return result.scalars().first()
