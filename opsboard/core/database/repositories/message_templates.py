"""
Message template repository.

Lookups used to resolve which template a report run renders.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlmodel import select

from ..entities.message_templates import MessageTemplate
from .base import AsyncBaseRepository


@dataclass(frozen=True)
class MessageTemplateRepository(AsyncBaseRepository):
    """SQL access to the ``whatsapp_message_templates`` table."""

    async def create(self, template: MessageTemplate) -> MessageTemplate:
        """Persist a new template row."""
        async with self.session_factory() as s:
            s.add(template)
            await s.commit()
            await s.refresh(template)
            return template

    async def get_active(self, template_id: str) -> Optional[MessageTemplate]:
        """
        Get a template by id, only when it is active.

        Args:
            template_id: Template primary key.

        Returns:
            The template row, or None when absent or inactive.
        """
        async with self.session_factory() as s:
            row = await s.get(MessageTemplate, template_id)
            if row is None or not row.is_active:
                return None
            return row

    async def get_active_by_type(self, template_type: str) -> Optional[MessageTemplate]:
        """
        Get the first active template of a report type.

        Args:
            template_type: Report type such as ``bacula_daily``.

        Returns:
            The oldest active template of that type, or None.
        """
        async with self.session_factory() as s:
            stmt = (
                select(MessageTemplate)
                .where(MessageTemplate.template_type == template_type)
                .where(MessageTemplate.is_active == True)  # noqa: E712
                .order_by(MessageTemplate.created_at)
                .limit(1)
            )
            result = await s.execute(stmt)
            return result.scalars().first()
