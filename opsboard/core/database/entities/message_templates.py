"""
WhatsApp message template entity model.

Templates hold a message body written in the placeholder language rendered
by ``opsboard.reports.template``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, new_id, utc_column, utc_now


class MessageTemplateBase(Base):
    """Base fields for a message template."""

    user_id: Optional[str] = Field(default=None, description="Owning user")
    name: str = Field(description="Template name")
    subject: str = Field(default="", description="Short subject line")
    body: str = Field(description="Template body with {{placeholders}}")
    template_type: str = Field(index=True, description="Report type, e.g. 'bacula_daily'")
    is_active: bool = Field(default=True)


class MessageTemplate(MessageTemplateBase, table=True):
    """Persistent message template.

    Table: whatsapp_message_templates
    """

    __tablename__ = "whatsapp_message_templates"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    variables: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=utc_now, sa_column=utc_column())
    updated_at: datetime = Field(default_factory=utc_now, sa_column=utc_column())

    def __repr__(self) -> str:
        return f"MessageTemplate(name={self.name}, type={self.template_type}, active={self.is_active})"
