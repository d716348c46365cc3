"""
Integration entity model.

One row stores the connection credentials of a single external vendor API
(Zabbix, GLPI, Bacula, the WhatsApp gateway, ...) for a user. The report
pipeline only reads it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_column, utc_now


class IntegrationBase(Base):
    """Base fields for an integration row."""

    user_id: Optional[str] = Field(default=None, description="Owning user")
    name: str = Field(description="Display name of the integration")
    type: str = Field(index=True, description="Vendor type, e.g. 'bacula' or 'evolution_api'")
    base_url: Optional[str] = Field(default=None, description="Vendor API base URL")
    api_token: Optional[str] = Field(default=None, description="API token or key")
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)
    instance_name: Optional[str] = Field(default=None, description="Messaging gateway instance")
    phone_number: Optional[str] = Field(default=None)
    is_active: bool = Field(default=True)


class Integration(IntegrationBase, table=True):
    """Persistent vendor integration.

    Table: integrations
    """

    __tablename__ = "integrations"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, sa_column=utc_column())
    updated_at: datetime = Field(default_factory=utc_now, sa_column=utc_column())

    def __repr__(self) -> str:
        return f"Integration(type={self.type}, name={self.name}, active={self.is_active})"
