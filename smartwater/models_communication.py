"""
Communication models: messaging provider credentials and entity communication links
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base


class CommunicationProvider(Base):
    """Email/SMS provider account for an organization. Secret columns hold Fernet tokens."""

    __tablename__ = "communication_providers"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)  # gmail, outlook, smtp, twilio, ringcentral
    name = Column(String(255), nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    client_id = Column(String(500), nullable=True)
    client_secret = Column(Text, nullable=True)
    api_key = Column(Text, nullable=True)
    account_sid = Column(String(255), nullable=True)
    auth_token = Column(Text, nullable=True)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(50), nullable=True)
    settings = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class CommunicationLink(Base):
    """A logged message or call tied to a vendor, client, work order or project"""

    __tablename__ = "communication_links"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    entity_type = Column(String(50), nullable=False, index=True)  # vendor, client, work_order, project
    entity_id = Column(Integer, nullable=False, index=True)
    channel = Column(String(20), nullable=False)  # email, sms, call, note
    subject = Column(String(500), nullable=True)
    summary = Column(Text, nullable=True)
    external_id = Column(String(255), nullable=True)
    occurred_at = Column(DateTime, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
