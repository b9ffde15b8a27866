"""
Tenant model - a store whose webhooks the service accepts.
"""

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, Text, Uuid
from sqlalchemy.orm import relationship

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Tenant(Base):
    """
    Tenant registered by explicit provisioning.

    The public identifier is the shop domain sent by the platform in every
    webhook. The signing secret is stored Fernet-encrypted.
    """

    __tablename__ = "tenants"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Public identifier
    shop_domain = Column(String(255), nullable=False, unique=True, index=True)

    # Webhook signing secret (encrypted)
    webhook_secret_encrypted = Column(Text, nullable=True)

    # Status
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    products = relationship("Product", back_populates="tenant", lazy="noload")
    customers = relationship("Customer", back_populates="tenant", lazy="noload")
    orders = relationship("Order", back_populates="tenant", lazy="noload")

    @property
    def has_webhook_secret(self) -> bool:
        return bool(self.webhook_secret_encrypted)

    def __repr__(self):
        return f"<Tenant(id={self.id}, shop_domain='{self.shop_domain}', active={self.is_active})>"
