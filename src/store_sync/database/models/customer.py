"""
Customer model for customers synchronized from store webhooks.
"""

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from .base import Base
from .tenant import _utcnow


class Customer(Base):
    """
    Customer synchronized from the platform, either directly or embedded
    in an order.

    Natural key: (external_customer_id, tenant_id).
    """

    __tablename__ = "customers"

    id = Column(Uuid, primary_key=True, default=uuid4)

    tenant_id = Column(
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    external_customer_id = Column(String(64), nullable=False)

    email = Column(String(320))
    first_name = Column(String(255))
    last_name = Column(String(255))

    synced_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    tenant = relationship("Tenant", back_populates="customers")
    orders = relationship("Order", back_populates="customer", lazy="noload")

    __table_args__ = (
        UniqueConstraint("external_customer_id", "tenant_id", name="uq_customers_external_tenant"),
        Index("idx_customers_tenant_synced", "tenant_id", "synced_at"),
    )

    def __repr__(self):
        return (
            f"<Customer(id={self.id}, tenant={self.tenant_id}, "
            f"external_id={self.external_customer_id})>"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for downstream consumers."""
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "external_customer_id": self.external_customer_id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "synced_at": self.synced_at.isoformat() if self.synced_at else None,
        }
