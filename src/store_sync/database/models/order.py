"""
Order model for orders synchronized from store webhooks.
"""

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Index, Numeric, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from .base import Base
from .tenant import _utcnow


class Order(Base):
    """
    Order synchronized from the platform.

    Natural key: (external_order_id, tenant_id). `created_at` is the time
    the platform reports for the order, not the ingestion time, which is
    kept in `synced_at`.
    """

    __tablename__ = "orders"

    id = Column(Uuid, primary_key=True, default=uuid4)

    tenant_id = Column(
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Order references its customer but does not own it
    customer_id = Column(
        Uuid,
        ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    external_order_id = Column(String(64), nullable=False)

    total_price = Column(Numeric(18, 4), nullable=False)
    financial_status = Column(String(64))

    created_at = Column(DateTime(timezone=True), nullable=False)
    synced_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    tenant = relationship("Tenant", back_populates="orders")
    customer = relationship("Customer", back_populates="orders")

    __table_args__ = (
        UniqueConstraint("external_order_id", "tenant_id", name="uq_orders_external_tenant"),
        Index("idx_orders_tenant_created", "tenant_id", "created_at"),
    )

    def __repr__(self):
        return (
            f"<Order(id={self.id}, tenant={self.tenant_id}, "
            f"external_id={self.external_order_id}, total={self.total_price})>"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for downstream consumers."""
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "customer_id": str(self.customer_id) if self.customer_id else None,
            "external_order_id": self.external_order_id,
            "total_price": str(self.total_price),
            "financial_status": self.financial_status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "synced_at": self.synced_at.isoformat() if self.synced_at else None,
        }
