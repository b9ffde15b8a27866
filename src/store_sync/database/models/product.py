"""
Product model for products synchronized from store webhooks.
"""

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from .base import Base
from .tenant import _utcnow


class Product(Base):
    """
    Product synchronized from the platform.

    Natural key: (external_product_id, tenant_id).
    """

    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid4)

    tenant_id = Column(
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Platform identifier
    external_product_id = Column(String(64), nullable=False)

    # Product details
    title = Column(String(512))
    vendor = Column(String(255))

    # Ingestion time of the last applied event
    synced_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    tenant = relationship("Tenant", back_populates="products")

    __table_args__ = (
        UniqueConstraint("external_product_id", "tenant_id", name="uq_products_external_tenant"),
        Index("idx_products_tenant_synced", "tenant_id", "synced_at"),
    )

    def __repr__(self):
        return (
            f"<Product(id={self.id}, tenant={self.tenant_id}, "
            f"external_id={self.external_product_id}, title='{self.title}')>"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for downstream consumers."""
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "external_product_id": self.external_product_id,
            "title": self.title,
            "vendor": self.vendor,
            "synced_at": self.synced_at.isoformat() if self.synced_at else None,
        }
