"""
SQLAlchemy database models for multi-tenant Store Sync.

Models:
- Tenant: Stores registered to send webhooks
- Product: Products synchronized per tenant
- Customer: Customers synchronized per tenant
- Order: Orders synchronized per tenant
"""

from .base import Base
from .tenant import Tenant
from .product import Product
from .customer import Customer
from .order import Order

__all__ = [
    "Base",
    "Tenant",
    "Product",
    "Customer",
    "Order",
]
