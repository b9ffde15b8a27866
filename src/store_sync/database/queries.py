"""
Read-only queries for downstream consumers (analytics, dashboards).

Every query is scoped to one tenant and a half-open date range
[start, end). Nothing here writes.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from store_sync.database.models import Customer, Order, Product


@dataclass(frozen=True)
class OrderTotals:
    """Aggregate of a tenant's orders over a date range."""

    order_count: int
    revenue: Decimal


def _in_range(column, start: Optional[datetime], end: Optional[datetime]):
    conditions = []
    if start is not None:
        conditions.append(column >= start)
    if end is not None:
        conditions.append(column < end)
    return conditions


def list_products(
    session: Session,
    tenant_id: uuid.UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Product]:
    """Products of a tenant last synchronized within the range."""
    stmt = (
        select(Product)
        .where(Product.tenant_id == tenant_id, *_in_range(Product.synced_at, start, end))
        .order_by(Product.synced_at)
    )
    return list(session.scalars(stmt))


def list_customers(
    session: Session,
    tenant_id: uuid.UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Customer]:
    """Customers of a tenant last synchronized within the range."""
    stmt = (
        select(Customer)
        .where(Customer.tenant_id == tenant_id, *_in_range(Customer.synced_at, start, end))
        .order_by(Customer.synced_at)
    )
    return list(session.scalars(stmt))


def list_orders(
    session: Session,
    tenant_id: uuid.UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Order]:
    """Orders of a tenant placed within the range (platform order time)."""
    stmt = (
        select(Order)
        .where(Order.tenant_id == tenant_id, *_in_range(Order.created_at, start, end))
        .order_by(Order.created_at)
    )
    return list(session.scalars(stmt))


def order_totals(
    session: Session,
    tenant_id: uuid.UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> OrderTotals:
    """
    Count and exact revenue of a tenant's orders within the range.

    The sum is computed from the stored decimals in Python so that the
    result does not depend on the database's numeric aggregation.
    """
    stmt = select(Order.total_price).where(
        Order.tenant_id == tenant_id, *_in_range(Order.created_at, start, end)
    )
    prices = list(session.scalars(stmt))
    revenue = sum((Decimal(p) for p in prices), Decimal("0"))
    return OrderTotals(order_count=len(prices), revenue=revenue)


def count_rows(session: Session, model, tenant_id: Optional[uuid.UUID] = None) -> int:
    """Number of rows of a model, optionally for one tenant."""
    stmt = select(func.count()).select_from(model)
    if tenant_id is not None:
        stmt = stmt.where(model.tenant_id == tenant_id)
    return session.scalar(stmt)
