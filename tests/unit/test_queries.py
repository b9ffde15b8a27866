"""
Unit tests for downstream read queries
"""
from datetime import datetime, timezone
from decimal import Decimal

from store_sync.database.models import Order, Product
from store_sync.database.queries import (
    OrderTotals,
    count_rows,
    list_customers,
    list_orders,
    list_products,
    order_totals,
)
from store_sync.services.sync_handlers import sync_order, sync_product


def _order(order_id, price, created_at, customer_id=None):
    payload = {"id": order_id, "current_total_price": price, "created_at": created_at}
    if customer_id:
        payload["customer"] = {"id": customer_id}
    return payload


def _apply(gateway, handler, payload, tenant_id):
    with gateway.session() as session:
        with gateway.transaction(session):
            handler(gateway, session, payload, tenant_id)


class TestOrderQueries:
    """Test order listing and totals"""

    def _seed(self, gateway, store_a, store_b):
        _apply(gateway, sync_order, _order(1, "10.10", "2024-01-01T00:00:00Z", 7), store_a.id)
        _apply(gateway, sync_order, _order(2, "0.20", "2024-01-15T12:00:00Z"), store_a.id)
        _apply(gateway, sync_order, _order(3, "99.00", "2024-02-01T00:00:00Z"), store_a.id)
        _apply(gateway, sync_order, _order(1, "500.00", "2024-01-10T00:00:00Z"), store_b.id)

    def test_list_orders_half_open_range(self, gateway, store_a, store_b):
        """Test the range includes start and excludes end"""
        self._seed(gateway, store_a, store_b)

        with gateway.session() as session:
            orders = list_orders(
                session, store_a.id,
                start=datetime(2024, 1, 1, tzinfo=timezone.utc),
                end=datetime(2024, 2, 1, tzinfo=timezone.utc),
            )

        assert [o.external_order_id for o in orders] == ["1", "2"]

    def test_list_orders_scoped_to_tenant(self, gateway, store_a, store_b):
        """Test one tenant never sees another tenant's orders"""
        self._seed(gateway, store_a, store_b)

        with gateway.session() as session:
            orders = list_orders(session, store_b.id)

        assert len(orders) == 1
        assert orders[0].total_price == Decimal("500.00")

    def test_order_totals_exact(self, gateway, store_a, store_b):
        """Test revenue is an exact decimal sum"""
        self._seed(gateway, store_a, store_b)

        with gateway.session() as session:
            totals = order_totals(
                session, store_a.id,
                start=datetime(2024, 1, 1, tzinfo=timezone.utc),
                end=datetime(2024, 2, 1, tzinfo=timezone.utc),
            )

        assert totals == OrderTotals(order_count=2, revenue=Decimal("10.30"))

    def test_order_totals_empty_range(self, gateway, store_a):
        """Test an empty range totals to zero"""
        with gateway.session() as session:
            totals = order_totals(session, store_a.id)

        assert totals.order_count == 0
        assert totals.revenue == Decimal("0")

    def test_order_to_dict(self, gateway, store_a, store_b):
        """Test orders serialize money as a string"""
        self._seed(gateway, store_a, store_b)

        with gateway.session() as session:
            data = list_orders(session, store_b.id)[0].to_dict()

        assert data["external_order_id"] == "1"
        assert data["customer_id"] is None
        assert Decimal(data["total_price"]) == Decimal("500")


class TestEntityQueries:
    """Test product and customer listing"""

    def test_list_products_and_count(self, gateway, store_a, store_b):
        """Test product listing and row counts are per tenant"""
        _apply(gateway, sync_product, {"id": 1, "title": "A"}, store_a.id)
        _apply(gateway, sync_product, {"id": 2, "title": "B"}, store_a.id)
        _apply(gateway, sync_product, {"id": 1, "title": "C"}, store_b.id)

        with gateway.session() as session:
            products = list_products(session, store_a.id)
            assert count_rows(session, Product) == 3
            assert count_rows(session, Product, store_b.id) == 1

        assert sorted(p.title for p in products) == ["A", "B"]

    def test_list_customers_from_orders(self, gateway, store_a):
        """Test customers embedded in orders are listed"""
        _apply(gateway, sync_order, _order(1, "1.00", "2024-01-01T00:00:00Z", 7), store_a.id)

        with gateway.session() as session:
            customers = list_customers(session, store_a.id)
            assert count_rows(session, Order, store_a.id) == 1

        assert [c.external_customer_id for c in customers] == ["7"]
