"""
Unit tests for webhook payload schemas
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from store_sync.services.payloads import CustomerPayload, OrderPayload, ProductPayload


class TestWebhookPayload:
    """Test shared id handling"""

    def test_numeric_id_coerced_to_string(self):
        """Test platform numeric ids are stored as strings"""
        assert ProductPayload.model_validate({"id": 555}).id == "555"

    def test_string_id_stripped(self):
        """Test surrounding whitespace is removed from ids"""
        assert ProductPayload.model_validate({"id": " 555 "}).id == "555"

    @pytest.mark.parametrize("payload", [{}, {"id": None}, {"id": ""}, {"id": "  "}, {"id": True}])
    def test_missing_or_invalid_id_rejected(self, payload):
        """Test payloads without a usable id are rejected"""
        with pytest.raises(ValidationError):
            ProductPayload.model_validate(payload)

    def test_unknown_fields_ignored(self):
        """Test extra platform fields are dropped"""
        product = ProductPayload.model_validate({"id": 1, "title": "T", "body_html": "<p>x</p>"})

        assert product.title == "T"
        assert not hasattr(product, "body_html")

    def test_optional_fields_default_to_none(self):
        """Test absent optional fields are None"""
        customer = CustomerPayload.model_validate({"id": 42})

        assert customer.email is None
        assert customer.first_name is None
        assert customer.last_name is None


class TestOrderPayload:
    """Test order schema"""

    def _order(self, **overrides):
        data = {"id": 900, "current_total_price": "19.99", "created_at": "2024-01-01T00:00:00Z"}
        data.update(overrides)
        return data

    def test_price_string_kept_exact(self):
        """Test a string price becomes an exact Decimal"""
        order = OrderPayload.model_validate(self._order(current_total_price="19.99"))

        assert order.current_total_price == Decimal("19.99")

    def test_price_decimal_kept_exact(self):
        """Test a Decimal price (from parse_float=Decimal) is preserved"""
        order = OrderPayload.model_validate(self._order(current_total_price=Decimal("0.10")))

        assert order.current_total_price == Decimal("0.10")

    def test_float_price_rejected(self):
        """Test binary floats are refused for money"""
        with pytest.raises(ValidationError):
            OrderPayload.model_validate(self._order(current_total_price=19.99))

    def test_missing_price_rejected(self):
        """Test an order without a total is rejected"""
        data = self._order()
        del data["current_total_price"]

        with pytest.raises(ValidationError):
            OrderPayload.model_validate(data)

    def test_missing_created_at_rejected(self):
        """Test an order without a creation time is rejected"""
        data = self._order()
        del data["created_at"]

        with pytest.raises(ValidationError):
            OrderPayload.model_validate(data)

    def test_created_at_normalized_to_utc(self):
        """Test offsets are converted to UTC"""
        order = OrderPayload.model_validate(self._order(created_at="2024-01-01T05:30:00+05:30"))

        assert order.created_at == datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)

    def test_naive_created_at_treated_as_utc(self):
        """Test timestamps without an offset are read as UTC"""
        order = OrderPayload.model_validate(self._order(created_at="2024-01-01T00:00:00"))

        assert order.created_at.tzinfo == timezone.utc

    def test_embedded_customer_parsed(self):
        """Test the embedded customer is validated with the customer schema"""
        order = OrderPayload.model_validate(self._order(customer={"id": 42, "email": "a@b.com"}))

        assert order.customer.id == "42"
        assert order.customer.email == "a@b.com"

    def test_null_customer_allowed(self):
        """Test guest orders carry no customer"""
        order = OrderPayload.model_validate(self._order(customer=None))

        assert order.customer is None
