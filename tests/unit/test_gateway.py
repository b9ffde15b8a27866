"""
Unit tests for the persistence gateway
"""
import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from sqlalchemy.exc import (
    DataError,
    IntegrityError,
    OperationalError,
    ProgrammingError,
    TimeoutError as PoolTimeoutError,
)

from store_sync.database.gateway import PersistenceGateway, classify_error, translate_error
from store_sync.database.models import Product, Tenant
from store_sync.utils.exceptions import (
    ConfigurationError,
    ErrorKind,
    StoreError,
    TransientStoreError,
)


def _tenant_id(gateway) -> uuid.UUID:
    with gateway.session() as session:
        with gateway.transaction(session):
            return gateway.upsert(
                session, Tenant, key=("shop_domain",),
                values={"shop_domain": "store-a.myshopify.com", "is_active": True},
                update=("is_active",),
            )


def _product_values(tenant_id, title):
    return {
        "external_product_id": "555",
        "tenant_id": tenant_id,
        "title": title,
        "vendor": "Acme",
        "synced_at": datetime.now(timezone.utc),
    }


class TestClassifyError:
    """Test mapping of driver faults onto error kinds"""

    def test_operational_error_is_transient(self):
        """Test connection and lock faults are transient"""
        exc = OperationalError("SELECT 1", {}, Exception("connection refused"))

        assert classify_error(exc) is ErrorKind.TRANSIENT

    def test_pool_timeout_is_transient(self):
        """Test pool exhaustion is transient"""
        assert classify_error(PoolTimeoutError("QueuePool limit reached")) is ErrorKind.TRANSIENT

    def test_integrity_error_is_constraint(self):
        """Test constraint violations are not transient"""
        exc = IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))

        assert classify_error(exc) is ErrorKind.CONSTRAINT

    def test_data_error_is_invalid_data(self):
        """Test value faults are classified as invalid data"""
        exc = DataError("INSERT", {}, Exception("numeric field overflow"))

        assert classify_error(exc) is ErrorKind.INVALID_DATA

    def test_other_dbapi_error_is_invalid_data(self):
        """Test other statement faults are not retried"""
        exc = ProgrammingError("SELECT", {}, Exception("no such table"))

        assert classify_error(exc) is ErrorKind.INVALID_DATA

    def test_translate_transient(self):
        """Test transient faults become TransientStoreError"""
        exc = OperationalError("SELECT 1", {}, Exception("server closed the connection"))
        error = translate_error(exc, "upsert", "orders")

        assert isinstance(error, TransientStoreError)
        assert error.is_transient
        assert error.details == {"kind": "transient", "operation": "upsert", "table": "orders"}

    def test_translate_constraint(self):
        """Test constraint faults become a non-transient StoreError"""
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        error = translate_error(exc, "upsert", "orders")

        assert type(error) is StoreError
        assert error.kind is ErrorKind.CONSTRAINT
        assert not error.is_transient


class TestPersistenceGateway:
    """Test gateway scopes and writes"""

    def test_unsupported_dialect_rejected(self):
        """Test a dialect without atomic upsert cannot be used"""
        engine = MagicMock()
        engine.dialect.name = "mysql"

        with pytest.raises(ConfigurationError):
            PersistenceGateway(engine)

    def test_ping(self, gateway):
        """Test ping succeeds against a live database"""
        assert gateway.ping() is True

    def test_upsert_inserts_then_updates_same_row(self, gateway, fetch_all):
        """Test a second upsert with the same key updates in place"""
        tenant_id = _tenant_id(gateway)

        with gateway.session() as session:
            with gateway.transaction(session):
                first = gateway.upsert(session, Product, ("external_product_id", "tenant_id"),
                                       _product_values(tenant_id, "Widget"), ("title", "synced_at"))
            with gateway.transaction(session):
                second = gateway.upsert(session, Product, ("external_product_id", "tenant_id"),
                                        _product_values(tenant_id, "Widget v2"), ("title", "synced_at"))

        products = fetch_all(Product)
        assert first == second
        assert len(products) == 1
        assert products[0].title == "Widget v2"

    def test_transaction_rolls_back_on_error(self, gateway, fetch_all):
        """Test work inside a failed transaction is discarded"""
        tenant_id = _tenant_id(gateway)

        with pytest.raises(RuntimeError):
            with gateway.session() as session:
                with gateway.transaction(session):
                    gateway.upsert(session, Product, ("external_product_id", "tenant_id"),
                                   _product_values(tenant_id, "Widget"), ("title",))
                    raise RuntimeError("boom")

        assert fetch_all(Product) == []

    def test_constraint_violation_translated(self, gateway, fetch_all):
        """Test a foreign key violation surfaces as a constraint StoreError"""
        with pytest.raises(StoreError) as exc_info:
            with gateway.session() as session:
                with gateway.transaction(session):
                    gateway.upsert(session, Product, ("external_product_id", "tenant_id"),
                                   _product_values(uuid.uuid4(), "Orphan"), ("title",))

        assert exc_info.value.kind is ErrorKind.CONSTRAINT
        assert exc_info.value.table == "products"
        assert fetch_all(Product) == []
