"""
Test configuration and fixtures for Store Sync
"""
import json
from typing import Callable, Dict, Generator, List

import pytest
from cryptography.fernet import Fernet
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry
from sqlalchemy import select

from store_sync.api.main import create_app
from store_sync.database.connection import create_db_engine
from store_sync.database.gateway import PersistenceGateway
from store_sync.monitoring import PrometheusMetrics
from store_sync.services.ingestion import WebhookIngestor
from store_sync.services.signature import compute_signature
from store_sync.services.tenant_directory import ResolvedTenant, TenantDirectory
from store_sync.utils.encryption import EncryptionService


# =============================================================================
# Test Database Setup
# =============================================================================

@pytest.fixture(scope="function")
def gateway() -> Generator[PersistenceGateway, None, None]:
    """In-memory SQLite gateway with all tables created"""
    gw = PersistenceGateway(create_db_engine("sqlite:///:memory:"))
    gw.create_all()
    yield gw
    gw.dispose()


@pytest.fixture(scope="function")
def file_gateway(tmp_path) -> Generator[PersistenceGateway, None, None]:
    """File-backed SQLite gateway, shared safely between threads"""
    gw = PersistenceGateway(create_db_engine(f"sqlite:///{tmp_path / 'store_sync.db'}"))
    gw.create_all()
    yield gw
    gw.dispose()


@pytest.fixture
def fetch_all(gateway) -> Callable[..., List]:
    """Read every row of a model in a fresh session"""
    def _fetch(model) -> List:
        with gateway.session() as session:
            return list(session.scalars(select(model)))

    return _fetch


# =============================================================================
# Tenants
# =============================================================================

@pytest.fixture(scope="session")
def encryption() -> EncryptionService:
    """Encryption service with a throw-away key"""
    return EncryptionService(Fernet.generate_key().decode())


@pytest.fixture
def directory(gateway, encryption) -> TenantDirectory:
    return TenantDirectory(gateway, encryption)


def _provision_tenant(gateway: PersistenceGateway, directory: TenantDirectory,
                     shop_domain: str, secret: str) -> ResolvedTenant:
    """Register a tenant the way operators do and resolve it back"""
    with gateway.session() as session:
        with gateway.transaction(session):
            directory.upsert(session, shop_domain, secret)
        return directory.resolve(session, shop_domain)


@pytest.fixture
def provision(gateway, directory) -> Callable[[str, str], ResolvedTenant]:
    """Provision or rotate a tenant secret"""
    def _provision(shop_domain: str, secret: str) -> ResolvedTenant:
        return _provision_tenant(gateway, directory, shop_domain, secret)

    return _provision


@pytest.fixture
def store_a(gateway, directory) -> ResolvedTenant:
    """Tenant store-a with secret s1"""
    return _provision_tenant(gateway, directory, "store-a.myshopify.com", "s1")


@pytest.fixture
def store_b(gateway, directory) -> ResolvedTenant:
    """Tenant store-b whose secret differs from store-a's only by length"""
    return _provision_tenant(gateway, directory, "store-b.myshopify.com", "s1x")


# =============================================================================
# Ingestion
# =============================================================================

@pytest.fixture
def metrics() -> PrometheusMetrics:
    """Metrics on a private registry"""
    return PrometheusMetrics(CollectorRegistry())


@pytest.fixture
def ingestor(gateway, directory, metrics) -> WebhookIngestor:
    return WebhookIngestor(gateway, directory, metrics)


@pytest.fixture
def signed() -> Callable[..., Dict]:
    """
    Build ingest() keyword arguments for a correctly signed delivery.

    Usage:
        ingestor.ingest(**signed(payload, "s1", "store-a.myshopify.com", "products/create"))
    """
    def _signed(payload, secret: str, shop_domain: str, topic: str) -> Dict:
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        return {
            "body": body,
            "signature": compute_signature(body, secret),
            "shop_domain": shop_domain,
            "topic": topic,
        }

    return _signed


# =============================================================================
# FastAPI Test Client
# =============================================================================

@pytest.fixture(scope="function")
def client(gateway, encryption) -> Generator[TestClient, None, None]:
    """FastAPI test client running the full lifespan against the test gateway"""
    app = create_app(gateway=gateway, encryption=encryption)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def webhook_headers() -> Callable[..., Dict[str, str]]:
    """Headers for POST /webhooks signed with the given secret"""
    def _headers(body: bytes, secret: str, shop_domain: str, topic: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Shopify-Hmac-Sha256": compute_signature(body, secret),
            "X-Shopify-Shop-Domain": shop_domain,
            "X-Shopify-Topic": topic,
        }

    return _headers


# =============================================================================
# Test Data Fixtures
# =============================================================================

@pytest.fixture
def product_payload() -> Dict:
    return {"id": 555, "title": "Widget", "vendor": "Acme"}


@pytest.fixture
def order_payload() -> Dict:
    return {
        "id": 900,
        "current_total_price": "19.99",
        "financial_status": "paid",
        "created_at": "2024-01-01T00:00:00Z",
        "customer": {
            "id": 42,
            "email": "a@b.com",
            "first_name": "A",
            "last_name": "B",
        },
    }
