"""
Webhook ingestion - drives one webhook delivery end to end.

Order of checks:
1. Required headers and a non-empty body are present
2. Tenant is resolved from the shop domain
3. Signature is verified over the raw body (before any parsing)
4. Body is parsed as a JSON object
5. Topic is routed to its handler, which runs in one transaction

Every failure is raised as a StoreSyncError subclass; the HTTP layer owns
the mapping to status codes.
"""

import enum
import json
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional
import uuid

from sqlalchemy.orm import Session

from store_sync.database.gateway import PersistenceGateway
from store_sync.monitoring import PrometheusMetrics, get_metrics
from store_sync.services.router import Topic, get_handler, resolve_topic
from store_sync.services.signature import compute_signature, verify_signature
from store_sync.services.sync_handlers import SyncResult
from store_sync.services.tenant_directory import ResolvedTenant, TenantDirectory
from store_sync.utils.exceptions import (
    AuthError,
    ConfigurationError,
    NotFoundError,
    ProcessingError,
    StoreError,
    StoreSyncError,
    TransientStoreError,
    ValidationError,
)
from store_sync.utils.logger import get_logger

logger = get_logger(__name__)

# Keyed work for requests that never reach a real secret
_PLACEHOLDER_SECRET = b"store-sync-placeholder-secret"


class IngestOutcome(str, enum.Enum):
    """Successful ingestion outcomes."""
    PROCESSED = "processed"
    IGNORED = "ignored"


@dataclass(frozen=True)
class IngestResult:
    """Result of a successfully acknowledged webhook."""

    outcome: IngestOutcome
    topic: Topic
    tenant_id: uuid.UUID
    sync: Optional[SyncResult] = None


class WebhookIngestor:
    """
    Stateless orchestrator for webhook deliveries.

    Safe to share between concurrent requests: the only shared resource is
    the gateway's connection pool, and each call works in its own session.
    """

    def __init__(self, gateway: PersistenceGateway, directory: TenantDirectory,
                 metrics: Optional[PrometheusMetrics] = None):
        self.gateway = gateway
        self.directory = directory
        self.metrics = metrics or get_metrics()

    def ingest(self, body: bytes, signature: Optional[str],
               shop_domain: Optional[str], topic: Optional[str]) -> IngestResult:
        """
        Authenticate and apply one webhook.

        Args:
            body: Raw request body exactly as received
            signature: X-Shopify-Hmac-Sha256 header
            shop_domain: X-Shopify-Shop-Domain header
            topic: X-Shopify-Topic header

        Returns:
            IngestResult for processed or ignored events

        Raises:
            ValidationError: Missing header/body or malformed JSON
            NotFoundError: Unknown tenant
            ConfigurationError: Tenant has no usable secret
            AuthError: Signature mismatch
            ProcessingError: Handler could not apply the event
            TransientStoreError: Storage unavailable
        """
        start_time = time.time()
        topic_label = resolve_topic(topic or "").value

        try:
            result = self._ingest(body, signature, shop_domain, topic)
        except StoreSyncError as e:
            status = type(e).__name__
            self._audit(shop_domain, topic, status, start_time, topic_label)
            if isinstance(e, AuthError):
                logger.warning(f"Webhook signature mismatch for shop {shop_domain}")
            raise

        self._audit(shop_domain, topic, result.outcome.value, start_time, topic_label)
        return result

    def _ingest(self, body: bytes, signature: Optional[str],
                shop_domain: Optional[str], topic: Optional[str]) -> IngestResult:
        self._require_inputs(body, signature, shop_domain, topic)

        with self.gateway.session() as session:
            tenant = self._authenticate(session, body, signature, shop_domain)
            payload = self._parse_body(body)

            resolved = resolve_topic(topic)
            handler = get_handler(resolved)
            if handler is None:
                logger.info(f"Unsupported webhook topic '{topic}' for {tenant.shop_domain} - acknowledged")
                return IngestResult(IngestOutcome.IGNORED, resolved, tenant.id)

            try:
                with self.gateway.transaction(session):
                    sync = handler(self.gateway, session, payload, tenant.id)
            except (ProcessingError, TransientStoreError):
                raise
            except StoreError as e:
                raise ProcessingError(
                    "Storage rejected webhook data", topic=resolved.value, details=e.details
                ) from e
            except Exception as e:
                logger.error(f"Handler for {resolved.value} failed: {e}", exc_info=True)
                raise ProcessingError("Error processing webhook data", topic=resolved.value) from e

        return IngestResult(IngestOutcome.PROCESSED, resolved, tenant.id, sync)

    @staticmethod
    def _require_inputs(body: bytes, signature: Optional[str],
                        shop_domain: Optional[str], topic: Optional[str]) -> None:
        required = {
            "X-Shopify-Hmac-Sha256": signature,
            "X-Shopify-Shop-Domain": shop_domain,
            "X-Shopify-Topic": topic,
        }
        for header, value in required.items():
            if not value or not value.strip():
                raise ValidationError(f"Missing {header} header", field=header)

        if not body:
            raise ValidationError("Missing request body", field="body")

    def _authenticate(self, session: Session, body: bytes, signature: str,
                      shop_domain: str) -> ResolvedTenant:
        try:
            tenant = self.directory.resolve(session, shop_domain)
        except (NotFoundError, ConfigurationError):
            compute_signature(body, _PLACEHOLDER_SECRET)
            raise

        if not tenant.webhook_secret:
            compute_signature(body, _PLACEHOLDER_SECRET)
            raise ConfigurationError(
                "Webhook secret not configured for tenant",
                {"shop_domain": tenant.shop_domain},
            )

        if not verify_signature(body, signature, tenant.webhook_secret):
            raise AuthError("Webhook signature mismatch", {"shop_domain": tenant.shop_domain})

        return tenant

    @staticmethod
    def _parse_body(body: bytes) -> Dict[str, Any]:
        try:
            payload = json.loads(body, parse_float=Decimal)
        except ValueError as e:
            raise ValidationError("Malformed JSON body", field="body") from e

        if not isinstance(payload, dict):
            raise ValidationError("Webhook body must be a JSON object", field="body")
        return payload

    def _audit(self, shop_domain: Optional[str], topic: Optional[str], status: str,
               start_time: float, topic_label: str) -> None:
        duration = time.time() - start_time
        logger.info(
            f"WEBHOOK_AUDIT shop={shop_domain} topic={topic} status={status} "
            f"duration={duration * 1000:.1f}ms"
        )
        self.metrics.track_webhook(topic_label, status, duration)
