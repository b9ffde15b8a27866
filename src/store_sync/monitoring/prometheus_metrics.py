"""
Prometheus metrics for monitoring webhook ingestion.

Metrics exported:
- store_sync_requests_total: Total HTTP requests
- store_sync_request_duration_seconds: Request duration histogram
- store_sync_webhooks_total: Webhooks by topic and outcome
- store_sync_webhook_duration_seconds: Webhook ingestion duration histogram
- store_sync_errors_total: Unhandled errors
"""

import re
import time
import logging
from typing import Optional

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    CollectorRegistry,
)
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

_UUID_RE = re.compile(
    r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}',
    re.IGNORECASE,
)


class PrometheusMetrics:
    """
    Prometheus metrics collector for Store Sync.

    Webhook outcomes are labelled separately from HTTP status codes so that
    acknowledged-but-ignored topics can be told apart from processed ones.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize Prometheus metrics.

        Args:
            registry: Prometheus registry (defaults to the global registry)
        """
        self.registry = registry or REGISTRY

        self.requests_total = Counter(
            "store_sync_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry,
        )

        self.request_duration = Histogram(
            "store_sync_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
            registry=self.registry,
        )

        self.webhooks_total = Counter(
            "store_sync_webhooks_total",
            "Webhooks received by topic and outcome",
            ["topic", "outcome"],
            registry=self.registry,
        )

        self.webhook_duration = Histogram(
            "store_sync_webhook_duration_seconds",
            "Webhook ingestion duration in seconds",
            ["topic"],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
            registry=self.registry,
        )

        self.errors_total = Counter(
            "store_sync_errors_total",
            "Total unhandled errors",
            ["error_type", "endpoint"],
            registry=self.registry,
        )

        logger.info("Prometheus metrics initialized")

    def track_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Track HTTP request metrics."""
        self.requests_total.labels(
            method=method,
            endpoint=endpoint,
            status_code=status_code,
        ).inc()

        self.request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def track_webhook(self, topic: str, outcome: str, duration: float):
        """
        Track one webhook delivery.

        Args:
            topic: Resolved topic value ("ignored" for unsupported topics)
            outcome: "processed", "ignored" or the error class name
            duration: Ingestion duration in seconds
        """
        self.webhooks_total.labels(topic=topic, outcome=outcome).inc()
        self.webhook_duration.labels(topic=topic).observe(duration)

    def track_error(self, error_type: str, endpoint: str):
        """Track an unhandled error."""
        self.errors_total.labels(error_type=error_type, endpoint=endpoint).inc()


# Global metrics instance
_metrics: Optional[PrometheusMetrics] = None


def get_metrics() -> PrometheusMetrics:
    """Get global metrics instance."""
    global _metrics
    if _metrics is None:
        _metrics = PrometheusMetrics()
    return _metrics


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for automatic request metrics collection.
    """

    def __init__(self, app):
        super().__init__(app)
        self.metrics = get_metrics()

    async def dispatch(self, request: Request, call_next):
        """Process request and track metrics."""
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.time()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            self.metrics.track_error(type(e).__name__, request.url.path)
            raise
        finally:
            self.metrics.track_request(
                method=request.method,
                endpoint=self._normalize_endpoint(request.url.path),
                status_code=status_code,
                duration=time.time() - start_time,
            )

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Replace UUIDs and numeric ids with placeholders to bound label cardinality."""
        path = _UUID_RE.sub('{uuid}', path)
        return re.sub(r'/\d+', '/{id}', path)
