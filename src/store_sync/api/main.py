"""
FastAPI application entry point for multi-tenant Store Sync.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from store_sync import __version__
from store_sync.api.middleware.error_handler import ErrorHandlerMiddleware
from store_sync.api.routes import health, webhooks
from store_sync.database.gateway import PersistenceGateway
from store_sync.monitoring import MetricsMiddleware, get_metrics, setup_sentry
from store_sync.services.ingestion import WebhookIngestor
from store_sync.services.tenant_directory import TenantDirectory
from store_sync.utils.config import get_config
from store_sync.utils.encryption import EncryptionService
from store_sync.utils.logger import get_logger

logger = get_logger(__name__)


def create_app(
    gateway: Optional[PersistenceGateway] = None,
    encryption: Optional[EncryptionService] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        gateway: Persistence gateway to use. When omitted one is created from
            configuration at startup and disposed at shutdown.
        encryption: Encryption service for tenant secrets (defaults to the
            configured ENCRYPTION_KEY)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("🚀 Starting Store Sync API...")
        config = get_config()

        setup_sentry(
            dsn=config.sentry_dsn,
            environment=config.environment,
            release=f"store-sync@{__version__}",
            traces_sample_rate=config.sentry_traces_sample_rate,
        )

        owns_gateway = gateway is None
        app.state.gateway = gateway or PersistenceGateway.from_config(config)

        try:
            directory = TenantDirectory(
                app.state.gateway,
                encryption or EncryptionService(config.encryption_key),
            )
            app.state.ingestor = WebhookIngestor(app.state.gateway, directory, get_metrics())
            logger.info("✅ API started successfully")

            yield
        finally:
            logger.info("🛑 Shutting down Store Sync API...")
            if owns_gateway:
                app.state.gateway.dispose()

    app = FastAPI(
        title="Store Sync API",
        description="Multi-tenant webhook ingestion for store platforms",
        version=__version__,
        lifespan=lifespan,
    )

    # Custom middlewares (order matters!)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(MetricsMiddleware)

    app.include_router(webhooks.router, tags=["Webhooks"])
    app.include_router(health.router, prefix="/api/v1/health", tags=["Health"])

    @app.get("/metrics", tags=["Monitoring"])
    async def metrics():
        """Prometheus metrics endpoint."""
        return PlainTextResponse(
            generate_latest(get_metrics().registry),
            media_type=CONTENT_TYPE_LATEST,
        )

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "name": "Store Sync API",
            "version": __version__,
            "status": "operational",
            "webhook_endpoint": "/webhooks",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(
        "store_sync.api.main:app",
        host=config.api_host,
        port=config.api_port,
    )
