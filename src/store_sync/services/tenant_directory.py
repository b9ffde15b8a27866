"""
Tenant directory - lookup of a tenant's identity and signing secret by
shop domain.

Tenants are only ever created through `upsert`, an explicit provisioning
action. Ingestion never creates one: accepting a secret for an unknown
domain on first contact would let anyone register themselves.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from store_sync.database.gateway import PersistenceGateway
from store_sync.database.models import Tenant
from store_sync.utils.encryption import EncryptionService
from store_sync.utils.exceptions import NotFoundError, ValidationError
from store_sync.utils.logger import get_logger

logger = get_logger(__name__)


def normalize_shop_domain(shop_domain: str) -> str:
    """Canonical form of a shop domain (trimmed, lower-case)."""
    return shop_domain.strip().lower()


@dataclass(frozen=True)
class ResolvedTenant:
    """Tenant identity plus its decrypted signing secret."""

    id: uuid.UUID
    shop_domain: str
    webhook_secret: Optional[str] = field(default=None, repr=False)


class TenantDirectory:
    """Resolves and provisions tenants."""

    def __init__(self, gateway: PersistenceGateway, encryption: EncryptionService):
        self.gateway = gateway
        self.encryption = encryption

    def resolve(self, session: Session, shop_domain: str) -> ResolvedTenant:
        """
        Look up an active tenant by shop domain.

        Args:
            session: Request session
            shop_domain: Public identifier from the webhook headers

        Returns:
            ResolvedTenant with the decrypted secret, or None as secret when
            the tenant has none configured

        Raises:
            NotFoundError: No active tenant for this domain
            ConfigurationError: Stored secret cannot be decrypted
        """
        domain = normalize_shop_domain(shop_domain)
        tenant = session.scalar(
            select(Tenant).where(Tenant.shop_domain == domain, Tenant.is_active.is_(True))
        )

        if tenant is None:
            raise NotFoundError("Tenant not found", {"shop_domain": domain})

        secret = None
        if tenant.has_webhook_secret:
            secret = self.encryption.decrypt(tenant.webhook_secret_encrypted)

        return ResolvedTenant(id=tenant.id, shop_domain=tenant.shop_domain, webhook_secret=secret)

    def upsert(self, session: Session, shop_domain: str, secret: str) -> uuid.UUID:
        """
        Provision a tenant or rotate its webhook secret.

        The caller owns the transaction.

        Returns:
            Internal tenant id
        """
        domain = normalize_shop_domain(shop_domain)
        if not domain:
            raise ValidationError("shop_domain is required", field="shop_domain")
        if not secret or not secret.strip():
            raise ValidationError("webhook secret is required", field="secret")

        tenant_id = self.gateway.upsert(
            session,
            Tenant,
            key=("shop_domain",),
            values={
                "shop_domain": domain,
                "webhook_secret_encrypted": self.encryption.encrypt(secret),
                "is_active": True,
                "updated_at": datetime.now(timezone.utc),
            },
            update=("webhook_secret_encrypted", "is_active", "updated_at"),
        )
        logger.info(f"Provisioned webhook secret for tenant {domain} ({tenant_id})")
        return tenant_id
