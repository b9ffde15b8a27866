"""
Synchronization handlers - one per entity kind.

Each handler performs an idempotent upsert keyed by the platform id and the
owning tenant id, so redelivering the same event leaves exactly one row
with the values of the last delivery. Handlers run inside a transaction
opened by the caller and hold no references after returning.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Type, TypeVar
import uuid

from pydantic import BaseModel
from pydantic import ValidationError as PayloadValidationError
from sqlalchemy.orm import Session

from store_sync.database.gateway import PersistenceGateway
from store_sync.database.models import Customer, Order, Product
from store_sync.services.payloads import CustomerPayload, OrderPayload, ProductPayload
from store_sync.utils.exceptions import ProcessingError
from store_sync.utils.logger import get_logger

logger = get_logger(__name__)

P = TypeVar("P", bound=BaseModel)


@dataclass(frozen=True)
class SyncResult:
    """Internal ids written by one handler invocation."""

    entity: str
    external_id: str
    record_id: uuid.UUID
    customer_id: Optional[uuid.UUID] = None


Handler = Callable[[PersistenceGateway, Session, Dict[str, Any], uuid.UUID], SyncResult]


def _parse(schema: Type[P], payload: Dict[str, Any], entity: str) -> P:
    try:
        return schema.model_validate(payload)
    except PayloadValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ProcessingError(
            f"Invalid {entity} payload",
            details={"fields": fields},
        ) from e


def _upsert_customer(gateway: PersistenceGateway, session: Session,
                     customer: CustomerPayload, tenant_id: uuid.UUID) -> uuid.UUID:
    return gateway.upsert(
        session,
        Customer,
        key=("external_customer_id", "tenant_id"),
        values={
            "external_customer_id": customer.id,
            "tenant_id": tenant_id,
            "email": customer.email,
            "first_name": customer.first_name,
            "last_name": customer.last_name,
            "synced_at": datetime.now(timezone.utc),
        },
        update=("email", "first_name", "last_name", "synced_at"),
    )


def sync_product(gateway: PersistenceGateway, session: Session,
                 payload: Dict[str, Any], tenant_id: uuid.UUID) -> SyncResult:
    """Create or update a product; title and vendor are last-write-wins."""
    product = _parse(ProductPayload, payload, "product")

    record_id = gateway.upsert(
        session,
        Product,
        key=("external_product_id", "tenant_id"),
        values={
            "external_product_id": product.id,
            "tenant_id": tenant_id,
            "title": product.title,
            "vendor": product.vendor,
            "synced_at": datetime.now(timezone.utc),
        },
        update=("title", "vendor", "synced_at"),
    )

    logger.debug(f"Synced product {product.id} for tenant {tenant_id}")
    return SyncResult(entity="product", external_id=product.id, record_id=record_id)


def sync_customer(gateway: PersistenceGateway, session: Session,
                  payload: Dict[str, Any], tenant_id: uuid.UUID) -> SyncResult:
    """Create or update a customer."""
    customer = _parse(CustomerPayload, payload, "customer")
    record_id = _upsert_customer(gateway, session, customer, tenant_id)

    logger.debug(f"Synced customer {customer.id} for tenant {tenant_id}")
    return SyncResult(entity="customer", external_id=customer.id, record_id=record_id)


def sync_order(gateway: PersistenceGateway, session: Session,
               payload: Dict[str, Any], tenant_id: uuid.UUID) -> SyncResult:
    """
    Create or update an order and its embedded customer.

    The customer is written first to obtain its internal id. Both writes
    belong to the caller's transaction, so either both are committed or
    neither is. An order without an embedded customer has customer_id NULL.
    """
    order = _parse(OrderPayload, payload, "order")

    customer_id = None
    if order.customer is not None:
        customer_id = _upsert_customer(gateway, session, order.customer, tenant_id)

    record_id = gateway.upsert(
        session,
        Order,
        key=("external_order_id", "tenant_id"),
        values={
            "external_order_id": order.id,
            "tenant_id": tenant_id,
            "customer_id": customer_id,
            "total_price": order.current_total_price,
            "financial_status": order.financial_status,
            "created_at": order.created_at,
            "synced_at": datetime.now(timezone.utc),
        },
        update=("customer_id", "total_price", "financial_status", "created_at", "synced_at"),
    )

    logger.debug(f"Synced order {order.id} for tenant {tenant_id} (customer={customer_id})")
    return SyncResult(
        entity="order",
        external_id=order.id,
        record_id=record_id,
        customer_id=customer_id,
    )
