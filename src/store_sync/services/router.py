"""
Event router - maps a webhook topic to its synchronization handler.

Topics form a closed set. Anything the platform sends outside it resolves
to Topic.IGNORED, which is acknowledged without processing: the platform
redelivers on any non-success response, so rejecting topics we do not
handle would make it retry them forever.
"""

import enum
from typing import Dict, Optional

from store_sync.services.sync_handlers import Handler, sync_customer, sync_order, sync_product


class Topic(str, enum.Enum):
    """Supported webhook topics."""
    PRODUCTS_CREATE = "products/create"
    PRODUCTS_UPDATE = "products/update"
    CUSTOMERS_CREATE = "customers/create"
    CUSTOMERS_UPDATE = "customers/update"
    ORDERS_CREATE = "orders/create"
    ORDERS_UPDATED = "orders/updated"
    ORDERS_PAID = "orders/paid"
    ORDERS_CANCELLED = "orders/cancelled"
    IGNORED = "ignored"


_HANDLERS: Dict[Topic, Handler] = {
    Topic.PRODUCTS_CREATE: sync_product,
    Topic.PRODUCTS_UPDATE: sync_product,
    Topic.CUSTOMERS_CREATE: sync_customer,
    Topic.CUSTOMERS_UPDATE: sync_customer,
    Topic.ORDERS_CREATE: sync_order,
    Topic.ORDERS_UPDATED: sync_order,
    Topic.ORDERS_PAID: sync_order,
    Topic.ORDERS_CANCELLED: sync_order,
}

_unmapped = set(Topic) - set(_HANDLERS) - {Topic.IGNORED}
if _unmapped:
    raise RuntimeError(f"Topics without a handler: {sorted(t.value for t in _unmapped)}")


def resolve_topic(raw_topic: str) -> Topic:
    """
    Resolve a topic header value.

    Returns:
        The matching Topic, or Topic.IGNORED for anything unsupported
        (including the literal "ignored")
    """
    value = raw_topic.strip().lower()
    for topic in Topic:
        if topic is not Topic.IGNORED and topic.value == value:
            return topic
    return Topic.IGNORED


def get_handler(topic: Topic) -> Optional[Handler]:
    """Handler for a topic, None for Topic.IGNORED."""
    if topic is Topic.IGNORED:
        return None
    return _HANDLERS[topic]
