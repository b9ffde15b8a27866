"""
Sentry integration for error tracking.

Provides automatic error capture for the FastAPI app and SQLAlchemy, with
log records at ERROR and above sent as events.
"""

import logging
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from store_sync.utils.exceptions import AuthError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Rejections of bad webhooks are expected traffic, not faults
_IGNORED_EXCEPTIONS = (AuthError, NotFoundError, ValidationError)


def setup_sentry(
    dsn: Optional[str] = None,
    environment: str = "development",
    release: Optional[str] = None,
    traces_sample_rate: float = 0.1,
) -> bool:
    """
    Initialize Sentry SDK.

    Args:
        dsn: Sentry DSN; Sentry stays disabled when empty
        environment: Deployment environment (production, staging, development)
        release: Release version (e.g., "store-sync@1.0.0")
        traces_sample_rate: Percentage of transactions to trace (0.0-1.0)

    Returns:
        True if Sentry was initialized
    """
    if not dsn:
        logger.warning("Sentry DSN not configured, skipping Sentry initialization")
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        traces_sample_rate=traces_sample_rate,
        before_send=before_send_filter,
        attach_stacktrace=True,
        send_default_pii=False,  # webhook payloads carry customer emails
        max_breadcrumbs=50,
    )

    logger.info(
        f"Sentry initialized: environment={environment}, "
        f"release={release}, traces_sample_rate={traces_sample_rate}"
    )
    return True


def before_send_filter(event, hint):
    """
    Filter events before sending to Sentry.

    Returns:
        The event, or None to drop it
    """
    if "exc_info" in hint:
        exc_type, exc_value, tb = hint["exc_info"]
        if isinstance(exc_value, _IGNORED_EXCEPTIONS):
            return None

    return event
