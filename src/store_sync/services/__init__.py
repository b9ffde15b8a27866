"""
Ingestion services: tenant directory, signature verification, topic
routing, synchronization handlers and the ingestion orchestrator.
"""

from .ingestion import IngestOutcome, IngestResult, WebhookIngestor
from .router import Topic, get_handler, resolve_topic
from .signature import compute_signature, verify_signature
from .tenant_directory import ResolvedTenant, TenantDirectory

__all__ = [
    "IngestOutcome",
    "IngestResult",
    "WebhookIngestor",
    "Topic",
    "get_handler",
    "resolve_topic",
    "compute_signature",
    "verify_signature",
    "ResolvedTenant",
    "TenantDirectory",
]
