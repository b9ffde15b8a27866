"""
API route modules.
"""

from . import health, webhooks

__all__ = ["health", "webhooks"]
