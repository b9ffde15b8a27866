"""
Store Sync

Multi-tenant webhook ingestion service. Authenticates commerce events sent
by the store platform on behalf of each tenant and synchronizes products,
customers and orders into per-tenant records.
"""

__version__ = "1.0.0"
__author__ = "Store Sync Team"
