"""
Storage layer: models, engine construction, persistence gateway and
read-only queries.
"""

from .gateway import PersistenceGateway, classify_error, translate_error
from .connection import create_db_engine

__all__ = [
    "PersistenceGateway",
    "classify_error",
    "translate_error",
    "create_db_engine",
]
