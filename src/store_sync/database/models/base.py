"""
Declarative base shared by all Store Sync models.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
