"""
Pydantic schemas for webhook payloads.

Only the fields the synchronization handlers store are declared; the
platform sends many more and they are ignored. Numeric platform ids are
coerced to strings, and money is kept as Decimal.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WebhookPayload(BaseModel):
    """Base schema for webhook resources."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str = Field(..., min_length=1)

    @field_validator("id", mode="before")
    @classmethod
    def reject_non_scalar_id(cls, v):
        if isinstance(v, bool) or v is None:
            raise ValueError("id must be a number or string")
        return v

    @field_validator("id")
    @classmethod
    def strip_id(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("id must not be blank")
        return v


class ProductPayload(WebhookPayload):
    """products/* payload."""

    title: Optional[str] = None
    vendor: Optional[str] = None


class CustomerPayload(WebhookPayload):
    """customers/* payload, also embedded in orders."""

    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class OrderPayload(WebhookPayload):
    """orders/* payload."""

    current_total_price: Decimal
    financial_status: Optional[str] = None
    created_at: datetime
    customer: Optional[CustomerPayload] = None

    @field_validator("current_total_price", mode="before")
    @classmethod
    def reject_float(cls, v):
        # Bodies are parsed with parse_float=Decimal; floats have lost precision
        if isinstance(v, float):
            raise ValueError("monetary amounts must not be binary floats")
        return v

    @field_validator("created_at")
    @classmethod
    def to_utc(cls, v):
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
