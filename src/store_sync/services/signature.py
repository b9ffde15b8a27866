"""
Webhook signature verification - constant-time HMAC-SHA256.

The platform signs the raw request body with the tenant's shared secret
and sends the base64-encoded digest in the X-Shopify-Hmac-Sha256 header.

Security contract:
- The digest is computed over the exact bytes received, never over a
  parsed or re-serialized body
- Comparison uses hmac.compare_digest() (constant time)
- Missing signature or secret -> verification fails (fail-closed)
"""

import base64
import hashlib
import hmac
from typing import Optional, Union


def compute_signature(body: bytes, secret: Union[str, bytes]) -> str:
    """
    Compute the base64 HMAC-SHA256 of a body.

    Args:
        body: Raw request body bytes
        secret: Tenant webhook secret

    Returns:
        Base64-encoded digest, as sent by the platform
    """
    key = secret.encode("utf-8") if isinstance(secret, str) else secret
    digest = hmac.new(key, body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(body: bytes, presented: Optional[str],
                     secret: Optional[Union[str, bytes]]) -> bool:
    """
    Verify a presented webhook signature.

    Args:
        body: Raw request body bytes
        presented: Value of the signature header
        secret: Tenant webhook secret

    Returns:
        True if the signature is valid
    """
    if not presented or not secret:
        return False

    expected = compute_signature(body, secret)
    return hmac.compare_digest(
        expected.encode("ascii"),
        presented.strip().encode("utf-8"),
    )
