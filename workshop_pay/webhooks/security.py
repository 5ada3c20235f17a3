"""Webhook signature verification.

The provider signs the exact request body bytes with HMAC-SHA256 using the
shared webhook secret and sends the hex digest in ``X-Razorpay-Signature``.
"""

import hashlib
import hmac
import secrets


SIGNATURE_HEADER = "X-Razorpay-Signature"


def compute_signature(secret: str, body: bytes) -> str:
    """Compute the hex HMAC-SHA256 digest of ``body``.

    Args:
        secret: Shared webhook secret
        body: Raw request body, exactly as received

    Returns:
        Lowercase hex digest
    """
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, body: bytes, signature: str | None) -> bool:
    """Check a delivery's signature against the expected digest.

    Uses timing-safe comparison of the header exactly as received. A missing
    signature never matches. Header values arrive latin-1 decoded, so they are
    compared as bytes and any non-hex character simply fails to match.
    """
    if not signature:
        return False
    expected = compute_signature(secret, body).encode()
    return secrets.compare_digest(expected, signature.encode("latin-1", "replace"))
