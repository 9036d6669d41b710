"""
Webhook signature verification.

The gateway signs the raw request body with HMAC-SHA512 using the shared
secret and sends the hex digest in a header. Verification must run on the
exact bytes received, before any JSON parsing.
"""

import hashlib
import hmac


def _to_bytes(value):
    if isinstance(value, str):
        return value.encode('utf-8')
    return bytes(value)


def compute_signature(raw_body, secret) -> str:
    """Hex HMAC-SHA512 of `raw_body` keyed with `secret`."""
    return hmac.new(_to_bytes(secret), _to_bytes(raw_body), hashlib.sha512).hexdigest()


def verify_signature(raw_body, signature, secret) -> bool:
    if not signature or not secret:
        return False

    expected = compute_signature(raw_body, secret).encode('ascii')
    provided = _to_bytes(signature)
    if len(provided) != len(expected):
        return False
    return hmac.compare_digest(expected, provided)
