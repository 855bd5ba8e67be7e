"""LINE webhook signature verification.

LINE signs each request with HMAC-SHA256 over the raw body, keyed by the
channel secret, and sends the base64 digest in the X-Line-Signature header.
The body must be the exact bytes received; re-serialized JSON will not match.
"""

import base64
import binascii
import hashlib
import hmac
import logging

from line_ingest.errors import AuthenticationFailure

logger = logging.getLogger(__name__)


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Base64 HMAC-SHA256 of raw_body, as LINE would send it."""
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(raw_body: bytes, secret: str, signature_header: str | None) -> bool:
    """Return True if signature_header is the valid signature of raw_body. Never raises."""
    if not secret:
        logger.warning("LINE_CHANNEL_SECRET not set, rejecting webhook")
        return False
    if not signature_header:
        return False

    try:
        provided = base64.b64decode(signature_header, validate=True)
    except (binascii.Error, ValueError):
        return False

    expected = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    return hmac.compare_digest(expected, provided)


def require_valid_signature(raw_body: bytes, secret: str, signature_header: str | None) -> None:
    """Raise AuthenticationFailure unless the signature verifies."""
    if not verify_signature(raw_body, secret, signature_header):
        reason = "missing" if not signature_header else "invalid"
        raise AuthenticationFailure(f"LINE signature {reason}")
