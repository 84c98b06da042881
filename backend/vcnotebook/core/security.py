"""Security utilities: webhook signature verification."""

import base64
import binascii
import hashlib
import hmac
import time
from typing import Optional

from vcnotebook.core.config import settings

SECRET_PREFIX = "whsec_"
SIGNATURE_VERSION = "v1"


class WebhookVerificationError(Exception):
    """Raised when a webhook signature cannot be verified."""


def _secret_bytes(secret: str) -> bytes:
    """Decode a Standard Webhooks secret (`whsec_<base64>`), falling back to raw bytes."""
    if secret.startswith(SECRET_PREFIX):
        secret = secret[len(SECRET_PREFIX):]
        try:
            return base64.b64decode(secret)
        except (binascii.Error, ValueError) as e:
            raise WebhookVerificationError("Malformed webhook secret") from e
    return secret.encode("utf-8")


def sign_webhook(secret: str, msg_id: str, timestamp: str, body: bytes) -> str:
    """Compute the `v1,<base64>` signature for a webhook delivery."""
    signed_content = f"{msg_id}.{timestamp}.".encode("utf-8") + body
    digest = hmac.new(_secret_bytes(secret), signed_content, hashlib.sha256).digest()
    return f"{SIGNATURE_VERSION},{base64.b64encode(digest).decode('ascii')}"


def verify_webhook(
    body: bytes,
    msg_id: Optional[str],
    timestamp: Optional[str],
    signature_header: Optional[str],
    secret: Optional[str] = None,
    tolerance: Optional[int] = None,
    now: Optional[float] = None,
) -> None:
    """Verify a Standard Webhooks signature.

    The signature header may hold several space-separated `v1,<sig>` entries
    (secret rotation); any one of them matching is enough.
    """
    secret = secret or settings.DODO_WEBHOOK_SECRET
    if not secret:
        raise WebhookVerificationError("Webhook secret not configured")
    if not (msg_id and timestamp and signature_header):
        raise WebhookVerificationError("Missing webhook signature headers")

    try:
        sent_at = int(timestamp)
    except ValueError as e:
        raise WebhookVerificationError("Invalid webhook timestamp") from e

    tolerance = settings.WEBHOOK_TOLERANCE_SECONDS if tolerance is None else tolerance
    current = time.time() if now is None else now
    if abs(current - sent_at) > tolerance:
        raise WebhookVerificationError("Webhook timestamp outside tolerance")

    expected = sign_webhook(secret, msg_id, timestamp, body).split(",", 1)[1]
    for candidate in signature_header.split():
        version, _, value = candidate.partition(",")
        if version != SIGNATURE_VERSION:
            continue
        if hmac.compare_digest(expected, value):
            return

    raise WebhookVerificationError("Webhook signature mismatch")
