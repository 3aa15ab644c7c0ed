"""
Messenger Webhook Verification

SECURITY BOUNDARY - subscription handshake and optional payload signature.
No side effects. No state.
"""

import hashlib
import hmac
from typing import Optional


SUBSCRIBE_MODE = "subscribe"
SIGNATURE_HEADER = "X-Hub-Signature-256"


class WebhookVerificationError(Exception):
    """Subscription handshake rejected."""
    pass


class SignatureVerificationError(Exception):
    """Payload signature missing or invalid."""
    pass


def verify_webhook_challenge(
    hub_mode: Optional[str],
    hub_verify_token: Optional[str],
    hub_challenge: Optional[str],
    expected_token: str,
) -> str:
    """
    Verify the webhook subscription challenge from Meta.

    Meta calls GET /webhook with:
    - hub.mode=subscribe
    - hub.verify_token=configured_token
    - hub.challenge=random_string

    Args:
        hub_mode: Should be "subscribe"
        hub_verify_token: Token to compare against `expected_token`
        hub_challenge: Value to echo back
        expected_token: The configured verify secret

    Returns:
        The challenge string to echo back

    Raises:
        WebhookVerificationError: Wrong mode or token
    """

    if hub_mode != SUBSCRIBE_MODE:
        raise WebhookVerificationError(f"Invalid hub.mode: {hub_mode!r}")

    # An unconfigured secret must never match an empty token
    if not expected_token or hub_verify_token is None:
        raise WebhookVerificationError("Invalid hub.verify_token")

    if not hmac.compare_digest(hub_verify_token.encode(), expected_token.encode()):
        raise WebhookVerificationError("Invalid hub.verify_token")

    return hub_challenge or ""


def verify_signature(
    body: bytes,
    signature: Optional[str],
    app_secret: str,
) -> None:
    """
    Verify the Meta HMAC-SHA256 signature of a webhook payload.

    Meta sends `X-Hub-Signature-256: sha256=<hex>` computed over the raw
    body with the app secret.

    Raises:
        SignatureVerificationError: Missing or mismatching signature
    """

    if not signature:
        raise SignatureVerificationError(f"Missing {SIGNATURE_HEADER} header")

    expected_signature = "sha256=" + hmac.new(
        key=app_secret.encode("utf-8"),
        msg=body,
        digestmod=hashlib.sha256
    ).hexdigest()

    # Compare (constant-time to prevent timing attacks)
    if not hmac.compare_digest(signature, expected_signature):
        raise SignatureVerificationError("Invalid signature")
