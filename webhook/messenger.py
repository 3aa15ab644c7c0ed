"""
Messenger Webhook Handler

FastAPI routes bridging the Messenger platform and the browser clients:

  GET  /webhook       subscription handshake
  POST /webhook       inbound events -> normalize -> enrich -> broadcast
  POST /send-message  frontend message -> Send API
  GET  /pages-info    display metadata of every configured page

Update Flow:
  webhook → verify → extract events → profile cache → broadcast
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from infra.bootstrap import RelayBootstrap, get_bootstrap
from realtime.broadcast import FACEBOOK_EVENT
from transport.messenger.normalize import (
    build_inbound_event,
    extract_message_events,
    is_page_payload,
)
from transport.messenger.pages import fetch_pages_info
from transport.messenger.schemas import SendMessageRequest
from transport.messenger.security import (
    SIGNATURE_HEADER,
    SignatureVerificationError,
    WebhookVerificationError,
    verify_signature,
    verify_webhook_challenge,
)
from transport.messenger.sender import (
    CredentialNotConfiguredError,
    MessengerSenderError,
    MissingFieldsError,
    send_message,
)

# Setup logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=["Messenger"])


EVENT_RECEIVED = "EVENT_RECEIVED"
ERROR_CODE_HEADER = "X-Error-Code"


# ============================================================================
# WEBHOOK CHALLENGE (Setup only)
# ============================================================================

@router.get("/webhook")
async def messenger_webhook_challenge(
    hub_mode: Optional[str] = Query(None, alias="hub.mode"),
    hub_verify_token: Optional[str] = Query(None, alias="hub.verify_token"),
    hub_challenge: Optional[str] = Query(None, alias="hub.challenge"),
    bootstrap: RelayBootstrap = Depends(get_bootstrap),
) -> Response:
    """
    Verify webhook subscription challenge from Meta.

    Returns:
        200 with the challenge as plain text, or 403 with no body
    """
    try:
        challenge = verify_webhook_challenge(
            hub_mode,
            hub_verify_token,
            hub_challenge,
            bootstrap.config.verify_token,
        )
    except WebhookVerificationError as e:
        logger.warning(f"Webhook verification rejected: {e}")
        return Response(status_code=status.HTTP_403_FORBIDDEN)

    logger.info("WEBHOOK_VERIFIED")
    return PlainTextResponse(challenge)


# ============================================================================
# WEBHOOK RECEIVER (Event relay)
# ============================================================================

@router.post("/webhook")
async def messenger_webhook_receiver(
    request: Request,
    bootstrap: RelayBootstrap = Depends(get_bootstrap),
) -> Response:
    """
    Receive Messenger events and relay them to connected clients.

    Flow:
    1. Get raw payload
    2. Verify signature (only when an app secret is configured)
    3. Reject anything that is not a page payload (404)
    4. For each message event: profile lookup, normalize, broadcast
    5. Acknowledge the whole batch

    Profile lookup failures degrade to fallback names and never abort
    the batch.
    """

    # Step 1: Get raw body (signature is computed over the exact bytes)
    body = await request.body()
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": "Invalid JSON payload"},
        )

    # Step 2: Verify signature (security boundary)
    app_secret = bootstrap.config.app_secret
    if app_secret:
        try:
            verify_signature(body, request.headers.get(SIGNATURE_HEADER), app_secret)
        except SignatureVerificationError as e:
            logger.warning(f"Signature verification failed: {e}")
            return Response(status_code=status.HTTP_403_FORBIDDEN)

    # Step 3: Only page events are relayed
    if not is_page_payload(payload):
        return Response(status_code=status.HTTP_404_NOT_FOUND)

    # Step 4: Normalize, enrich and broadcast each message event
    for event in extract_message_events(payload):
        profile = await bootstrap.profile_cache.get(event.sender.id, event.recipient.id)
        inbound = build_inbound_event(event, profile)
        event_data = inbound.to_payload()

        logger.info(
            f"Emitting {FACEBOOK_EVENT} to frontend",
            extra={
                "page_id": inbound.page_id,
                "sender_id": inbound.sender.id,
                "message_id": inbound.message.mid,
            }
        )
        await bootstrap.broadcast_channel.broadcast(FACEBOOK_EVENT, event_data)

    # Step 5: Acknowledge the batch
    return PlainTextResponse(EVENT_RECEIVED)


# ============================================================================
# OUTBOUND MESSAGES
# ============================================================================

@router.post("/send-message")
async def messenger_send_message(
    body: Optional[SendMessageRequest] = None,
    bootstrap: RelayBootstrap = Depends(get_bootstrap),
) -> Response:
    """
    Send a message composed in the frontend to a Messenger user.

    Expected payload:
    {
        "psid": "<page-scoped user id>",
        "message": "Hello!" | "https://example.com/image.png",
        "pageId": "<page id>",
        "messageType": "text" | "image"   (optional, default "text")
    }
    """
    try:
        await send_message(body or SendMessageRequest(), bootstrap.credentials, bootstrap.graph)
    except MissingFieldsError as e:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(e), e.code)
    except CredentialNotConfiguredError as e:
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e), e.code)
    except MessengerSenderError as e:
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to send message", e.code
        )

    return PlainTextResponse("Message sent successfully")


def _error_response(status_code: int, message: str, code: str) -> PlainTextResponse:
    return PlainTextResponse(
        message,
        status_code=status_code,
        headers={ERROR_CODE_HEADER: code},
    )


# ============================================================================
# PAGE DIRECTORY
# ============================================================================

@router.get("/pages-info")
async def messenger_pages_info(
    bootstrap: RelayBootstrap = Depends(get_bootstrap),
) -> Response:
    """
    List display metadata of every configured page.

    Pages whose lookup fails are left out. No pages configured → [].
    """
    try:
        pages = await fetch_pages_info(bootstrap.credentials, bootstrap.graph)
    except Exception as e:
        logger.error(f"Failed to fetch page info: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch page info"},
        )

    return JSONResponse(content=[page.model_dump() for page in pages])
