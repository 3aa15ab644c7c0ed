"""
Messenger Message Dispatcher

Sends a frontend-composed message to a Messenger user via the Send API.
At most one delivery attempt per request. No retries. No queueing.
"""

import logging
from typing import Any, Optional

from .credentials import CredentialResolver
from .graph import GraphAPIError, GraphClient
from .schemas import SendMessageRequest

logger = logging.getLogger(__name__)


MESSAGE_TYPE_TEXT = "text"
MESSAGE_TYPE_IMAGE = "image"

REQUIRED_FIELDS = ("psid", "message", "pageId")


class MessengerSenderError(Exception):
    """Failed to send a message to Messenger."""

    code = "send_failed"


class MissingFieldsError(MessengerSenderError):
    """The send request lacks psid, message or pageId."""

    code = "missing_fields"

    def __init__(self, missing: list[str]):
        super().__init__(f"Missing required fields: {', '.join(REQUIRED_FIELDS)}")
        self.missing = missing


class CredentialNotConfiguredError(MessengerSenderError):
    """No access token is configured for the page."""

    code = "credential_not_configured"

    def __init__(self, page_id: str):
        super().__init__(f"Token for page {page_id} not configured.")
        self.page_id = page_id


def build_message_payload(
    recipient_id: str,
    body: str,
    message_type: Optional[str] = MESSAGE_TYPE_TEXT,
) -> dict[str, Any]:
    """
    Shape a Send API request body.

    `image` sends `body` as a reusable image attachment URL; any other
    type, including None, sends it as plain text.
    """
    if message_type == MESSAGE_TYPE_IMAGE:
        message: dict[str, Any] = {
            "attachment": {
                "type": "image",
                "payload": {
                    "url": body,
                    "is_reusable": True,
                },
            }
        }
    else:
        message = {"text": body}

    return {
        "recipient": {"id": recipient_id},
        "message": message,
        "messaging_type": "RESPONSE",
    }


async def send_message(
    request: SendMessageRequest,
    resolver: CredentialResolver,
    graph: GraphClient,
) -> dict[str, Any]:
    """
    Validate, resolve the page token and issue exactly one Send API call.

    Returns:
        The Send API response (recipient_id, message_id)

    Raises:
        MissingFieldsError: psid, message or pageId absent (no remote call)
        CredentialNotConfiguredError: no token for the page (no remote call)
        MessengerSenderError: the Send API call failed
    """

    missing = [
        name
        for name, value in (
            ("psid", request.psid),
            ("message", request.message),
            ("pageId", request.page_id),
        )
        if not value
    ]
    if missing:
        raise MissingFieldsError(missing)

    access_token = resolver.resolve(request.page_id)
    if not access_token:
        raise CredentialNotConfiguredError(request.page_id)

    payload = build_message_payload(request.psid, request.message, request.message_type)

    try:
        result = await graph.send_message(payload, access_token)
    except GraphAPIError as e:
        logger.error(
            f"Failed to send message: {e.message}",
            extra={
                "page_id": request.page_id,
                "recipient_id": request.psid,
                "status_code": e.status_code,
                "error_body": e.detail,
            }
        )
        raise MessengerSenderError(f"Send API call failed: {e.message}") from e

    logger.info(
        f"Message sent to {request.psid} from page {request.page_id}",
        extra={
            "page_id": request.page_id,
            "recipient_id": request.psid,
            "message_type": request.message_type,
            "response_id": result.get("message_id"),
        }
    )
    return result
