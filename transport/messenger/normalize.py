"""
Messenger Input Normalization

Turns a webhook batch into the messaging events worth relaying, and shapes
each one into the InboundEvent the frontend consumes.

Policy:
- Every messaging event of every entry is inspected.
- Events without a `message` (delivery, read, postback...) are skipped.
- Echoes of messages the page itself sent are always skipped.
- A malformed event is logged and skipped; the rest of the batch goes on.
"""

import logging
from typing import Any

from pydantic import ValidationError

from .schemas import (
    EventMessage,
    EventSender,
    InboundEvent,
    MessagingEvent,
    UserProfile,
)

logger = logging.getLogger(__name__)


PAGE_OBJECT = "page"


def is_page_payload(payload: Any) -> bool:
    """True if the webhook payload carries page (Messenger) events."""
    return isinstance(payload, dict) and payload.get("object") == PAGE_OBJECT


def extract_message_events(payload: dict[str, Any]) -> list[MessagingEvent]:
    """
    Collect the relayable message events of a webhook batch, in order.
    """
    events: list[MessagingEvent] = []

    entries = payload.get("entry") or []
    if not isinstance(entries, list):
        logger.warning("Webhook payload 'entry' is not a list, ignoring batch")
        return events

    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning("Skipping malformed webhook entry")
            continue

        messaging = entry.get("messaging") or []
        if not isinstance(messaging, list):
            logger.warning("Skipping webhook entry whose 'messaging' is not a list")
            continue

        for raw_event in messaging:
            try:
                event = MessagingEvent.model_validate(raw_event)
            except ValidationError as e:
                logger.warning(f"Skipping malformed messaging event: {e}")
                continue

            if event.message is None:
                continue
            if event.message.is_echo:
                logger.debug(f"Skipping echo {event.message.mid}")
                continue

            events.append(event)

    return events


def build_inbound_event(event: MessagingEvent, profile: UserProfile) -> InboundEvent:
    """
    Combine a message event and its sender profile into an InboundEvent.

    The page is the event recipient; the sender is the Messenger user.
    """
    message = event.message
    if message is None:
        raise ValueError("Messaging event carries no message")

    return InboundEvent(
        page_id=event.recipient.id,
        sender=EventSender(
            id=event.sender.id,
            name=profile.name,
            profile_pic=profile.profile_pic,
        ),
        message=EventMessage(
            mid=message.mid,
            text=message.text,
            attachments=message.attachments,
            timestamp=event.timestamp,
        ),
    )
