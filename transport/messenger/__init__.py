"""Messenger Transport Layer - Module Exports"""

from .credentials import CredentialResolver
from .graph import GraphAPIError, GraphClient
from .normalize import build_inbound_event, extract_message_events, is_page_payload
from .pages import fetch_pages_info
from .profiles import ProfileCache
from .schemas import (
    EventMessage,
    EventSender,
    InboundEvent,
    MessagePayload,
    MessagingEvent,
    MessengerWebhookPayload,
    PageInfo,
    SendMessageRequest,
    UserProfile,
)
from .security import (
    SignatureVerificationError,
    WebhookVerificationError,
    verify_signature,
    verify_webhook_challenge,
)
from .sender import (
    CredentialNotConfiguredError,
    MessengerSenderError,
    MissingFieldsError,
    build_message_payload,
    send_message,
)

__all__ = [
    # Schemas
    "InboundEvent",
    "EventSender",
    "EventMessage",
    "MessengerWebhookPayload",
    "MessagingEvent",
    "MessagePayload",
    "SendMessageRequest",
    "PageInfo",
    "UserProfile",
    # Credentials & Graph API
    "CredentialResolver",
    "GraphClient",
    "GraphAPIError",
    # Profiles
    "ProfileCache",
    # Normalization
    "is_page_payload",
    "extract_message_events",
    "build_inbound_event",
    # Security
    "verify_webhook_challenge",
    "verify_signature",
    "WebhookVerificationError",
    "SignatureVerificationError",
    # Sender
    "build_message_payload",
    "send_message",
    "MessengerSenderError",
    "MissingFieldsError",
    "CredentialNotConfiguredError",
    # Pages
    "fetch_pages_info",
]
