"""
Messenger Transport Layer - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Defines the contract between the Messenger platform, the relay and the
browser clients listening on the real-time channel.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


# ============================================================================
# MESSENGER WEBHOOK PAYLOAD SCHEMAS (INPUT)
# ============================================================================

class Participant(BaseModel):
    """Sender or recipient of a messaging event."""
    id: str


class MessagePayload(BaseModel):
    """The `message` object of a messaging event."""
    mid: str
    text: Optional[str] = None
    attachments: Optional[list[dict[str, Any]]] = None
    is_echo: bool = False

    class Config:
        extra = "allow"  # quick_reply, reply_to, app_id, ...


class MessagingEvent(BaseModel):
    """A single entry of `entry[].messaging[]`."""
    sender: Participant
    recipient: Participant
    timestamp: Optional[int] = None
    message: Optional[MessagePayload] = None

    class Config:
        extra = "allow"  # delivery, read, postback, ...


class MessengerWebhookPayload(BaseModel):
    """
    Full Messenger webhook payload.

    ref: https://developers.facebook.com/docs/messenger-platform/webhooks
    """

    object: str = Field(..., description="'page' for Messenger events")
    entry: list[dict[str, Any]] = Field(default_factory=list, description="Webhook entries")

    class Config:
        extra = "allow"


# ============================================================================
# USER PROFILE
# ============================================================================

class UserProfile(BaseModel):
    """Display metadata for a Messenger user."""
    name: str
    profile_pic: Optional[str] = None

    class Config:
        frozen = True

    @classmethod
    def fallback(cls, user_id: str) -> "UserProfile":
        """Placeholder used when the real profile cannot be fetched."""
        return cls(name=f"User {user_id[-4:]}", profile_pic=None)


# ============================================================================
# INBOUND EVENT (THE CONTRACT WITH THE FRONTEND)
# ============================================================================

class EventSender(BaseModel):
    id: str
    name: str
    profile_pic: Optional[str] = None


class EventMessage(BaseModel):
    mid: str
    text: Optional[str] = None
    attachments: Optional[list[dict[str, Any]]] = None
    timestamp: Optional[int] = None


class InboundEvent(BaseModel):
    """
    Normalized event pushed to every connected client as `facebook-event`.

    The frontend never sees raw webhook payloads, only this shape.
    """

    page_id: str = Field(..., alias="pageId")
    sender: EventSender
    message: EventMessage

    class Config:
        populate_by_name = True
        frozen = True

    def to_payload(self) -> dict[str, Any]:
        """
        Wire representation.

        `text` and `attachments` are omitted when absent; `profile_pic`
        is always present, null when unknown.
        """
        return {
            "pageId": self.page_id,
            "sender": self.sender.model_dump(),
            "message": self.message.model_dump(exclude_none=True),
        }


# ============================================================================
# OUTBOUND SEND REQUEST (INPUT FROM THE FRONTEND)
# ============================================================================

class SendMessageRequest(BaseModel):
    """
    Body of POST /send-message.

    Every field is optional at parse time so a missing field is reported
    as a 400 by the dispatcher instead of a validation error.
    """

    psid: Optional[str] = None
    message: Optional[str] = None
    page_id: Optional[str] = Field(None, alias="pageId")
    message_type: Optional[str] = Field("text", alias="messageType")

    class Config:
        populate_by_name = True

    @field_validator("psid", "message", "page_id", mode="before")
    @classmethod
    def _numbers_as_strings(cls, value: Any) -> Any:
        # Page-scoped ids often arrive as JSON numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("message_type", mode="before")
    @classmethod
    def _null_type_is_text(cls, value: Any) -> Any:
        return "text" if value is None else value


# ============================================================================
# PAGE DIRECTORY (OUTPUT)
# ============================================================================

class PageInfo(BaseModel):
    """Display metadata for a configured page."""
    id: str
    name: Optional[str] = None
    picture: Optional[Any] = None  # Graph `picture{url}` object, passed through
