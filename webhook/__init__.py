"""
Webhook module - FastAPI route handlers for the Messenger relay.

Includes:
- messenger.py: webhook handshake, event relay, outbound send, page directory
"""

from webhook.messenger import router as messenger_router

__all__ = ["messenger_router"]
