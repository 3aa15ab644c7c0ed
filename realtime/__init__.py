"""Real-time Layer - Module Exports"""

from .broadcast import FACEBOOK_EVENT, BroadcastChannel

__all__ = [
    "BroadcastChannel",
    "FACEBOOK_EVENT",
]
