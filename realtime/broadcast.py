"""
Real-time Broadcast Channel

Fan-out of relay events to every connected browser session.
Fire-and-forget: no acknowledgment, no replay for late subscribers.
"""

import asyncio
import logging
from typing import Any
from uuid import uuid4

from fastapi import WebSocket

logger = logging.getLogger(__name__)


FACEBOOK_EVENT = "facebook-event"

DEFAULT_SEND_TIMEOUT = 5.0


class BroadcastChannel:
    """Registry of connected WebSocket sessions."""

    def __init__(self, send_timeout: float = DEFAULT_SEND_TIMEOUT):
        self._connections: dict[str, WebSocket] = {}
        self._send_timeout = send_timeout

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def connection_ids(self) -> list[str]:
        return list(self._connections)

    async def connect(self, websocket: WebSocket) -> str:
        """
        Accept a session and register it.

        The session is registered before the accept frame goes out, so it
        is visible to broadcasts as soon as the client sees the handshake.
        """
        connection_id = uuid4().hex
        self._connections[connection_id] = websocket
        try:
            await websocket.accept()
        except Exception:
            self._connections.pop(connection_id, None)
            raise
        logger.info(f"Client connected to WebSocket: {connection_id}")
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        """Forget a session. Unknown ids are ignored."""
        if self._connections.pop(connection_id, None) is not None:
            logger.info(f"Client disconnected: {connection_id}")

    async def broadcast(self, event: str, data: Any) -> int:
        """
        Send `{"event": event, "data": data}` to every current session.

        Sends run concurrently, each bounded by `send_timeout`. Sessions that
        fail or time out are dropped without holding up the others.

        Returns:
            Number of sessions the frame was delivered to
        """
        frame = {"event": event, "data": data}
        sessions = list(self._connections.items())
        if not sessions:
            return 0

        results = await asyncio.gather(
            *(self._send(connection_id, websocket, frame) for connection_id, websocket in sessions),
            return_exceptions=True,
        )
        return sum(1 for result in results if result is True)

    async def _send(self, connection_id: str, websocket: WebSocket, frame: dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(websocket.send_json(frame), timeout=self._send_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Dropping WebSocket {connection_id} after send timeout ({self._send_timeout}s)")
            self.disconnect(connection_id)
            return False
        except Exception as e:
            logger.warning(f"Dropping WebSocket {connection_id} after send failure: {e}")
            self.disconnect(connection_id)
            return False
        return True
