"""
Real-time WebSocket Endpoint

Browser clients connect here to receive relay events.
Frames sent by clients are ignored.
"""

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from infra.bootstrap import RelayBootstrap, get_bootstrap

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Real-time"])


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    bootstrap: RelayBootstrap = Depends(get_bootstrap),
) -> None:
    """Hold a session open until the client goes away."""
    channel = bootstrap.broadcast_channel
    connection_id = await channel.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect as e:
        logger.debug(f"WebSocket {connection_id} closed with code {e.code}")
    finally:
        channel.disconnect(connection_id)
