"""WebSocket receive loop for one relay client."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from src.session import ClientRecord, SessionRegistry
from src.protocol.client import parse_client_frame

from .dispatch import HANDLERS

logger = logging.getLogger(__name__)

_DISCONNECT = "websocket.disconnect"


async def _receive(ws: WebSocket) -> dict[str, Any] | None:
    message = await ws.receive()
    if message.get("type") == _DISCONNECT:
        logger.debug("client disconnect code=%s", message.get("code"))
        return None
    return message


async def run_message_loop(ws: WebSocket, record: ClientRecord, registry: SessionRegistry) -> None:
    """Classify each frame (text vs binary) first, then dispatch in receipt order."""
    try:
        while True:
            message = await _receive(ws)
            if message is None:
                return

            frame = parse_client_frame(text=message.get("text"), data=message.get("bytes"))
            handler = HANDLERS.get(type(frame))
            if handler is None:
                logger.warning("client %s: no handler for %s", record.connection_id, type(frame).__name__)
                continue
            await handler(registry, record, frame)
    except WebSocketDisconnect:
        return


__all__ = ["run_message_loop"]
