"""Primary WebSocket connection handler orchestration."""

from __future__ import annotations

import logging

from fastapi import WebSocket

from src.session import ClientChannel
from src.runtime.dependencies import RuntimeDeps
from src.config.websocket import WS_SCREEN_QUERY_PARAM

from .message_loop import run_message_loop

logger = logging.getLogger(__name__)


async def handle_websocket_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> None:
    registry = runtime_deps.registry
    await ws.accept()

    screen = ws.query_params.get(WS_SCREEN_QUERY_PARAM)
    channel = ClientChannel(ws)
    record = registry.register_client(channel, screen)
    try:
        await run_message_loop(ws, record, registry)
    finally:
        try:
            await registry.unregister_client(record.connection_id)
        except Exception:
            logger.exception("client %s: cleanup failed", record.connection_id)
        logger.info(
            "WebSocket connection closed client=%s. Active clients: %d, sessions: %d",
            record.connection_id,
            registry.client_count(),
            registry.session_count(),
        )


__all__ = ["handle_websocket_connection"]
