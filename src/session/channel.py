"""Send side of one client WebSocket."""

from __future__ import annotations

import logging
from typing import Any

import orjson
from fastapi import WebSocketDisconnect

from src.protocol.relay import RelayFrame
from src.config.websocket import WS_CLOSE_NORMAL_CODE

logger = logging.getLogger(__name__)


class ClientChannel:
    """Wraps the client socket so relay code never sees a send failure as an exception."""

    def __init__(self, ws: Any, *, label: str = "client") -> None:
        self._ws = ws
        self._label = label
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, frame: RelayFrame) -> bool:
        if self._closed:
            logger.debug("%s: channel closed, dropping %s", self._label, type(frame).__name__)
            return False
        try:
            await self._ws.send_text(orjson.dumps(frame.to_wire()).decode("utf-8"))
        except WebSocketDisconnect:
            self._closed = True
            return False
        except Exception:
            logger.debug("%s: WebSocket send failed", self._label, exc_info=True)
            self._closed = True
            return False
        return True

    def mark_closed(self) -> None:
        self._closed = True

    async def close(self, code: int = WS_CLOSE_NORMAL_CODE, reason: str = "") -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._ws.close(code=code, reason=reason)
        except Exception:
            logger.debug("%s: WebSocket close failed", self._label, exc_info=True)


__all__ = ["ClientChannel"]
