"""Outbound connection to the upstream AI service for one session."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable, Awaitable

import orjson
import websockets
from websockets.exceptions import ConnectionClosed

from src.errors import UpstreamHandshakeError
from src.state.settings import UpstreamSettings
from src.config.websocket import (
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_ABNORMAL_CODE,
    WS_CLOSE_SESSION_TERMINATED_REASON,
)
from src.protocol.upstream import (
    SetupFrame,
    UpstreamEvent,
    SetupComplete,
    encode_audio,
    parse_upstream_frame,
)

from .phase import UpstreamPhase
from .url import redacted_endpoint, build_upstream_url

logger = logging.getLogger(__name__)

ConnectFn = Callable[[str], Awaitable[Any]]
EventHandler = Callable[[UpstreamEvent], Awaitable[None]]
ClosedHandler = Callable[[int, str], Awaitable[None]]


def _dumps(frame: Any) -> str:
    return orjson.dumps(frame.to_wire()).decode("utf-8")


def _close_details(exc: ConnectionClosed) -> tuple[int, str]:
    if exc.rcvd is None:
        return WS_CLOSE_ABNORMAL_CODE, ""
    return exc.rcvd.code, exc.rcvd.reason


class UpstreamConnector:
    """Owns at most one upstream WebSocket.

    Lifecycle: idle -> connecting -> handshaking -> ready -> closing -> closed.
    Events read from the socket are delivered to `on_event` in receipt order;
    a close the connector did not initiate is reported once via `on_closed`.
    """

    def __init__(
        self,
        *,
        settings: UpstreamSettings,
        session_id: str,
        on_event: EventHandler,
        on_closed: ClosedHandler,
        connect_fn: ConnectFn | None = None,
    ) -> None:
        self._settings = settings
        self._session_id = session_id
        self._on_event = on_event
        self._on_closed = on_closed
        self._connect_fn = connect_fn or self._default_connect

        self._ws: Any | None = None
        self._reader: asyncio.Task | None = None
        self._phase = UpstreamPhase.IDLE
        self._close_requested = False

    @property
    def phase(self) -> UpstreamPhase:
        return self._phase

    @property
    def ready(self) -> bool:
        return self._phase is UpstreamPhase.READY

    async def _default_connect(self, url: str) -> Any:
        return await websockets.connect(
            url,
            open_timeout=self._settings.open_timeout_s,
            max_size=None,
        )

    async def open(self, *, system_instruction: str = "") -> None:
        """Connect, then send the setup frame. Raises UpstreamHandshakeError on failure."""
        if self._phase is not UpstreamPhase.IDLE:
            raise RuntimeError(f"upstream connector already used (phase={self._phase.value})")

        url = build_upstream_url(self._settings)
        self._phase = UpstreamPhase.CONNECTING
        logger.info("session %s: connecting upstream %s", self._session_id, redacted_endpoint(self._settings))
        try:
            ws = await asyncio.wait_for(self._connect_fn(url), timeout=self._settings.open_timeout_s)
        except (OSError, TimeoutError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as exc:
            self._phase = UpstreamPhase.CLOSED
            raise UpstreamHandshakeError(reason=str(exc) or type(exc).__name__) from exc

        if self._close_requested:
            # Session was torn down while the socket was opening.
            with contextlib.suppress(Exception):
                await ws.close(WS_CLOSE_NORMAL_CODE, WS_CLOSE_SESSION_TERMINATED_REASON)
            self._phase = UpstreamPhase.CLOSED
            return

        self._ws = ws
        self._phase = UpstreamPhase.HANDSHAKING
        setup = SetupFrame(
            model=self._settings.model,
            response_modalities=self._settings.response_modalities,
            system_instruction=system_instruction,
        )
        try:
            await ws.send(_dumps(setup))
        except ConnectionClosed as exc:
            self._phase = UpstreamPhase.CLOSED
            raise UpstreamHandshakeError(reason=f"closed during setup: {exc}") from exc
        logger.debug("session %s: setup frame sent (model=%s)", self._session_id, setup.model)
        self._reader = asyncio.create_task(self._read_loop(ws))

    async def _read_loop(self, ws: Any) -> None:
        code, reason = WS_CLOSE_ABNORMAL_CODE, ""
        try:
            while True:
                raw = await ws.recv()
                event = parse_upstream_frame(raw)
                if isinstance(event, SetupComplete) and self._phase is UpstreamPhase.HANDSHAKING:
                    self._phase = UpstreamPhase.READY
                    logger.info("session %s: upstream setup complete", self._session_id)
                await self._on_event(event)
                if self._close_requested:
                    return
        except ConnectionClosed as exc:
            code, reason = _close_details(exc)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("session %s: upstream reader failed", self._session_id)

        if self._close_requested:
            return
        self._phase = UpstreamPhase.CLOSED
        self._ws = None
        logger.info("session %s: upstream closed code=%s reason=%s", self._session_id, code, reason or "-")
        await self._on_closed(code, reason)

    async def send_audio(self, data: bytes) -> bool:
        ws = self._ws
        if ws is None or self._phase is not UpstreamPhase.READY:
            return False
        try:
            await ws.send(_dumps(encode_audio(data)))
        except ConnectionClosed:
            logger.debug("session %s: audio dropped, upstream closed", self._session_id)
            return False
        return True

    async def close(
        self,
        code: int = WS_CLOSE_NORMAL_CODE,
        reason: str = WS_CLOSE_SESSION_TERMINATED_REASON,
    ) -> None:
        """Close the upstream socket. Safe to call repeatedly and from the reader task."""
        if self._close_requested:
            return
        self._close_requested = True
        if self._phase is not UpstreamPhase.CLOSED:
            self._phase = UpstreamPhase.CLOSING

        reader = self._reader
        self._reader = None
        if reader is not None and reader is not asyncio.current_task() and not reader.done():
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader

        ws = self._ws
        self._ws = None
        if ws is not None:
            try:
                await ws.close(code, reason)
            except Exception:
                logger.debug("session %s: upstream close failed", self._session_id, exc_info=True)
        self._phase = UpstreamPhase.CLOSED


__all__ = ["ConnectFn", "UpstreamConnector"]
