"""Supervised client of the relay: connect/disconnect, audio and context updates."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import urlencode
from collections.abc import Callable

from src.config.supervisor import DEFAULT_RELAY_URL
from src.config.websocket import WS_SCREEN_QUERY_PARAM
from src.protocol.client import StartSession, ContextUpdate, UnrecognizedFrame
from src.protocol.relay import Error, Status, AiReady, RelayFrame, parse_relay_frame
from src.supervisor import BackoffPolicy, ConnectionPhase, ConnectionSupervisor
from src.supervisor.supervisor import Scheduler, StateListener, ErrorListener

from .transport import ConnectFn, RelayTransport

logger = logging.getLogger(__name__)

FrameListener = Callable[[RelayFrame], None]


class RelayClient:
    """Drives a `ConnectionSupervisor` with `RelayTransport`s.

    Once connected it announces `start_ai_session` followed by the current
    context label. Relay error frames feed the supervisor; everything else
    goes to `on_frame`. Without a capture subsystem (`auto_capture_ready`),
    the downstream readiness signal fires as soon as the transport opens.
    """

    def __init__(
        self,
        url: str = DEFAULT_RELAY_URL,
        *,
        screen: str | None = None,
        policy: BackoffPolicy | None = None,
        scheduler: Scheduler | None = None,
        connect_fn: ConnectFn | None = None,
        auto_capture_ready: bool = True,
        on_state: StateListener | None = None,
        on_error: ErrorListener | None = None,
        on_frame: FrameListener | None = None,
    ) -> None:
        self._url = url
        self._connect_fn = connect_fn
        self._auto_capture_ready = auto_capture_ready
        self._on_frame = on_frame
        self._announce_task: asyncio.Task | None = None
        self.ai_ready = False

        self._supervisor = ConnectionSupervisor(
            transport_factory=self._new_transport,
            policy=policy,
            scheduler=scheduler,
            on_state=on_state,
            on_error=on_error,
            on_connected=self._handle_connected,
            on_transport_open=self._handle_transport_open,
        )
        self._supervisor.set_context(screen)

    @property
    def supervisor(self) -> ConnectionSupervisor:
        return self._supervisor

    @property
    def phase(self) -> ConnectionPhase:
        return self._supervisor.phase

    @property
    def context_label(self) -> str | None:
        return self._supervisor.state.context_label

    def connect(self) -> None:
        self._supervisor.start()

    def disconnect(self) -> None:
        self._supervisor.stop()
        self.ai_ready = False

    def capture_ready(self) -> None:
        self._supervisor.downstream_ready()

    def capture_failed(self, message: str, *, user_cancelled: bool = False) -> None:
        self._supervisor.downstream_failed(message, user_cancelled=user_cancelled)

    async def send_audio(self, data: bytes) -> bool:
        transport = self._current_transport()
        if transport is None:
            return False
        return await transport.send_bytes(data)

    async def update_context(self, label: str) -> bool:
        self._supervisor.set_context(label)
        transport = self._current_transport()
        if transport is None:
            return False
        return await transport.send_json(ContextUpdate(context=label))

    async def wait_announced(self) -> None:
        if self._announce_task is not None:
            await self._announce_task

    def _current_transport(self) -> RelayTransport | None:
        if self._supervisor.phase is not ConnectionPhase.CONNECTED:
            return None
        transport = self._supervisor.transport
        return transport if isinstance(transport, RelayTransport) else None

    def _connect_url(self) -> str:
        label = self._supervisor.state.context_label
        if not label:
            return self._url
        sep = "&" if "?" in self._url else "?"
        return f"{self._url}{sep}{urlencode({WS_SCREEN_QUERY_PARAM: label})}"

    def _new_transport(self, supervisor: ConnectionSupervisor) -> RelayTransport:
        self.ai_ready = False
        transport = RelayTransport(
            self._connect_url(),
            supervisor=supervisor,
            on_frame=self._handle_raw_frame,
            connect_fn=self._connect_fn,
        )
        transport.start()
        logger.info("connecting to relay %s", self._url)
        return transport

    def _handle_transport_open(self) -> None:
        if self._auto_capture_ready:
            self._supervisor.downstream_ready()

    def _handle_connected(self) -> None:
        transport = self._supervisor.transport
        if not isinstance(transport, RelayTransport):
            return
        self._announce_task = asyncio.create_task(self._announce(transport))

    async def _announce(self, transport: RelayTransport) -> None:
        if not await transport.send_json(StartSession()):
            return
        label = self._supervisor.state.context_label
        if label:
            await transport.send_json(ContextUpdate(context=label))

    def _handle_raw_frame(self, raw: str | bytes) -> None:
        frame = parse_relay_frame(raw)
        if isinstance(frame, UnrecognizedFrame):
            logger.warning("dropping relay frame: %s", frame.reason)
            return
        if isinstance(frame, Error):
            logger.error("relay error (critical=%s): %s", frame.critical, frame.message)
            self._supervisor.remote_error(frame.message, critical=frame.critical)
        elif isinstance(frame, AiReady):
            self.ai_ready = True
            logger.info("AI session is ready")
        elif isinstance(frame, Status):
            logger.info("relay status: %s", frame.message)
        self._emit(frame)

    def _emit(self, frame: Any) -> None:
        if self._on_frame is None:
            return
        try:
            self._on_frame(frame)
        except Exception:
            logger.exception("frame listener failed")


__all__ = ["RelayClient"]
