"""One relay-mediated conversation: a client channel bound to an upstream connector."""

from __future__ import annotations

import uuid
import asyncio
import logging
import contextlib
from collections.abc import Callable, Awaitable

from src.state.settings import AppSettings
from src.upstream.connector import ConnectFn, UpstreamConnector
from src.errors import UpstreamConfigError, UpstreamHandshakeError
from src.protocol.relay import Tts, Error, Status, AiReady, ToolCall, ServerContent, ToolCallCancellation
from src.protocol.upstream import (
    UpstreamError,
    SetupComplete,
    UpstreamEvent,
    UpstreamContent,
    UpstreamToolCall,
    UnrecognizedUpstreamFrame,
    UpstreamToolCallCancellation,
)
from src.config.websocket import (
    WS_ERROR_UPSTREAM,
    WS_CLOSE_NORMAL_CODE,
    WS_ERROR_CONFIGURATION,
    WS_ERROR_UPSTREAM_CLOSED,
    WS_ERROR_UPSTREAM_CONNECTION,
)

from .channel import ClientChannel

logger = logging.getLogger(__name__)

CONFIG_MISSING_MESSAGE = "AI service connection details are missing."
STARTING_STATUS = "Connecting to AI service..."

SessionClosedFn = Callable[["RelaySession"], Awaitable[None]]


class RelaySession:
    """Forwards client audio upstream once the handshake completes; proxies upstream events back.

    Frames arriving before the upstream is ready are dropped, never buffered.
    `close()` is idempotent and always goes through the connector's close.
    """

    def __init__(
        self,
        *,
        channel: ClientChannel,
        initial_context: str,
        settings: AppSettings,
        on_closed: SessionClosedFn,
        connect_fn: ConnectFn | None = None,
    ) -> None:
        self.session_id = uuid.uuid4().hex
        self.initial_context = initial_context
        self.current_context: str | None = None

        self._channel = channel
        self._settings = settings
        self._on_closed = on_closed
        self._connector = UpstreamConnector(
            settings=settings.upstream,
            session_id=self.session_id,
            on_event=self._handle_upstream_event,
            on_closed=self._handle_upstream_closed,
            connect_fn=connect_fn,
        )
        self._closed = False
        self._dropped = 0
        self._start_task: asyncio.Task | None = None
        self._turn_text: list[str] = []

    @property
    def ready(self) -> bool:
        return self._connector.ready and not self._closed

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def connector(self) -> UpstreamConnector:
        return self._connector

    def launch(self) -> asyncio.Task:
        """Run `start()` in the background so the client receive loop keeps reading."""
        if self._start_task is None:
            self._start_task = asyncio.create_task(self.start())
            self._start_task.add_done_callback(self._on_start_done)
        return self._start_task

    async def wait_started(self) -> None:
        task = self._start_task
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def _on_start_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            logger.debug("session %s: start cancelled", self.session_id)
            return
        exc = task.exception()
        if exc is not None:
            logger.error("session %s: start failed", self.session_id, exc_info=exc)

    async def start(self) -> None:
        if not self._settings.upstream.is_configured:
            logger.error("session %s: upstream host or key not configured", self.session_id)
            await self._channel.send(Error(CONFIG_MISSING_MESSAGE, critical=True, code=WS_ERROR_CONFIGURATION))
            await self.close()
            return

        await self._channel.send(Status(STARTING_STATUS))
        try:
            await self._connector.open(system_instruction=self.initial_context)
        except UpstreamConfigError as exc:
            logger.error("session %s: %s", self.session_id, exc)
            await self._channel.send(Error(CONFIG_MISSING_MESSAGE, critical=True, code=WS_ERROR_CONFIGURATION))
            await self.close()
        except UpstreamHandshakeError as exc:
            logger.warning("session %s: upstream connection failed: %s", self.session_id, exc)
            await self._channel.send(
                Error(f"AI service connection error: {exc}", critical=False, code=WS_ERROR_UPSTREAM_CONNECTION)
            )
            await self.close()

    def note_not_ready(self, kind: str) -> None:
        self._dropped += 1
        if self._dropped == 1:
            logger.warning("session %s: upstream not ready, dropping %s frame", self.session_id, kind)
        else:
            logger.debug(
                "session %s: upstream not ready, dropping %s frame (dropped=%d)", self.session_id, kind, self._dropped
            )

    async def forward_audio(self, data: bytes) -> bool:
        if not self.ready:
            self.note_not_ready("audio")
            return False
        return await self._connector.send_audio(data)

    def update_context(self, label: str) -> bool:
        if not self.ready:
            self.note_not_ready("context")
            return False
        self.current_context = label
        logger.info("session %s: context updated to %r (not sent upstream)", self.session_id, label)
        return True

    async def _on_setup_complete(self, _event: SetupComplete) -> None:
        await self._channel.send(AiReady(context=self.initial_context))

    async def _on_content(self, event: UpstreamContent) -> None:
        await self._channel.send(ServerContent(content=event.content))
        if not self._settings.relay.tts_directives:
            return
        self._turn_text.extend(event.text_parts())
        if event.turn_complete:
            text = "".join(self._turn_text).strip()
            self._turn_text.clear()
            if text:
                await self._channel.send(Tts(text=text))

    async def _on_tool_call(self, event: UpstreamToolCall) -> None:
        logger.info("session %s: tool call received: %s", self.session_id, event.payload)
        await self._channel.send(ToolCall(tool_call=event.payload))

    async def _on_tool_call_cancellation(self, event: UpstreamToolCallCancellation) -> None:
        logger.info("session %s: tool call cancellation received: %s", self.session_id, event.payload)
        await self._channel.send(ToolCallCancellation(cancellation=event.payload))

    async def _on_error(self, event: UpstreamError) -> None:
        logger.error("session %s: upstream error: %s", self.session_id, event.message)
        await self._channel.send(Error(f"AI service error: {event.message}", critical=True, code=WS_ERROR_UPSTREAM))
        await self.close()

    async def _on_unrecognized(self, event: UnrecognizedUpstreamFrame) -> None:
        logger.warning("session %s: dropping upstream frame: %s", self.session_id, event.reason)

    async def _handle_upstream_event(self, event: UpstreamEvent) -> None:
        if self._closed:
            return
        if isinstance(event, SetupComplete):
            await self._on_setup_complete(event)
        elif isinstance(event, UpstreamContent):
            await self._on_content(event)
        elif isinstance(event, UpstreamToolCall):
            await self._on_tool_call(event)
        elif isinstance(event, UpstreamToolCallCancellation):
            await self._on_tool_call_cancellation(event)
        elif isinstance(event, UpstreamError):
            await self._on_error(event)
        else:
            await self._on_unrecognized(event)

    async def _handle_upstream_closed(self, code: int, reason: str) -> None:
        if self._closed:
            return
        if code != WS_CLOSE_NORMAL_CODE:
            await self._channel.send(
                Error(
                    f"AI service connection closed unexpectedly. Code: {code}",
                    critical=False,
                    code=WS_ERROR_UPSTREAM_CLOSED,
                )
            )
        await self.close()

    async def close(self) -> None:
        task = self._start_task
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._connector.close()
        if self._closed:
            return
        self._closed = True
        logger.info("session %s: closed", self.session_id)
        await self._on_closed(self)


__all__ = ["RelaySession"]
