"""Client-leg connection lifecycle: disconnected -> connecting -> connected -> error."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from collections.abc import Callable

from src.config.websocket import (
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_CLIENT_ABORTED_REASON,
    WS_CLOSE_CLIENT_DISCONNECTED_REASON,
)
from src.config.supervisor import (
    STATUS_CONNECTED,
    STATUS_CONNECTING,
    STATUS_DISCONNECTED,
    RETRIES_EXHAUSTED_MESSAGE,
)

from .phase import ConnectionPhase
from .backoff import BackoffPolicy
from .categories import ErrorCategory
from .state import ClientConnectionState

logger = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], Any]
TransportFactory = Callable[["ConnectionSupervisor"], Any]
StateListener = Callable[[ConnectionPhase, str], None]
ErrorListener = Callable[[str, bool], None]
Hook = Callable[[], None]


def _loop_scheduler(delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    return asyncio.get_running_loop().call_later(delay_s, callback)


class ConnectionSupervisor:
    """Owns the phase of one supervised connection.

    The phase only changes here. `connected` requires both readiness signals
    (transport open and downstream ready). Transport errors are recorded but
    the following close event is what moves the phase to `error`. Events from
    a transport that is no longer current are ignored. At most one retry timer
    is pending at any time.

    Transports produced by `transport_factory` must provide `detach()` (stop
    delivering events, synchronously) and `close(code, reason)`.
    """

    def __init__(
        self,
        *,
        transport_factory: TransportFactory,
        policy: BackoffPolicy | None = None,
        scheduler: Scheduler | None = None,
        on_state: StateListener | None = None,
        on_error: ErrorListener | None = None,
        on_connected: Hook | None = None,
        on_transport_open: Hook | None = None,
    ) -> None:
        self._policy = policy or BackoffPolicy()
        self._transport_factory = transport_factory
        self._scheduler = scheduler or _loop_scheduler
        self._on_state = on_state
        self._on_error = on_error
        self._on_connected = on_connected
        self._on_transport_open = on_transport_open

        self._state = ClientConnectionState(delay_ms=self._policy.initial_ms)
        self._transport: Any | None = None

    @property
    def state(self) -> ClientConnectionState:
        return self._state

    @property
    def phase(self) -> ConnectionPhase:
        return self._state.phase

    @property
    def policy(self) -> BackoffPolicy:
        return self._policy

    @property
    def transport(self) -> Any | None:
        return self._transport

    # Explicit user requests

    def start(self) -> None:
        if self._state.phase in (ConnectionPhase.CONNECTING, ConnectionPhase.CONNECTED):
            logger.debug("start ignored: already %s", self._state.phase.value)
            self._notify_state()
            return
        self._state.user_initiated = True
        self._begin_attempt()

    def stop(self) -> None:
        state = self._state
        state.user_initiated = False
        self._cancel_retry()
        state.delay_ms = self._policy.initial_ms
        state.attempts = 0
        self._drop_transport(WS_CLOSE_CLIENT_DISCONNECTED_REASON)
        state.downstream_ready = False
        if state.phase is not ConnectionPhase.DISCONNECTED:
            self._set_phase(ConnectionPhase.DISCONNECTED, STATUS_DISCONNECTED)

    def set_context(self, label: str | None) -> None:
        self._state.context_label = label

    # Readiness signals

    def transport_opened(self, transport: Any) -> None:
        if self._is_stale(transport, "open"):
            return
        self._state.transport_open = True
        logger.info("transport open")
        if self._on_transport_open is not None:
            self._call_hook(self._on_transport_open, "on_transport_open")
        self._maybe_connected()

    def downstream_ready(self) -> None:
        self._state.downstream_ready = True
        self._maybe_connected()

    # Failure signals

    def transport_error(self, transport: Any, exc: BaseException | str) -> None:
        if self._is_stale(transport, "error"):
            return
        self._state.last_error = str(exc)
        logger.warning("transport error (waiting for close): %s", exc)

    def transport_closed(self, transport: Any, code: int | None, reason: str | None) -> None:
        if self._is_stale(transport, "close"):
            return
        self._transport = None
        self._state.transport_open = False
        if self._state.phase not in (ConnectionPhase.CONNECTING, ConnectionPhase.CONNECTED):
            return
        message = f"Connection closed: {reason}" if reason else f"Connection lost (Code: {code})"
        self._fail(message, ErrorCategory.TRANSPORT, critical=True)

    def remote_error(self, message: str, *, critical: bool) -> None:
        if not critical:
            logger.warning("remote reported transient error: %s", message)
            self._notify_error(message, False)
            return
        if self._state.phase not in (ConnectionPhase.CONNECTING, ConnectionPhase.CONNECTED):
            self._notify_error(message, True)
            return
        self._fail(f"Server error: {message}", ErrorCategory.APPLICATION, critical=True)

    def downstream_failed(self, message: str, *, user_cancelled: bool = False) -> None:
        self._state.downstream_ready = False
        if self._state.phase not in (ConnectionPhase.CONNECTING, ConnectionPhase.CONNECTED):
            return
        category = ErrorCategory.USER_CANCELLED if user_cancelled else ErrorCategory.DOWNSTREAM
        self._fail(message, category, critical=not user_cancelled)

    # Internals

    def _is_stale(self, transport: Any, event: str) -> bool:
        if transport is self._transport and transport is not None:
            return False
        logger.debug("ignoring %s event from stale transport", event)
        return True

    def _begin_attempt(self) -> None:
        state = self._state
        self._cancel_retry()
        self._drop_transport(WS_CLOSE_CLIENT_ABORTED_REASON)
        state.transport_open = False
        state.last_error = None
        state.attempts += 1
        logger.info("connection attempt %d (delay=%dms)", state.attempts, state.delay_ms)
        self._set_phase(ConnectionPhase.CONNECTING, STATUS_CONNECTING)
        try:
            self._transport = self._transport_factory(self)
        except Exception as exc:
            logger.exception("transport creation failed")
            self._transport = None
            self._fail(f"Failed to connect: {exc}", ErrorCategory.TRANSPORT, critical=True)

    def _maybe_connected(self) -> None:
        state = self._state
        if state.phase is not ConnectionPhase.CONNECTING:
            return
        if not (state.transport_open and state.downstream_ready):
            return
        state.delay_ms = self._policy.initial_ms
        state.attempts = 0
        self._cancel_retry()
        self._set_phase(ConnectionPhase.CONNECTED, STATUS_CONNECTED)
        if self._on_connected is not None:
            self._call_hook(self._on_connected, "on_connected")

    def _fail(self, message: str, category: ErrorCategory, *, critical: bool) -> None:
        state = self._state
        self._drop_transport(WS_CLOSE_CLIENT_ABORTED_REASON)
        state.downstream_ready = False
        state.last_error = message
        logger.error("connection error (%s): %s", category.value, message)
        self._set_phase(ConnectionPhase.ERROR, message)
        self._notify_error(message, critical)
        if category.retryable and state.user_initiated:
            self._schedule_retry()

    def _schedule_retry(self) -> None:
        state = self._state
        if state.retry_handle is not None:
            return
        delay_ms = state.delay_ms
        if not self._policy.allows(delay_ms):
            logger.error("max reconnect attempts reached; stopping retries")
            state.user_initiated = False
            state.delay_ms = self._policy.initial_ms
            state.last_error = RETRIES_EXHAUSTED_MESSAGE
            self._notify_error(RETRIES_EXHAUSTED_MESSAGE, True)
            return
        logger.info("scheduling reconnect in %.1fs", delay_ms / 1000)
        state.retry_handle = self._scheduler(delay_ms / 1000, self._on_retry_timer)
        state.delay_ms = self._policy.next_delay(delay_ms)

    def _on_retry_timer(self) -> None:
        state = self._state
        state.retry_handle = None
        if state.phase in (ConnectionPhase.CONNECTED, ConnectionPhase.CONNECTING):
            logger.debug("retry skipped: already %s", state.phase.value)
            return
        if not state.user_initiated:
            return
        logger.info("retrying connection")
        self._begin_attempt()

    def _cancel_retry(self) -> None:
        handle = self._state.retry_handle
        self._state.retry_handle = None
        if handle is not None:
            handle.cancel()

    def _drop_transport(self, reason: str) -> None:
        transport = self._transport
        self._transport = None
        self._state.transport_open = False
        if transport is None:
            return
        transport.detach()
        transport.close(WS_CLOSE_NORMAL_CODE, reason)

    def _set_phase(self, phase: ConnectionPhase, message: str) -> None:
        old = self._state.phase
        self._state.phase = phase
        self._state.status_message = message
        logger.info("connection state changed: %s -> %s (%s)", old.value, phase.value, message)
        self._notify_state()

    def _notify_state(self) -> None:
        if self._on_state is None:
            return
        try:
            self._on_state(self._state.phase, self._state.status_message)
        except Exception:
            logger.exception("state listener failed")

    def _notify_error(self, message: str, critical: bool) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(message, critical)
        except Exception:
            logger.exception("error listener failed")

    @staticmethod
    def _call_hook(hook: Hook, name: str) -> None:
        try:
            hook()
        except Exception:
            logger.exception("%s hook failed", name)


__all__ = ["ConnectionSupervisor"]
