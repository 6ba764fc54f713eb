"""One client-side WebSocket to the relay, reporting lifecycle events to a supervisor."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable, Awaitable

import orjson
import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from src.supervisor import ConnectionSupervisor
from src.config.websocket import WS_CLOSE_NORMAL_CODE, WS_CLOSE_ABNORMAL_CODE

logger = logging.getLogger(__name__)

ConnectFn = Callable[[str], Awaitable[Any]]
FrameHandler = Callable[[str | bytes], None]


async def _default_connect(url: str) -> Any:
    return await websockets.connect(url, ping_interval=None, ping_timeout=None)


class RelayTransport:
    """Events stop the moment `detach()` or `close()` is called."""

    def __init__(
        self,
        url: str,
        *,
        supervisor: ConnectionSupervisor,
        on_frame: FrameHandler,
        connect_fn: ConnectFn | None = None,
    ) -> None:
        self.url = url
        self._supervisor = supervisor
        self._on_frame = on_frame
        self._connect_fn = connect_fn or _default_connect

        self._ws: Any | None = None
        self._task: asyncio.Task | None = None
        self._close_task: asyncio.Task | None = None
        self._detached = False

    @property
    def detached(self) -> bool:
        return self._detached

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self._detached

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    def detach(self) -> None:
        self._detached = True

    def close(self, code: int = WS_CLOSE_NORMAL_CODE, reason: str = "") -> None:
        self._detached = True
        ws = self._ws
        self._ws = None
        if ws is not None:
            if self._close_task is None:
                self._close_task = asyncio.create_task(self._close_ws(ws, code, reason))
            return
        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def wait_closed(self) -> None:
        for task in (self._task, self._close_task):
            if task is None:
                continue
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _close_ws(self, ws: Any, code: int, reason: str) -> None:
        try:
            await ws.close(code, reason)
        except Exception:
            logger.debug("relay close failed", exc_info=True)

    async def _run(self) -> None:
        try:
            ws = await self._connect_fn(self.url)
        except (OSError, TimeoutError, asyncio.TimeoutError, WebSocketException) as exc:
            if not self._detached:
                self._supervisor.transport_error(self, exc)
                self._supervisor.transport_closed(self, WS_CLOSE_ABNORMAL_CODE, "")
            return

        if self._detached:
            await self._close_ws(ws, WS_CLOSE_NORMAL_CODE, "")
            return
        self._ws = ws
        self._supervisor.transport_opened(self)
        await self._read_loop(ws)

    async def _read_loop(self, ws: Any) -> None:
        try:
            while not self._detached:
                raw = await ws.recv()
                if self._detached:
                    return
                self._on_frame(raw)
        except ConnectionClosed as exc:
            if self._detached:
                return
            self._ws = None
            if exc.rcvd is None:
                self._supervisor.transport_error(self, exc)
                self._supervisor.transport_closed(self, WS_CLOSE_ABNORMAL_CODE, "")
            else:
                self._supervisor.transport_closed(self, exc.rcvd.code, exc.rcvd.reason)

    async def send_json(self, frame: Any) -> bool:
        return await self._send(orjson.dumps(frame.to_wire()).decode("utf-8"))

    async def send_bytes(self, data: bytes) -> bool:
        return await self._send(data)

    async def _send(self, payload: str | bytes) -> bool:
        ws = self._ws
        if ws is None or self._detached:
            return False
        try:
            await ws.send(payload)
        except ConnectionClosed:
            logger.debug("send on closed relay connection dropped")
            return False
        return True


__all__ = ["RelayTransport"]
