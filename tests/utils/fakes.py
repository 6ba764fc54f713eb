from __future__ import annotations

import asyncio
from typing import Any
from collections.abc import Callable

import orjson
from websockets.frames import Close
from websockets.exceptions import ConnectionClosed

from src.state.settings import AppSettings, RelaySettings, ServerSettings, UpstreamSettings


def make_settings(
    *,
    host: str = "wss://upstream.test",
    api_key: str = "test-key",
    tts_directives: bool = True,
    default_screen: str = "initial",
    open_timeout_s: float = 1.0,
) -> AppSettings:
    return AppSettings(
        server=ServerSettings(host="127.0.0.1", port=0),
        upstream=UpstreamSettings(
            host=host,
            api_key=api_key,
            path="/ws/test.BidiGenerateContent",
            model="models/test-model",
            response_modalities=("TEXT", "AUDIO"),
            open_timeout_s=open_timeout_s,
        ),
        relay=RelaySettings(default_screen=default_screen, tts_directives=tts_directives),
    )


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout=timeout)


class FakeSocket:
    """Stands in for a `websockets` client connection (send/recv/close)."""

    def __init__(self, *, auto_setup_complete: bool = False) -> None:
        self.sent: list[str | bytes] = []
        self.close_calls: list[tuple[int, str]] = []
        self.auto_setup_complete = auto_setup_complete
        self._incoming: asyncio.Queue[Any] = asyncio.Queue()

    @property
    def closed(self) -> bool:
        return bool(self.close_calls)

    def sent_json(self) -> list[dict[str, Any]]:
        return [orjson.loads(item) for item in self.sent if isinstance(item, str)]

    def push(self, frame: dict[str, Any]) -> None:
        self._incoming.put_nowait(orjson.dumps(frame))

    def push_raw(self, raw: str | bytes) -> None:
        self._incoming.put_nowait(raw)

    def push_close(self, code: int | None, reason: str = "") -> None:
        rcvd = Close(code, reason) if code is not None else None
        self._incoming.put_nowait(ConnectionClosed(rcvd, None))

    async def send(self, data: str | bytes) -> None:
        if self.close_calls:
            code, reason = self.close_calls[0]
            raise ConnectionClosed(None, Close(code, reason))
        self.sent.append(data)
        if self.auto_setup_complete and isinstance(data, str) and '"setup"' in data:
            self.push({"setupComplete": {}})

    async def recv(self) -> Any:
        item = await self._incoming.get()
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.close_calls.append((code, reason))
        self._incoming.put_nowait(ConnectionClosed(Close(code, reason), Close(code, reason)))


class FakeUpstream:
    """Connect factory handing out `FakeSocket`s (or failing, or never completing)."""

    def __init__(
        self,
        *,
        fail: BaseException | None = None,
        auto_setup_complete: bool = False,
        hang: bool = False,
    ) -> None:
        self.fail = fail
        self.hang = hang
        self.auto_setup_complete = auto_setup_complete
        self.urls: list[str] = []
        self.sockets: list[FakeSocket] = []

    async def connect(self, url: str) -> FakeSocket:
        self.urls.append(url)
        if self.hang:
            await asyncio.Event().wait()
        if self.fail is not None:
            raise self.fail
        sock = FakeSocket(auto_setup_complete=self.auto_setup_complete)
        self.sockets.append(sock)
        return sock


class FakeClientWebSocket:
    """Stands in for the FastAPI WebSocket the relay sends to."""

    def __init__(self, *, fail_sends: bool = False) -> None:
        self.frames: list[dict[str, Any]] = []
        self.close_calls: list[tuple[int, str]] = []
        self.fail_sends = fail_sends

    async def send_text(self, text: str) -> None:
        if self.fail_sends:
            raise RuntimeError("socket gone")
        self.frames.append(orjson.loads(text))

    async def close(self, *, code: int = 1000, reason: str = "") -> None:
        self.close_calls.append((code, reason))

    def of_type(self, msg_type: str) -> list[dict[str, Any]]:
        return [frame for frame in self.frames if frame.get("type") == msg_type]


class FakeTransport:
    def __init__(self) -> None:
        self.detached = False
        self.close_calls: list[tuple[int, str]] = []

    def detach(self) -> None:
        self.detached = True

    def close(self, code: int = 1000, reason: str = "") -> None:
        self.close_calls.append((code, reason))


class _Handle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Records retry timers instead of arming them; `fire()` runs the latest one."""

    def __init__(self) -> None:
        self.calls: list[tuple[float, Callable[[], None], _Handle]] = []

    def __call__(self, delay_s: float, callback: Callable[[], None]) -> _Handle:
        handle = _Handle()
        self.calls.append((delay_s, callback, handle))
        return handle

    @property
    def delays(self) -> list[float]:
        return [delay for delay, _cb, _handle in self.calls]

    @property
    def pending(self) -> list[_Handle]:
        return [handle for _delay, _cb, handle in self.calls if not handle.cancelled]

    def fire(self) -> None:
        _delay, callback, handle = self.calls[-1]
        if not handle.cancelled:
            callback()
