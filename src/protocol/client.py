"""Client -> relay frames.

Text frames are tagged JSON objects; binary frames are opaque audio and are
never inspected. Anything that does not match a known tag becomes an
`UnrecognizedFrame` value instead of raising.
"""

from __future__ import annotations

from typing import Any
from dataclasses import dataclass

import orjson

from src.config.websocket import WS_MSG_CONTEXT, WS_MSG_START_SESSION


@dataclass(frozen=True, slots=True)
class StartSession:
    kind = WS_MSG_START_SESSION

    def to_wire(self) -> dict[str, Any]:
        return {"type": WS_MSG_START_SESSION}


@dataclass(frozen=True, slots=True)
class ContextUpdate:
    context: str
    kind = WS_MSG_CONTEXT

    def to_wire(self) -> dict[str, Any]:
        return {"type": WS_MSG_CONTEXT, "context": self.context}


@dataclass(frozen=True, slots=True)
class AudioChunk:
    data: bytes
    kind = "audio"


@dataclass(frozen=True, slots=True)
class UnrecognizedFrame:
    reason: str
    tag: str | None = None
    kind = "unrecognized"


ClientFrame = StartSession | ContextUpdate | AudioChunk | UnrecognizedFrame


def _parse_text(text: str) -> ClientFrame:
    try:
        msg = orjson.loads(text)
    except orjson.JSONDecodeError as exc:
        return UnrecognizedFrame(reason=f"invalid JSON: {exc}")

    if not isinstance(msg, dict):
        return UnrecognizedFrame(reason="message must be a JSON object")

    tag = msg.get("type")
    if not isinstance(tag, str) or not tag.strip():
        return UnrecognizedFrame(reason="message missing non-empty 'type'")
    tag = tag.strip()

    if tag == WS_MSG_START_SESSION:
        return StartSession()
    if tag == WS_MSG_CONTEXT:
        context = msg.get("context")
        if not isinstance(context, str):
            return UnrecognizedFrame(reason="context message requires a string 'context'", tag=tag)
        return ContextUpdate(context=context)
    return UnrecognizedFrame(reason=f"message type '{tag}' is not supported", tag=tag)


def parse_client_frame(*, text: str | None = None, data: bytes | None = None) -> ClientFrame:
    """Classify one inbound frame. Binary payloads always become audio."""
    if data is not None:
        return AudioChunk(data=bytes(data))
    if text is None:
        return UnrecognizedFrame(reason="empty frame")
    return _parse_text(text)


__all__ = [
    "AudioChunk",
    "ClientFrame",
    "ContextUpdate",
    "StartSession",
    "UnrecognizedFrame",
    "parse_client_frame",
]
