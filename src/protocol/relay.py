"""Relay -> client frames."""

from __future__ import annotations

from typing import Any
from dataclasses import field, dataclass

import orjson

from src.config.websocket import (
    WS_MSG_TTS,
    WS_MSG_ERROR,
    WS_MSG_STATUS,
    WS_MSG_AI_READY,
    WS_MSG_TOOL_CALL,
    WS_MSG_SERVER_CONTENT,
    WS_MSG_TOOL_CALL_CANCELLATION,
)

from .client import UnrecognizedFrame


@dataclass(frozen=True, slots=True)
class AiReady:
    context: str

    def to_wire(self) -> dict[str, Any]:
        return {"type": WS_MSG_AI_READY, "context": self.context}


@dataclass(frozen=True, slots=True)
class ServerContent:
    content: dict[str, Any]

    def to_wire(self) -> dict[str, Any]:
        return {"type": WS_MSG_SERVER_CONTENT, "content": self.content}


@dataclass(frozen=True, slots=True)
class Status:
    message: str

    def to_wire(self) -> dict[str, Any]:
        return {"type": WS_MSG_STATUS, "message": self.message}


@dataclass(frozen=True, slots=True)
class Error:
    message: str
    critical: bool = False
    code: str | None = None

    def to_wire(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": WS_MSG_ERROR, "message": self.message, "critical": self.critical}
        if self.code:
            out["code"] = self.code
        return out


@dataclass(frozen=True, slots=True)
class Tts:
    text: str

    def to_wire(self) -> dict[str, Any]:
        return {"type": WS_MSG_TTS, "text": self.text}


@dataclass(frozen=True, slots=True)
class ToolCall:
    tool_call: dict[str, Any] = field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        return {"type": WS_MSG_TOOL_CALL, "toolCall": self.tool_call}


@dataclass(frozen=True, slots=True)
class ToolCallCancellation:
    cancellation: dict[str, Any] = field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        return {"type": WS_MSG_TOOL_CALL_CANCELLATION, "toolCallCancellation": self.cancellation}


RelayFrame = AiReady | ServerContent | Status | Error | Tts | ToolCall | ToolCallCancellation


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _decode(msg: dict[str, Any], tag: str) -> RelayFrame | UnrecognizedFrame:
    if tag == WS_MSG_AI_READY:
        return AiReady(context=_as_str(msg.get("context")))
    if tag == WS_MSG_SERVER_CONTENT:
        return ServerContent(content=_as_dict(msg.get("content")))
    if tag == WS_MSG_STATUS:
        return Status(message=_as_str(msg.get("message")))
    if tag == WS_MSG_ERROR:
        code = msg.get("code")
        return Error(
            message=_as_str(msg.get("message")) or "Unknown error",
            critical=bool(msg.get("critical", False)),
            code=code if isinstance(code, str) else None,
        )
    if tag == WS_MSG_TTS:
        text = msg.get("text")
        if not isinstance(text, str):
            return UnrecognizedFrame(reason="tts message requires a string 'text'", tag=tag)
        return Tts(text=text)
    if tag == WS_MSG_TOOL_CALL:
        return ToolCall(tool_call=_as_dict(msg.get("toolCall")))
    if tag == WS_MSG_TOOL_CALL_CANCELLATION:
        return ToolCallCancellation(cancellation=_as_dict(msg.get("toolCallCancellation")))
    return UnrecognizedFrame(reason=f"message type '{tag}' is not supported", tag=tag)


def parse_relay_frame(raw: str | bytes) -> RelayFrame | UnrecognizedFrame:
    try:
        msg = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        return UnrecognizedFrame(reason=f"invalid JSON: {exc}")
    if not isinstance(msg, dict):
        return UnrecognizedFrame(reason="message must be a JSON object")
    tag = msg.get("type")
    if not isinstance(tag, str) or not tag:
        return UnrecognizedFrame(reason="message missing non-empty 'type'")
    return _decode(msg, tag)


__all__ = [
    "AiReady",
    "Error",
    "RelayFrame",
    "ServerContent",
    "Status",
    "ToolCall",
    "ToolCallCancellation",
    "Tts",
    "parse_relay_frame",
]
