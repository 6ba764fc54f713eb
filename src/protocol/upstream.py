"""Relay <-> upstream (Gemini Live BidiGenerateContent) frames."""

from __future__ import annotations

import base64
from typing import Any
from dataclasses import dataclass

import orjson

UNKNOWN_UPSTREAM_ERROR = "Unknown error"


@dataclass(frozen=True, slots=True)
class SetupFrame:
    model: str
    response_modalities: tuple[str, ...]
    system_instruction: str = ""

    def to_wire(self) -> dict[str, Any]:
        setup: dict[str, Any] = {
            "model": self.model,
            "generationConfig": {"responseModalities": list(self.response_modalities)},
        }
        if self.system_instruction:
            setup["systemInstruction"] = {"parts": [{"text": self.system_instruction}]}
        return {"setup": setup}


@dataclass(frozen=True, slots=True)
class RealtimeInputFrame:
    media_chunks: tuple[str, ...]

    def to_wire(self) -> dict[str, Any]:
        return {"realtimeInput": {"media_chunks": list(self.media_chunks)}}


def encode_audio(data: bytes) -> RealtimeInputFrame:
    return RealtimeInputFrame(media_chunks=(base64.b64encode(data).decode("ascii"),))


@dataclass(frozen=True, slots=True)
class SetupComplete:
    pass


@dataclass(frozen=True, slots=True)
class UpstreamContent:
    content: dict[str, Any]

    @property
    def turn_complete(self) -> bool:
        return bool(self.content.get("turnComplete"))

    def text_parts(self) -> list[str]:
        turn = self.content.get("modelTurn")
        parts = turn.get("parts") if isinstance(turn, dict) else None
        if not isinstance(parts, list):
            return []
        return [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]


@dataclass(frozen=True, slots=True)
class UpstreamToolCall:
    payload: dict[str, Any]


@dataclass(frozen=True, slots=True)
class UpstreamToolCallCancellation:
    payload: dict[str, Any]


@dataclass(frozen=True, slots=True)
class UpstreamError:
    message: str


@dataclass(frozen=True, slots=True)
class UnrecognizedUpstreamFrame:
    reason: str


UpstreamEvent = (
    SetupComplete
    | UpstreamContent
    | UpstreamToolCall
    | UpstreamToolCallCancellation
    | UpstreamError
    | UnrecognizedUpstreamFrame
)


def _error_message(error: Any) -> str:
    if isinstance(error, dict):
        message = error.get("message")
        return message if isinstance(message, str) and message else UNKNOWN_UPSTREAM_ERROR
    if isinstance(error, str) and error:
        return error
    return UNKNOWN_UPSTREAM_ERROR


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def parse_upstream_frame(raw: str | bytes) -> UpstreamEvent:
    """Translate one upstream frame; the first known top-level field wins."""
    try:
        msg = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        return UnrecognizedUpstreamFrame(reason=f"invalid JSON: {exc}")
    if not isinstance(msg, dict):
        return UnrecognizedUpstreamFrame(reason="frame must be a JSON object")

    if "setupComplete" in msg:
        return SetupComplete()
    if msg.get("serverContent"):
        return UpstreamContent(content=_as_dict(msg["serverContent"]))
    if msg.get("toolCall"):
        return UpstreamToolCall(payload=_as_dict(msg["toolCall"]))
    if msg.get("toolCallCancellation"):
        return UpstreamToolCallCancellation(payload=_as_dict(msg["toolCallCancellation"]))
    if msg.get("error"):
        return UpstreamError(message=_error_message(msg["error"]))
    return UnrecognizedUpstreamFrame(reason=f"unknown frame keys: {sorted(msg)}")


__all__ = [
    "RealtimeInputFrame",
    "SetupComplete",
    "SetupFrame",
    "UnrecognizedUpstreamFrame",
    "UpstreamContent",
    "UpstreamError",
    "UpstreamEvent",
    "UpstreamToolCall",
    "UpstreamToolCallCancellation",
    "encode_audio",
    "parse_upstream_frame",
]
