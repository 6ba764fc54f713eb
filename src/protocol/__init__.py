"""Closed frame types for each direction of the relay."""

from .client import AudioChunk, StartSession, ContextUpdate, UnrecognizedFrame, parse_client_frame
from .relay import Tts, Error, Status, AiReady, ToolCall, ServerContent, ToolCallCancellation, parse_relay_frame
from .upstream import SetupFrame, RealtimeInputFrame, encode_audio, parse_upstream_frame

__all__ = [
    "AiReady",
    "AudioChunk",
    "ContextUpdate",
    "Error",
    "RealtimeInputFrame",
    "ServerContent",
    "SetupFrame",
    "StartSession",
    "Status",
    "ToolCall",
    "ToolCallCancellation",
    "Tts",
    "UnrecognizedFrame",
    "encode_audio",
    "parse_client_frame",
    "parse_relay_frame",
    "parse_upstream_frame",
]
