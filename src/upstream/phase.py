"""Upstream connection phases for one session."""

from __future__ import annotations

from enum import Enum


class UpstreamPhase(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    HANDSHAKING = "handshaking"
    READY = "ready"
    CLOSING = "closing"
    CLOSED = "closed"


__all__ = ["UpstreamPhase"]
