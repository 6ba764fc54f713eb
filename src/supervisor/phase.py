"""Client-leg connection phases."""

from __future__ import annotations

from enum import Enum


class ConnectionPhase(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


__all__ = ["ConnectionPhase"]
