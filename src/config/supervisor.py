"""Client-leg reconnection defaults and user-facing status text."""

from __future__ import annotations

DEFAULT_INITIAL_RETRY_DELAY_MS = 1000
DEFAULT_RETRY_MULTIPLIER = 2.0
DEFAULT_MAX_RETRY_DELAY_MS = 30000

DEFAULT_RELAY_URL = "ws://localhost:3001"

STATUS_DISCONNECTED = "Helper disconnected"
STATUS_CONNECTING = "Attempting connection..."
STATUS_CONNECTED = "Helper connected"

RETRIES_EXHAUSTED_MESSAGE = "Connection failed after multiple retries. Please check the helper service."

__all__ = [
    "DEFAULT_INITIAL_RETRY_DELAY_MS",
    "DEFAULT_RETRY_MULTIPLIER",
    "DEFAULT_MAX_RETRY_DELAY_MS",
    "DEFAULT_RELAY_URL",
    "STATUS_DISCONNECTED",
    "STATUS_CONNECTING",
    "STATUS_CONNECTED",
    "RETRIES_EXHAUSTED_MESSAGE",
]
