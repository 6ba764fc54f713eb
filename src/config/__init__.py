"""Configuration module exports (env names, defaults and protocol constants only)."""

from .websocket import WS_ENDPOINT_PATH
from .server import DEFAULT_RELAY_PORT
from .upstream import DEFAULT_UPSTREAM_MODEL

__all__ = [
    "DEFAULT_RELAY_PORT",
    "DEFAULT_UPSTREAM_MODEL",
    "WS_ENDPOINT_PATH",
]
