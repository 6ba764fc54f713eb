"""Relay process configuration (env names and defaults only)."""

from __future__ import annotations

ENV_RELAY_HOST = "RELAY_HOST"
ENV_RELAY_PORT = "PORT"
ENV_RELAY_DEFAULT_SCREEN = "RELAY_DEFAULT_SCREEN"
ENV_RELAY_TTS_DIRECTIVES = "RELAY_TTS_DIRECTIVES"

DEFAULT_RELAY_HOST = "0.0.0.0"
DEFAULT_RELAY_PORT = 3001
DEFAULT_RELAY_SCREEN = "initial"
DEFAULT_RELAY_TTS_DIRECTIVES = True

__all__ = [
    "ENV_RELAY_HOST",
    "ENV_RELAY_PORT",
    "ENV_RELAY_DEFAULT_SCREEN",
    "ENV_RELAY_TTS_DIRECTIVES",
    "DEFAULT_RELAY_HOST",
    "DEFAULT_RELAY_PORT",
    "DEFAULT_RELAY_SCREEN",
    "DEFAULT_RELAY_TTS_DIRECTIVES",
]
