"""Environment parsing for runtime settings."""

from __future__ import annotations

import os
import logging

from src.state.settings import AppSettings, RelaySettings, ServerSettings, UpstreamSettings
from src.config.server import (
    ENV_RELAY_HOST,
    ENV_RELAY_PORT,
    DEFAULT_RELAY_HOST,
    DEFAULT_RELAY_PORT,
    DEFAULT_RELAY_SCREEN,
    ENV_RELAY_DEFAULT_SCREEN,
    ENV_RELAY_TTS_DIRECTIVES,
    DEFAULT_RELAY_TTS_DIRECTIVES,
)
from src.config.upstream import (
    ENV_UPSTREAM_HOST,
    ENV_UPSTREAM_PATH,
    ENV_UPSTREAM_MODEL,
    ENV_UPSTREAM_API_KEY,
    DEFAULT_UPSTREAM_PATH,
    DEFAULT_UPSTREAM_MODEL,
    ENV_UPSTREAM_OPEN_TIMEOUT_S,
    UPSTREAM_RESPONSE_MODALITIES,
    DEFAULT_UPSTREAM_OPEN_TIMEOUT_S,
)

logger = logging.getLogger(__name__)


def _str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("ignoring non-integer %s=%r", name, raw)
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("ignoring non-numeric %s=%r", name, raw)
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _load_server_settings() -> ServerSettings:
    return ServerSettings(
        host=_str_env(ENV_RELAY_HOST, DEFAULT_RELAY_HOST),
        port=_int_env(ENV_RELAY_PORT, DEFAULT_RELAY_PORT),
    )


def _load_upstream_settings() -> UpstreamSettings:
    # Missing host/key is reported per session, never at startup.
    host = _str_env(ENV_UPSTREAM_HOST, "").rstrip("/")
    api_key = _str_env(ENV_UPSTREAM_API_KEY, "")
    if not host or not api_key:
        logger.warning("%s or %s is not set; AI sessions will be refused", ENV_UPSTREAM_HOST, ENV_UPSTREAM_API_KEY)

    timeout_s = _float_env(ENV_UPSTREAM_OPEN_TIMEOUT_S, DEFAULT_UPSTREAM_OPEN_TIMEOUT_S)
    if timeout_s <= 0:
        timeout_s = DEFAULT_UPSTREAM_OPEN_TIMEOUT_S

    return UpstreamSettings(
        host=host,
        api_key=api_key,
        path=_str_env(ENV_UPSTREAM_PATH, DEFAULT_UPSTREAM_PATH),
        model=_str_env(ENV_UPSTREAM_MODEL, DEFAULT_UPSTREAM_MODEL),
        response_modalities=UPSTREAM_RESPONSE_MODALITIES,
        open_timeout_s=timeout_s,
    )


def _load_relay_settings() -> RelaySettings:
    return RelaySettings(
        default_screen=_str_env(ENV_RELAY_DEFAULT_SCREEN, DEFAULT_RELAY_SCREEN),
        tts_directives=_bool_env(ENV_RELAY_TTS_DIRECTIVES, DEFAULT_RELAY_TTS_DIRECTIVES),
    )


def load_settings() -> AppSettings:
    return AppSettings(
        server=_load_server_settings(),
        upstream=_load_upstream_settings(),
        relay=_load_relay_settings(),
    )


__all__ = ["load_settings"]
