"""Upstream AI service configuration (env names and defaults only)."""

from __future__ import annotations

ENV_UPSTREAM_HOST = "GEMINI_API_HOST"
ENV_UPSTREAM_API_KEY = "GEMINI_API_KEY"
ENV_UPSTREAM_MODEL = "GEMINI_MODEL"
ENV_UPSTREAM_PATH = "GEMINI_API_PATH"
ENV_UPSTREAM_OPEN_TIMEOUT_S = "UPSTREAM_OPEN_TIMEOUT_S"

# Host is expected to carry the scheme, e.g. wss://generativelanguage.googleapis.com
DEFAULT_UPSTREAM_PATH = "/ws/google.ai.generativelanguage.v1alpha.GenerativeService.BidiGenerateContent"
DEFAULT_UPSTREAM_MODEL = "models/gemini-2.0-flash-exp"
DEFAULT_UPSTREAM_OPEN_TIMEOUT_S = 10.0

UPSTREAM_API_KEY_QUERY_PARAM = "key"
UPSTREAM_RESPONSE_MODALITIES: tuple[str, ...] = ("TEXT", "AUDIO")

__all__ = [
    "ENV_UPSTREAM_HOST",
    "ENV_UPSTREAM_API_KEY",
    "ENV_UPSTREAM_MODEL",
    "ENV_UPSTREAM_PATH",
    "ENV_UPSTREAM_OPEN_TIMEOUT_S",
    "DEFAULT_UPSTREAM_PATH",
    "DEFAULT_UPSTREAM_MODEL",
    "DEFAULT_UPSTREAM_OPEN_TIMEOUT_S",
    "UPSTREAM_API_KEY_QUERY_PARAM",
    "UPSTREAM_RESPONSE_MODALITIES",
]
