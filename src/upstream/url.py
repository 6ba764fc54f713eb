"""Upstream endpoint URL construction."""

from __future__ import annotations

from urllib.parse import urlencode

from src.errors import UpstreamConfigError
from src.state.settings import UpstreamSettings
from src.config.upstream import ENV_UPSTREAM_HOST, ENV_UPSTREAM_API_KEY, UPSTREAM_API_KEY_QUERY_PARAM


def build_upstream_url(settings: UpstreamSettings) -> str:
    missing = tuple(
        name for name, value in ((ENV_UPSTREAM_HOST, settings.host), (ENV_UPSTREAM_API_KEY, settings.api_key)) if not value
    )
    if missing:
        raise UpstreamConfigError(missing=missing)
    query = urlencode({UPSTREAM_API_KEY_QUERY_PARAM: settings.api_key})
    return f"{settings.host}{settings.path}?{query}"


def redacted_endpoint(settings: UpstreamSettings) -> str:
    """Host and path only; safe to log."""
    return f"{settings.host}{settings.path}"


__all__ = ["build_upstream_url", "redacted_endpoint"]
