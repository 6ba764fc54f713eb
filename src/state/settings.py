"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UpstreamSettings:
    host: str
    api_key: str
    path: str
    model: str
    response_modalities: tuple[str, ...]
    open_timeout_s: float

    @property
    def is_configured(self) -> bool:
        return bool(self.host) and bool(self.api_key)


@dataclass(frozen=True, slots=True)
class ServerSettings:
    host: str
    port: int


@dataclass(frozen=True, slots=True)
class RelaySettings:
    default_screen: str
    tts_directives: bool


@dataclass(frozen=True, slots=True)
class AppSettings:
    server: ServerSettings
    upstream: UpstreamSettings
    relay: RelaySettings


__all__ = [
    "AppSettings",
    "RelaySettings",
    "ServerSettings",
    "UpstreamSettings",
]
