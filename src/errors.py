"""Shared error types for the voice relay."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UpstreamConfigError(Exception):
    """Raised when the upstream host or credential is missing."""

    missing: tuple[str, ...]

    def __str__(self) -> str:
        return f"upstream configuration missing: {', '.join(self.missing)}"


@dataclass(frozen=True, slots=True)
class UpstreamHandshakeError(Exception):
    """Raised when the upstream transport cannot be opened or set up."""

    reason: str

    def __str__(self) -> str:
        return self.reason


__all__ = ["UpstreamConfigError", "UpstreamHandshakeError"]
