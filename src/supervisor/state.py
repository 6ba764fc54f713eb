"""Per-connection state tracked by the connection supervisor."""

from __future__ import annotations

from typing import Any
from dataclasses import dataclass

from src.config.supervisor import STATUS_DISCONNECTED, DEFAULT_INITIAL_RETRY_DELAY_MS

from .phase import ConnectionPhase


@dataclass(slots=True)
class ClientConnectionState:
    phase: ConnectionPhase = ConnectionPhase.DISCONNECTED
    status_message: str = STATUS_DISCONNECTED
    delay_ms: int = DEFAULT_INITIAL_RETRY_DELAY_MS
    retry_handle: Any | None = None
    user_initiated: bool = False
    transport_open: bool = False
    downstream_ready: bool = False
    context_label: str | None = None
    last_error: str | None = None
    attempts: int = 0

    @property
    def retry_pending(self) -> bool:
        return self.retry_handle is not None


__all__ = ["ClientConnectionState"]
