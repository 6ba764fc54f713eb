"""Relay-side record for one connected client socket."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .session import RelaySession
    from .channel import ClientChannel


@dataclass(slots=True)
class ClientRecord:
    connection_id: str
    channel: ClientChannel
    context_label: str
    session: RelaySession | None = None
    dropped_frames: int = 0


__all__ = ["ClientRecord"]
