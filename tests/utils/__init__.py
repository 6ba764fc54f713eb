"""Shared test doubles for relay tests.

- fakes.py: in-memory WebSockets (client side and upstream side), connect
  factories, a manual retry scheduler and settings builders.
"""

from __future__ import annotations

from .fakes import (
    FakeSocket,
    FakeUpstream,
    FakeScheduler,
    FakeTransport,
    FakeClientWebSocket,
    wait_until,
    make_settings,
)

__all__ = [
    "FakeClientWebSocket",
    "FakeScheduler",
    "FakeSocket",
    "FakeTransport",
    "FakeUpstream",
    "make_settings",
    "wait_until",
]
