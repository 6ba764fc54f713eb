"""Exponential backoff policy for client-leg reconnects."""

from __future__ import annotations

from dataclasses import dataclass

from src.config.supervisor import (
    DEFAULT_RETRY_MULTIPLIER,
    DEFAULT_MAX_RETRY_DELAY_MS,
    DEFAULT_INITIAL_RETRY_DELAY_MS,
)


@dataclass(frozen=True, slots=True)
class BackoffPolicy:
    initial_ms: int = DEFAULT_INITIAL_RETRY_DELAY_MS
    multiplier: float = DEFAULT_RETRY_MULTIPLIER
    ceiling_ms: int = DEFAULT_MAX_RETRY_DELAY_MS

    def __post_init__(self) -> None:
        if self.initial_ms <= 0:
            raise ValueError("initial_ms must be positive")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")
        if self.ceiling_ms < self.initial_ms:
            raise ValueError("ceiling_ms must be >= initial_ms")

    def next_delay(self, current_ms: int) -> int:
        # Not capped: a delay past the ceiling is what ends the retry cycle.
        return int(current_ms * self.multiplier)

    def allows(self, delay_ms: int) -> bool:
        return delay_ms <= self.ceiling_ms

    def schedule(self) -> list[int]:
        """Every delay this policy will wait before giving up."""
        delays: list[int] = []
        delay = self.initial_ms
        while self.allows(delay):
            delays.append(delay)
            delay = self.next_delay(delay)
            if self.multiplier == 1:
                break
        return delays


__all__ = ["BackoffPolicy"]
