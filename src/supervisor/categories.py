"""Error categories that decide reconnect eligibility."""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    TRANSPORT = "transport"
    DOWNSTREAM = "downstream"
    APPLICATION = "application"
    USER_CANCELLED = "user_cancelled"

    @property
    def retryable(self) -> bool:
        return self in (ErrorCategory.TRANSPORT, ErrorCategory.DOWNSTREAM)


__all__ = ["ErrorCategory"]
