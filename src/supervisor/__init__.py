from .phase import ConnectionPhase
from .backoff import BackoffPolicy
from .categories import ErrorCategory
from .state import ClientConnectionState
from .supervisor import ConnectionSupervisor

__all__ = [
    "BackoffPolicy",
    "ClientConnectionState",
    "ConnectionPhase",
    "ConnectionSupervisor",
    "ErrorCategory",
]
