from .session import RelaySession
from .channel import ClientChannel
from .registry import SessionRegistry
from .client_record import ClientRecord

__all__ = ["ClientChannel", "ClientRecord", "RelaySession", "SessionRegistry"]
