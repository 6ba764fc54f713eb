from .relay_client import RelayClient
from .transport import RelayTransport
from .context import screen_label_from_url

__all__ = ["RelayClient", "RelayTransport", "screen_label_from_url"]
