from .phase import UpstreamPhase
from .url import build_upstream_url
from .connector import ConnectFn, UpstreamConnector

__all__ = ["ConnectFn", "UpstreamConnector", "UpstreamPhase", "build_upstream_url"]
