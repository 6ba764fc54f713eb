from __future__ import annotations

import os

from src.config.server import DEFAULT_RELAY_PORT


def derive_default_server() -> str:
    return (os.getenv("RELAY_SERVER") or f"localhost:{DEFAULT_RELAY_PORT}").strip()


def build_ws_url(server: str, *, secure: bool) -> str:
    s = server.strip()
    if s.startswith("ws://") or s.startswith("wss://"):
        base = s
    else:
        scheme = "wss" if secure else "ws"
        base = f"{scheme}://{s}"
    if base.endswith("/"):
        base = base[:-1]
    return f"{base}/"


__all__ = ["build_ws_url", "derive_default_server"]
