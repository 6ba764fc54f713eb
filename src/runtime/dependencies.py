"""Runtime dependency construction (settings + session registry)."""

from __future__ import annotations

import logging

from src.state import RuntimeDeps
from src.state.settings import AppSettings
from src.session.registry import SessionRegistry
from src.upstream.connector import ConnectFn

from .settings_loader import load_settings

logger = logging.getLogger(__name__)


async def build_runtime_deps(
    settings: AppSettings | None = None,
    *,
    connect_fn: ConnectFn | None = None,
) -> RuntimeDeps:
    resolved = settings if settings is not None else load_settings()
    registry = SessionRegistry(settings=resolved, connect_fn=connect_fn)
    logger.info(
        "relay ready: upstream=%s model=%s configured=%s",
        resolved.upstream.host or "<unset>",
        resolved.upstream.model,
        resolved.upstream.is_configured,
    )
    return RuntimeDeps(registry=registry, settings=resolved)


__all__ = ["RuntimeDeps", "build_runtime_deps"]
