"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from src.state.settings import AppSettings
    from src.session.registry import SessionRegistry


@dataclass(slots=True)
class RuntimeDeps:
    registry: SessionRegistry
    settings: AppSettings

    async def shutdown(self) -> None:
        try:
            await self.registry.close_all()
        except Exception:
            logger.exception("runtime shutdown failed")


__all__ = ["RuntimeDeps"]
