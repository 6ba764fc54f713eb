"""Knowledge lookup used to seed a session's initial prompt."""

from __future__ import annotations

import logging

from .table import KNOWLEDGE, DEFAULT_KEY, ASSISTANT_PERSONA

logger = logging.getLogger(__name__)


def lookup(screen: str | None) -> str:
    """Return the knowledge text for `screen`, falling back to the default entry."""
    key = (screen or "").strip().lower() or DEFAULT_KEY
    text = KNOWLEDGE.get(key)
    if text is None:
        logger.debug("no knowledge entry for screen=%r; using default", key)
        return KNOWLEDGE[DEFAULT_KEY]
    return text


def build_initial_prompt(screen: str | None) -> str:
    return f"{lookup(screen)}\n\n{ASSISTANT_PERSONA}"


__all__ = ["build_initial_prompt", "lookup"]
