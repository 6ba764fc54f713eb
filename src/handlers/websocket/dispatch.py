"""Dispatch handlers for classified client frames."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Callable, Awaitable

from src.session import ClientRecord, SessionRegistry
from src.knowledge import build_initial_prompt
from src.protocol.client import AudioChunk, StartSession, ContextUpdate, UnrecognizedFrame

logger = logging.getLogger(__name__)

HandlerFn = Callable[[SessionRegistry, ClientRecord, Any], Awaitable[None]]


def _note_no_session(record: ClientRecord, kind: str) -> None:
    record.dropped_frames += 1
    if record.dropped_frames == 1:
        logger.warning("client %s: %s frame received before start_ai_session; ignoring", record.connection_id, kind)
    else:
        logger.debug(
            "client %s: %s frame without session ignored (dropped=%d)",
            record.connection_id,
            kind,
            record.dropped_frames,
        )


async def _handle_start(registry: SessionRegistry, record: ClientRecord, _frame: StartSession) -> None:
    initial_context = build_initial_prompt(record.context_label)
    session = registry.create_session(record.connection_id, initial_context)
    if session is None:
        return
    session.launch()


async def _handle_context(registry: SessionRegistry, record: ClientRecord, frame: ContextUpdate) -> None:
    record.context_label = frame.context
    session = registry.get_session(record.connection_id)
    if session is None:
        _note_no_session(record, frame.kind)
        return
    session.update_context(frame.context)


async def _handle_audio(registry: SessionRegistry, record: ClientRecord, frame: AudioChunk) -> None:
    session = registry.get_session(record.connection_id)
    if session is None:
        _note_no_session(record, frame.kind)
        return
    await session.forward_audio(frame.data)


async def _handle_unrecognized(_registry: SessionRegistry, record: ClientRecord, frame: UnrecognizedFrame) -> None:
    logger.warning("client %s: dropping frame: %s", record.connection_id, frame.reason)


HANDLERS: dict[type, HandlerFn] = {
    StartSession: _handle_start,
    ContextUpdate: _handle_context,
    AudioChunk: _handle_audio,
    UnrecognizedFrame: _handle_unrecognized,
}

__all__ = ["HANDLERS"]
