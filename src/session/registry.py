"""Client connection -> session mapping."""

from __future__ import annotations

import uuid
import logging

from src.state.settings import AppSettings
from src.upstream.connector import ConnectFn

from .session import RelaySession
from .channel import ClientChannel
from .client_record import ClientRecord

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Sole owner of client records and their sessions (at most one session per client)."""

    def __init__(self, *, settings: AppSettings, connect_fn: ConnectFn | None = None) -> None:
        self._settings = settings
        self._connect_fn = connect_fn
        self._clients: dict[str, ClientRecord] = {}

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def register_client(self, channel: ClientChannel, screen: str | None = None) -> ClientRecord:
        connection_id = uuid.uuid4().hex[:8]
        label = (screen or "").strip() or self._settings.relay.default_screen
        record = ClientRecord(connection_id=connection_id, channel=channel, context_label=label)
        self._clients[connection_id] = record
        logger.info("client %s registered (screen=%r). Active: %d", connection_id, label, len(self._clients))
        return record

    def get_client(self, connection_id: str) -> ClientRecord | None:
        return self._clients.get(connection_id)

    async def unregister_client(self, connection_id: str) -> None:
        record = self._clients.pop(connection_id, None)
        if record is None:
            return
        record.channel.mark_closed()
        session = record.session
        if session is not None:
            await self.close_session(session)
            record.session = None
        logger.info(
            "client %s unregistered (session=%s). Active: %d",
            connection_id,
            session.session_id if session is not None else None,
            len(self._clients),
        )

    def create_session(self, connection_id: str, initial_context: str) -> RelaySession | None:
        record = self._clients.get(connection_id)
        if record is None:
            logger.warning("create_session for unknown client %s", connection_id)
            return None
        if record.session is not None:
            logger.warning(
                "client %s sent start_ai_session but session %s already exists",
                connection_id,
                record.session.session_id,
            )
            return None

        session = RelaySession(
            channel=record.channel,
            initial_context=initial_context,
            settings=self._settings,
            on_closed=self._release,
            connect_fn=self._connect_fn,
        )
        record.session = session
        logger.info("client %s: created session %s", connection_id, session.session_id)
        return session

    async def close_session(self, session: RelaySession) -> None:
        await session.close()

    async def _release(self, session: RelaySession) -> None:
        for record in self._clients.values():
            if record.session is session:
                record.session = None
                logger.debug("client %s: released session %s", record.connection_id, session.session_id)
                return

    def get_session(self, connection_id: str) -> RelaySession | None:
        record = self._clients.get(connection_id)
        return record.session if record is not None else None

    def session_count(self) -> int:
        return sum(1 for record in self._clients.values() if record.session is not None)

    def client_count(self) -> int:
        return len(self._clients)

    async def close_all(self) -> None:
        sessions = [record.session for record in self._clients.values() if record.session is not None]
        for session in sessions:
            try:
                await self.close_session(session)
            except Exception:
                logger.exception("failed to close session %s", session.session_id)
        if sessions:
            logger.info("closed %d session(s) on shutdown", len(sessions))


__all__ = ["SessionRegistry"]
